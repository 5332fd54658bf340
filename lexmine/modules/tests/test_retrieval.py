# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the license found in the
# LICENSE file in the root directory of this source tree.

import pytest

from lexmine.modules.lexical import (
    InflectionTable,
    LanguageResources,
    TranslationEquivalents,
)
from lexmine.modules.retrieval import (
    CandidateRetriever,
    InMemorySentenceIndex,
    LengthBuckets,
)


@pytest.fixture
def retriever() -> CandidateRetriever:
    en = LanguageResources("en", frozenset({"the", "a", "on"}))
    fr = LanguageResources(
        "fr", frozenset({"le", "les", "sur"}), InflectionTable({"s": 1}, longest=1)
    )
    equivalents = TranslationEquivalents(
        [
            ("cat", "chat", 0.8),
            ("cat", "chats", 0.5),
            ("cat", "matou", 0.05),
            ("sleeps", "dort", 0.7),
            ("house", "maison", 0.9),
        ]
    )
    return CandidateRetriever(InMemorySentenceIndex(), equivalents, en, fr)


def test_length_buckets():
    buckets = LengthBuckets.from_lengths([2, 4, 4, 4, 5, 5, 7, 9])
    assert buckets.large_threshold == 3.0
    assert buckets.small_threshold == 7.0
    assert buckets.flags(2) == (False, True)
    assert buckets.flags(5) == (True, True)
    assert buckets.flags(9) == (True, False)


def test_index_search():
    index = InMemorySentenceIndex()
    index.add("le chat dort", ["le", "chat", "dort"], True, True, doc_id="0")
    index.add("le chat mange", ["le", "chat", "mange"], True, True, doc_id="1")
    index.add("une maison", ["une", "maison"], True, True, doc_id="1")
    assert len(index) == 3

    hits = index.search([["chat"], ["dort"]], large=True, small=True)
    assert [h.sentence for h in hits] == ["le chat dort", "le chat mange"]
    assert hits[0].score > hits[1].score > 0
    assert hits[0].doc_id == "0"

    hits = index.search([["chat"], ["dort"]], large=True, small=True, doc_filter="1")
    assert [h.sentence for h in hits] == ["le chat mange"]

    hits = index.search([["chat"]], large=True, small=True, top_n=1)
    assert len(hits) == 1

    assert index.search([["velo"]], large=True, small=True) == []
    assert index.search([], large=True, small=True) == []


def test_length_bucket_boost():
    index = InMemorySentenceIndex()
    index.add("chat court", ["chat", "court"], False, True)
    index.add("chat long", ["chat", "long"], True, False)
    hits = index.search([["chat"]], large=True, small=False)
    assert hits[0].sentence == "chat long"
    hits = index.search([["chat"]], large=False, small=True)
    assert hits[0].sentence == "chat court"


def test_expand(retriever: CandidateRetriever):
    # the word itself first, then its translations above 0.1 as target lemmas
    assert retriever.expand("cat") == ["cat", "chat"]
    # the source word goes through the target lemmatizer like any index term
    assert retriever.expand("Sleeps") == ["sleep", "dort"]
    assert retriever.expand("unknown") == ["unknown"]
    retriever.max_equivalents = 1
    assert retriever.expand("cat") == ["cat"]


def test_query_groups_skip_stopwords(retriever: CandidateRetriever):
    groups = retriever.query_groups("the cat, the cat sleeps")
    assert groups == [["cat", "chat"], ["sleep", "dort"]]


def test_retrieve(retriever: CandidateRetriever):
    with pytest.raises(AssertionError):
        retriever.retrieve("the cat sleeps")

    retriever.build_index(
        [
            ("les chats dorment", "0"),
            ("le chat dort", "1"),
            ("une maison rouge", "1"),
            ("the cat sleeps", "1"),
        ]
    )
    hits = retriever.retrieve("the cat sleeps")
    sentences = [h.sentence for h in hits]
    assert sentences[0] == "le chat dort"
    assert "les chats dorment" in sentences
    # no shared word, and the query itself
    assert "une maison rouge" not in sentences
    assert "the cat sleeps" not in sentences

    hits = retriever.retrieve("the cat sleeps", doc_filter="0")
    assert [h.sentence for h in hits] == ["les chats dorment"]
    assert retriever.retrieve("the on a") == []
