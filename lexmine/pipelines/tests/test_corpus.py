# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the license found in the
# LICENSE file in the root directory of this source tree.

from pathlib import Path

import pytest

from lexmine.core.errors import CorpusInputError
from lexmine.pipelines.mining.corpus import (
    SourceQuery,
    document_sentences,
    prepare_corpus,
    read_doc_alignment,
    read_file_list,
    read_queries,
    read_targets,
)


def test_source_query_line():
    assert SourceQuery("a sentence").to_line() == "a sentence"
    query = SourceQuery("a sentence", "2", "5")
    assert query.to_line() == "a sentence\t2\t5"
    assert SourceQuery.from_line("a sentence\t2\t5\n") == query
    assert SourceQuery.from_line("a sentence") == SourceQuery("a sentence")


def test_read_file_list(corpus_dir: Path):
    docs = read_file_list(corpus_dir / "en.list")
    assert docs == [corpus_dir / "en1.txt", corpus_dir / "en2.txt"]


def test_read_file_list_errors(corpus_dir: Path, tmp_path: Path):
    with pytest.raises(CorpusInputError):
        read_file_list(tmp_path / "missing.list")

    (tmp_path / "bad.list").write_text("nowhere.txt\n", encoding="utf-8")
    with pytest.raises(CorpusInputError, match="nowhere.txt"):
        read_file_list(tmp_path / "bad.list")

    (tmp_path / "empty.list").write_text("\n", encoding="utf-8")
    with pytest.raises(CorpusInputError, match="no documents"):
        read_file_list(tmp_path / "empty.list")


def test_read_doc_alignment(corpus_dir: Path):
    pairs = read_doc_alignment(corpus_dir / "docs.align")
    assert pairs[1] == (corpus_dir / "en2.txt", corpus_dir / "fr2.txt")

    bad = corpus_dir / "bad.align"
    bad.write_text("en1.txt fr1.txt\n", encoding="utf-8")
    with pytest.raises(CorpusInputError, match="line 1"):
        read_doc_alignment(bad)


def test_document_sentences(tmp_path: Path):
    doc = tmp_path / "doc.txt"
    doc.write_text("This is one. And here is two!\nA\tsingle  line here\n", encoding="utf-8")
    assert list(document_sentences(doc)) == [
        "This is one.",
        "And here is two!",
        "A single  line here",
    ]
    assert list(document_sentences(doc, already_segmented=True)) == [
        "This is one. And here is two!",
        "A single  line here",
    ]


def test_prepare_corpus_from_lists(corpus_dir: Path, tmp_path: Path):
    # the same document listed twice only adds its sentences once
    (corpus_dir / "fr_twice.list").write_text(
        "fr1.txt\nfr2.txt\nfr1.txt\n", encoding="utf-8"
    )
    corpus = prepare_corpus(
        tmp_path / "out",
        src_files=str(corpus_dir / "en.list"),
        tgt_files=str(corpus_dir / "fr_twice.list"),
        already_segmented=True,
    )
    assert not corpus.doc_aligned
    assert corpus.num_queries == 3
    assert corpus.num_targets == 3
    assert [q.sentence for q in read_queries(corpus.queries)] == [
        "The cat sleeps on the mat.",
        "The dog eats in the garden.",
        "My house is red.",
    ]
    assert read_queries(corpus.queries, 1, 2) == [
        SourceQuery("The dog eats in the garden.")
    ]
    assert read_targets(corpus.targets) == [
        ("Le chat dort sur le tapis.", None),
        ("Le chien mange dans le jardin.", None),
        ("La banque ferme demain.", None),
    ]


def test_prepare_corpus_doc_aligned(corpus_dir: Path, tmp_path: Path):
    corpus = prepare_corpus(
        tmp_path / "out",
        doc_align_file=str(corpus_dir / "docs.align"),
        already_segmented=True,
    )
    assert corpus.doc_aligned
    assert corpus.doc_pairs == [
        (str(corpus_dir / "en1.txt"), str(corpus_dir / "fr1.txt")),
        (str(corpus_dir / "en2.txt"), str(corpus_dir / "fr2.txt")),
    ]
    assert read_queries(corpus.queries) == [
        SourceQuery("The cat sleeps on the mat.", "0", "0"),
        SourceQuery("The dog eats in the garden.", "1", "1"),
        SourceQuery("My house is red.", "1", "1"),
    ]
    assert read_targets(corpus.targets) == [
        ("Le chat dort sur le tapis.", "0"),
        ("Le chien mange dans le jardin.", "1"),
        ("La banque ferme demain.", "1"),
    ]


def test_prepare_corpus_without_inputs(tmp_path: Path):
    with pytest.raises(CorpusInputError):
        prepare_corpus(tmp_path / "out")
