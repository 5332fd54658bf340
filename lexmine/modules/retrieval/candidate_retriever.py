# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the license found in the
# LICENSE file in the root directory of this source tree.

import dataclasses
import logging
import typing as tp

from lexmine.modules.lexical.dictionary import TranslationEquivalents
from lexmine.modules.lexical.resources import LanguageResources
from lexmine.modules.retrieval.sentence_index import SearchHit, SentenceIndex
from lexmine.utils.stats_utils import mean, population_std
from lexmine.utils.text_utils import retrieval_tokens

logger = logging.getLogger("lexmine.retrieval")


@dataclasses.dataclass(frozen=True)
class LengthBuckets:
    """
    A sentence is `large` when it has at least mean - std tokens and `small`
    when it has at most mean + std tokens, so most sentences are both.
    """

    large_threshold: float
    small_threshold: float

    @classmethod
    def from_lengths(cls, lengths: tp.Sequence[int]) -> "LengthBuckets":
        avg = mean(lengths)
        std = population_std(lengths)
        return cls(large_threshold=avg - std, small_threshold=avg + std)

    def flags(self, length: int) -> tp.Tuple[bool, bool]:
        return length >= self.large_threshold, length <= self.small_threshold


class CandidateRetriever:
    """
    Finds the target sentences sharing translations with a source sentence.
    Each source content word is expanded to its most probable translations,
    reduced to the lemma under which target sentences are indexed.
    """

    def __init__(
        self,
        index: SentenceIndex,
        equivalents: TranslationEquivalents,
        src: LanguageResources,
        tgt: LanguageResources,
        top_n: int = 100,
        max_equivalents: int = 50,
        min_equivalent_probability: float = 0.1,
        bucket_boost: float = 2.0,
    ):
        self.index = index
        self.equivalents = equivalents
        self.src = src
        self.tgt = tgt
        self.top_n = top_n
        self.max_equivalents = max_equivalents
        self.min_equivalent_probability = min_equivalent_probability
        self.bucket_boost = bucket_boost
        self.buckets: tp.Optional[LengthBuckets] = None

    def index_terms(self, sentence: str) -> tp.List[str]:
        return [self.tgt.lemmatize_unique(t) for t in retrieval_tokens(sentence)]

    def build_index(
        self, sentences: tp.Sequence[tp.Tuple[str, tp.Optional[str]]]
    ) -> LengthBuckets:
        """
        indexes (sentence, doc_id) target pairs. The length buckets are computed
        on the target side and reused to classify the queries.
        """
        terms = [self.index_terms(sentence) for sentence, _ in sentences]
        self.buckets = LengthBuckets.from_lengths([len(t) for t in terms])
        for (sentence, doc_id), sentence_terms in zip(sentences, terms):
            large, small = self.buckets.flags(len(sentence_terms))
            self.index.add(sentence, sentence_terms, large, small, doc_id=doc_id)
        logger.info(
            f"indexed {len(self.index)} {self.tgt.lang} sentences, length buckets: "
            f"{self.buckets.large_threshold:.2f} / {self.buckets.small_threshold:.2f}"
        )
        return self.buckets

    def expand(self, token: str) -> tp.List[str]:
        """
        the index terms a source token can match: its translations above the
        probability threshold (and itself), most probable first, as distinct
        target lemmas.
        """
        candidates = {
            word: prob
            for word, prob in self.equivalents.equivalents(token).items()
            if prob > self.min_equivalent_probability
        }
        candidates.setdefault(token.lower(), 1.0)
        ranked = sorted(candidates.items(), key=lambda kv: -kv[1])
        stems: tp.List[str] = []
        for word, _ in ranked:
            stem = self.tgt.lemmatize_unique(word)
            if stem not in stems:
                stems.append(stem)
            if len(stems) >= self.max_equivalents:
                break
        return stems

    def query_groups(self, sentence: str) -> tp.List[tp.List[str]]:
        tokens = dict.fromkeys(retrieval_tokens(sentence))
        return [self.expand(t) for t in tokens if not self.src.is_stopword(t)]

    def retrieve(
        self, sentence: str, doc_filter: tp.Optional[str] = None
    ) -> tp.List[SearchHit]:
        assert self.buckets is not None, "build_index must be called before retrieve"
        groups = self.query_groups(sentence)
        if not groups:
            return []
        large, small = self.buckets.flags(len(retrieval_tokens(sentence)))
        hits = self.index.search(
            groups,
            large,
            small,
            doc_filter=doc_filter,
            top_n=self.top_n,
            bucket_boost=self.bucket_boost,
        )
        seen: tp.Set[str] = set()
        results = []
        for hit in hits:
            if hit.sentence == sentence or hit.sentence in seen:
                continue
            seen.add(hit.sentence)
            results.append(hit)
        return results
