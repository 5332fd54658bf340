# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the license found in the
# LICENSE file in the root directory of this source tree.

import typing as tp

from lexmine.modules.lexical.dictionary import TranslationEquivalents
from lexmine.modules.lexical.resources import LanguageResources
from lexmine.utils.stats_utils import mean
from lexmine.utils.text_utils import edit_similarity, retrieval_tokens

# spelling similarity only counts for a quarter of a dictionary match
EDIT_SIMILARITY_DISCOUNT = 4.0
MIN_ALIGNED_WORDS = 3


def gap_factor(positions: tp.Iterable[int]) -> float:
    """inverse of the mean distance between consecutive aligned target positions"""
    ordered = sorted(positions)
    if len(ordered) < 2:
        return 0.0
    average = mean([abs(b - a) for a, b in zip(ordered, ordered[1:])])
    if average > 0:
        return 1.0 / average
    return 0.0


def length_balance(c1: int, c2: int) -> float:
    if max(c1, c2) == 0:
        return 0.0
    return 1.0 - abs(c1 - c2) / max(c1, c2)


class LexicalPrefilter:
    """
    Cheap first pass over the retrieved candidates: each source content word
    is paired with its best target word, the pair score rewards many and
    close together matches between sentences of similar length.
    """

    def __init__(
        self,
        equivalents: TranslationEquivalents,
        src: LanguageResources,
        use_edit_similarity: bool = True,
    ):
        self.equivalents = equivalents
        self.src = src
        self.use_edit_similarity = use_edit_similarity

    def _match(self, src_word: str, tgt_word: str) -> float:
        prob = self.equivalents.probability(src_word, tgt_word)
        if self.use_edit_similarity:
            similarity = edit_similarity(src_word, tgt_word)
            return max(prob, similarity / EDIT_SIMILARITY_DISCOUNT)
        return prob

    def lexical_similarity(
        self, src_tokens: tp.Sequence[str], tgt_tokens: tp.Sequence[str]
    ) -> float:
        total = 0.0
        aligned = 0
        positions = []
        for src_word in src_tokens:
            if self.src.is_stopword(src_word):
                continue
            best, best_j = 0.0, -1
            for j, tgt_word in enumerate(tgt_tokens):
                match = self._match(src_word, tgt_word)
                if match > best:
                    best, best_j = match, j
            if best_j >= 0:
                positions.append(best_j)
                total += best
                aligned += 1
        if aligned < MIN_ALIGNED_WORDS:
            return 0.0
        coverage = 2.0 * total / (len(src_tokens) + len(tgt_tokens))
        return aligned * coverage * gap_factor(positions) ** 0.5

    def score(
        self, src_sentence: str, tgt_sentence: str, retrieval_score: float
    ) -> float:
        src_tokens = retrieval_tokens(src_sentence)
        tgt_tokens = retrieval_tokens(tgt_sentence)
        c1, c2 = len(src_tokens), len(tgt_tokens)
        if c1 == 0 or c2 == 0:
            return 0.0
        return (
            retrieval_score
            * self.lexical_similarity(src_tokens, tgt_tokens)
            * length_balance(c1, c2)
            * min(c1, c2)
            / 100.0
        )
