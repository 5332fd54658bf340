# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the license found in the
# LICENSE file in the root directory of this source tree.

"""
PEXACC: a weighted combination of five lexical features telling how likely
two sentences are translations of each other.

  1. coverage of the source content words by translation equivalents
  2. function words around the aligned content words are translated too
  3. the word alignment is not scrambled
  4. both ends of the sentences are translated
  5. both sentences end with the same punctuation

The measure is directional, PexaccMeasure.score_pair averages the
source->target and target->source scores, each computed with the resources
of its own direction.
"""

import dataclasses
import logging
import math
import typing as tp
from pathlib import Path

from lexmine.modules.lexical.dictionary import (
    DEFAULT_MIN_PROBABILITY,
    TranslationDictionary,
)
from lexmine.modules.lexical.resources import LanguageResources
from lexmine.modules.lexical.weights import PexaccWeights, load_weights
from lexmine.utils.stats_utils import pearson, sigmoid
from lexmine.utils.text_utils import (
    edit_similarity,
    has_digit,
    is_punctuation,
    normalize_word,
    tokenize_text,
)

logger = logging.getLogger("lexmine.pexacc")

MAX_LENGTH_RATIO = 1.5
HALF_WINDOW = 5
HALF_WINDOW_FUNCTION_WORDS = 3
SPELLING_SIMILARITY = 0.7
NUMBER_SIMILARITY = 0.5
SURE_PROBABILITY = 0.2
SURE_PROBABILITY_FUNCTION_WORDS = 0.1
EDGE_DISTANCE = 2


@dataclasses.dataclass(frozen=True)
class DirectionalResources:
    """everything needed to score in one direction, shared read-only"""

    src: LanguageResources
    tgt: LanguageResources
    dictionary: TranslationDictionary
    weights: PexaccWeights = PexaccWeights()

    @classmethod
    def load(
        cls,
        res_dir: tp.Union[str, Path],
        dict_dir: tp.Union[str, Path],
        src: LanguageResources,
        tgt: LanguageResources,
        min_probability: float = DEFAULT_MIN_PROBABILITY,
        lemmatize: bool = True,
    ) -> "DirectionalResources":
        return cls(
            src=src,
            tgt=tgt,
            dictionary=TranslationDictionary.load(
                Path(dict_dir) / f"{src.lang}_{tgt.lang}",
                src,
                tgt,
                min_probability=min_probability,
                lemmatize=lemmatize,
            ),
            weights=load_weights(Path(res_dir) / f"weights_{src.lang}-{tgt.lang}.txt"),
        )

    def is_src_content(self, token: str) -> bool:
        return not is_punctuation(token) and not self.src.is_stopword(token)

    def is_tgt_content(self, token: str) -> bool:
        return not is_punctuation(token) and not self.tgt.is_stopword(token)


@dataclasses.dataclass
class PexaccValue:
    content_words: float = 0.0
    function_words: float = 0.0
    not_scrambled: float = 0.0
    translated_ends: float = 0.0
    final_punctuation: float = 0.0
    score: float = 0.0

    def features(self) -> tp.Tuple[float, float, float, float, float]:
        return (
            self.content_words,
            self.function_words,
            self.not_scrambled,
            self.translated_ends,
            self.final_punctuation,
        )


@dataclasses.dataclass
class PairScore:
    forward: PexaccValue
    backward: PexaccValue

    @property
    def score(self) -> float:
        return (self.forward.score + self.backward.score) / 2


@dataclasses.dataclass
class Alignment:
    """
    Greedy word alignment of one sentence pair. Each map goes from a target
    position to (source position, probability), `tokens` uses positions in the
    token lists and `content` uses positions in the content word lists.
    A target position is claimed at most once.
    """

    tokens: tp.Dict[int, tp.Tuple[int, float]] = dataclasses.field(
        default_factory=dict
    )
    content: tp.Dict[int, tp.Tuple[int, float]] = dataclasses.field(
        default_factory=dict
    )
    probabilities: tp.List[float] = dataclasses.field(default_factory=list)

    def claim(
        self, src_pos: int, tgt_pos: int, src_cw: int, tgt_cw: int, prob: float
    ) -> None:
        if tgt_pos in self.tokens:
            return
        self.tokens[tgt_pos] = (src_pos, prob)
        self.content[tgt_cw] = (src_cw, prob)
        self.probabilities.append(prob)

    def __len__(self) -> int:
        return len(self.tokens)


def target_window(
    src_pos: int, src_len: int, tgt_len: int, half_window: int = HALF_WINDOW
) -> tp.Tuple[int, int]:
    """
    Inclusive target window around the position proportional to src_pos. When
    it hits one end of the sentence, it is pushed the other way to keep its
    width, and clamped again to the sentence.
    """
    anchor = math.floor(tgt_len / src_len * src_pos + 0.5)
    left = anchor - half_window
    right = anchor + half_window
    stuck_left = left < 0
    stuck_right = right >= tgt_len
    if stuck_left:
        left = 0
    if stuck_right:
        right = tgt_len - 1
    if stuck_left:
        right = min(max(right, left + 2 * half_window), tgt_len - 1)
    if stuck_right:
        left = max(min(left, right - 2 * half_window), 0)
    return left, right


def equivalence_probability(
    src_word: str, tgt_word: str, resources: DirectionalResources
) -> float:
    if src_word.lower() == tgt_word.lower():
        return 1.0
    similarity = edit_similarity(
        normalize_word(src_word, resources.src.lang).lower(),
        normalize_word(tgt_word, resources.tgt.lang).lower(),
    )
    if similarity >= SPELLING_SIMILARITY:
        return similarity
    return max(resources.dictionary.probability(src_word, tgt_word), 0.0)


def align(
    src_tokens: tp.Sequence[str],
    tgt_tokens: tp.Sequence[str],
    resources: DirectionalResources,
) -> Alignment:
    """
    Left to right, each source content word takes the best equivalent among the
    target content words of its window that nobody claimed yet.
    """
    tgt_content_pos: tp.Dict[int, int] = {}
    for j, token in enumerate(tgt_tokens):
        if resources.is_tgt_content(token):
            tgt_content_pos[j] = len(tgt_content_pos)

    alignment = Alignment()
    src_cw = -1
    for i, src_word in enumerate(src_tokens):
        if not resources.is_src_content(src_word):
            continue
        src_cw += 1
        left, right = target_window(i, len(src_tokens), len(tgt_tokens))
        best_prob, best_j = 0.0, -1
        for j in range(left, right + 1):
            if j not in tgt_content_pos or j in alignment.tokens:
                continue
            prob = equivalence_probability(src_word, tgt_tokens[j], resources)
            if prob > best_prob:
                best_prob, best_j = prob, j
        if best_j >= 0:
            alignment.claim(i, best_j, src_cw, tgt_content_pos[best_j], best_prob)
    return alignment


def have_same_numbers(
    src_tokens: tp.Sequence[str], tgt_tokens: tp.Sequence[str]
) -> bool:
    """every target token with a digit must resemble a source token with a digit"""
    src_numbers = {t.lower() for t in src_tokens if has_digit(t)}
    for token in tgt_tokens:
        if not has_digit(token):
            continue
        token = token.lower()
        if not any(
            edit_similarity(number, token) >= NUMBER_SIMILARITY
            for number in src_numbers
        ):
            return False
    return True


def function_words_aligned(
    alignment: Alignment,
    src_tokens: tp.Sequence[str],
    tgt_tokens: tp.Sequence[str],
    resources: DirectionalResources,
) -> float:
    w = HALF_WINDOW_FUNCTION_WORDS
    with_function_words = 0
    translated = 0
    for j, (i, _) in alignment.tokens.items():
        src_function_words = [
            src_tokens[x]
            for x in range(max(0, i - w), min(len(src_tokens), i + w + 1))
            if resources.src.is_stopword(src_tokens[x])
        ]
        if not src_function_words:
            continue
        with_function_words += 1
        tgt_function_words = [
            tgt_tokens[y]
            for y in range(max(0, j - w), min(len(tgt_tokens), j + w + 1))
            if resources.tgt.is_stopword(tgt_tokens[y])
        ]
        if any(
            resources.dictionary.probability(src_fw, tgt_fw)
            >= SURE_PROBABILITY_FUNCTION_WORDS
            for src_fw in src_function_words
            for tgt_fw in tgt_function_words
        ):
            translated += 1
    if with_function_words == 0:
        return 1.0
    return translated / with_function_words


def alignment_not_scrambled(alignment: Alignment, max_i: int, max_j: int) -> float:
    """
    |correlation| of the aligned content word positions, damped by a sigmoid
    when few words are aligned. max_i, max_j are the last content positions.
    """
    if not alignment.content or max_i <= 0 or max_j <= 0:
        return 0.0
    tgt_positions = list(alignment.content)
    src_positions = [alignment.content[j][0] for j in tgt_positions]
    max_possible = min(max_i + 1, max_j + 1)
    density = len(tgt_positions) / (max_possible / 2.0) - 1
    return abs(pearson(src_positions, tgt_positions) * sigmoid(density, slope=5))


def translated_ends(alignment: Alignment, max_i: int, max_j: int) -> float:
    positions = sorted(alignment.content)

    left = False
    for j in positions:
        if j > EDGE_DISTANCE:
            break
        i, prob = alignment.content[j]
        if i <= EDGE_DISTANCE and prob >= SURE_PROBABILITY:
            left = True
            break

    right = False
    for j in reversed(positions):
        if abs(max_j - j) > EDGE_DISTANCE:
            break
        i, prob = alignment.content[j]
        if abs(max_i - i) <= EDGE_DISTANCE and prob >= SURE_PROBABILITY:
            right = True
            break

    return 1.0 if left and right else 0.0


def same_final_punctuation(
    src_tokens: tp.Sequence[str], tgt_tokens: tp.Sequence[str]
) -> float:
    src_last, tgt_last = src_tokens[-1], tgt_tokens[-1]
    if is_punctuation(src_last) or is_punctuation(tgt_last):
        return 1.0 if src_last == tgt_last else 0.0
    return 1.0


def score(
    src_sentence: str, tgt_sentence: str, resources: DirectionalResources
) -> PexaccValue:
    """
    Directional PEXACC score. Degenerate pairs (empty sentences, very different
    lengths, nothing aligned, numbers that do not match) get a score of 0.
    """
    src_tokens = tokenize_text(src_sentence)
    tgt_tokens = tokenize_text(tgt_sentence)
    if not src_tokens or not tgt_tokens:
        return PexaccValue()
    if (
        len(src_tokens) / len(tgt_tokens) > MAX_LENGTH_RATIO
        or len(tgt_tokens) / len(src_tokens) > MAX_LENGTH_RATIO
    ):
        return PexaccValue()

    alignment = align(src_tokens, tgt_tokens, resources)
    if not alignment.probabilities:
        return PexaccValue()
    if not have_same_numbers(src_tokens, tgt_tokens):
        return PexaccValue()

    src_cw = sum(1 for t in src_tokens if resources.is_src_content(t))
    tgt_cw = sum(1 for t in tgt_tokens if resources.is_tgt_content(t))

    value = PexaccValue(
        content_words=sum(alignment.probabilities) / src_cw,
        function_words=function_words_aligned(
            alignment, src_tokens, tgt_tokens, resources
        ),
        not_scrambled=alignment_not_scrambled(alignment, src_cw - 1, tgt_cw - 1),
        translated_ends=translated_ends(alignment, src_cw - 1, tgt_cw - 1),
        final_punctuation=same_final_punctuation(src_tokens, tgt_tokens),
    )
    value.score = sum(
        w * f for w, f in zip(resources.weights.as_tuple(), value.features())
    )
    return value


class PexaccMeasure:
    """Symmetric PEXACC, built from the resources of both directions."""

    def __init__(self, forward: DirectionalResources, backward: DirectionalResources):
        self.forward = forward
        self.backward = backward

    @classmethod
    def load(
        cls,
        res_dir: tp.Union[str, Path],
        dict_dir: tp.Union[str, Path],
        src_lang: str,
        tgt_lang: str,
        min_probability: float = DEFAULT_MIN_PROBABILITY,
        lemmatize: bool = True,
    ) -> "PexaccMeasure":
        src = LanguageResources.load(res_dir, src_lang)
        tgt = LanguageResources.load(res_dir, tgt_lang)
        kwargs = dict(min_probability=min_probability, lemmatize=lemmatize)
        return cls(
            DirectionalResources.load(res_dir, dict_dir, src, tgt, **kwargs),
            DirectionalResources.load(res_dir, dict_dir, tgt, src, **kwargs),
        )

    def score_pair(self, src_sentence: str, tgt_sentence: str) -> PairScore:
        return PairScore(
            forward=score(src_sentence, tgt_sentence, self.forward),
            backward=score(tgt_sentence, src_sentence, self.backward),
        )
