# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the license found in the
# LICENSE file in the root directory of this source tree.

import dataclasses
import itertools
import logging
import typing as tp
from pathlib import Path

from lexmine.core import utils
from lexmine.core.errors import ResourceLoadError

logger = logging.getLogger("lexmine.lexical")

# letters that are used interchangeably in real world text. The cedilla/comma
# Romanian letters show up in every language as they leak through corpora.
COMMON_VARIANT_PAIRS: tp.Tuple[tp.Tuple[str, str], ...] = (
    ("\u0163", "\u021b"),  # t cedilla, t comma below
    ("\u015f", "\u0219"),  # s cedilla, s comma below
)
LANG_VARIANT_PAIRS: tp.Dict[str, tp.Tuple[tp.Tuple[str, str], ...]] = {
    "hr": (("\u010d", "\u0107"),),  # c caron, c acute
    "sl": (("\u010d", "\u0107"),),
}


def variant_pairs(lang: tp.Optional[str]) -> tp.Tuple[tp.Tuple[str, str], ...]:
    return COMMON_VARIANT_PAIRS + LANG_VARIANT_PAIRS.get(lang or "", ())


def orthographic_variants(
    entry: str, lang: tp.Optional[str] = None
) -> tp.List[str]:
    """
    All the spellings of entry obtained by keeping, or substituting one way or
    the other, each of the interchangeable letter pairs of the language.
    Variants are lowercased, the unmodified entry comes first.
    """
    options = [(None, (a, b), (b, a)) for a, b in variant_pairs(lang)]
    variants: tp.Dict[str, None] = {}
    for substitutions in itertools.product(*options):
        word = entry
        for sub in substitutions:
            if sub is not None:
                word = word.replace(*sub)
        variants[word.lower()] = None
    return list(variants)


@dataclasses.dataclass(frozen=True)
class InflectionTable:
    """suffix -> suffix length, and the length of the longest suffix"""

    suffixes: tp.Mapping[str, int] = dataclasses.field(default_factory=dict)
    longest: int = 0

    def __contains__(self, suffix: str) -> bool:
        return suffix in self.suffixes

    def __len__(self) -> int:
        return len(self.suffixes)


def _read_entries(path: tp.Union[str, Path]) -> tp.List[str]:
    try:
        with utils.open(path) as f:
            return [line.strip() for line in f if line.strip()]
    except (OSError, UnicodeDecodeError) as e:
        raise ResourceLoadError(path, str(e)) from e


def load_stop_words(
    path: tp.Union[str, Path], lang: tp.Optional[str] = None
) -> tp.FrozenSet[str]:
    try:
        entries = _read_entries(path)
    except ResourceLoadError as e:
        logger.warning(f"{e}, using an empty stopword list")
        return frozenset()
    stop_words: tp.Set[str] = set()
    for entry in entries:
        stop_words.update(orthographic_variants(entry, lang))
    logger.info(f"loaded {len(stop_words)} stopwords from {path}")
    return frozenset(stop_words)


def load_inflections(
    path: tp.Union[str, Path], lang: tp.Optional[str] = None
) -> InflectionTable:
    try:
        entries = _read_entries(path)
    except ResourceLoadError as e:
        logger.warning(f"{e}, lemmatization will be a no-op")
        return InflectionTable()
    suffixes: tp.Dict[str, int] = {}
    longest = 0
    for entry in entries:
        for variant in orthographic_variants(entry, lang):
            suffixes[variant] = len(entry)
        longest = max(longest, len(entry))
    logger.info(f"loaded {len(suffixes)} inflectional suffixes from {path}")
    return InflectionTable(suffixes=suffixes, longest=longest)


def lemmatize(
    word: str,
    table: InflectionTable,
    is_stopword: tp.Callable[[str], bool] = lambda w: False,
) -> tp.Tuple[str, ...]:
    """
    Lemma candidates of word: the lowercased word itself, then the word
    stripped of every known suffix, longest suffix first. The whole word is
    never stripped. Function words are returned untouched.
    """
    if is_stopword(word):
        return (word,)
    word = word.lower()
    candidates = [word]
    for length in range(min(table.longest, len(word) - 1), 0, -1):
        if word[-length:] in table:
            lemma = word[:-length]
            if lemma not in candidates:
                candidates.append(lemma)
    return tuple(candidates)


@dataclasses.dataclass(frozen=True)
class LanguageResources:
    """The monolingual resources of one language, shared read-only by all scorers."""

    lang: str
    stop_words: tp.FrozenSet[str] = frozenset()
    inflections: InflectionTable = dataclasses.field(
        default_factory=InflectionTable
    )

    @classmethod
    def load(cls, res_dir: tp.Union[str, Path], lang: str) -> "LanguageResources":
        res_dir = Path(res_dir)
        return cls(
            lang=lang,
            stop_words=load_stop_words(res_dir / f"stopwords_{lang}.txt", lang),
            inflections=load_inflections(res_dir / f"endings_{lang}.txt", lang),
        )

    def is_stopword(self, word: str) -> bool:
        return word.lower() in self.stop_words

    def lemmatize(self, word: str) -> tp.Tuple[str, ...]:
        return lemmatize(word, self.inflections, self.is_stopword)

    def lemmatize_unique(self, word: str) -> str:
        """a single lemma per word (longest suffix stripped), used as index term"""
        candidates = self.lemmatize(word)
        return candidates[1] if len(candidates) > 1 else candidates[0].lower()
