# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the license found in the
# LICENSE file in the root directory of this source tree.

"""
Bilingual lexicons read from a word alignment probability table, one
`source_word target_word probability` entry per line.

TranslationDictionary is the lemmatized lexicon used by the PEXACC measure,
TranslationEquivalents keeps the surface forms and is used to expand
retrieval queries and by the lexical prefilter.
"""

import logging
import re
import typing as tp
from collections import defaultdict
from pathlib import Path

from lexmine.core import utils
from lexmine.core.errors import ParseError, ResourceLoadError
from lexmine.modules.lexical.resources import LanguageResources, orthographic_variants

logger = logging.getLogger("lexmine.lexical")

DEFAULT_MIN_PROBABILITY = 0.001
_TABS = re.compile(r"\t+")


def parse_table_line(line: str, path: tp.Any = None, line_no: int = 0):
    """
    Splits one line of a probability table into (source, target, probability).
    Fields are separated by whitespace, unless the line mixes tabs and spaces in
    which case only tabs separate fields (entries may be multiword).
    """
    if "\t" in line and " " in line:
        fields = _TABS.split(line)
    else:
        fields = line.split()
    if len(fields) != 3:
        raise ParseError(path, line_no, line, f"expected 3 fields, got {len(fields)}")
    try:
        prob = float(fields[2])
    except ValueError as e:
        raise ParseError(path, line_no, line, "invalid probability") from e
    return fields[0], fields[1], prob


def read_probability_table(
    path: tp.Union[str, Path]
) -> tp.Iterator[tp.Tuple[str, str, float]]:
    """
    yields the well formed entries of a probability table, malformed lines are
    logged and skipped.
    """
    try:
        f = utils.open(path, "rb")
    except OSError as e:
        raise ResourceLoadError(path, str(e)) from e
    skipped = 0
    with f:
        for line_no, raw in enumerate(f, start=1):
            try:
                line = raw.decode("utf-8").strip()
            except UnicodeDecodeError:
                # a bad byte only costs its line
                line = raw.decode("utf-8", "replace").strip()
                skipped += 1
                logger.warning(str(ParseError(path, line_no, line, "invalid utf-8")))
                continue
            if not line:
                continue
            try:
                yield parse_table_line(line, path, line_no)
            except ParseError as e:
                skipped += 1
                logger.warning(str(e))
            if line_no % 100_000 == 0:
                logger.info(f"read {line_no} lines from {path}")
    if skipped:
        logger.warning(f"skipped {skipped} malformed lines in {path}")


class TranslationDictionary:
    """
    (source lemma, target lemma) -> translation probability. When several
    entries fold to the same key, the highest probability is kept.
    """

    def __init__(
        self,
        src: LanguageResources,
        tgt: LanguageResources,
        entries: tp.Optional[tp.Iterable[tp.Tuple[str, str, float]]] = None,
        min_probability: float = DEFAULT_MIN_PROBABILITY,
        lemmatize: bool = True,
    ):
        self.src = src
        self.tgt = tgt
        self.lemmatize = lemmatize
        self.min_probability = min_probability
        self._table: tp.Dict[tp.Tuple[str, str], float] = {}
        for src_word, tgt_word, prob in entries or ():
            self._register(src_word, tgt_word, prob)

    @classmethod
    def load(
        cls,
        path: tp.Union[str, Path],
        src: LanguageResources,
        tgt: LanguageResources,
        min_probability: float = DEFAULT_MIN_PROBABILITY,
        lemmatize: bool = True,
    ) -> "TranslationDictionary":
        try:
            dictionary = cls(
                src,
                tgt,
                read_probability_table(path),
                min_probability=min_probability,
                lemmatize=lemmatize,
            )
        except ResourceLoadError as e:
            logger.warning(f"{e}, using an empty dictionary")
            return cls(src, tgt, min_probability=min_probability, lemmatize=lemmatize)
        logger.info(
            f"loaded {len(dictionary)} {src.lang}-{tgt.lang} dictionary pairs from {path}"
        )
        return dictionary

    def _register(self, src_word: str, tgt_word: str, prob: float) -> None:
        if prob < self.min_probability:
            return
        for src_variant in orthographic_variants(src_word, self.src.lang):
            for tgt_variant in orthographic_variants(tgt_word, self.tgt.lang):
                if self.lemmatize:
                    keys = [
                        (src_lemma, tgt_lemma)
                        for src_lemma in self.src.lemmatize(src_variant)
                        for tgt_lemma in self.tgt.lemmatize(tgt_variant)
                    ]
                else:
                    keys = [(src_variant, tgt_variant)]
                for key in keys:
                    if self._table.get(key, -1.0) < prob:
                        self._table[key] = prob

    def probability(self, src_word: str, tgt_word: str) -> float:
        src_word = src_word.lower()
        tgt_word = tgt_word.lower()
        if not self.lemmatize:
            return self._table.get((src_word, tgt_word), 0.0)
        best = 0.0
        for src_lemma in self.src.lemmatize(src_word):
            for tgt_lemma in self.tgt.lemmatize(tgt_word):
                best = max(best, self._table.get((src_lemma, tgt_lemma), 0.0))
        return best

    def __len__(self) -> int:
        return len(self._table)

    def __contains__(self, pair: tp.Tuple[str, str]) -> bool:
        return pair in self._table


class TranslationEquivalents:
    """surface form -> {translation: probability}, case insensitive"""

    def __init__(
        self, entries: tp.Optional[tp.Iterable[tp.Tuple[str, str, float]]] = None
    ):
        table: tp.Dict[str, tp.Dict[str, float]] = defaultdict(dict)
        for src_word, tgt_word, prob in entries or ():
            if prob == 0:
                continue
            translations = table[src_word.lower()]
            tgt_word = tgt_word.lower()
            if translations.get(tgt_word, 0.0) < prob:
                translations[tgt_word] = prob
        self._table = dict(table)

    @classmethod
    def load(cls, path: tp.Union[str, Path]) -> "TranslationEquivalents":
        try:
            return cls(read_probability_table(path))
        except ResourceLoadError as e:
            logger.warning(f"{e}, queries will not be expanded")
            return cls()

    def equivalents(self, word: str) -> tp.Mapping[str, float]:
        return self._table.get(word.lower(), {})

    def probability(self, src_word: str, tgt_word: str) -> float:
        return self.equivalents(src_word).get(tgt_word.lower(), 0.0)

    def __contains__(self, word: str) -> bool:
        return word.lower() in self._table

    def __len__(self) -> int:
        return len(self._table)
