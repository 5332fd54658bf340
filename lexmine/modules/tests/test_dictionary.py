# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the license found in the
# LICENSE file in the root directory of this source tree.

from pathlib import Path

import pytest

from lexmine.core.errors import ParseError
from lexmine.modules.lexical import (
    InflectionTable,
    LanguageResources,
    TranslationDictionary,
    TranslationEquivalents,
)
from lexmine.modules.lexical.dictionary import parse_table_line, read_probability_table


@pytest.fixture
def en() -> LanguageResources:
    return LanguageResources(
        "en", frozenset({"the"}), InflectionTable({"s": 1}, longest=1)
    )


@pytest.fixture
def fr() -> LanguageResources:
    return LanguageResources(
        "fr", frozenset({"le"}), InflectionTable({"s": 1}, longest=1)
    )


def test_parse_table_line():
    assert parse_table_line("cat chat 0.3") == ("cat", "chat", 0.3)
    assert parse_table_line("cat\tchat\t1") == ("cat", "chat", 1.0)
    # tabs and spaces mixed: multiword entries
    assert parse_table_line("new york\tnew york\t0.5") == ("new york", "new york", 0.5)
    with pytest.raises(ParseError):
        parse_table_line("cat chat")
    with pytest.raises(ParseError):
        parse_table_line("cat chat high")


def test_read_probability_table_skips_bad_lines(tmp_path: Path):
    path = tmp_path / "en_fr"
    path.write_text(
        "cat chat 0.3\nnot a good line\n\ndog chien nan?\ndog chien 0.8\n",
        encoding="utf-8",
    )
    assert list(read_probability_table(path)) == [
        ("cat", "chat", 0.3),
        ("dog", "chien", 0.8),
    ]


def test_max_merge(en: LanguageResources, fr: LanguageResources):
    dictionary = TranslationDictionary(
        en, fr, [("cat", "chat", 0.3), ("cat", "chat", 0.6)]
    )
    assert dictionary.probability("cat", "chat") == 0.6
    dictionary = TranslationDictionary(
        en, fr, [("cat", "chat", 0.6), ("cat", "chat", 0.3)]
    )
    assert dictionary.probability("cat", "chat") == 0.6


def test_min_probability(en: LanguageResources, fr: LanguageResources):
    dictionary = TranslationDictionary(en, fr, [("cat", "chien", 0.0005)])
    assert dictionary.probability("cat", "chien") == 0.0
    assert len(dictionary) == 0


def test_lemmatized_lookup(en: LanguageResources, fr: LanguageResources):
    dictionary = TranslationDictionary(en, fr, [("cat", "chat", 0.4)])
    assert dictionary.probability("Cats", "CHATS") == 0.4
    assert dictionary.probability("cat", "chien") == 0.0

    plain = TranslationDictionary(en, fr, [("cat", "chat", 0.4)], lemmatize=False)
    assert plain.probability("Cat", "chat") == 0.4
    assert plain.probability("cats", "chats") == 0.0


def test_variants_are_folded():
    ro = LanguageResources("ro")
    en = LanguageResources("en")
    dictionary = TranslationDictionary(ro, en, [("ţară", "country", 0.7)])
    assert dictionary.probability("țară", "country") == 0.7
    assert dictionary.probability("ţară", "country") == 0.7


def test_load_missing_dictionary(tmp_path: Path, en, fr):
    dictionary = TranslationDictionary.load(tmp_path / "en_fr", en, fr)
    assert len(dictionary) == 0
    assert dictionary.probability("cat", "chat") == 0.0


def test_load_dictionary(tmp_path: Path, en, fr):
    path = tmp_path / "en_fr"
    path.write_text("cat chat 0.3\nbroken\ncat chat 0.6\n", encoding="utf-8")
    dictionary = TranslationDictionary.load(path, en, fr)
    assert dictionary.probability("cat", "chat") == 0.6
    assert ("cat", "chat") in dictionary


def test_translation_equivalents(tmp_path: Path):
    equivalents = TranslationEquivalents(
        [("House", "Maison", 0.5), ("house", "maison", 0.7), ("house", "logis", 0)]
    )
    assert equivalents.equivalents("HOUSE") == {"maison": 0.7}
    assert equivalents.probability("house", "Maison") == 0.7
    assert equivalents.probability("house", "logis") == 0.0
    assert "house" in equivalents
    assert len(equivalents) == 1

    assert len(TranslationEquivalents.load(tmp_path / "missing")) == 0


def test_invalid_utf8_lines_are_skipped(tmp_path: Path, en, fr):
    path = tmp_path / "en_fr"
    path.write_bytes(b"cat chat 0.5\n\xff\xfe bad 0.3\ndog chien 0.8\n")
    assert list(read_probability_table(path)) == [
        ("cat", "chat", 0.5),
        ("dog", "chien", 0.8),
    ]

    dictionary = TranslationDictionary.load(path, en, fr)
    assert dictionary.probability("cat", "chat") == 0.5
    assert dictionary.probability("dog", "chien") == 0.8
    assert TranslationEquivalents.load(path).probability("dog", "chien") == 0.8
