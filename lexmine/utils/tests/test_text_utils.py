# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the license found in the
# LICENSE file in the root directory of this source tree.

import pytest

from lexmine.utils.text_utils import (
    clean_sentence,
    edit_similarity,
    has_digit,
    is_punctuation,
    normalize_word,
    retrieval_tokens,
    split_sentences,
    tokenize_text,
)


def test_tokenize_text_splits_punctuation():
    assert tokenize_text('"Hello, world!"') == ['"', "Hello", ",", "world", "!", '"']
    assert tokenize_text("  spaced   out  ") == ["spaced", "out"]
    assert tokenize_text("") == []
    assert tokenize_text(" ... ") == [".", ".", "."]
    # only the edges of a chunk are split
    assert tokenize_text("e-mail l'homme") == ["e-mail", "l'homme"]


def test_is_punctuation():
    assert is_punctuation(".")
    assert is_punctuation("?!")
    assert is_punctuation("«")
    assert not is_punctuation("")
    assert not is_punctuation("a.")
    assert not is_punctuation("$")


def test_has_digit():
    assert has_digit("1984")
    assert has_digit("A4")
    assert not has_digit("four")


def test_retrieval_tokens():
    assert retrieval_tokens("state-of-the-art, isn't it?") == [
        "state-of-the-art",
        "isn",
        "t",
        "it",
    ]


def test_clean_sentence():
    assert clean_sentence("  a\tb  ") == "a b"


def test_split_sentences():
    line = "This is one. And here is two! ok"
    assert split_sentences(line) == ["This is one.", "And here is two!"]
    # pieces with less than three words are dropped
    assert split_sentences("Too short. Yes it is long enough.") == [
        "Yes it is long enough."
    ]
    assert split_sentences("") == []


def test_edit_similarity():
    assert edit_similarity("kitten", "sitting") == pytest.approx(4 / 7)
    assert edit_similarity("same", "same") == 1.0
    assert edit_similarity("", "word") == 0.0
    assert edit_similarity("abc", "xyz") == 0.0


@pytest.mark.parametrize(
    "word,lang,expected",
    [
        ("philosophy", "en", "filosofy"),
        ("committee", "en", "comitee"),
        ("john", "en", "jon"),
        ("ţară", "ro", "tara"),
        ("Ştiinţă", "ro", "Stiinta"),
        ("šūnas", "lv", "sunas"),
        ("Ćevapčići", "hr", "Cevapcici"),
        ("μπαρ", "el", "bar"),
        ("Παρίσι", "el", "Parisi"),
        ("word", "fr", "word"),
    ],
)
def test_normalize_word(word: str, lang: str, expected: str):
    assert normalize_word(word, lang) == expected
