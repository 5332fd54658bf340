# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the license found in the
# LICENSE file in the root directory of this source tree.

"""
Text primitives shared by the scoring and retrieval code: tokenization,
punctuation and digit tests, orthographic normalization and the normalized
edit similarity between two words.
"""

import re
import typing as tp
import unicodedata

import Levenshtein

_LEADING_NON_WORD = re.compile(r"^(\W+)")
_TRAILING_NON_WORD = re.compile(r"(\W+)$")
_DIGIT = re.compile(r"[0-9]")
_RETRIEVAL_TOKEN = re.compile(r"[\w-]+")
_SENTENCE = re.compile(r"....+?(?:[.!?]+|$)")

_VOWELS = "aAeEiIoOuUyY"
_EN_PH = re.compile(r"[pP][hH]")
_EN_H_BEFORE_CONSONANT = re.compile(rf"[Hh]([^{_VOWELS}])")
_EN_DOUBLE_CONSONANT = re.compile(rf"([^{_VOWELS}])\1")


def tokenize_text(text: str) -> tp.List[str]:
    """
    Whitespace tokenization where the non-word characters glued at the start or
    at the end of a chunk are split off, one token per character:
    '"Hello,' -> ['"', 'Hello', ',']
    """
    tokens: tp.List[str] = []
    for chunk in text.split():
        leading = _LEADING_NON_WORD.match(chunk)
        if leading:
            tokens.extend(leading.group(1))
            chunk = chunk[leading.end() :]
        trailing = _TRAILING_NON_WORD.search(chunk)
        if trailing:
            word = chunk[: trailing.start()]
            if word:
                tokens.append(word)
            tokens.extend(trailing.group(1))
        elif chunk:
            tokens.append(chunk)
    return tokens


def is_punctuation(token: str) -> bool:
    return bool(token) and all(
        unicodedata.category(c).startswith("P") for c in token
    )


def has_digit(token: str) -> bool:
    return _DIGIT.search(token) is not None


def retrieval_tokens(text: str) -> tp.List[str]:
    """word tokens used to build queries and index terms"""
    return _RETRIEVAL_TOKEN.findall(text)


def clean_sentence(text: str) -> str:
    return text.strip().replace("\t", " ")


def split_sentences(line: str, min_words: int = 3) -> tp.List[str]:
    """
    Rough sentence splitting for documents that are not segmented yet: cut
    after runs of terminal punctuation and keep pieces that have at least
    min_words space separated words.
    """
    sentences = []
    for match in _SENTENCE.finditer(line.strip()):
        sent = clean_sentence(match.group(0))
        if len(sent.split(" ")) >= min_words:
            sentences.append(sent)
    return sentences


def edit_similarity(s: str, t: str) -> float:
    """1 - levenshtein(s, t) / max(|s|, |t|), 0 if one of the strings is empty"""
    if not s or not t:
        return 0.0
    longest = max(len(s), len(t))
    return (longest - Levenshtein.distance(s, t)) / longest


# diacritics folded to their base letter before comparing the spelling of words
_DIACRITICS = {
    "ro": ("âÂîÎăĂşșŞȘţțŢȚ", "aAiIaAssSSttTT"),
    "lv": ("āĀčČēĒģĢīĪķĶļĻņŅšŠūŪžŽ", "aAcCeEgGiIkKlLnNsSuUzZ"),
    "lt": ("ĄČĘĖĮŠŲŪŽąčęėįšųūž", "ACEEISUUZaceeisuuz"),
    "et": ("ŠšŽžÕõÄäÖöÜü", "SsZzOoAaOoUu"),
    "sl": ("čČćĆĐđšŠžŽéÉâÂáÁàÀíÍìÌÓóúÚŕŔ", "cCcCDdsSzZeEaAaAaAiIiIOouUrR"),
    "hr": ("ČčĆćĐđŠšŽž", "CcCcDdSsZz"),
}
_DIACRITICS_TABLES = {
    lang: str.maketrans(src, tgt) for lang, (src, tgt) in _DIACRITICS.items()
}

# UN/ELOT romanization of Greek
_EL_CONTEXT_RULES = [
    (re.compile(r"^μπ"), "b"),
    (re.compile(r"(.)μπ(.)"), r"\1mp\2"),
    (re.compile(r"([βγδζλμνραεηιουω])αυ"), r"\1av"),
    (re.compile(r"([θκξπστφχψ])αυ$"), r"\1af"),
    (re.compile(r"([βγδζλμνραεηιουω])ευ"), r"\1ev"),
    (re.compile(r"([θκξπστφχψ])ευ$"), r"\1ef"),
    (re.compile(r"([βγδζλμνραεηιουω])ηυ"), r"\1iv"),
    (re.compile(r"([θκξπστφχψ])ηυ$"), r"\1if"),
]
_EL_DIGRAPHS = [
    ("αι", "ai"),
    ("ει", "ei"),
    ("οι", "oi"),
    ("ου", "ou"),
    ("υι", "yi"),
    ("γγ", "ng"),
    ("γξ", "nx"),
    ("γκ", "gk"),
    ("γχ", "nch"),
    ("ντ", "nt"),
]
_EL_LETTERS = str.maketrans(
    {
        **dict(zip("αβγδεζηικλμνξοπρστυφω", "avgdeziiklmnxoprstyfo")),
        **dict(zip("ΑΒΓΔΕΖΗΙΚΛΜΝΞΟΠΡΣΤΥΦΩ", "AVGDEZIIKLMNXOPRSTYFO")),
        **dict(zip("άέήίϊΐόύϋΰώ", "aeiiiioyyyo")),
        **dict(zip("ΆΈΉΊΪΌΎΫΏ", "AEIIIOYYO")),
        "ς": "s",
        "θ": "th",
        "χ": "ch",
        "ψ": "ps",
        "Θ": "TH",
        "Χ": "CH",
        "Ψ": "PS",
    }
)


def normalize_word(word: str, lang: str) -> str:
    """
    Language specific spelling normalization used before comparing the
    surface forms of two words (cognates, names, numbers).
    """
    if lang in _DIACRITICS_TABLES:
        return word.translate(_DIACRITICS_TABLES[lang])
    if lang == "en":
        word = _EN_PH.sub("f", word)
        word = _EN_H_BEFORE_CONSONANT.sub(r"\1", word)
        return _EN_DOUBLE_CONSONANT.sub(r"\1", word)
    if lang == "el":
        for rule, repl in _EL_CONTEXT_RULES:
            word = rule.sub(repl, word)
        for digraph, repl in _EL_DIGRAPHS:
            word = word.replace(digraph, repl)
        return word.translate(_EL_LETTERS)
    return word
