# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the license found in the
# LICENSE file in the root directory of this source tree.

import typing as tp
from pathlib import Path

import pytest

EN_FR = """cat chat 0.8
sleeps dort 0.7
mat tapis 0.6
dog chien 0.8
eats mange 0.7
garden jardin 0.6
the le 0.5
the la 0.4
on sur 0.6
in dans 0.6
"""

EN_DOCS = {
    "en1.txt": ["The cat sleeps on the mat."],
    "en2.txt": ["The dog eats in the garden.", "My house is red."],
}
FR_DOCS = {
    "fr1.txt": ["Le chat dort sur le tapis."],
    "fr2.txt": ["Le chien mange dans le jardin.", "La banque ferme demain."],
}


def _write_lines(path: Path, lines: tp.Iterable[str]) -> Path:
    path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
    return path


@pytest.fixture
def resources(tmp_path: Path) -> tp.Tuple[Path, Path]:
    res_dir = tmp_path / "res"
    dict_dir = tmp_path / "dict"
    res_dir.mkdir()
    dict_dir.mkdir()
    _write_lines(res_dir / "stopwords_en.txt", ["the", "on", "in", "a", "is", "my"])
    _write_lines(
        res_dir / "stopwords_fr.txt", ["le", "la", "sur", "dans", "de", "est", "ma"]
    )
    (dict_dir / "en_fr").write_text(EN_FR, encoding="utf-8")
    reverse = [line.split() for line in EN_FR.splitlines()]
    _write_lines(dict_dir / "fr_en", (f"{t} {s} {p}" for s, t, p in reverse))
    return res_dir, dict_dir


@pytest.fixture
def corpus_dir(tmp_path: Path) -> Path:
    corpus = tmp_path / "corpus"
    corpus.mkdir()
    for name, lines in {**EN_DOCS, **FR_DOCS}.items():
        _write_lines(corpus / name, lines)
    _write_lines(corpus / "en.list", EN_DOCS)
    _write_lines(corpus / "fr.list", FR_DOCS)
    _write_lines(corpus / "docs.align", ["en1.txt\tfr1.txt", "en2.txt\tfr2.txt"])
    return corpus
