# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the license found in the
# LICENSE file in the root directory of this source tree.

from pathlib import Path

import pytest

from lexmine.core.errors import ParseError
from lexmine.modules.lexical import PexaccWeights, load_weights


def test_default_weights():
    assert PexaccWeights().as_tuple() == (0.45, 0.20, 0.15, 0.15, 0.05)


def test_from_line():
    assert PexaccWeights.from_line("0.2 0.2 0.2 0.2 0.2").as_tuple() == (0.2,) * 5
    with pytest.raises(ParseError):
        PexaccWeights.from_line("0.2 0.2 0.2 0.2")
    with pytest.raises(ParseError):
        PexaccWeights.from_line("0.2 0.2 0.2 0.2 x")
    with pytest.raises(ParseError):
        PexaccWeights.from_line("0.2 0.2 0.2 0.2 -0.1")


def test_first_valid_line_wins(tmp_path: Path):
    path = tmp_path / "weights_en-fr.txt"
    path.write_text(
        "# trained weights\n\n0.1 0.2\n0.5 0.2 0.1 -0.1 0.1\n"
        "0.5 0.2 0.1 0.1 0.1\n0.2 0.2 0.2 0.2 0.2\n",
        encoding="utf-8",
    )
    assert load_weights(path).as_tuple() == (0.5, 0.2, 0.1, 0.1, 0.1)


def test_fallback_to_defaults(tmp_path: Path):
    assert load_weights(tmp_path / "missing.txt") == PexaccWeights()
    path = tmp_path / "weights_en-fr.txt"
    path.write_text("# nothing here\n1 2 3\n", encoding="utf-8")
    assert load_weights(path) == PexaccWeights()
