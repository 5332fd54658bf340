# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the license found in the
# LICENSE file in the root directory of this source tree.

from pathlib import Path

import pytest

from lexmine.core import utils


def test_path_append_suffix():
    assert utils.path_append_suffix(Path("a/b.txt"), ".gz") == Path("a/b.txt.gz")
    assert utils.path_append_suffix(Path("mined"), ".tsv") == Path("mined.tsv")


@pytest.mark.parametrize("name", ["plain.txt", "compressed.txt.gz", "compressed.xz"])
def test_open_write_and_read_lines(tmp_path: Path, name: str):
    output = tmp_path / name
    with utils.open_write(output) as o:
        o.write("first line  \n\n  second line\n")
    assert output.exists()
    # nothing but the output is left in the directory
    assert list(tmp_path.iterdir()) == [output]
    assert list(utils.read_lines(output)) == ["first line", "second line"]
    assert list(utils.read_lines(output, strip=False)) == [
        "first line  ",
        "  second line",
    ]


def test_open_write_keeps_previous_output_on_failure(tmp_path: Path):
    output = tmp_path / "out.txt"
    output.write_text("done\n")
    with pytest.raises(RuntimeError):
        with utils.open_write(output) as o:
            o.write("partial")
            raise RuntimeError("boom")
    assert output.read_text() == "done\n"


def test_sha_key():
    assert utils.sha_key("a") == utils.sha_key("a")
    assert utils.sha_key("a") != utils.sha_key("b")
    assert len(utils.sha_key("a")) == 64
