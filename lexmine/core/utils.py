# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the license found in the
# LICENSE file in the root directory of this source tree.

import builtins
import contextlib
import gzip
import hashlib
import lzma
import os
import tempfile
import typing as tp
from pathlib import Path

import omegaconf

TConfig = tp.TypeVar("TConfig")

# corpora, dictionaries and stage outputs can be compressed with any of these
_OPENERS: tp.Dict[str, tp.Callable[..., tp.IO]] = {
    ".gz": gzip.open,
    ".xz": lzma.open,
}


def sha_key(raw_key: str) -> str:
    return hashlib.sha256(raw_key.encode("utf-8")).hexdigest()


def ensure_dir(path: tp.Union[str, Path]) -> None:
    os.makedirs(path, exist_ok=True)


def open(
    filename: tp.Union[Path, str],
    mode: str = "rt",
    encoding: tp.Optional[str] = "utf-8",
) -> tp.IO:
    """opens text files as utf-8, going through gzip/lzma for .gz/.xz files"""
    if len(mode) == 1:
        mode += "t"
    if "b" in mode:
        encoding = None
    filename = Path(filename)
    opener = _OPENERS.get(filename.suffix, builtins.open)
    return opener(filename, mode=mode, encoding=encoding)  # type: ignore


@contextlib.contextmanager
def open_write(output: Path, mode: str = "wt", **kwargs) -> tp.Iterator[tp.IO]:
    """
    Writes to a temporary file next to `output` and renames it on success:
    an interrupted stage never leaves a truncated file under the final name.
    """
    assert "w" in mode, f"open_write needs a write mode, got: {mode}"
    output = Path(output)
    suffix = "".join(output.suffixes)
    fd, tmp_name = tempfile.mkstemp(
        dir=output.parent,
        prefix=output.name[: len(output.name) - len(suffix)] or output.name,
        suffix=".tmp" + suffix,
    )
    os.close(fd)
    tmp = Path(tmp_name)
    with open(tmp, mode=mode, **kwargs) as o:
        yield o
    tmp.replace(output)


def read_lines(
    filename: tp.Union[Path, str], strip: bool = True
) -> tp.Iterator[str]:
    """
    yields the non blank lines of a (possibly compressed) text file. With
    strip=False only the line break is removed, so that tab separated rows
    keep their empty fields.
    """
    with open(filename) as f:
        for line in f:
            line = line.strip() if strip else line.rstrip("\n")
            if line.strip():
                yield line


def promote_config(
    config: omegaconf.DictConfig, config_class: tp.Type[TConfig]
) -> TConfig:
    """
    turns a loaded config into the structured config of `config_class`,
    checking the keys and types of the loaded values against the dataclass.
    """
    if hasattr(config, "_target_"):
        # hydra already used it to pick the class
        read_only = config._get_flag("readonly")
        omegaconf.OmegaConf.set_readonly(config, False)
        del config._target_
        omegaconf.OmegaConf.set_readonly(config, read_only)

    # merge the loaded values into the dataclass defaults, not the other way
    proto = omegaconf.OmegaConf.structured(config_class)
    proto.merge_with(config)
    return proto  # type: ignore


def path_append_suffix(path: Path, suffix: str) -> Path:
    """`mined.txt` + `.sweep.tsv` -> `mined.txt.sweep.tsv`"""
    return path.with_name(path.name + suffix)
