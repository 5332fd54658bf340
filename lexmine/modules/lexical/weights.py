# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the license found in the
# LICENSE file in the root directory of this source tree.

import dataclasses
import logging
import typing as tp
from pathlib import Path

from lexmine.core import utils
from lexmine.core.errors import ParseError, ResourceLoadError

logger = logging.getLogger("lexmine.lexical")


@dataclasses.dataclass(frozen=True)
class PexaccWeights:
    content_words: float = 0.45
    function_words: float = 0.20
    not_scrambled: float = 0.15
    translated_ends: float = 0.15
    final_punctuation: float = 0.05

    def as_tuple(self) -> tp.Tuple[float, float, float, float, float]:
        return dataclasses.astuple(self)  # type: ignore[return-value]

    @classmethod
    def from_line(cls, line: str, path: tp.Any = None, line_no: int = 0):
        fields = line.split()
        if len(fields) != len(dataclasses.fields(cls)):
            raise ParseError(path, line_no, line, "expected 5 weights")
        try:
            values = [float(f) for f in fields]
        except ValueError as e:
            raise ParseError(path, line_no, line, "invalid weight") from e
        if any(v < 0 for v in values):
            raise ParseError(path, line_no, line, "weights must be non negative")
        return cls(*values)


def load_weights(path: tp.Union[str, Path]) -> PexaccWeights:
    """
    reads the first line of five weights of a weights file. Blank lines,
    comments and malformed lines are skipped, the default weights are used
    when the file has no usable line.
    """
    try:
        with utils.open(path) as f:
            lines = f.readlines()
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"{ResourceLoadError(path, str(e))}, using default weights")
        return PexaccWeights()

    for line_no, line in enumerate(lines, start=1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        try:
            weights = PexaccWeights.from_line(line, path, line_no)
        except ParseError as e:
            logger.debug(str(e))
            continue
        logger.info(f"loaded weights {weights.as_tuple()} from {path}")
        return weights

    logger.warning(f"no valid weights line in {path}, using default weights")
    return PexaccWeights()
