# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the license found in the
# LICENSE file in the root directory of this source tree.


class LexmineError(Exception):
    pass


class ResourceLoadError(LexmineError):
    """A lexical resource (stopwords, endings, dictionary, weights) could not be read.

    Callers log it and go on with an empty resource.
    """

    def __init__(self, path, reason: str = ""):
        self.path = path
        msg = f"could not load resource {path}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class ParseError(LexmineError):
    def __init__(self, path, line_no: int, line: str, reason: str = ""):
        self.path = path
        self.line_no = line_no
        self.line = line
        super().__init__(f"{path}:{line_no}: cannot parse {line!r} {reason}".rstrip())


class CorpusInputError(LexmineError):
    """Missing or malformed corpus input, this is fatal for a mining run."""

    def __init__(self, path, reason: str = "file not found"):
        self.path = path
        super().__init__(f"corpus input {path}: {reason}")
