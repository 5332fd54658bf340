# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the license found in the
# LICENSE file in the root directory of this source tree.

from .errors import CorpusInputError as CorpusInputError
from .errors import LexmineError as LexmineError
from .errors import ParseError as ParseError
from .errors import ResourceLoadError as ResourceLoadError
from .lexmine_module import LexmineModule as LexmineModule
from .lexmine_module import Requirements as Requirements
from .cache import Cache as Cache
from .cache import FileCache as FileCache
from .cache import MissingCache as MissingCache
from .cache import NoCache as NoCache
from .launcher import Launcher as Launcher
