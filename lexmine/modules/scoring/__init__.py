# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the license found in the
# LICENSE file in the root directory of this source tree.

from .lexical_prefilter import LexicalPrefilter as LexicalPrefilter
from .pexacc import DirectionalResources as DirectionalResources
from .pexacc import PairScore as PairScore
from .pexacc import PexaccMeasure as PexaccMeasure
from .pexacc import PexaccValue as PexaccValue
