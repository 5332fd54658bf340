# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the license found in the
# LICENSE file in the root directory of this source tree.

from .dictionary import TranslationDictionary as TranslationDictionary
from .dictionary import TranslationEquivalents as TranslationEquivalents
from .resources import InflectionTable as InflectionTable
from .resources import LanguageResources as LanguageResources
from .resources import lemmatize as lemmatize
from .resources import load_inflections as load_inflections
from .resources import load_stop_words as load_stop_words
from .resources import orthographic_variants as orthographic_variants
from .weights import PexaccWeights as PexaccWeights
from .weights import load_weights as load_weights
