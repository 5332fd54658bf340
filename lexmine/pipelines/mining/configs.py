# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the license found in the
# LICENSE file in the root directory of this source tree.

from dataclasses import dataclass, field
from typing import Optional

from hydra.core.config_store import ConfigStore
from omegaconf import MISSING

from lexmine.modules.lexical.dictionary import DEFAULT_MIN_PROBABILITY


@dataclass
class ResourcesConfig:
    # stopwords_<lang>.txt, endings_<lang>.txt and weights_<src>-<tgt>.txt
    res_dir: str = MISSING
    # probability tables named <src>_<tgt>, one per direction
    dict_dir: str = MISSING
    min_probability: float = DEFAULT_MIN_PROBABILITY
    lemmatize: bool = True


@dataclass
class SentenceIndexConfig:
    _target_: str = "lexmine.modules.retrieval.InMemorySentenceIndex"


@dataclass
class RetrievalConfig:
    index: SentenceIndexConfig = field(default_factory=SentenceIndexConfig)
    top_n: int = 100
    max_equivalents: int = 50
    min_equivalent_probability: float = 0.1
    length_bucket_boost: float = 2.0


@dataclass
class PrefilterConfig:
    use_edit_similarity: bool = True


@dataclass
class SelectionConfig:
    # None picks 0.2 for english source texts and 0 otherwise
    threshold: Optional[float] = None
    max_repeated_source: int = 1
    max_repeated_target: int = 1


@dataclass
class MiningConfig:
    src_lang: str = MISSING
    tgt_lang: str = MISSING
    output_dir: str = MISSING
    # defaults to <output_dir>/<src>-<tgt>.mined.txt
    output_file: Optional[str] = None

    # either two file lists (one document path per line) ...
    src_files: Optional[str] = None
    tgt_files: Optional[str] = None
    # ... or a document alignment, one "src_doc<TAB>tgt_doc" per line
    doc_align_file: Optional[str] = None
    already_segmented: bool = False

    # run the lexical prefilter and the mean cut before rescoring
    filter: bool = True
    keep_intermediate: bool = True
    num_workers: int = 1
    batch_size: int = 2000

    resources: ResourcesConfig = field(default_factory=ResourcesConfig)
    retrieval: RetrievalConfig = field(default_factory=RetrievalConfig)
    prefilter: PrefilterConfig = field(default_factory=PrefilterConfig)
    selection: SelectionConfig = field(default_factory=SelectionConfig)


def register_configs():
    cs = ConfigStore.instance()
    cs.store(name="base_mining", node=MiningConfig)
