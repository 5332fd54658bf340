# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the license found in the
# LICENSE file in the root directory of this source tree.

"""
The mining stages as lexmine modules. Array stages split their input file
in line ranges; every batch writes its own output file so that the launcher
can cache and resume batches independently.
"""

import dataclasses
import functools
import logging
import typing as tp
from pathlib import Path

import hydra
from omegaconf import MISSING

from lexmine.core import LexmineModule, Requirements, utils
from lexmine.modules.lexical import LanguageResources, TranslationEquivalents
from lexmine.modules.retrieval import CandidateRetriever
from lexmine.modules.scoring import LexicalPrefilter, PexaccMeasure
from lexmine.modules.lexical.dictionary import DEFAULT_MIN_PROBABILITY
from lexmine.pipelines.mining.configs import SentenceIndexConfig
from lexmine.pipelines.mining.corpus import (
    CorpusFiles,
    prepare_corpus,
    read_queries,
    read_targets,
)
from lexmine.pipelines.mining.records import CandidateRecord, read_records, write_records

logger = logging.getLogger("lexmine.stages")


# a worker keeps the resources of its last few stage configs
@functools.lru_cache(maxsize=4)
def _stage_resources(stage: "BatchStage") -> tp.Any:
    return stage.load_resources()


def line_ranges(num_lines: int, batch_size: int) -> tp.List[tp.Tuple[int, int]]:
    assert batch_size > 0, "batch_size must be positive"
    return [
        (start, min(start + batch_size, num_lines))
        for start in range(0, num_lines, batch_size)
    ]


@dataclasses.dataclass
class PrepareCorpusConfig:
    output_dir: str = MISSING
    src_files: tp.Optional[str] = None
    tgt_files: tp.Optional[str] = None
    doc_align_file: tp.Optional[str] = None
    already_segmented: bool = False


class PrepareCorpusModule(LexmineModule):
    def __init__(self, config: PrepareCorpusConfig):
        super().__init__(config, PrepareCorpusConfig)

    def run(
        self,
        iteration_value: tp.Optional[tp.Any] = None,
        iteration_index: int = 0,
    ) -> CorpusFiles:
        return prepare_corpus(
            Path(self.config.output_dir) / self.name(),
            src_files=self.config.src_files,
            tgt_files=self.config.tgt_files,
            doc_align_file=self.config.doc_align_file,
            already_segmented=self.config.already_segmented,
        )

    def validate(
        self,
        output: tp.Any,
        iteration_value: tp.Optional[tp.Any] = None,
        iteration_index: int = 0,
    ) -> bool:
        return output.queries.exists() and output.targets.exists()


@dataclasses.dataclass
class BatchStageConfig:
    src_lang: str = MISSING
    tgt_lang: str = MISSING
    res_dir: str = MISSING
    dict_dir: str = MISSING
    # file this stage reads, and how many rows it holds
    input_file: str = MISSING
    num_rows: int = MISSING
    output_dir: str = MISSING
    doc_aligned: bool = False
    batch_size: int = 2000
    num_workers: int = 1


class BatchStage(LexmineModule):
    """base of the stages mapping an input file to scored candidate rows"""

    output_prefix = "rows"

    def array(self) -> tp.List[tp.Tuple[int, int]]:
        return line_ranges(self.config.num_rows, self.config.batch_size)

    def requirements(self) -> Requirements:
        return Requirements(cpus_per_task=self.config.num_workers)

    def output_file(self, iteration_index: int) -> Path:
        out_dir = Path(self.config.output_dir) / self.name()
        utils.ensure_dir(out_dir)
        return out_dir / f"{self.output_prefix}.{iteration_index:05d}.tsv"

    def run(
        self,
        iteration_value: tp.Optional[tp.Any] = None,
        iteration_index: int = 0,
    ) -> Path:
        start, stop = iteration_value
        output = self.output_file(iteration_index)
        written = write_records(self.process(start, stop), output)
        logger.info(
            f"{self.__class__.__name__} batch {iteration_index}: {written} rows"
            f" out of lines [{start}, {stop})"
        )
        return output

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other) and self.sha_key() == other.sha_key()

    def __hash__(self) -> int:
        return hash((type(self), self.sha_key()))

    def load_resources(self) -> tp.Any:
        """dictionaries and indexes shared by all the batches of this stage"""
        return None

    def resources(self) -> tp.Any:
        return _stage_resources(self)

    def process(self, start: int, stop: int) -> tp.Iterator[CandidateRecord]:
        raise NotImplementedError


@dataclasses.dataclass
class RetrieveCandidatesConfig(BatchStageConfig):
    targets_file: str = MISSING
    # config of the SentenceIndex implementation, with its _target_
    index: tp.Any = dataclasses.field(
        default_factory=lambda: {"_target_": SentenceIndexConfig._target_}
    )
    top_n: int = 100
    max_equivalents: int = 50
    min_equivalent_probability: float = 0.1
    length_bucket_boost: float = 2.0


class RetrieveCandidatesModule(BatchStage):
    """queries the index of target sentences with every source sentence"""

    output_prefix = "candidates"

    def __init__(self, config: RetrieveCandidatesConfig):
        super().__init__(config, RetrieveCandidatesConfig)

    def load_resources(self) -> CandidateRetriever:
        cfg = self.config
        retriever = CandidateRetriever(
            index=hydra.utils.instantiate(cfg.index),
            equivalents=TranslationEquivalents.load(
                Path(cfg.dict_dir) / f"{cfg.src_lang}_{cfg.tgt_lang}"
            ),
            src=LanguageResources.load(cfg.res_dir, cfg.src_lang),
            tgt=LanguageResources.load(cfg.res_dir, cfg.tgt_lang),
            top_n=cfg.top_n,
            max_equivalents=cfg.max_equivalents,
            min_equivalent_probability=cfg.min_equivalent_probability,
            bucket_boost=cfg.length_bucket_boost,
        )
        retriever.build_index(read_targets(cfg.targets_file))
        return retriever

    def process(self, start: int, stop: int) -> tp.Iterator[CandidateRecord]:
        retriever = self.resources()
        for query in read_queries(self.config.input_file, start, stop):
            for hit in retriever.retrieve(query.sentence, doc_filter=query.doc_filter):
                yield CandidateRecord(
                    src=query.sentence,
                    tgt=hit.sentence,
                    score=hit.score,
                    doc_id=query.pair_id,
                )


@dataclasses.dataclass
class PrefilterCandidatesConfig(BatchStageConfig):
    use_edit_similarity: bool = True


class PrefilterCandidatesModule(BatchStage):
    """
    cheap lexical score of the retrieved rows, only rows with a positive score
    are kept. The retrieval score is kept as a diagnostic column.
    """

    output_prefix = "prefiltered"

    def __init__(self, config: PrefilterCandidatesConfig):
        super().__init__(config, PrefilterCandidatesConfig)

    def load_resources(self) -> LexicalPrefilter:
        cfg = self.config
        return LexicalPrefilter(
            equivalents=TranslationEquivalents.load(
                Path(cfg.dict_dir) / f"{cfg.src_lang}_{cfg.tgt_lang}"
            ),
            src=LanguageResources.load(cfg.res_dir, cfg.src_lang),
            use_edit_similarity=cfg.use_edit_similarity,
        )

    def process(self, start: int, stop: int) -> tp.Iterator[CandidateRecord]:
        prefilter = self.resources()
        for row in read_records(
            self.config.input_file, self.config.doc_aligned, start, stop
        ):
            score = prefilter.score(row.src, row.tgt, row.score)
            if score > 0:
                yield CandidateRecord(
                    row.src, row.tgt, score, extra=(row.score,), doc_id=row.doc_id
                )


@dataclasses.dataclass
class RescoreCandidatesConfig(BatchStageConfig):
    min_probability: float = DEFAULT_MIN_PROBABILITY
    lemmatize: bool = True
    threshold: float = 0.0


class RescoreCandidatesModule(BatchStage):
    """
    symmetric pexacc score of the surviving rows. The features of both
    directions are written after the score, followed by the scores of the
    previous stages.
    """

    output_prefix = "pexacc"

    def __init__(self, config: RescoreCandidatesConfig):
        super().__init__(config, RescoreCandidatesConfig)

    def load_resources(self) -> PexaccMeasure:
        cfg = self.config
        return PexaccMeasure.load(
            cfg.res_dir,
            cfg.dict_dir,
            cfg.src_lang,
            cfg.tgt_lang,
            min_probability=cfg.min_probability,
            lemmatize=cfg.lemmatize,
        )

    def process(self, start: int, stop: int) -> tp.Iterator[CandidateRecord]:
        measure = self.resources()
        for row in read_records(
            self.config.input_file, self.config.doc_aligned, start, stop
        ):
            pair = measure.score_pair(row.src, row.tgt)
            if pair.score > self.config.threshold:
                yield CandidateRecord(
                    row.src,
                    row.tgt,
                    pair.score,
                    extra=pair.forward.features()
                    + pair.backward.features()
                    + (row.score,)
                    + row.extra,
                    doc_id=row.doc_id,
                )
