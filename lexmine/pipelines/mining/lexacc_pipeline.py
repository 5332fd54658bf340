# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the license found in the
# LICENSE file in the root directory of this source tree.

import dataclasses
import logging
import shutil
import typing as tp
from pathlib import Path

import hydra
import yaml
from omegaconf import DictConfig, OmegaConf

from lexmine.core import FileCache, Launcher, utils
from lexmine.pipelines.mining.configs import MiningConfig, register_configs
from lexmine.pipelines.mining.corpus import CorpusFiles
from lexmine.pipelines.mining.records import (
    concat_records,
    count_lines,
    read_records,
    write_aligned_pairs,
    write_records,
)
from lexmine.pipelines.mining.selection import (
    MiningCounts,
    above_threshold,
    default_threshold,
    mean_cut,
    select_pairs,
)
from lexmine.pipelines.mining.stages import (
    BatchStage,
    PrepareCorpusConfig,
    PrepareCorpusModule,
    PrefilterCandidatesConfig,
    PrefilterCandidatesModule,
    RescoreCandidatesConfig,
    RescoreCandidatesModule,
    RetrieveCandidatesConfig,
    RetrieveCandidatesModule,
)

logger = logging.getLogger("lexmine.mining")

register_configs()


class LexaccPipeline:
    """
    Mines parallel sentences out of comparable corpora:
    retrieve -> lexical prefilter -> mean cut -> pexacc rescoring -> selection.

    Every stage output lands in output_dir and finished stages are not run
    again when the pipeline is restarted with the same config.
    """

    def __init__(self, config: tp.Any):
        if dataclasses.is_dataclass(config):
            config = OmegaConf.structured(config)
        elif not isinstance(config, DictConfig):
            config = OmegaConf.create(config)
        self.config: MiningConfig = utils.promote_config(config, MiningConfig)
        OmegaConf.resolve(self.config)
        self.output_dir = Path(self.config.output_dir).resolve()
        utils.ensure_dir(self.output_dir)
        self.launcher = Launcher(
            cache=FileCache(self.output_dir / "progress"),
            config_dump_dir=self.output_dir / "config_logs",
        )
        self.counts = MiningCounts()
        self._intermediate: tp.List[Path] = []

    @property
    def direction(self) -> str:
        return f"{self.config.src_lang}-{self.config.tgt_lang}"

    @property
    def output_file(self) -> Path:
        if self.config.output_file:
            return Path(self.config.output_file)
        return self.output_dir / f"{self.direction}.mined.txt"

    @property
    def threshold(self) -> float:
        if self.config.selection.threshold is not None:
            return self.config.selection.threshold
        return default_threshold(self.config.src_lang)

    def _stage_kwargs(self, input_file: Path, doc_aligned: bool) -> tp.Dict[str, tp.Any]:
        cfg = self.config
        return dict(
            src_lang=cfg.src_lang,
            tgt_lang=cfg.tgt_lang,
            res_dir=cfg.resources.res_dir,
            dict_dir=cfg.resources.dict_dir,
            input_file=str(input_file),
            num_rows=count_lines(input_file),
            output_dir=str(self.output_dir),
            doc_aligned=doc_aligned,
            batch_size=cfg.batch_size,
            num_workers=cfg.num_workers,
        )

    def _run_batches(self, module: BatchStage, output_name: str) -> Path:
        parts = self.launcher.schedule(module)
        output = concat_records(parts, self.output_dir / output_name)
        self._intermediate.extend([output, self.output_dir / module.name()])
        return output

    def prepare_corpus(self) -> CorpusFiles:
        cfg = self.config
        module = PrepareCorpusModule(
            PrepareCorpusConfig(
                output_dir=str(self.output_dir),
                src_files=cfg.src_files,
                tgt_files=cfg.tgt_files,
                doc_align_file=cfg.doc_align_file,
                already_segmented=cfg.already_segmented,
            )
        )
        corpus = self.launcher.schedule(module)
        self._intermediate.append(self.output_dir / module.name())
        self.counts.queries = corpus.num_queries
        return corpus

    def retrieve(self, corpus: CorpusFiles) -> Path:
        retrieval = self.config.retrieval
        module = RetrieveCandidatesModule(
            RetrieveCandidatesConfig(
                targets_file=str(corpus.targets),
                index=OmegaConf.to_container(retrieval.index),
                top_n=retrieval.top_n,
                max_equivalents=retrieval.max_equivalents,
                min_equivalent_probability=retrieval.min_equivalent_probability,
                length_bucket_boost=retrieval.length_bucket_boost,
                **self._stage_kwargs(corpus.queries, corpus.doc_aligned),
            )
        )
        candidates = self._run_batches(module, f"candidates.{self.direction}.tsv")
        self.counts.retrieved = count_lines(candidates)
        return candidates

    def prefilter(self, candidates: Path, doc_aligned: bool) -> Path:
        module = PrefilterCandidatesModule(
            PrefilterCandidatesConfig(
                use_edit_similarity=self.config.prefilter.use_edit_similarity,
                **self._stage_kwargs(candidates, doc_aligned),
            )
        )
        prefiltered = self._run_batches(module, f"prefiltered.{self.direction}.tsv")
        rows = list(read_records(prefiltered, doc_aligned))
        self.counts.prefiltered = len(rows)

        above_mean = self.output_dir / f"above_mean.{self.direction}.tsv"
        write_records(mean_cut(rows, self.counts), above_mean)
        self._intermediate.append(above_mean)
        return above_mean

    def rescore(self, candidates: Path, doc_aligned: bool) -> Path:
        resources = self.config.resources
        module = RescoreCandidatesModule(
            RescoreCandidatesConfig(
                min_probability=resources.min_probability,
                lemmatize=resources.lemmatize,
                **self._stage_kwargs(candidates, doc_aligned),
            )
        )
        self.counts.rescored = count_lines(candidates)
        return self._run_batches(module, f"pexacc.{self.direction}.tsv")

    def select(self, scored: Path, corpus: CorpusFiles) -> Path:
        selection = self.config.selection
        rows = list(read_records(scored, corpus.doc_aligned))
        # rows scoring 0 are not written by the rescoring stage
        self.counts.below_threshold += self.counts.rescored - len(rows)
        rows = above_threshold(rows, self.threshold, self.counts)
        selected = select_pairs(
            rows,
            max_repeated_source=selection.max_repeated_source,
            max_repeated_target=selection.max_repeated_target,
            counts=self.counts,
        )
        write_aligned_pairs(selected, self.output_file, corpus.doc_pairs)
        logger.info(
            f"{len(selected)} pairs above {self.threshold} written to {self.output_file}"
        )
        return self.output_file

    def run(self) -> Path:
        OmegaConf.save(self.config, self.output_dir / "mining.yaml")
        corpus = self.prepare_corpus()
        candidates = self.retrieve(corpus)
        if self.config.filter:
            candidates = self.prefilter(candidates, corpus.doc_aligned)
        scored = self.rescore(candidates, corpus.doc_aligned)
        output = self.select(scored, corpus)

        with open(self.output_dir / f"counts.{self.direction}.yaml", "wt") as fout:
            yaml.safe_dump(self.counts.__dict__, fout)
        logger.info(f"counts: {self.counts.__dict__}")

        if not self.config.keep_intermediate:
            self.clean_intermediate()
        return output

    def clean_intermediate(self) -> None:
        for path in self._intermediate:
            if path.is_dir():
                shutil.rmtree(path)
            elif path.exists():
                path.unlink()
        logger.info(f"removed {len(self._intermediate)} intermediate outputs")


@hydra.main(config_path="conf", config_name="mining", version_base=None)
def main(config: DictConfig) -> None:
    LexaccPipeline(config).run()


if __name__ == "__main__":
    main()
