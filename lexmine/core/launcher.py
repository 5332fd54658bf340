# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the license found in the
# LICENSE file in the root directory of this source tree.

import logging
import typing as tp
from pathlib import Path

import tqdm
from joblib import Parallel, delayed
from omegaconf import OmegaConf
from tqdm.contrib.logging import logging_redirect_tqdm

from lexmine.core.cache import Cache, MissingCache, NoCache

if tp.TYPE_CHECKING:
    from lexmine.core import LexmineModule

logger = logging.getLogger("lexmine.launcher")


class Launcher:
    """
    Runs lexmine modules on the local machine. Array modules are spread over a
    joblib worker pool sized by the module's requirements; every iteration
    is looked up in the cache first.
    """

    def __init__(
        self,
        cache: tp.Optional[Cache] = None,
        config_dump_dir: tp.Optional[Path] = None,
        disable_tqdm: bool = False,
    ):
        self.cache = NoCache() if cache is None else cache
        self.config_dump_dir = (
            Path(config_dump_dir)
            if config_dump_dir is not None
            else Path.cwd() / "config_logs"
        )
        self.config_dump_dir.mkdir(parents=True, exist_ok=True)
        self.disable_tqdm = disable_tqdm

    def dump_config(self, module: "LexmineModule") -> Path:
        config_file = self.config_dump_dir / f"{module.name()}.yaml"
        OmegaConf.save(config=module.config, f=config_file)
        return config_file

    def schedule(self, module: "LexmineModule") -> tp.Any:
        with logging_redirect_tqdm():
            self.dump_config(module)
            value_array = module.array()
            if value_array is None:
                return self._schedule_single(module)
            return self._schedule_array(module, value_array)

    def _schedule_single(self, module: "LexmineModule") -> tp.Any:
        try:
            cached_result = self.cache.get_cache(module)
            logger.info(f"{module.name()} done from cache")
            return cached_result
        except MissingCache:
            pass
        result = module(cache=self.cache)
        logger.info(f"{module.name()} done after full execution")
        return result

    def _schedule_array(
        self, module: "LexmineModule", value_array: tp.List[tp.Any]
    ) -> tp.List[tp.Any]:
        results: tp.List[tp.Any] = [None] * len(value_array)
        to_compute = []
        for idx, val in enumerate(value_array):
            try:
                results[idx] = self.cache.get_cache(
                    module, iteration_value=val, iteration_index=idx
                )
            except MissingCache:
                to_compute.append(idx)

        logger.info(
            f"for {module.name()} found {len(value_array) - len(to_compute)} already "
            f"cached array results, {len(to_compute)} left to compute"
        )
        if not to_compute:
            return results

        n_jobs = max(1, module.requirements().cpus_per_task)
        computed = Parallel(n_jobs=n_jobs, return_as="generator")(
            delayed(module)(value_array[idx], idx, self.cache) for idx in to_compute
        )
        for idx, res in zip(
            to_compute,
            tqdm.tqdm(
                computed,
                total=len(to_compute),
                desc=module.__class__.__name__,
                disable=self.disable_tqdm,
            ),
        ):
            results[idx] = res
        return results
