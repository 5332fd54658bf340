# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the license found in the
# LICENSE file in the root directory of this source tree.

import dataclasses
import logging
import typing as tp
from abc import ABC, abstractmethod
from pathlib import Path

from omegaconf import OmegaConf

from lexmine.core import utils

if tp.TYPE_CHECKING:
    from lexmine.core.cache import Cache

logger = logging.getLogger("lexmine.module")
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(process)d:%(name)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M",
)


@dataclasses.dataclass
class Requirements:
    # stages run on the local machine, the only knob is the size of the worker pool
    cpus_per_task: int = 1


class LexmineModule(ABC):
    """
    A stage of a mining run.

    The config is checked against `config_class`, resolved and frozen: the
    stage name and its cache entries are derived from it, so a stage is
    computed again exactly when its config changes.

    Stages working on many rows return their batches from `array`, `run`
    is then called once per batch by the launcher.
    """

    def __init__(self, config: tp.Any, config_class: tp.Type[tp.Any]):
        if dataclasses.is_dataclass(config):
            config = OmegaConf.structured(config)
        self.config = utils.promote_config(config, config_class)
        OmegaConf.resolve(self.config)
        OmegaConf.set_readonly(self.config, True)

    def __call__(
        self,
        iteration_value: tp.Optional[tp.Any] = None,
        iteration_index: int = 0,
        cache: tp.Optional["Cache"] = None,
    ) -> tp.Any:
        """entry point of the launcher workers, stages implement `run`"""
        result = self.run(iteration_value=iteration_value, iteration_index=iteration_index)
        if cache is not None:
            cache.save_cache(self, result, iteration_value, iteration_index)
        return result

    @abstractmethod
    def run(
        self,
        iteration_value: tp.Optional[tp.Any] = None,
        iteration_index: int = 0,
    ) -> tp.Any:
        """
        computes the stage, or one of its batches when `array` is not None:
        iteration_value is then the batch and iteration_index its position.
        """
        ...

    def array(self) -> tp.Optional[tp.List[tp.Any]]:
        """the batches of this stage, None for a stage run once"""
        return None

    def requirements(self) -> Requirements:
        return Requirements()

    def name(self) -> str:
        return f"{self.__class__.__name__}_{self.sha_key()[:16]}"

    def cache_key(self) -> tp.Tuple[tp.Any, ...]:
        return (
            self.__class__.__module__,
            self.__class__.__qualname__,
            self.version(),
            OmegaConf.to_container(self.config, resolve=True),
        )

    def sha_key(self) -> str:
        return utils.sha_key(repr(self.cache_key()))

    @classmethod
    def version(cls) -> str:
        # bump to invalidate the cached results of a stage after a logic change
        return "0.0"

    def validate(
        self,
        output: tp.Any,
        iteration_value: tp.Optional[tp.Any] = None,
        iteration_index: int = 0,
    ) -> bool:
        """
        checked before reusing a cached result. Stages returning the path of
        their output file are computed again when the file is gone.
        """
        if isinstance(output, Path) and not output.exists():
            logger.warning(
                f"{self.name()} batch {iteration_index}: {output} is missing,"
                " the batch will be computed again"
            )
            return False
        return True
