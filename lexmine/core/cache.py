# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the license found in the
# LICENSE file in the root directory of this source tree.

import logging
import pickle
import typing as tp
from abc import ABC, abstractmethod
from pathlib import Path

from omegaconf import OmegaConf

from lexmine.core import utils

if tp.TYPE_CHECKING:
    from lexmine.core import LexmineModule

logger = logging.getLogger("lexmine.cache")


class MissingCache(Exception):
    """No usable result is cached for this stage batch"""


class Cache(ABC):
    """
    Where the launcher keeps the results of finished stages. An entry is
    identified by the stage config and the batch (value and index) it was
    computed for.
    """

    def get_cache_key(
        self,
        module: "LexmineModule",
        iteration_value: tp.Optional[tp.Any] = None,
        iteration_index: int = 0,
    ) -> str:
        return utils.sha_key(
            repr(module.cache_key() + (repr(iteration_value), iteration_index))
        )

    @abstractmethod
    def get_cache(
        self,
        module: "LexmineModule",
        iteration_value: tp.Optional[tp.Any] = None,
        iteration_index: int = 0,
        validate: bool = True,
    ) -> tp.Any:
        """raises MissingCache when the batch has to be computed"""
        ...

    @abstractmethod
    def save_cache(
        self,
        module: "LexmineModule",
        result: tp.Any,
        iteration_value: tp.Optional[tp.Any] = None,
        iteration_index: int = 0,
    ) -> None:
        ...

    @abstractmethod
    def invalidate_cache(
        self,
        module: "LexmineModule",
        iteration_value: tp.Optional[tp.Any] = None,
        iteration_index: int = 0,
    ) -> None:
        ...


class NoCache(Cache):
    def get_cache(self, module, iteration_value=None, iteration_index=0, validate=True):
        raise MissingCache()

    def save_cache(self, module, result, iteration_value=None, iteration_index=0):
        pass

    def invalidate_cache(self, module, iteration_value=None, iteration_index=0):
        pass


class FileCache(Cache):
    """
    Pickled stage results under `<caching_dir>/<stage name>/`, one file per
    batch, next to the config of the stage. The stage name carries the sha of
    its config: a restarted run finds the batches it already produced, a run
    with another config starts a fresh folder.
    """

    def __init__(self, caching_dir: tp.Union[str, Path]):
        self.caching_dir = Path(caching_dir)
        utils.ensure_dir(self.caching_dir)

    def stage_dir(self, module: "LexmineModule") -> Path:
        return self.caching_dir / module.name()

    def result_file(
        self,
        module: "LexmineModule",
        iteration_value: tp.Optional[tp.Any] = None,
        iteration_index: int = 0,
    ) -> Path:
        key = self.get_cache_key(module, iteration_value, iteration_index)
        return self.stage_dir(module) / f"{iteration_index:05d}.{key[:16]}.pickle"

    def get_cache(
        self,
        module: "LexmineModule",
        iteration_value: tp.Optional[tp.Any] = None,
        iteration_index: int = 0,
        validate: bool = True,
    ) -> tp.Any:
        path = self.result_file(module, iteration_value, iteration_index)
        if not path.is_file():
            raise MissingCache()
        try:
            with path.open("rb") as f:
                result = pickle.load(f)
        except (OSError, pickle.UnpicklingError, EOFError) as e:
            logger.warning(f"unreadable cached result {path}, recomputing: {e}")
            path.unlink(missing_ok=True)
            raise MissingCache() from e

        if validate and not module.validate(result, iteration_value, iteration_index):
            self.invalidate_cache(module, iteration_value, iteration_index)
            raise MissingCache()
        return result

    def save_cache(
        self,
        module: "LexmineModule",
        result: tp.Any,
        iteration_value: tp.Optional[tp.Any] = None,
        iteration_index: int = 0,
    ) -> None:
        stage_dir = self.stage_dir(module)
        utils.ensure_dir(stage_dir)
        path = self.result_file(module, iteration_value, iteration_index)
        try:
            with utils.open_write(path, "wb") as f:
                pickle.dump(result, f)
            config_file = stage_dir / "config.yaml"
            if not config_file.exists():
                OmegaConf.save(config=module.config, f=config_file)
        except OSError as e:
            # the batch is done, it will only be computed again on restart
            logger.warning(
                f"could not cache {module.name()} batch {iteration_index}: {e}"
            )
            return
        logger.debug(f"cached {module.name()} batch {iteration_index} in {path}")

    def invalidate_cache(
        self,
        module: "LexmineModule",
        iteration_value: tp.Optional[tp.Any] = None,
        iteration_index: int = 0,
    ) -> None:
        logger.info(f"dropping cached {module.name()} batch {iteration_index}")
        self.result_file(module, iteration_value, iteration_index).unlink(
            missing_ok=True
        )
