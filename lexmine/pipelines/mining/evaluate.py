# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the license found in the
# LICENSE file in the root directory of this source tree.

"""
Scores a mining output against a gold standard given as two parallel files.
Sentences are compared on their lowercased word characters only, so that
tokenization and punctuation differences do not count.
"""

import dataclasses
import logging
import re
import typing as tp
from pathlib import Path

import hydra
import numpy as np
import pandas as pd
from hydra.core.config_store import ConfigStore
from omegaconf import MISSING, DictConfig

from lexmine.core import utils
from lexmine.core.errors import CorpusInputError
from lexmine.pipelines.mining.records import read_aligned_pairs

logger = logging.getLogger("lexmine.evaluate")

_WORD_CHAR = re.compile(r"\w")


@dataclasses.dataclass
class EvaluationConfig:
    mined_file: str = MISSING
    gold_src: str = MISSING
    gold_tgt: str = MISSING
    # where to write the threshold sweep, defaults to <mined_file>.sweep.tsv
    output_file: tp.Optional[str] = None
    step: float = 0.01


@dataclasses.dataclass
class PRF:
    precision: float
    recall: float
    f1: float


def only_word_chars(text: str) -> str:
    return "".join(_WORD_CHAR.findall(text.strip().lower()))


def pair_key(src: str, tgt: str) -> str:
    return f"{only_word_chars(src)}\t{only_word_chars(tgt)}"


def f1_score(precision: float, recall: float) -> float:
    if precision + recall == 0:
        return 0.0
    return 2 * precision * recall / (precision + recall)


def load_gold_standard(
    src_file: tp.Union[str, Path], tgt_file: tp.Union[str, Path]
) -> tp.Set[str]:
    for path in (src_file, tgt_file):
        if not Path(path).is_file():
            raise CorpusInputError(path)
    with utils.open(src_file) as src, utils.open(tgt_file) as tgt:
        return {pair_key(s, t) for s, t in zip(src, tgt)}


def evaluate_pairs(pairs: tp.Iterable[tp.Tuple[str, str]], gold: tp.Set[str]) -> PRF:
    """a gold pair found more than once counts once, but every line counts for precision"""
    found: tp.Set[str] = set()
    total = 0
    for src, tgt in pairs:
        total += 1
        key = pair_key(src, tgt)
        if key in gold:
            found.add(key)
    precision = len(found) / total if total else 0.0
    recall = len(found) / len(gold) if gold else 0.0
    return PRF(precision, recall, f1_score(precision, recall))


def threshold_sweep(
    results: tp.Iterable[tp.Tuple[str, str, float]],
    gold: tp.Set[str],
    step: float = 0.01,
) -> pd.DataFrame:
    """
    precision, recall and f1 of the pairs scoring at least t, for t going
    from 0 to 1. A pair listed twice keeps its first score.
    """
    scores: tp.Dict[tp.Tuple[str, str], float] = {}
    for src, tgt, score in results:
        scores.setdefault((src, tgt), score)
    data = pd.DataFrame(
        {
            "score": list(scores.values()),
            "good": [pair_key(src, tgt) in gold for src, tgt in scores],
        },
        columns=["score", "good"],
    )

    rows = []
    for threshold in np.round(np.arange(0.0, 1.0 + step / 2, step), 6):
        kept = data[data.score >= threshold]
        good = int(kept.good.sum())
        precision = good / len(kept) if len(kept) else 0.0
        recall = good / len(gold) if gold else 0.0
        rows.append(
            {
                "threshold": float(threshold),
                "pairs": len(kept),
                "precision": precision,
                "recall": recall,
                "f1": f1_score(precision, recall),
            }
        )
    return pd.DataFrame(
        rows, columns=["threshold", "pairs", "precision", "recall", "f1"]
    )


def evaluate(config: EvaluationConfig) -> pd.DataFrame:
    mined_file = Path(config.mined_file)
    if not mined_file.is_file():
        raise CorpusInputError(mined_file)
    gold = load_gold_standard(config.gold_src, config.gold_tgt)
    results = list(read_aligned_pairs(mined_file))

    overall = evaluate_pairs(((src, tgt) for src, tgt, _ in results), gold)
    logger.info(
        f"{len(results)} mined pairs, {len(gold)} gold pairs: "
        f"f1={100 * overall.f1:.2f} p={100 * overall.precision:.2f} "
        f"r={100 * overall.recall:.2f}"
    )

    sweep = threshold_sweep(results, gold, step=config.step)
    output = (
        Path(config.output_file)
        if config.output_file
        else utils.path_append_suffix(mined_file, ".sweep.tsv")
    )
    sweep.to_csv(output, sep="\t", index=False, float_format="%.4f")
    best = sweep.loc[sweep.f1.idxmax()]
    logger.info(
        f"best f1 {100 * best.f1:.2f} at threshold {best.threshold:.2f}, "
        f"sweep written to {output}"
    )
    return sweep


cs = ConfigStore.instance()
cs.store(name="evaluate", node=EvaluationConfig)


@hydra.main(config_path=None, config_name="evaluate", version_base=None)
def main(config: DictConfig) -> None:
    evaluate(config)


if __name__ == "__main__":
    main()
