# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the license found in the
# LICENSE file in the root directory of this source tree.

import math
import typing as tp

import numpy as np


def mean(values: tp.Sequence[float]) -> float:
    if len(values) == 0:
        return 0.0
    return float(np.mean(values))


def population_std(values: tp.Sequence[float]) -> float:
    if len(values) == 0:
        return 0.0
    return float(np.std(values))


def pearson(xs: tp.Sequence[float], ys: tp.Sequence[float]) -> float:
    """Pearson correlation, 0 when one of the series has no variance."""
    assert len(xs) == len(ys), f"series of different lengths {len(xs)} != {len(ys)}"
    if len(xs) == 0:
        return 0.0
    x = np.asarray(xs, dtype=np.float64)
    y = np.asarray(ys, dtype=np.float64)
    dx = x - x.mean()
    dy = y - y.mean()
    denominator = math.sqrt(float(np.sum(dx * dx)) * float(np.sum(dy * dy)))
    if denominator == 0:
        return 0.0
    return float(np.sum(dx * dy)) / denominator


def sigmoid(x: float, slope: float = 1.0) -> float:
    return 1.0 / (1.0 + math.exp(-x * slope))
