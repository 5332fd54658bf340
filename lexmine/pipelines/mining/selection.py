# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the license found in the
# LICENSE file in the root directory of this source tree.

import logging
import typing as tp
from collections import Counter

import xxhash

from lexmine.pipelines.mining.records import CandidateRecord
from lexmine.utils.stats_utils import mean

logger = logging.getLogger("lexmine.selection")


class MiningCounts:
    def __init__(
        self,
        queries: int = 0,  # distinct source sentences sent to retrieval
        retrieved: int = 0,  # candidate rows out of retrieval
        prefiltered: int = 0,  # rows with a non zero lexical prefilter score
        below_mean: int = 0,  # rows dropped by the mean cut
        rescored: int = 0,  # rows scored with pexacc
        below_threshold: int = 0,
        pair_dedup: int = 0,
        source_cap: int = 0,  # rows rejected because the source was used up
        target_cap: int = 0,
        selected: int = 0,
    ):
        self.queries = queries
        self.retrieved = retrieved
        self.prefiltered = prefiltered
        self.below_mean = below_mean
        self.rescored = rescored
        self.below_threshold = below_threshold
        self.pair_dedup = pair_dedup
        self.source_cap = source_cap
        self.target_cap = target_cap
        self.selected = selected

    def __add__(self, other):
        return MiningCounts(
            **{key: val + getattr(other, key) for key, val in self.__dict__.items()}
        )

    def __radd__(self, other):
        # so that sum() works
        if other == 0:
            return self
        return self.__add__(other)

    def __eq__(self, other):
        return isinstance(other, MiningCounts) and self.__dict__ == other.__dict__

    def __repr__(self):
        return f"MiningCounts({self.__dict__})"


def default_threshold(src_lang: str) -> float:
    return 0.2 if src_lang == "en" else 0.0


def mean_cut(
    records: tp.Sequence[CandidateRecord], counts: tp.Optional[MiningCounts] = None
) -> tp.List[CandidateRecord]:
    """keeps the rows scoring at least the mean score of all rows"""
    if not records:
        return []
    cut = mean([r.score for r in records])
    kept = [r for r in records if r.score >= cut]
    logger.info(f"mean cut at {cut:.4f}: kept {len(kept)} of {len(records)} rows")
    if counts is not None:
        counts.below_mean += len(records) - len(kept)
    return kept


def above_threshold(
    records: tp.Iterable[CandidateRecord],
    threshold: float,
    counts: tp.Optional[MiningCounts] = None,
) -> tp.List[CandidateRecord]:
    kept = []
    for record in records:
        if record.score > threshold:
            kept.append(record)
        elif counts is not None:
            counts.below_threshold += 1
    return kept


def _hash(text: str) -> int:
    return xxhash.xxh3_64_intdigest(text.encode("utf-8"))


def select_pairs(
    records: tp.Iterable[CandidateRecord],
    max_repeated_source: int = 1,
    max_repeated_target: int = 1,
    counts: tp.Optional[MiningCounts] = None,
) -> tp.List[CandidateRecord]:
    """
    Greedy selection: rows are visited best first, identical (src, tgt) pairs
    only once, and a row is accepted while both its source and its target
    sentence are under their repetition cap. Accepting a row uses one slot
    on each side. This does not look for the best global assignment.
    """
    if counts is None:
        counts = MiningCounts()
    ordered = sorted(records, key=lambda r: -r.score)

    seen_pairs: tp.Set[int] = set()
    source_counts: tp.Dict[int, int] = Counter()
    target_counts: tp.Dict[int, int] = Counter()
    selected = []
    for record in ordered:
        pair_hash = _hash(f"{record.src}\t{record.tgt}")
        if pair_hash in seen_pairs:
            counts.pair_dedup += 1
            continue
        seen_pairs.add(pair_hash)

        src_hash = _hash(record.src)
        tgt_hash = _hash(record.tgt)
        if source_counts[src_hash] >= max_repeated_source:
            counts.source_cap += 1
            continue
        if target_counts[tgt_hash] >= max_repeated_target:
            counts.target_cap += 1
            continue
        source_counts[src_hash] += 1
        target_counts[tgt_hash] += 1
        selected.append(record)

    counts.selected += len(selected)
    return selected
