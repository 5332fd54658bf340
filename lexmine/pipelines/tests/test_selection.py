# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the license found in the
# LICENSE file in the root directory of this source tree.

from lexmine.pipelines.mining.records import CandidateRecord
from lexmine.pipelines.mining.selection import (
    MiningCounts,
    above_threshold,
    default_threshold,
    mean_cut,
    select_pairs,
)


def rows(*triples):
    return [CandidateRecord(src, tgt, score) for src, tgt, score in triples]


def test_select_pairs_greedy():
    counts = MiningCounts()
    selected = select_pairs(
        rows(("B", "X", 0.7), ("A", "X", 0.9), ("A", "Y", 0.8)), counts=counts
    )
    assert [r.key for r in selected] == [("A", "X")]
    assert counts.source_cap == 1
    assert counts.target_cap == 1
    assert counts.selected == 1


def test_select_pairs_separate_caps():
    records = rows(("A", "X", 0.9), ("A", "Y", 0.8), ("B", "X", 0.7), ("B", "Z", 0.1))
    selected = select_pairs(records, max_repeated_source=2, max_repeated_target=1)
    assert [r.key for r in selected] == [("A", "X"), ("A", "Y"), ("B", "Z")]

    selected = select_pairs(records, max_repeated_source=1, max_repeated_target=2)
    assert [r.key for r in selected] == [("A", "X"), ("B", "X")]


def test_select_pairs_dedup_keeps_best():
    counts = MiningCounts()
    selected = select_pairs(
        rows(("A", "X", 0.5), ("A", "X", 0.9), ("A", "X", 0.2)),
        max_repeated_source=5,
        max_repeated_target=5,
        counts=counts,
    )
    assert len(selected) == 1
    assert selected[0].score == 0.9
    assert counts.pair_dedup == 2


def test_select_pairs_empty():
    assert select_pairs([]) == []


def test_mean_cut():
    counts = MiningCounts()
    kept = mean_cut(
        rows(("a", "x", 0.1), ("b", "y", 0.2), ("c", "z", 0.3), ("d", "w", 0.4)),
        counts,
    )
    assert [r.src for r in kept] == ["c", "d"]
    assert counts.below_mean == 2
    assert mean_cut([]) == []


def test_mean_cut_keeps_ties():
    kept = mean_cut(rows(("a", "x", 0.5), ("b", "y", 0.5)))
    assert len(kept) == 2


def test_above_threshold_is_strict():
    counts = MiningCounts()
    kept = above_threshold(
        rows(("a", "x", 0.2), ("b", "y", 0.21), ("c", "z", 0.0)), 0.2, counts
    )
    assert [r.src for r in kept] == ["b"]
    assert counts.below_threshold == 2


def test_default_threshold():
    assert default_threshold("en") == 0.2
    assert default_threshold("ro") == 0.0


def test_counts_sum():
    total = sum([MiningCounts(queries=2, selected=1), MiningCounts(queries=3)])
    assert total == MiningCounts(queries=5, selected=1)
    assert "queries" in repr(total)


def test_select_pairs_non_ascii():
    counts = MiningCounts()
    selected = select_pairs(
        rows(
            ("Ţara e frumoasă", "Le pays est beau", 0.9),
            ("Ţara e frumoasă", "Le pays est beau", 0.4),
            ("Ţara e frumoasă", "Das Land ist schön", 0.8),
            ("Câinele doarme", "Das Land ist schön", 0.7),
            ("Pisica doarme", "Le pays est beau", 0.6),
        ),
        counts=counts,
    )
    assert [r.score for r in selected] == [0.9, 0.7]
    assert counts.pair_dedup == 1
    assert counts.source_cap == 1
    assert counts.target_cap == 1
