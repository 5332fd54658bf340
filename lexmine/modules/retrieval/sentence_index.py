# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the license found in the
# LICENSE file in the root directory of this source tree.

import dataclasses
import logging
import math
import typing as tp
from abc import ABC, abstractmethod
from collections import Counter, defaultdict

logger = logging.getLogger("lexmine.retrieval")


@dataclasses.dataclass(frozen=True)
class SearchHit:
    sentence: str
    score: float
    doc_id: tp.Optional[str] = None


class SentenceIndex(ABC):
    """
    Inverted index over the target sentences. A query is a list of term groups
    (one group per source word, the group lists its possible translations)
    plus two length bucket clauses. Any full text engine able to score weighted
    boolean queries can sit behind this interface.
    """

    @abstractmethod
    def add(
        self,
        sentence: str,
        terms: tp.Sequence[str],
        large: bool,
        small: bool,
        doc_id: tp.Optional[str] = None,
    ) -> None:
        ...

    @abstractmethod
    def search(
        self,
        term_groups: tp.Sequence[tp.Sequence[str]],
        large: bool,
        small: bool,
        doc_filter: tp.Optional[str] = None,
        top_n: int = 100,
        bucket_boost: float = 2.0,
    ) -> tp.List[SearchHit]:
        ...

    @abstractmethod
    def __len__(self) -> int:
        ...


@dataclasses.dataclass
class _Entry:
    sentence: str
    doc_id: tp.Optional[str]
    large: bool
    small: bool
    length_norm: float


class InMemorySentenceIndex(SentenceIndex):
    """
    TF-IDF scoring in the shape of lucene's classic similarity:
    coord * query_norm * sum(sqrt(tf) * idf^2 * boost * length_norm),
    where nested term groups get their own coord factor. Only sentences
    sharing at least one term with the query are returned.
    """

    def __init__(self) -> None:
        self._entries: tp.List[_Entry] = []
        self._postings: tp.Dict[str, tp.Dict[int, int]] = defaultdict(dict)
        self._by_doc: tp.Dict[tp.Optional[str], tp.Set[int]] = defaultdict(set)
        self._large_count = 0
        self._small_count = 0

    def add(
        self,
        sentence: str,
        terms: tp.Sequence[str],
        large: bool,
        small: bool,
        doc_id: tp.Optional[str] = None,
    ) -> None:
        idx = len(self._entries)
        norm = 1.0 / math.sqrt(len(terms)) if terms else 0.0
        self._entries.append(_Entry(sentence, doc_id, large, small, norm))
        for term, tf in Counter(terms).items():
            self._postings[term][idx] = tf
        self._by_doc[doc_id].add(idx)
        self._large_count += int(large)
        self._small_count += int(small)

    def __len__(self) -> int:
        return len(self._entries)

    def _idf(self, doc_freq: int) -> float:
        return 1.0 + math.log(len(self._entries) / (doc_freq + 1))

    def search(
        self,
        term_groups: tp.Sequence[tp.Sequence[str]],
        large: bool,
        small: bool,
        doc_filter: tp.Optional[str] = None,
        top_n: int = 100,
        bucket_boost: float = 2.0,
    ) -> tp.List[SearchHit]:
        groups = [list(dict.fromkeys(g)) for g in term_groups if g]
        if not groups or not self._entries:
            return []
        allowed = self._by_doc.get(doc_filter, set()) if doc_filter is not None else None

        idf = {
            term: self._idf(len(self._postings.get(term, {})))
            for group in groups
            for term in group
        }
        n = len(self._entries)
        large_df = self._large_count if large else n - self._large_count
        small_df = self._small_count if small else n - self._small_count
        large_idf = self._idf(large_df)
        small_idf = self._idf(small_df)
        sum_of_squares = (
            sum(v * v for v in idf.values())
            + (large_idf * bucket_boost) ** 2
            + (small_idf * bucket_boost) ** 2
        )
        query_norm = 1.0 / math.sqrt(sum_of_squares) if sum_of_squares > 0 else 1.0

        # per sentence, per group: sum of term scores and number of matched terms
        partial: tp.Dict[int, tp.Dict[int, tp.List[float]]] = defaultdict(dict)
        for g, group in enumerate(groups):
            for term in group:
                for idx, tf in self._postings.get(term, {}).items():
                    if allowed is not None and idx not in allowed:
                        continue
                    entry = self._entries[idx]
                    acc = partial[idx].setdefault(g, [0.0, 0])
                    acc[0] += math.sqrt(tf) * idf[term] ** 2 * entry.length_norm
                    acc[1] += 1

        n_clauses = len(groups) + 2
        hits = []
        for idx, matched in partial.items():
            entry = self._entries[idx]
            total = sum(s * (m / len(groups[g])) for g, (s, m) in matched.items())
            clauses = len(matched)
            if entry.large == large:
                total += bucket_boost * large_idf**2
                clauses += 1
            if entry.small == small:
                total += bucket_boost * small_idf**2
                clauses += 1
            score = (clauses / n_clauses) * query_norm * total
            hits.append((score, idx))

        hits.sort(key=lambda h: (-h[0], h[1]))
        return [
            SearchHit(self._entries[idx].sentence, score, self._entries[idx].doc_id)
            for score, idx in hits[:top_n]
        ]
