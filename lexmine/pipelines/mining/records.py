# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the license found in the
# LICENSE file in the root directory of this source tree.

import dataclasses
import itertools
import typing as tp
from pathlib import Path

from lexmine.core import utils


@dataclasses.dataclass
class CandidateRecord:
    """
    One row of the working set. `score` is the score of the stage that wrote
    the row, `extra` keeps the diagnostic scores of the stage and of the
    previous ones. `doc_id` is only set when mining aligned documents.
    """

    src: str
    tgt: str
    score: float
    extra: tp.Tuple[float, ...] = ()
    doc_id: tp.Optional[str] = None

    @property
    def key(self) -> tp.Tuple[str, str]:
        return self.src, self.tgt

    def to_line(self) -> str:
        fields = [self.src, self.tgt, _format(self.score)]
        fields.extend(_format(v) for v in self.extra)
        if self.doc_id is not None:
            fields.append(self.doc_id)
        return "\t".join(fields)

    @classmethod
    def from_line(cls, line: str, with_doc: bool = False) -> "CandidateRecord":
        fields = line.rstrip("\n").split("\t")
        assert len(fields) >= (4 if with_doc else 3), f"malformed row: {line!r}"
        doc_id = fields.pop() if with_doc else None
        return cls(
            src=fields[0],
            tgt=fields[1],
            score=float(fields[2]),
            extra=tuple(float(v) for v in fields[3:]),
            doc_id=doc_id,
        )


def _format(value: float) -> str:
    # shortest repr that reads back to the same float
    return repr(float(value))


def write_records(
    records: tp.Iterable[CandidateRecord], output: tp.Union[str, Path]
) -> int:
    written = 0
    with utils.open_write(Path(output)) as o:
        for record in records:
            print(record.to_line(), file=o)
            written += 1
    return written


def read_records(
    path: tp.Union[str, Path],
    with_doc: bool = False,
    start: int = 0,
    stop: tp.Optional[int] = None,
) -> tp.Iterator[CandidateRecord]:
    """reads the rows [start, stop) of a record file"""
    lines = utils.read_lines(path, strip=False)
    for line in itertools.islice(lines, start, stop):
        yield CandidateRecord.from_line(line, with_doc=with_doc)


def count_lines(path: tp.Union[str, Path]) -> int:
    return sum(1 for _ in utils.read_lines(path, strip=False))


def concat_records(
    parts: tp.Sequence[tp.Union[str, Path]], output: tp.Union[str, Path]
) -> Path:
    """concatenates the batch outputs of an array stage, in batch order"""
    with utils.open_write(Path(output)) as o:
        for part in parts:
            for line in utils.read_lines(part, strip=False):
                print(line, file=o)
    return Path(output)


def write_aligned_pairs(
    records: tp.Iterable[CandidateRecord],
    output: tp.Union[str, Path],
    doc_pairs: tp.Optional[tp.Sequence[tp.Tuple[str, str]]] = None,
) -> int:
    """
    the final output: one block per pair with the source sentence, the target
    sentence and the score, followed by the document pair when known, then a
    blank line.
    """
    written = 0
    with utils.open_write(Path(output)) as o:
        for record in records:
            print(record.src, file=o)
            print(record.tgt, file=o)
            print(_format(record.score), file=o)
            if doc_pairs is not None and record.doc_id is not None:
                src_doc, tgt_doc = doc_pairs[int(record.doc_id)]
                print(f"{src_doc}\t{tgt_doc}", file=o)
            print(file=o)
            written += 1
    return written


def read_aligned_pairs(
    path: tp.Union[str, Path]
) -> tp.Iterator[tp.Tuple[str, str, float]]:
    """reads back (src, tgt, score) from a final output file"""
    block: tp.List[str] = []
    with utils.open(path) as f:
        for line in itertools.chain(f, [""]):
            line = line.rstrip("\n")
            if line.strip():
                block.append(line)
                continue
            if len(block) >= 3:
                yield block[0], block[1], float(block[2])
            block = []
