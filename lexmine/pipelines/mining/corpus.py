# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the license found in the
# LICENSE file in the root directory of this source tree.

import dataclasses
import itertools
import logging
import typing as tp
from pathlib import Path

from lexmine.core import utils
from lexmine.core.errors import CorpusInputError
from lexmine.utils.text_utils import clean_sentence, split_sentences

logger = logging.getLogger("lexmine.corpus")


@dataclasses.dataclass(frozen=True)
class SourceQuery:
    sentence: str
    # target document the hits must come from, and the document pair it belongs to
    doc_filter: tp.Optional[str] = None
    pair_id: tp.Optional[str] = None

    def to_line(self) -> str:
        if self.pair_id is None:
            return self.sentence
        return f"{self.sentence}\t{self.doc_filter}\t{self.pair_id}"

    @classmethod
    def from_line(cls, line: str) -> "SourceQuery":
        fields = line.rstrip("\n").split("\t")
        if len(fields) == 3:
            return cls(fields[0], fields[1], fields[2])
        return cls(fields[0])


@dataclasses.dataclass
class CorpusFiles:
    queries: Path
    targets: Path
    num_queries: int
    num_targets: int
    doc_pairs: tp.Optional[tp.List[tp.Tuple[str, str]]] = None

    @property
    def doc_aligned(self) -> bool:
        return self.doc_pairs is not None


def _check_exists(path: tp.Union[str, Path]) -> Path:
    path = Path(path)
    if not path.is_file():
        raise CorpusInputError(path)
    return path


def read_file_list(path: tp.Union[str, Path]) -> tp.List[Path]:
    """a file list names one document per line, relative paths are resolved
    from the directory of the list"""
    path = _check_exists(path)
    docs = []
    for line in utils.read_lines(path):
        doc = Path(line)
        if not doc.is_absolute():
            doc = path.parent / doc
        docs.append(_check_exists(doc))
    if not docs:
        raise CorpusInputError(path, "no documents listed")
    return docs


def read_doc_alignment(path: tp.Union[str, Path]) -> tp.List[tp.Tuple[Path, Path]]:
    path = _check_exists(path)
    pairs = []
    for line_no, line in enumerate(utils.read_lines(path), start=1):
        fields = line.split("\t")
        if len(fields) != 2:
            raise CorpusInputError(path, f"line {line_no} is not 'src_doc<TAB>tgt_doc'")
        docs = []
        for field in fields:
            doc = Path(field.strip())
            if not doc.is_absolute():
                doc = path.parent / doc
            docs.append(_check_exists(doc))
        pairs.append((docs[0], docs[1]))
    if not pairs:
        raise CorpusInputError(path, "no document pairs")
    return pairs


def document_sentences(
    path: tp.Union[str, Path], already_segmented: bool = False
) -> tp.Iterator[str]:
    for line in utils.read_lines(_check_exists(path)):
        if already_segmented:
            yield clean_sentence(line)
        else:
            yield from split_sentences(line)


def _unique(items: tp.Iterable[tp.Any]) -> tp.List[tp.Any]:
    return list(dict.fromkeys(items))


def prepare_corpus(
    output_dir: Path,
    src_files: tp.Optional[str] = None,
    tgt_files: tp.Optional[str] = None,
    doc_align_file: tp.Optional[str] = None,
    already_segmented: bool = False,
) -> CorpusFiles:
    """
    Reads the input documents and writes the two sentence files the mining
    stages work on: the distinct source queries and the target sentences to
    index (with their document id when mining aligned documents).
    """
    utils.ensure_dir(output_dir)
    queries: tp.List[SourceQuery]
    targets: tp.List[tp.Tuple[str, tp.Optional[str]]]
    doc_pairs = None
    if doc_align_file is not None:
        pairs = read_doc_alignment(doc_align_file)
        tgt_doc_ids = {doc: str(i) for i, doc in enumerate(_unique(t for _, t in pairs))}
        queries = _unique(
            SourceQuery(sentence, tgt_doc_ids[tgt_doc], str(pair_id))
            for pair_id, (src_doc, tgt_doc) in enumerate(pairs)
            for sentence in document_sentences(src_doc, already_segmented)
        )
        targets = _unique(
            (sentence, doc_id)
            for tgt_doc, doc_id in tgt_doc_ids.items()
            for sentence in document_sentences(tgt_doc, already_segmented)
        )
        doc_pairs = [(str(s), str(t)) for s, t in pairs]
    else:
        if src_files is None or tgt_files is None:
            raise CorpusInputError(
                "<unset>", "either src_files and tgt_files or doc_align_file is needed"
            )
        queries = _unique(
            SourceQuery(sentence)
            for doc in read_file_list(src_files)
            for sentence in document_sentences(doc, already_segmented)
        )
        targets = _unique(
            (sentence, None)
            for doc in read_file_list(tgt_files)
            for sentence in document_sentences(doc, already_segmented)
        )

    queries_file = output_dir / "queries.tsv"
    targets_file = output_dir / "targets.tsv"
    with utils.open_write(queries_file) as o:
        for query in queries:
            print(query.to_line(), file=o)
    with utils.open_write(targets_file) as o:
        for sentence, doc_id in targets:
            print(sentence if doc_id is None else f"{sentence}\t{doc_id}", file=o)
    logger.info(
        f"{len(queries)} source sentences to query, {len(targets)} target sentences"
    )
    return CorpusFiles(
        queries=queries_file,
        targets=targets_file,
        num_queries=len(queries),
        num_targets=len(targets),
        doc_pairs=doc_pairs,
    )


def read_queries(
    path: tp.Union[str, Path], start: int = 0, stop: tp.Optional[int] = None
) -> tp.List[SourceQuery]:
    lines = utils.read_lines(path, strip=False)
    return [SourceQuery.from_line(line) for line in itertools.islice(lines, start, stop)]


def read_targets(
    path: tp.Union[str, Path]
) -> tp.List[tp.Tuple[str, tp.Optional[str]]]:
    targets = []
    for line in utils.read_lines(path, strip=False):
        sentence, _, doc_id = line.partition("\t")
        targets.append((sentence, doc_id or None))
    return targets
