# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the license found in the
# LICENSE file in the root directory of this source tree.

from .candidate_retriever import CandidateRetriever as CandidateRetriever
from .candidate_retriever import LengthBuckets as LengthBuckets
from .sentence_index import InMemorySentenceIndex as InMemorySentenceIndex
from .sentence_index import SearchHit as SearchHit
from .sentence_index import SentenceIndex as SentenceIndex
