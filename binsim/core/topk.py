"""
Exact top-k nearest neighbour search over a :class:`VectorStore`.

The selector keeps a bounded list of the k best candidates sorted by
descending similarity. Each candidate that strictly beats the current k-th
score replaces it and is moved into place by swapping towards the head, so a
scan costs O(n * k) in the worst case. Candidates tied with the k-th score
are rejected, which makes the earliest scanned (lowest identifier) candidate
win every tie. The query's own identifier is never a candidate.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Union

import numpy as np

from .similarity import sokal_michener_many
from .vectors import VectorStore
from .vocabulary import Vocabulary, normalize_word

logger = logging.getLogger(__name__)

# Below every real similarity; marks a slot that has not been filled.
SENTINEL_SCORE = -1.0
SENTINEL_ID = -1


@dataclass(frozen=True)
class Neighbor:
    """One entry of a top-k result."""

    identifier: int
    score: float
    word: Optional[str] = None

    def __iter__(self):
        # Unpacks as (word or identifier, score)
        yield self.word if self.word is not None else self.identifier
        yield self.score


def _bounded_insert(ids: List[int], scores: List[float], identifier: int, score: float) -> None:
    """Replace the tail slot and swap it forward until the list is sorted."""
    i = len(scores) - 1
    ids[i], scores[i] = identifier, score
    while i > 0 and scores[i - 1] < scores[i]:
        ids[i - 1], ids[i] = ids[i], ids[i - 1]
        scores[i - 1], scores[i] = scores[i], scores[i - 1]
        i -= 1


def top_k(query_id: int, k: int, store: VectorStore) -> Optional[List[Neighbor]]:
    """
    Return the k vectors most similar to the vector of ``query_id``.

    Args:
        query_id: Identifier of the query word
        k: Maximum number of neighbours (>= 1)
        store: Vector store to scan

    Returns:
        Neighbours sorted by non-increasing score, at most ``k`` long, or
        ``None`` when ``query_id`` has no vector.
    """
    if k < 1:
        raise ValueError(f"k must be >= 1, got {k}")
    if not store.has_vector(query_id):
        return None

    query = store.get(query_id)
    candidates = store.present_ids()
    scores_all = sokal_michener_many(query, store.matrix[candidates]) if candidates.size else np.empty(0)

    ids = [SENTINEL_ID] * k
    scores = [SENTINEL_SCORE] * k
    for identifier, score in zip(candidates.tolist(), scores_all.tolist()):
        if identifier == query_id:
            continue
        if score > scores[-1]:
            _bounded_insert(ids, scores, identifier, score)

    return [Neighbor(identifier=i, score=s) for i, s in zip(ids, scores) if i != SENTINEL_ID]


class TopKSelector:
    """Word-level front end to :func:`top_k`."""

    def __init__(self, store: VectorStore, vocabulary: Vocabulary, default_k: int = 10):
        self.store = store
        self.vocabulary = vocabulary
        self.default_k = default_k

    def resolve(self, query: Union[str, int]) -> Optional[int]:
        """Map a query word (normalized) or identifier to an identifier."""
        if isinstance(query, str):
            identifier = self.vocabulary.lookup(normalize_word(query))
            if identifier is None:
                identifier = self.vocabulary.lookup(query)
            return identifier
        return query if 0 <= query < len(self.vocabulary) else None

    def query(self, query: Union[str, int], k: Optional[int] = None) -> Optional[List[Neighbor]]:
        """
        Find the nearest neighbours of a word.

        Returns:
            Neighbours with their words filled in, or ``None`` if the word is
            unknown or has no vector.
        """
        k = self.default_k if k is None else k
        identifier = self.resolve(query)
        if identifier is None or not self.store.has_vector(identifier):
            logger.debug(f"No vector for query {query!r}")
            return None

        neighbors = top_k(identifier, k, self.store)
        if neighbors is not None and len(neighbors) < k:
            logger.debug(f"Only {len(neighbors)} of {k} neighbours available for {query!r}")
        return [
            Neighbor(identifier=n.identifier, score=n.score,
                     word=self.vocabulary.word_of(n.identifier))
            for n in neighbors
        ]
