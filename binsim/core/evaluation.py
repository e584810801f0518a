"""
Correlation of binary similarities with human similarity judgments.

For each benchmark dataset the pairs whose two words both have a vector are
scored with the Sokal-Michener similarity, and the resulting scores are
compared with the human scores by Spearman rank correlation. Pairs with a
missing word are dropped from the correlation but still count towards the
dataset size, which gives the out-of-vocabulary (OOV) percentage.
"""

from __future__ import annotations

import logging
import math
import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple, Union

import numpy as np
from scipy import stats

from .similarity import sokal_michener
from .vectors import VectorStore
from .vocabulary import Vocabulary

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Judgment:
    """One line of a similarity benchmark: two words and a human score."""

    word1: str
    word2: str
    score: float


@dataclass
class DatasetResult:
    """Evaluation outcome for one dataset."""

    name: str
    coefficient: float
    matched: int
    total: int

    @property
    def oov_percent(self) -> float:
        """Share of judgment lines that could not be scored, in percent."""
        if self.total == 0:
            return 0.0
        return (self.total - self.matched) * 100.0 / self.total

    def to_dict(self):
        return {
            "name": self.name,
            "coefficient": None if math.isnan(self.coefficient) else self.coefficient,
            "matched": self.matched,
            "total": self.total,
            "oov_percent": self.oov_percent,
        }


def rank_correlation(gold: Sequence[float], computed: Sequence[float]) -> float:
    """
    Spearman rank correlation between two equal-length sequences.

    Returns NaN when fewer than two pairs are given or when either sequence
    is constant.
    """
    if len(gold) != len(computed):
        raise ValueError(f"sequences differ in length: {len(gold)} != {len(computed)}")
    if len(gold) < 2:
        return float("nan")
    with warnings.catch_warnings():
        # Constant input yields NaN with a warning; NaN is the documented result
        warnings.simplefilter("ignore")
        result = stats.spearmanr(np.asarray(gold, dtype=float), np.asarray(computed, dtype=float))
    return float(result[0])


def evaluate(pairs: Iterable[Tuple[float, float]]) -> Tuple[float, int]:
    """
    Correlate (gold_score, computed_score) pairs.

    Returns:
        (coefficient, matched_count)
    """
    pairs = list(pairs)
    gold = [p[0] for p in pairs]
    computed = [p[1] for p in pairs]
    return rank_correlation(gold, computed), len(pairs)


class CorrelationEvaluator:
    """Scores judgment datasets against a loaded vocabulary and vector store."""

    def __init__(self, vocabulary: Vocabulary, store: VectorStore):
        self.vocabulary = vocabulary
        self.store = store

    def pair_similarity(self, word1: str, word2: str) -> Optional[float]:
        """Similarity of two words, or ``None`` if either has no vector."""
        id1 = self.vocabulary.lookup(word1)
        id2 = self.vocabulary.lookup(word2)
        if not self.store.has_vector(id1) or not self.store.has_vector(id2):
            return None
        return sokal_michener(self.store.get(id1), self.store.get(id2))

    def score_judgments(self, judgments: Iterable[Judgment]) -> Tuple[List[Tuple[float, float]], int]:
        """
        Score every judgment that has vectors for both words.

        Returns:
            ((gold, computed) pairs for matched judgments, total judgment count)
        """
        pairs: List[Tuple[float, float]] = []
        total = 0
        for judgment in judgments:
            total += 1
            sim = self.pair_similarity(judgment.word1, judgment.word2)
            if sim is None:
                continue
            pairs.append((judgment.score, sim))
        return pairs, total

    def evaluate_dataset(self, name: str, judgments: Iterable[Judgment]) -> DatasetResult:
        pairs, total = self.score_judgments(judgments)
        coefficient, matched = evaluate(pairs)
        result = DatasetResult(name=name, coefficient=coefficient, matched=matched, total=total)
        logger.info(
            f"{name}: spearman={coefficient:.3f} matched={matched}/{total} "
            f"oov={result.oov_percent:.1f}%"
        )
        return result

    def evaluate_directory(self, datasets_dir: Union[str, Path], max_lines: int = 0) -> Iterator[DatasetResult]:
        """
        Evaluate every dataset file in ``datasets_dir``, in name order.

        Unreadable dataset files are skipped with a warning.

        Raises:
            LoadError: if the directory itself cannot be listed
        """
        from .loader import iter_dataset_files, read_judgments

        for path in iter_dataset_files(datasets_dir, operation="evaluate"):
            try:
                judgments = read_judgments(path, max_lines=max_lines)
            except OSError as e:
                logger.warning(f"evaluate: can't open file {path}: {e}")
                continue
            yield self.evaluate_dataset(path.name, judgments)
