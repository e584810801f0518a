"""Tests for the correlation evaluator."""

import math

import pytest

from binsim.core import loader
from binsim.core.evaluation import (
    CorrelationEvaluator,
    DatasetResult,
    Judgment,
    evaluate,
    rank_correlation,
)
from binsim.core.loader import build_vocabulary, load_vectors


class TestRankCorrelation:
    """Test the Spearman wrapper."""

    def test_monotonic_two_points(self):
        assert rank_correlation([0.9, 0.1], [0.875, 0.0]) == pytest.approx(1.0)

    def test_reversed_order(self):
        assert rank_correlation([1, 2, 3, 4], [0.9, 0.5, 0.4, 0.1]) == pytest.approx(-1.0)

    def test_too_few_pairs_is_nan(self):
        assert math.isnan(rank_correlation([], []))
        assert math.isnan(rank_correlation([1.0], [0.5]))

    def test_constant_input_is_nan(self):
        assert math.isnan(rank_correlation([1.0, 2.0, 3.0], [0.5, 0.5, 0.5]))

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            rank_correlation([1.0, 2.0], [1.0])


def test_evaluate_returns_coefficient_and_count():
    coefficient, matched = evaluate([(0.9, 0.875), (0.1, 0.0)])
    assert coefficient == pytest.approx(1.0)
    assert matched == 2


class TestDatasetResult:
    """Test OOV percentage arithmetic."""

    def test_oov_percent(self):
        assert DatasetResult("ws", 0.5, matched=3, total=4).oov_percent == 25.0

    def test_all_oov(self):
        assert DatasetResult("ws", float("nan"), matched=0, total=5).oov_percent == 100.0

    def test_empty_dataset(self):
        result = DatasetResult("empty", float("nan"), matched=0, total=0)
        assert result.oov_percent == 0.0
        assert result.to_dict()["coefficient"] is None


class TestCorrelationEvaluator:
    """Test dataset scoring against a loaded store."""

    @pytest.fixture
    def evaluator(self, datasets_dir, filtered_embedding):
        vocab = build_vocabulary(datasets_dir)
        store = load_vectors(filtered_embedding, vocab, block_size=8)
        return CorrelationEvaluator(vocab, store)

    def test_scenario_dataset(self, evaluator):
        judgments = [Judgment("cat", "dog", 0.9), Judgment("cat", "car", 0.1)]

        result = evaluator.evaluate_dataset("pets", judgments)

        assert result.matched == 2
        assert result.total == 2
        assert result.coefficient == pytest.approx(1.0)
        assert result.oov_percent == 0.0

    def test_pair_similarity(self, evaluator):
        assert evaluator.pair_similarity("cat", "dog") == 0.875
        assert evaluator.pair_similarity("cat", "car") == 0.0
        assert evaluator.pair_similarity("cat", "zebra") is None
        assert evaluator.pair_similarity("cat", "unseen") is None

    def test_oov_pairs_dropped_but_counted(self, evaluator):
        judgments = [
            Judgment("cat", "dog", 0.9),
            Judgment("cat", "zebra", 0.3),
            Judgment("cat", "car", 0.1),
            Judgment("emu", "gnu", 0.2),
        ]

        result = evaluator.evaluate_dataset("mixed", judgments)

        assert result.matched == 2
        assert result.total == 4
        assert result.matched <= result.total
        assert result.oov_percent == 50.0

    def test_all_oov_dataset(self, evaluator):
        result = evaluator.evaluate_dataset("unknown", [Judgment("zebra", "yak", 5.0)])

        assert result.matched == 0
        assert result.oov_percent == 100.0
        assert math.isnan(result.coefficient)

    def test_evaluate_directory(self, evaluator, datasets_dir):
        results = list(evaluator.evaluate_directory(datasets_dir))

        assert [r.name for r in results] == ["pets.txt", "unknown.txt"]
        pets, unknown = results
        assert pets.coefficient == pytest.approx(1.0)
        assert pets.matched == 2
        assert unknown.matched == 0
        assert unknown.oov_percent == 100.0

    def test_evaluate_directory_respects_max_lines(self, evaluator, datasets_dir):
        pets = next(iter(evaluator.evaluate_directory(datasets_dir, max_lines=1)))
        assert pets.total == 1

    def test_unreadable_dataset_is_skipped(self, evaluator, datasets_dir, monkeypatch):
        real_read = loader.read_judgments

        def flaky_read(path, max_lines=0):
            if path.name == "pets.txt":
                raise PermissionError(13, "Permission denied", str(path))
            return real_read(path, max_lines=max_lines)

        monkeypatch.setattr(loader, "read_judgments", flaky_read)

        results = list(evaluator.evaluate_directory(datasets_dir))

        assert [r.name for r in results] == ["unknown.txt"]
