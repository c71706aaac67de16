import pytest

from layerwise.data import Labeled
from layerwise.training import metrics


class _Constant:
    def __init__(self, prediction):
        self.prediction = prediction

    def predict(self, dataset):
        return [self.prediction] * dataset.num_rows


def test_accuracy():
    assert metrics.Accuracy().compute(["a", "b", "a"], ["a", "a", "a"]) == pytest.approx(2 / 3)
    assert metrics.Accuracy().range() == (0.0, 1.0)


def test_f1_and_mcc_on_perfect_predictions():
    labels = ["a", "b", "b", "c"]
    assert metrics.F1Score().compute(labels, labels) == pytest.approx(1.0, abs=1e-6)
    assert metrics.MCC().compute(labels, labels) == pytest.approx(1.0, abs=1e-6)


def test_regression_metrics():
    labels = [1.0, 2.0, 3.0]
    assert metrics.RSquared().compute(labels, labels) == pytest.approx(1.0)
    assert metrics.RSquared().compute([2.0, 2.0, 2.0], labels) == pytest.approx(0.0, abs=1e-6)
    assert metrics.MeanSquaredError().compute([2.0, 2.0, 2.0], labels) == pytest.approx(-2 / 3)
    assert metrics.MeanAbsoluteError().compute([2.0, 2.0, 2.0], labels) == pytest.approx(-2 / 3)


def test_score_uses_estimator_predictions():
    testing = Labeled([[0.0], [1.0], [2.0], [3.0]], ["a", "a", "a", "b"])
    assert metrics.Accuracy().score(_Constant("a"), testing) == pytest.approx(0.75)
    with pytest.raises(ValueError):
        metrics.Accuracy().score(_Constant("a"), Labeled([], []))


def test_registry_and_compatibility():
    assert isinstance(metrics.get("f1"), metrics.F1Score)
    assert isinstance(metrics.default_metric("regression"), metrics.RSquared)
    assert metrics.compatible(metrics.Accuracy(), "classification")
    assert not metrics.compatible(metrics.Accuracy(), "regression")
    assert metrics.compatible(metrics.RSquared(), "regression")
    with pytest.raises(KeyError, match="Available metrics"):
        metrics.get("auc")
