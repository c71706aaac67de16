"""Validation metrics used to score estimators against a holdout set.

A metric scores an estimator's predictions on a labeled dataset and reports
the ``(min, max)`` range of its scores. Every metric is oriented so that
higher is better; error metrics are therefore negated.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Protocol, Sequence, Tuple

import numpy as np

from ..data.dataset import Labeled


class Estimator(Protocol):
    def predict(self, dataset: Any) -> List[Any]:
        ...


class Metric(Protocol):
    name: str

    def range(self) -> Tuple[float, float]:
        ...

    def compute(self, predictions: Sequence[Any], labels: Sequence[Any]) -> float:
        ...

    def score(self, estimator: Estimator, testing: Labeled) -> float:
        ...


class _Scored:
    def score(self, estimator: Estimator, testing: Labeled) -> float:
        if testing.num_rows == 0:
            raise ValueError("Cannot score an empty dataset")
        return self.compute(estimator.predict(testing), testing.labels)  # type: ignore[attr-defined]


def _confusion(predictions: Sequence[Any], labels: Sequence[Any]) -> Dict[Any, Tuple[int, int, int, int]]:
    """Return per-class ``(tp, fp, fn, tn)`` counts."""

    preds = list(predictions)
    targs = list(labels)
    classes = list(dict.fromkeys(targs + preds))
    n = len(targs)
    counts: Dict[Any, Tuple[int, int, int, int]] = {}
    for cls in classes:
        tp = sum(1 for p, t in zip(preds, targs) if p == cls and t == cls)
        fp = sum(1 for p, t in zip(preds, targs) if p == cls and t != cls)
        fn = sum(1 for p, t in zip(preds, targs) if p != cls and t == cls)
        counts[cls] = (tp, fp, fn, n - tp - fp - fn)
    return counts


@dataclass(frozen=True)
class Accuracy(_Scored):
    name: str = "accuracy"

    def range(self) -> Tuple[float, float]:
        return 0.0, 1.0

    def compute(self, predictions: Sequence[Any], labels: Sequence[Any]) -> float:
        if not labels:
            return 0.0
        return float(np.mean([p == t for p, t in zip(predictions, labels)]))


@dataclass(frozen=True)
class F1Score(_Scored):
    """Macro averaged F1 over every class seen in labels or predictions."""

    name: str = "f1"

    def range(self) -> Tuple[float, float]:
        return 0.0, 1.0

    def compute(self, predictions: Sequence[Any], labels: Sequence[Any]) -> float:
        scores = []
        for tp, fp, fn, _ in _confusion(predictions, labels).values():
            precision = tp / (tp + fp + 1e-9)
            recall = tp / (tp + fn + 1e-9)
            scores.append(2 * precision * recall / (precision + recall + 1e-9))
        return float(np.mean(scores)) if scores else 0.0


@dataclass(frozen=True)
class MCC(_Scored):
    """Matthews correlation coefficient, macro averaged over classes."""

    name: str = "mcc"

    def range(self) -> Tuple[float, float]:
        return -1.0, 1.0

    def compute(self, predictions: Sequence[Any], labels: Sequence[Any]) -> float:
        scores = []
        for tp, fp, fn, tn in _confusion(predictions, labels).values():
            denominator = np.sqrt(float((tp + fp) * (tp + fn) * (tn + fp) * (tn + fn)))
            scores.append((tp * tn - fp * fn) / (denominator + 1e-9))
        return float(np.mean(scores)) if scores else 0.0


@dataclass(frozen=True)
class RSquared(_Scored):
    name: str = "r2"

    def range(self) -> Tuple[float, float]:
        return -np.inf, 1.0

    def compute(self, predictions: Sequence[Any], labels: Sequence[Any]) -> float:
        preds = np.asarray(predictions, dtype=np.float64)
        targs = np.asarray(labels, dtype=np.float64)
        ss_res = float(np.sum((targs - preds) ** 2))
        ss_tot = float(np.sum((targs - targs.mean()) ** 2))
        return 1.0 if ss_tot == 0 else float(1 - ss_res / (ss_tot + 1e-9))


@dataclass(frozen=True)
class MeanSquaredError(_Scored):
    """Negated mean squared error."""

    name: str = "neg_mse"

    def range(self) -> Tuple[float, float]:
        return -np.inf, 0.0

    def compute(self, predictions: Sequence[Any], labels: Sequence[Any]) -> float:
        preds = np.asarray(predictions, dtype=np.float64)
        targs = np.asarray(labels, dtype=np.float64)
        return -float(np.mean((preds - targs) ** 2))


@dataclass(frozen=True)
class MeanAbsoluteError(_Scored):
    """Negated mean absolute error."""

    name: str = "neg_mae"

    def range(self) -> Tuple[float, float]:
        return -np.inf, 0.0

    def compute(self, predictions: Sequence[Any], labels: Sequence[Any]) -> float:
        preds = np.asarray(predictions, dtype=np.float64)
        targs = np.asarray(labels, dtype=np.float64)
        return -float(np.mean(np.abs(preds - targs)))


_REGISTRY: Dict[str, Callable[[], Metric]] = {
    "accuracy": Accuracy,
    "f1": F1Score,
    "macro_f1": F1Score,
    "mcc": MCC,
    "r2": RSquared,
    "neg_mse": MeanSquaredError,
    "neg_mae": MeanAbsoluteError,
}

_CLASSIFICATION = {"accuracy", "f1", "macro_f1", "mcc"}


def get(name: str) -> Metric:
    key = name.lower()
    if key not in _REGISTRY:
        available = ", ".join(names())
        raise KeyError(f"Unknown metric {name!r}. Available metrics: {available}")
    return _REGISTRY[key]()


def default_metric(task_type: str) -> Metric:
    if task_type == "classification":
        return Accuracy()
    if task_type == "regression":
        return RSquared()
    raise ValueError(f"Unknown task type: {task_type}")


def compatible(metric: Metric, task_type: str) -> bool:
    """Return whether ``metric`` can score estimators of ``task_type``."""

    return (metric.name in _CLASSIFICATION) == (task_type == "classification")


def names() -> Iterable[str]:
    return sorted(_REGISTRY)


__all__ = [
    "Accuracy",
    "F1Score",
    "MCC",
    "MeanAbsoluteError",
    "MeanSquaredError",
    "Metric",
    "RSquared",
    "compatible",
    "default_metric",
    "get",
    "names",
]
