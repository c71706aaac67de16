"""Cross validation of estimators against a metric."""

from __future__ import annotations

from typing import Any, List, Protocol

import numpy as np

from ..backends import Serial, ThreadPool
from ..data.dataset import Labeled
from .metrics import Metric


class Estimator(Protocol):
    def train(self, dataset: Labeled) -> None:
        ...

    def predict(self, dataset: Any) -> List[Any]:
        ...

    def clone(self) -> "Estimator":
        ...


class HoldOut:
    """Train once and score on a held out fraction of the dataset."""

    def __init__(self, ratio: float = 0.2, stratify: bool = False, seed: int | None = None) -> None:
        if not 0.01 <= ratio <= 1.0:
            raise ValueError(f"Holdout ratio must be between 0.01 and 1.0, {ratio} given")
        self.ratio = ratio
        self.stratify = stratify
        self.seed = seed

    def test(self, estimator: Estimator, dataset: Labeled, metric: Metric) -> float:
        rng = np.random.default_rng(self.seed)
        if self.stratify:
            testing, training = dataset.stratified_split(self.ratio, rng=rng)
        else:
            testing, training = dataset.split(self.ratio, rng=rng)
        if training.num_rows == 0 or testing.num_rows == 0:
            raise ValueError(f"Holdout ratio {self.ratio} leaves an empty split")
        estimator.train(training)
        return metric.score(estimator, testing)


class KFold:
    """Score ``k`` independent clones, each tested on one fold.

    Every fold trains a fresh clone of the estimator, so folds can run
    concurrently on a :class:`~layerwise.backends.ThreadPool`.
    """

    def __init__(
        self,
        k: int = 5,
        backend: Serial | ThreadPool | None = None,
        seed: int | None = None,
    ) -> None:
        if k < 2:
            raise ValueError(f"Cannot create less than 2 folds, {k} given")
        self.k = k
        self.backend = backend if backend is not None else Serial()
        self.seed = seed
        self.scores: List[float] = []

    def test(self, estimator: Estimator, dataset: Labeled, metric: Metric) -> float:
        folds = dataset.fold(self.k, rng=np.random.default_rng(self.seed))
        for i, testing in enumerate(folds):
            training = None
            for j, fold in enumerate(folds):
                if j != i:
                    training = fold if training is None else training.merge(fold)
            self.backend.enqueue(_train_and_score, (estimator.clone(), training, testing, metric))
        self.scores = [float(score) for score in self.backend.process()]
        return float(np.mean(self.scores))


def _train_and_score(estimator: Estimator, training: Labeled, testing: Labeled, metric: Metric) -> float:
    estimator.train(training)
    return metric.score(estimator, testing)


__all__ = ["HoldOut", "KFold"]
