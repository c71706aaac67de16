"""Neural network estimators: mini-batch training with progress monitoring.

Both estimators hold out part of every training set to score the network
after each epoch. Training stops early when the cost stops moving, when the
score reaches the metric's ceiling, or when the score has not improved over
the last ``window`` epochs. The best scoring parameters are snapshotted and
restored if the network ends training worse off than its best epoch.
"""

from __future__ import annotations

import copy
import math
from typing import Any, Dict, List, Mapping, Sequence

import numpy as np

from ..core.costs import REGISTRY as COSTS
from ..core.costs import CostFunction
from ..core.layers import Dense, Linear, Multiclass, Output, Placeholder
from ..core.network import FeedForward, Snapshot
from ..core.optimizers import Adam, Optimizer
from ..core.types import CATEGORICAL, History, NotTrainedError
from ..data.dataset import Labeled, Unlabeled
from ..data.registry import TASK_TYPES
from .metrics import Metric, default_metric

TOLERANCE = 1e-3


class _NeuralEstimator:
    """Shared epoch loop for the classifier and the regressor."""

    task_type = ""

    def __init__(
        self,
        hidden: Sequence[Dense] = (),
        batch_size: int = 50,
        optimizer: Optimizer | None = None,
        alpha: float = 1e-4,
        cost_function: CostFunction | None = None,
        min_change: float = 1e-4,
        metric: Metric | None = None,
        holdout: float = 0.1,
        window: int = 3,
        epochs: int = 1000,
        seed: int | None = None,
        callbacks: Sequence[object] | None = None,
    ) -> None:
        if self.task_type not in TASK_TYPES:
            raise TypeError(
                f"{type(self).__name__} has no task type, use MultiLayerPerceptron or MLPRegressor"
            )
        for layer in hidden:
            if not isinstance(layer, Dense):
                raise TypeError(f"Hidden layers must be Dense layers, {type(layer).__name__} given")
        if batch_size < 1:
            raise ValueError(f"Cannot have less than 1 sample per batch, {batch_size} given")
        if alpha < 0.0:
            raise ValueError(f"Regularization parameter must be non-negative, {alpha} given")
        if min_change < 0.0:
            raise ValueError(f"Minimum change cannot be less than 0, {min_change} given")
        if not 0.01 <= holdout <= 1.0:
            raise ValueError(f"Holdout ratio must be between 0.01 and 1.0, {holdout} given")
        if window < 1:
            raise ValueError(f"Stopping criteria window must be at least 1 epoch, {window} given")
        if epochs < 1:
            raise ValueError(f"Estimator must train for at least 1 epoch, {epochs} given")

        self.hidden = list(hidden)
        self.batch_size = batch_size
        self.optimizer = optimizer if optimizer is not None else Adam()
        self.alpha = alpha
        self.cost_function = cost_function if cost_function is not None else self._default_cost()
        self.min_change = min_change
        self.metric = metric if metric is not None else self._default_metric()
        self.holdout = holdout
        self.window = window
        self.epochs = epochs
        self.seed = seed
        self.callbacks = list(callbacks or [])
        self.network: FeedForward | None = None
        self.history = History()
        self._rng = np.random.default_rng(seed)

    # ------------------------------------------------------------------
    # Diagnostics

    @property
    def steps(self) -> List[float]:
        """Average training cost per sample at every epoch."""

        return list(self.history.steps)

    @property
    def scores(self) -> List[float]:
        """Validation score at every epoch."""

        return list(self.history.scores)

    def params(self) -> Dict[str, Any]:
        return {
            "hidden": [repr(layer) for layer in self.hidden],
            "batch_size": self.batch_size,
            "optimizer": repr(self.optimizer),
            "alpha": self.alpha,
            "cost_function": type(self.cost_function).__name__,
            "min_change": self.min_change,
            "metric": self.metric.name,
            "holdout": self.holdout,
            "window": self.window,
            "epochs": self.epochs,
            "seed": self.seed,
        }

    def clone(self) -> "_NeuralEstimator":
        """Return an untrained estimator with the same hyperparameters.

        Callbacks are not carried over, so clones trained side by side never
        write into the same sinks.
        """

        optimizer = copy.deepcopy(self.optimizer)
        optimizer.reset()
        return type(self)(
            hidden=copy.deepcopy(self.hidden),
            batch_size=self.batch_size,
            optimizer=optimizer,
            alpha=self.alpha,
            cost_function=self.cost_function,
            min_change=self.min_change,
            metric=self.metric,
            holdout=self.holdout,
            window=self.window,
            epochs=self.epochs,
            seed=self.seed,
            callbacks=None,
        )

    # ------------------------------------------------------------------
    # Training

    def train(self, dataset: Labeled) -> None:
        """Build a fresh network, clear the history and train on ``dataset``."""

        self._check_training_set(dataset)
        self._prepare(dataset)
        self.optimizer.reset()
        self.network = FeedForward(
            Placeholder(dataset.num_columns),
            copy.deepcopy(self.hidden),
            self._build_output(),
            self.optimizer,
            rng=self._rng,
        )
        self.history.clear()
        self.partial(dataset)

    def partial(self, dataset: Labeled) -> None:
        """Continue training the existing network, or :meth:`train` if there is none."""

        if self.network is None:
            self.train(dataset)
            return

        self._check_training_set(dataset)
        self._check_width(dataset)
        self._check_labels(dataset)

        network = self.network
        testing, training = self._split(dataset)
        min_score, max_score = self.metric.range()

        best_score = min_score
        best_snapshot: Snapshot | None = None
        previous = math.inf

        for epoch in range(1, self.epochs + 1):
            cost = 0.0
            for batch in training.randomize(self._rng).batch(self.batch_size):
                cost += network.feed(batch.samples).backpropagate(batch.labels)
            cost /= dataset.num_rows

            score = self.metric.score(self, testing)
            self.history.append(cost, score)

            if score > best_score:
                best_score = score
                best_snapshot = Snapshot.take(network)

            self._emit_epoch(epoch, {"cost": cost, "score": score, "best_score": best_score})

            if abs(previous - cost) < self.min_change:
                break

            if score > max_score - TOLERANCE:
                break

            if epoch >= self.window:
                window = self.history.scores[-self.window :]
                if window == sorted(window, reverse=True):
                    break

            previous = cost

        if self.history.scores[-1] < best_score and best_snapshot is not None:
            network.restore(best_snapshot)

    # ------------------------------------------------------------------
    # Inference

    def _infer(self, dataset: Unlabeled) -> np.ndarray:
        if self.network is None:
            raise NotTrainedError("Estimator has not been trained")
        self._check_continuous(dataset)
        self._check_width(dataset)
        return self.network.infer(dataset.to_array())

    # ------------------------------------------------------------------
    # Hooks and helpers

    def _default_cost(self) -> CostFunction:
        return COSTS.resolve("auto", task_type=self.task_type)

    def _default_metric(self) -> Metric:
        return default_metric(self.task_type)

    def _prepare(self, dataset: Labeled) -> None:
        return None

    def _check_labels(self, dataset: Labeled) -> None:
        return None

    def _split(self, dataset: Labeled) -> tuple[Labeled, Labeled]:
        testing, training = dataset.split(self.holdout, rng=self._rng)
        return self._fill(testing, training, dataset)

    @staticmethod
    def _fill(testing: Labeled, training: Labeled, dataset: Labeled) -> tuple[Labeled, Labeled]:
        # A holdout that swallows a whole side falls back to the full dataset for it.
        if testing.num_rows == 0:
            testing = dataset
        if training.num_rows == 0:
            training = dataset
        return testing, training

    def _check_training_set(self, dataset: Labeled) -> None:
        if not isinstance(dataset, Labeled):
            raise TypeError("This estimator requires a Labeled training set")
        if dataset.num_rows == 0:
            raise ValueError("Cannot train on an empty dataset")
        self._check_continuous(dataset)

    @staticmethod
    def _check_continuous(dataset: Unlabeled) -> None:
        if not isinstance(dataset, Unlabeled):
            raise TypeError(f"Expected a dataset, {type(dataset).__name__} given")
        if CATEGORICAL in dataset.column_types():
            raise ValueError("This estimator only works with continuous features")

    def _check_width(self, dataset: Unlabeled) -> None:
        if self.network is None:
            raise NotTrainedError("Estimator has not been trained")
        expected = self.network.input.inputs
        if dataset.num_rows and dataset.num_columns != expected:
            raise ValueError(
                f"Network was trained on {expected} features, {dataset.num_columns} given"
            )

    def _emit_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        for callback in self.callbacks:
            if hasattr(callback, "on_epoch"):
                callback.on_epoch(epoch, metrics)  # type: ignore[attr-defined]
            elif callable(callback):
                callback(epoch, metrics)

    def __repr__(self) -> str:
        hidden = ", ".join(repr(layer) for layer in self.hidden)
        return f"{type(self).__name__}(hidden=[{hidden}], epochs={self.epochs})"


class MultiLayerPerceptron(_NeuralEstimator):
    """Multiclass neural network classifier.

    Hidden layers are user supplied :class:`~layerwise.core.layers.Dense`
    layers; the output is a softmax :class:`~layerwise.core.layers.Multiclass`
    layer over the classes seen in the first training set. The holdout split
    is stratified.
    """

    task_type = "classification"

    def __init__(self, hidden: Sequence[Dense] = (), **options: Any) -> None:
        super().__init__(hidden, **options)
        self.classes: List[Any] = []

    def _prepare(self, dataset: Labeled) -> None:
        classes = dataset.possible_outcomes()
        if len(classes) < 2:
            raise ValueError(f"Classifier needs at least 2 classes, {len(classes)} given")
        self.classes = classes

    def _build_output(self) -> Output:
        return Multiclass(self.classes, self.alpha, self.cost_function)

    def _check_labels(self, dataset: Labeled) -> None:
        unknown = set(dataset.possible_outcomes()) - set(self.classes)
        if unknown:
            raise ValueError(f"Labels {sorted(map(str, unknown))} were not seen during train")

    def _split(self, dataset: Labeled) -> tuple[Labeled, Labeled]:
        testing, training = dataset.stratified_split(self.holdout, rng=self._rng)
        return self._fill(testing, training, dataset)

    def proba(self, dataset: Unlabeled) -> List[Dict[Any, float]]:
        """Return a ``{class: probability}`` mapping per sample."""

        activations = self._infer(dataset)
        return [dict(zip(self.classes, map(float, row))) for row in activations]

    def predict(self, dataset: Unlabeled) -> List[Any]:
        """Return the most probable class per sample (first maximum wins)."""

        return [max(dist.items(), key=lambda item: item[1])[0] for dist in self.proba(dataset)]


class MLPRegressor(_NeuralEstimator):
    """Neural network regressor with a single linear output neuron."""

    task_type = "regression"

    def _build_output(self) -> Output:
        return Linear(self.alpha, self.cost_function)

    def _check_labels(self, dataset: Labeled) -> None:
        try:
            np.asarray(dataset.labels, dtype=np.float64)
        except (TypeError, ValueError) as exc:
            raise ValueError("Regressor requires continuous labels") from exc

    def _prepare(self, dataset: Labeled) -> None:
        self._check_labels(dataset)

    def predict(self, dataset: Unlabeled) -> List[float]:
        return [float(row[0]) for row in self._infer(dataset)]


__all__ = ["MLPRegressor", "MultiLayerPerceptron", "TOLERANCE"]
