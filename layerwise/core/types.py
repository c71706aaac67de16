"""Core typing contracts for layerwise."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

import numpy as np

from .matrix import Matrix

Array = np.ndarray

CONTINUOUS = "continuous"
CATEGORICAL = "categorical"


class NotTrainedError(RuntimeError):
    """Raised when inference is requested from an estimator that was never trained."""


@dataclass(frozen=True)
class Backward:
    """Result of a single layer's backward pass.

    ``weights`` are the weights *before* the optimizer step was applied so the
    upstream layer can propagate its errors through them.
    """

    weights: Matrix
    errors: Matrix
    step_norm: float
    cost: float = 0.0


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :func:`layerwise.training.pipelines.run_pipeline`."""

    epochs: int
    metrics_path: str
    manifest_path: str
    summary_path: str = ""
    best_score: float = float("nan")
    validation_score: float = float("nan")


@dataclass
class History:
    """Per-epoch cost and validation score sequences of one estimator."""

    steps: List[float] = field(default_factory=list)
    scores: List[float] = field(default_factory=list)

    def clear(self) -> None:
        self.steps.clear()
        self.scores.clear()

    def append(self, cost: float, score: float) -> None:
        self.steps.append(float(cost))
        self.scores.append(float(score))


LayerState = Dict[str, Matrix]
