"""layerwise public API."""

from . import backends  # noqa: F401
from .core import activations, costs, optimizers  # noqa: F401
from .core.layers import Dense, Linear, Multiclass, Placeholder
from .core.network import FeedForward, Snapshot
from .core.types import NotTrainedError, RunResult
from .data import Labeled, Unlabeled, get_dataset
from .training.pipelines import load_preset, presets, run_pipeline
from .training.trainer import MLPRegressor, MultiLayerPerceptron

__all__ = [
    "Dense",
    "FeedForward",
    "Labeled",
    "Linear",
    "MLPRegressor",
    "Multiclass",
    "MultiLayerPerceptron",
    "NotTrainedError",
    "Placeholder",
    "RunResult",
    "Snapshot",
    "Unlabeled",
    "activations",
    "backends",
    "costs",
    "get_dataset",
    "load_preset",
    "optimizers",
    "presets",
    "run_pipeline",
]
