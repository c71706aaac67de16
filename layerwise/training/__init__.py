"""Estimators, metrics, validators and config-driven runs."""

from .metrics import Accuracy, F1Score, MCC, MeanAbsoluteError, MeanSquaredError, RSquared
from .trainer import MLPRegressor, MultiLayerPerceptron
from .validation import HoldOut, KFold

__all__ = [
    "Accuracy",
    "F1Score",
    "HoldOut",
    "KFold",
    "MCC",
    "MLPRegressor",
    "MeanAbsoluteError",
    "MeanSquaredError",
    "MultiLayerPerceptron",
    "RSquared",
]
