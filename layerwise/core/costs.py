"""Cost functions used to seed backpropagation at the output layer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Protocol

import numpy as np

from .matrix import Matrix

EPSILON = 1e-8


class CostFunction(Protocol):
    def compute(self, expected: Matrix, activation: Matrix) -> Matrix:
        ...

    def differentiate(self, expected: Matrix, activation: Matrix, delta: Matrix) -> Matrix:
        ...


@dataclass(frozen=True)
class CrossEntropy:
    """Categorical cross entropy over one-hot expectations."""

    name: str = "cross_entropy"

    def compute(self, expected: Matrix, activation: Matrix) -> Matrix:
        a = np.asarray(activation)
        return expected.hadamard(Matrix(-np.log(a + EPSILON)))

    def differentiate(self, expected: Matrix, activation: Matrix, delta: Matrix) -> Matrix:
        a = np.asarray(activation)
        diff = np.asarray(activation.subtract(expected))
        return Matrix(diff / ((1.0 - a) * a + EPSILON))


@dataclass(frozen=True)
class LeastSquares:
    name: str = "least_squares"

    def compute(self, expected: Matrix, activation: Matrix) -> Matrix:
        diff = expected.subtract(activation)
        return diff.hadamard(diff).scalar_multiply(0.5)

    def differentiate(self, expected: Matrix, activation: Matrix, delta: Matrix) -> Matrix:
        return activation.subtract(expected)


@dataclass(frozen=True)
class Huber:
    """Quadratic near zero and linear beyond ``delta``."""

    delta: float = 1.0
    name: str = "huber"

    def __post_init__(self) -> None:
        if self.delta <= 0.0:
            raise ValueError(f"Delta must be greater than 0, {self.delta} given")

    def compute(self, expected: Matrix, activation: Matrix) -> Matrix:
        diff = np.abs(np.asarray(expected.subtract(activation)))
        quadratic = np.minimum(diff, self.delta)
        linear = diff - quadratic
        return Matrix(0.5 * quadratic**2 + self.delta * linear)

    def differentiate(self, expected: Matrix, activation: Matrix, delta: Matrix) -> Matrix:
        diff = np.asarray(activation.subtract(expected))
        return Matrix(np.clip(diff, -self.delta, self.delta))


class CostRegistry:
    """Central registry for cost functions."""

    def __init__(self) -> None:
        self._registry: Dict[str, Callable[[], CostFunction]] = {}

    def register(self, name: str, factory: Callable[[], CostFunction]) -> None:
        self._registry[name] = factory

    def names(self) -> Iterable[str]:
        return sorted(self._registry)

    def resolve(self, name: str, *, task_type: str) -> CostFunction:
        if name == "auto":
            if task_type == "classification":
                name = "cross_entropy"
            elif task_type == "regression":
                name = "least_squares"
            else:
                raise ValueError(f"Unknown task type: {task_type}")
        if name not in self._registry:
            available = ", ".join(self.names())
            raise KeyError(f"Unknown cost function {name!r}. Available cost functions: {available}")
        return self._registry[name]()


REGISTRY = CostRegistry()
REGISTRY.register("cross_entropy", CrossEntropy)
REGISTRY.register("ce", CrossEntropy)
REGISTRY.register("least_squares", LeastSquares)
REGISTRY.register("mse", LeastSquares)
REGISTRY.register("huber", Huber)

__all__ = ["CostFunction", "CostRegistry", "CrossEntropy", "Huber", "LeastSquares", "REGISTRY"]
