"""Activation functions for hidden and output layers.

Every activation exposes ``compute(z)`` and ``differentiate(z, a)`` over
:class:`~layerwise.core.matrix.Matrix` values together with a ``family`` tag.
Hidden layers use the family to pick their weight initialisation range.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Protocol

import numpy as np

from .matrix import Matrix
from .types import Array

SATURATING = "saturating"
RECTIFIED = "rectified"


def relu(x: Array) -> Array:
    """Return the ReLU activation."""

    return np.maximum(x, 0.0)


def sigmoid(x: Array) -> Array:
    return 0.5 * (1.0 + np.tanh(0.5 * x))


def softmax(z: Array, axis: int = 0) -> Array:
    """Numerically stable softmax along ``axis`` (columns hold samples)."""

    shifted = z - np.max(z, axis=axis, keepdims=True)
    e = np.exp(shifted)
    return e / np.sum(e, axis=axis, keepdims=True)


class ActivationFunction(Protocol):
    family: str

    def compute(self, z: Matrix) -> Matrix:
        ...

    def differentiate(self, z: Matrix, computed: Matrix) -> Matrix:
        ...


@dataclass(frozen=True)
class HyperbolicTangent:
    family: str = SATURATING

    def compute(self, z: Matrix) -> Matrix:
        return z.map(np.tanh)

    def differentiate(self, z: Matrix, computed: Matrix) -> Matrix:
        return computed.map(lambda a: 1.0 - a * a)


@dataclass(frozen=True)
class Sigmoid:
    family: str = SATURATING

    def compute(self, z: Matrix) -> Matrix:
        return z.map(sigmoid)

    def differentiate(self, z: Matrix, computed: Matrix) -> Matrix:
        return computed.map(lambda a: a * (1.0 - a))


@dataclass(frozen=True)
class Softsign:
    family: str = SATURATING

    def compute(self, z: Matrix) -> Matrix:
        return z.map(lambda x: x / (1.0 + np.abs(x)))

    def differentiate(self, z: Matrix, computed: Matrix) -> Matrix:
        return z.map(lambda x: 1.0 / (1.0 + np.abs(x)) ** 2)


@dataclass(frozen=True)
class ReLU:
    family: str = RECTIFIED

    def compute(self, z: Matrix) -> Matrix:
        return z.map(relu)

    def differentiate(self, z: Matrix, computed: Matrix) -> Matrix:
        return z.map(lambda x: (x > 0.0).astype(np.float64))


@dataclass(frozen=True)
class LeakyReLU:
    leakage: float = 0.01
    family: str = RECTIFIED

    def __post_init__(self) -> None:
        if not 0.0 < self.leakage < 1.0:
            raise ValueError(f"Leakage must be between 0 and 1, {self.leakage} given")

    def compute(self, z: Matrix) -> Matrix:
        return z.map(lambda x: np.where(x > 0.0, x, self.leakage * x))

    def differentiate(self, z: Matrix, computed: Matrix) -> Matrix:
        return z.map(lambda x: np.where(x > 0.0, 1.0, self.leakage))


@dataclass(frozen=True)
class ELU:
    alpha: float = 1.0
    family: str = RECTIFIED

    def __post_init__(self) -> None:
        if self.alpha < 0.0:
            raise ValueError(f"Alpha must be non-negative, {self.alpha} given")

    def compute(self, z: Matrix) -> Matrix:
        return z.map(lambda x: np.where(x > 0.0, x, self.alpha * np.expm1(np.minimum(x, 0.0))))

    def differentiate(self, z: Matrix, computed: Matrix) -> Matrix:
        return z.map(lambda x: np.where(x > 0.0, 1.0, self.alpha * np.exp(np.minimum(x, 0.0))))


@dataclass(frozen=True)
class SELU:
    """Self-normalising exponential linear unit."""

    scale: float = 1.0507009873554805
    alpha: float = 1.6732632423543772
    family: str = RECTIFIED

    def compute(self, z: Matrix) -> Matrix:
        return z.map(
            lambda x: self.scale
            * np.where(x > 0.0, x, self.alpha * np.expm1(np.minimum(x, 0.0)))
        )

    def differentiate(self, z: Matrix, computed: Matrix) -> Matrix:
        return z.map(
            lambda x: self.scale
            * np.where(x > 0.0, 1.0, self.alpha * np.exp(np.minimum(x, 0.0)))
        )


@dataclass(frozen=True)
class Softmax:
    """Column-wise softmax; the derivative is the diagonal Jacobian term."""

    family: str = SATURATING

    def compute(self, z: Matrix) -> Matrix:
        return z.map(softmax)

    def differentiate(self, z: Matrix, computed: Matrix) -> Matrix:
        return computed.map(lambda a: a * (1.0 - a))


_REGISTRY: Dict[str, Callable[[], ActivationFunction]] = {
    "tanh": HyperbolicTangent,
    "sigmoid": Sigmoid,
    "softsign": Softsign,
    "relu": ReLU,
    "leaky_relu": LeakyReLU,
    "elu": ELU,
    "selu": SELU,
}


def get(name: str, **options: Any) -> ActivationFunction:
    """Resolve an activation function by its configuration name."""

    key = name.lower()
    if key not in _REGISTRY:
        available = ", ".join(names())
        raise KeyError(f"Unknown activation {name!r}. Available activations: {available}")
    return _REGISTRY[key](**options)


def names() -> Iterable[str]:
    return sorted(_REGISTRY)


__all__ = [
    "ActivationFunction",
    "ELU",
    "HyperbolicTangent",
    "LeakyReLU",
    "RECTIFIED",
    "ReLU",
    "SATURATING",
    "SELU",
    "Sigmoid",
    "Softmax",
    "Softsign",
    "get",
    "names",
    "relu",
    "sigmoid",
    "softmax",
]
