"""Gradient descent optimizers with per-parameter state."""

from __future__ import annotations

import weakref
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Mapping, Protocol, Tuple

import numpy as np

from .matrix import Matrix
from .parameter import Parameter


class Optimizer(Protocol):
    def step(self, parameter: Parameter, gradients: Matrix) -> Matrix:
        """Return the step to subtract from ``parameter``'s weights."""

    def reset(self) -> None:
        ...


@dataclass
class Stochastic:
    """Vanilla gradient descent."""

    rate: float = 0.01

    def __post_init__(self) -> None:
        if self.rate <= 0.0:
            raise ValueError(f"The learning rate must be positive, {self.rate} given")

    def step(self, parameter: Parameter, gradients: Matrix) -> Matrix:
        return gradients.scalar_multiply(self.rate)

    def reset(self) -> None:
        return None


@dataclass
class Momentum:
    """Gradient descent with a decaying velocity term."""

    rate: float = 0.001
    decay: float = 0.9
    _velocities: "weakref.WeakKeyDictionary[Parameter, Matrix]" = field(
        default_factory=weakref.WeakKeyDictionary, init=False, repr=False
    )

    def __post_init__(self) -> None:
        if self.rate <= 0.0:
            raise ValueError(f"The learning rate must be positive, {self.rate} given")
        if not 0.0 <= self.decay <= 1.0:
            raise ValueError(f"Decay must be between 0 and 1, {self.decay} given")

    def step(self, parameter: Parameter, gradients: Matrix) -> Matrix:
        velocity = self._velocities.get(parameter)
        if velocity is None:
            velocity = Matrix.zeros(*parameter.shape)
        velocity = velocity.scalar_multiply(self.decay).add(gradients.scalar_multiply(self.rate))
        self._velocities[parameter] = velocity
        return velocity

    def reset(self) -> None:
        self._velocities.clear()


@dataclass
class Adam:
    """Adaptive moment estimation.

    Blends a momentum term (first moment) with an RMS term (second moment) for
    every parameter it has seen. State is created lazily at zero on the first
    step for a parameter and lives as long as that parameter does.
    """

    rate: float = 0.001
    momentum_decay: float = 0.9
    rms_decay: float = 0.999
    epsilon: float = 1e-8
    _state: "weakref.WeakKeyDictionary[Parameter, Tuple[Matrix, Matrix]]" = field(
        default_factory=weakref.WeakKeyDictionary, init=False, repr=False
    )

    def __post_init__(self) -> None:
        if self.rate <= 0.0:
            raise ValueError(f"The learning rate must be positive, {self.rate} given")
        if not 0.0 <= self.momentum_decay <= 1.0:
            raise ValueError(
                f"Momentum decay must be between 0 and 1, {self.momentum_decay} given"
            )
        if not 0.0 <= self.rms_decay <= 1.0:
            raise ValueError(f"RMS decay must be between 0 and 1, {self.rms_decay} given")
        if self.epsilon == 0.0:
            raise ValueError("Epsilon cannot be 0")

    def step(self, parameter: Parameter, gradients: Matrix) -> Matrix:
        state = self._state.get(parameter)
        if state is None:
            m, n = parameter.shape
            state = (Matrix.zeros(m, n), Matrix.zeros(m, n))
        velocity, cache = state

        velocity = velocity.scalar_multiply(self.momentum_decay).add(
            gradients.scalar_multiply(1.0 - self.momentum_decay)
        )
        cache = cache.scalar_multiply(self.rms_decay).add(
            gradients.hadamard(gradients).scalar_multiply(1.0 - self.rms_decay)
        )
        self._state[parameter] = (velocity, cache)

        v = np.asarray(velocity)
        c = np.asarray(cache)
        return Matrix(self.rate * v / (np.sqrt(c) + self.epsilon))

    def state_for(self, parameter: Parameter) -> Tuple[Matrix, Matrix] | None:
        """Return the (velocity, cache) pair tracked for ``parameter``."""

        return self._state.get(parameter)

    def reset(self) -> None:
        self._state.clear()


_REGISTRY: Dict[str, Callable[..., Optimizer]] = {
    "sgd": Stochastic,
    "stochastic": Stochastic,
    "momentum": Momentum,
    "adam": Adam,
}


def build(config: str | Mapping[str, Any]) -> Optimizer:
    """Build an optimizer from ``"adam"`` or ``{"name": "adam", "rate": 0.01}``."""

    if isinstance(config, str):
        options: Dict[str, Any] = {}
        name = config
    else:
        options = dict(config)
        name = str(options.pop("name", "adam"))
    key = name.lower()
    if key not in _REGISTRY:
        available = ", ".join(names())
        raise KeyError(f"Unknown optimizer {name!r}. Available optimizers: {available}")
    return _REGISTRY[key](**options)


def names() -> Iterable[str]:
    return sorted(_REGISTRY)


__all__ = ["Adam", "Momentum", "Optimizer", "Stochastic", "build", "names"]
