"""Feed-forward network assembly, passes and snapshots."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, List, Mapping, Sequence, Tuple

import numpy as np

from .layers import Dense, Layer, Output, Placeholder
from .matrix import Matrix
from .optimizers import Optimizer
from .types import Array, LayerState


@dataclass(frozen=True)
class Snapshot:
    """Value copy of every parametric layer's state for one topology."""

    shapes: Tuple[Tuple[int, int], ...]
    states: Tuple[Mapping[str, Matrix], ...]

    @classmethod
    def take(cls, network: "FeedForward") -> "Snapshot":
        states = tuple(MappingProxyType(layer.read()) for layer in network.parametric)
        shapes = tuple(state["weights"].shape for state in states)
        return cls(shapes=shapes, states=states)


class FeedForward:
    """A placeholder, zero or more hidden layers and one output layer."""

    def __init__(
        self,
        input: Placeholder,
        hidden: Sequence[Dense],
        output: Output,
        optimizer: Optimizer,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.input = input
        self.hidden = list(hidden)
        self.output = output
        self.optimizer = optimizer
        self._rng = rng if rng is not None else np.random.default_rng()
        self.init()

    @property
    def layers(self) -> List[Layer]:
        return [self.input, *self.hidden, self.output]

    @property
    def parametric(self) -> List[Dense | Output]:
        return [*self.hidden, self.output]

    @property
    def depth(self) -> int:
        return len(self.layers)

    def init(self) -> None:
        """Chain ``init`` through every layer, each width feeding the next fan-in."""

        fan_in = self.input.init(0, self._rng)
        for layer in self.parametric:
            fan_in = layer.init(fan_in, self._rng)

    def feed(self, samples: Sequence[Sequence[float]] | Array) -> "FeedForward":
        """Forward pass over row-per-sample ``samples``, memoizing activations."""

        x = Matrix(samples).transpose()
        for layer in self.layers:
            x = layer.forward(x)
        return self

    def backpropagate(self, labels: Sequence[Any]) -> float:
        """Backward pass from the output layer; returns the summed batch cost."""

        result = self.output.back(labels, self.optimizer)
        weights, errors = result.weights, result.errors
        for layer in reversed(self.hidden):
            hidden = layer.back(weights, errors, self.optimizer)
            weights, errors = hidden.weights, hidden.errors
        return result.cost

    def infer(self, samples: Sequence[Sequence[float]] | Array) -> Array:
        """Return output activations, one row per sample, without training."""

        x = Matrix(samples).transpose()
        if x.n == 0:
            return np.zeros((0, self.output.width))
        for layer in self.layers:
            x = layer.forward(x)
        return x.transpose().to_array()

    def read(self) -> Snapshot:
        return Snapshot.take(self)

    def restore(self, snapshot: Snapshot) -> None:
        layers = self.parametric
        current = tuple(layer.shape for layer in layers)
        if current != snapshot.shapes:
            raise ValueError("Snapshot was taken from a network with a different topology")
        for layer, state in zip(layers, snapshot.states):
            layer.restore(dict(state))

    def parameter_count(self) -> int:
        return int(sum(m * n for m, n in (layer.shape for layer in self.parametric)))

    def __repr__(self) -> str:
        inner = ", ".join(repr(layer) for layer in self.layers)
        return f"FeedForward({inner})"


__all__ = ["FeedForward", "Snapshot"]
