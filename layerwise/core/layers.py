"""Network layers.

Matrices flowing between layers hold one sample per *column*. A layer with
``width`` neurons and ``fan_in`` inputs owns a ``width x fan_in`` weight matrix
so the forward pass is a single product ``W x input``.

The set of layers is closed: :class:`Placeholder` (input), :class:`Dense`
(hidden) and the two output layers :class:`Multiclass` and :class:`Linear`.
"""

from __future__ import annotations

import math
from typing import Any, Sequence, Union

import numpy as np

from .activations import SATURATING, ActivationFunction, ReLU, Softmax
from .costs import CostFunction, CrossEntropy, LeastSquares
from .matrix import DimensionMismatch, Matrix
from .optimizers import Optimizer
from .parameter import Parameter
from .types import Backward, LayerState


def _rng(rng: np.random.Generator | None) -> np.random.Generator:
    return rng if rng is not None else np.random.default_rng()


def _l2_penalty(weights: Matrix, alpha: float, n: int) -> Matrix:
    """Return ``0.5 * alpha * (sum of row weights)^2`` repeated across ``n`` columns."""

    rows = np.asarray(weights).sum(axis=1, keepdims=True)
    penalty = 0.5 * alpha * rows**2
    return Matrix(np.repeat(penalty, n, axis=1))


class Placeholder:
    """Input layer: validates the feature count and appends the bias row."""

    def __init__(self, inputs: int) -> None:
        if inputs < 1:
            raise ValueError(f"The number of inputs cannot be less than 1, {inputs} given")
        self.inputs = inputs
        self.width = inputs + 1

    def init(self, fan_in: int = 0, rng: np.random.Generator | None = None) -> int:
        return self.width

    def forward(self, input: Matrix) -> Matrix:
        if input.m != self.inputs:
            raise DimensionMismatch(
                f"Network expects {self.inputs} features, {input.m} given"
            )
        return input.augment_below(Matrix.ones(1, input.n))

    def __repr__(self) -> str:
        return f"Placeholder(inputs={self.inputs})"


class _Parametric:
    """Shared weight bookkeeping for layers that own a :class:`Parameter`."""

    width: int

    def __init__(self) -> None:
        self.weights: Parameter | None = None
        self._input: Matrix | None = None
        self._computed: Matrix | None = None
        self._z: Matrix | None = None

    @property
    def fan_in(self) -> int:
        return self._parameter().shape[1]

    @property
    def shape(self) -> tuple[int, int]:
        return self._parameter().shape

    def _parameter(self) -> Parameter:
        if self.weights is None:
            raise RuntimeError(f"{type(self).__name__} layer has not been initialized")
        return self.weights

    def _memo(self) -> tuple[Matrix, Matrix]:
        if self._input is None or self._computed is None:
            raise RuntimeError("Backward pass requested before a forward pass")
        return self._input, self._computed

    def _pre_activations(self) -> Matrix:
        if self._z is None:
            raise RuntimeError("Backward pass requested before a forward pass")
        return self._z

    def _apply(self, errors: Matrix, optimizer: Optimizer, cost: float = 0.0) -> Backward:
        parameter = self._parameter()
        input, _ = self._memo()
        gradients = errors.multiply(input.transpose())
        weights = parameter.w
        step = optimizer.step(parameter, gradients)
        parameter.update(step)
        return Backward(weights=weights, errors=errors, step_norm=step.max_norm(), cost=cost)

    def read(self) -> LayerState:
        return {"weights": self._parameter().w.copy()}

    def restore(self, state: LayerState) -> None:
        weights = state["weights"]
        if self.weights is not None and weights.shape != self.weights.shape:
            raise DimensionMismatch(
                f"Cannot restore {weights.m}x{weights.n} weights into "
                f"{self.weights.shape[0]}x{self.weights.shape[1]} layer"
            )
        name = self.weights.name if self.weights is not None else ""
        self.weights = Parameter(weights.copy(), name=name)


class Dense(_Parametric):
    """Fully connected hidden layer.

    The last row of the output is a bias row held at one. Its error is always
    zero, so the matching weight row never moves.
    """

    def __init__(self, neurons: int, activation: ActivationFunction | None = None) -> None:
        if neurons < 1:
            raise ValueError(f"The number of neurons cannot be less than 1, {neurons} given")
        super().__init__()
        self.neurons = neurons
        self.activation = activation if activation is not None else ReLU()
        self.width = neurons + 1

    def init(self, fan_in: int, rng: np.random.Generator | None = None) -> int:
        if self.activation.family == SATURATING:
            r = math.sqrt(6.0 / (fan_in + self.width))
        else:
            r = math.sqrt(6.0 / fan_in)
        w = Matrix.uniform(self.width, fan_in, r, _rng(rng))
        self.weights = Parameter(w, name=f"dense_{self.neurons}")
        return self.width

    def forward(self, input: Matrix) -> Matrix:
        self._input = input
        self._z = self._parameter().w.multiply(input)
        activated = self.activation.compute(self._z.row_exclude(-1))
        self._computed = activated.augment_below(Matrix.ones(1, input.n))
        return self._computed

    def back(self, prev_weights: Matrix, prev_errors: Matrix, optimizer: Optimizer) -> Backward:
        _, computed = self._memo()
        z = self._pre_activations()
        derivative = self.activation.differentiate(
            z.row_exclude(-1), computed.row_exclude(-1)
        ).augment_below(Matrix.zeros(1, computed.n))
        errors = derivative.hadamard(prev_weights.transpose().multiply(prev_errors))
        return self._apply(errors, optimizer)

    def __repr__(self) -> str:
        return f"Dense(neurons={self.neurons}, activation={type(self.activation).__name__})"


class Multiclass(_Parametric):
    """Softmax output layer with one neuron per class."""

    def __init__(
        self,
        classes: Sequence[Any],
        alpha: float = 1e-4,
        cost_function: CostFunction | None = None,
    ) -> None:
        classes = list(classes)
        if len(classes) < 2:
            raise ValueError(f"Multiclass output needs at least 2 classes, {len(classes)} given")
        if alpha < 0.0:
            raise ValueError(f"L2 regularization parameter must be 0 or greater, {alpha} given")
        super().__init__()
        self.classes = classes
        self.alpha = alpha
        self.cost_function = cost_function if cost_function is not None else CrossEntropy()
        self.activation = Softmax()
        self.width = len(classes)

    def init(self, fan_in: int, rng: np.random.Generator | None = None) -> int:
        r = 1.0 / math.sqrt(fan_in)
        self.weights = Parameter(
            Matrix.uniform(self.width, fan_in, r, _rng(rng)), name="multiclass"
        )
        return self.width

    def forward(self, input: Matrix) -> Matrix:
        self._input = input
        self._z = self._parameter().w.multiply(input)
        self._computed = self.activation.compute(self._z)
        return self._computed

    def back(self, labels: Sequence[Any], optimizer: Optimizer) -> Backward:
        _, computed = self._memo()
        if len(labels) != computed.n:
            raise DimensionMismatch(f"Expected {computed.n} labels, {len(labels)} given")
        expected = Matrix(
            [[1.0 if label == cls else 0.0 for label in labels] for cls in self.classes]
        )
        delta = self.cost_function.compute(expected, computed)
        errors = (
            self.cost_function.differentiate(expected, computed, delta)
            .hadamard(self.activation.differentiate(self._pre_activations(), computed))
            .add(_l2_penalty(self._parameter().w, self.alpha, computed.n))
        )
        return self._apply(errors, optimizer, cost=delta.sum())

    def __repr__(self) -> str:
        return f"Multiclass(classes={self.classes!r}, alpha={self.alpha})"


class Linear(_Parametric):
    """Single linear neuron producing a continuous output."""

    def __init__(self, alpha: float = 1e-4, cost_function: CostFunction | None = None) -> None:
        if alpha < 0.0:
            raise ValueError(f"L2 regularization parameter must be 0 or greater, {alpha} given")
        super().__init__()
        self.alpha = alpha
        self.cost_function = cost_function if cost_function is not None else LeastSquares()
        self.width = 1

    def init(self, fan_in: int, rng: np.random.Generator | None = None) -> int:
        r = 1.0 / math.sqrt(fan_in)
        self.weights = Parameter(Matrix.uniform(self.width, fan_in, r, _rng(rng)), name="linear")
        return self.width

    def forward(self, input: Matrix) -> Matrix:
        self._input = input
        self._computed = self._parameter().w.multiply(input)
        return self._computed

    def back(self, labels: Sequence[float], optimizer: Optimizer) -> Backward:
        _, computed = self._memo()
        if len(labels) != computed.n:
            raise DimensionMismatch(f"Expected {computed.n} labels, {len(labels)} given")
        expected = Matrix([[float(label) for label in labels]])
        delta = self.cost_function.compute(expected, computed)
        errors = self.cost_function.differentiate(expected, computed, delta).add(
            _l2_penalty(self._parameter().w, self.alpha, computed.n)
        )
        return self._apply(errors, optimizer, cost=delta.sum())

    def __repr__(self) -> str:
        return f"Linear(alpha={self.alpha})"


Output = Union[Multiclass, Linear]
Layer = Union[Placeholder, Dense, Multiclass, Linear]

__all__ = ["Dense", "Layer", "Linear", "Multiclass", "Output", "Placeholder"]
