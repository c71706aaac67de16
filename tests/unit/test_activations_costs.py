import numpy as np
import pytest

from layerwise.core import activations
from layerwise.core.costs import REGISTRY, CrossEntropy, Huber, LeastSquares
from layerwise.core.matrix import Matrix

EXPECTED = Matrix([[36.0], [22.0], [18.0], [41.5], [38.0]])
ACTIVATION = Matrix([[33.98], [20.0], [4.6], [44.2], [38.5]])


def test_least_squares_values():
    cost = LeastSquares()
    delta = cost.compute(EXPECTED, ACTIVATION)
    np.testing.assert_allclose(
        np.asarray(delta).ravel(), [2.0402, 2.0, 89.78, 3.645, 0.125], rtol=1e-9
    )
    gradient = cost.differentiate(EXPECTED, ACTIVATION, delta)
    np.testing.assert_allclose(
        np.asarray(gradient).ravel(), [-2.02, -2.0, -13.4, 2.7, 0.5], atol=1e-9
    )


def test_huber_is_linear_beyond_delta():
    cost = Huber(1.0)
    delta = np.asarray(cost.compute(EXPECTED, ACTIVATION)).ravel()
    assert delta[0] == pytest.approx(0.5 + 1.02)
    assert delta[4] == pytest.approx(0.125)
    gradient = np.asarray(cost.differentiate(EXPECTED, ACTIVATION, Matrix(delta[:, None]))).ravel()
    np.testing.assert_allclose(gradient, [-1.0, -1.0, -1.0, 1.0, 0.5])
    with pytest.raises(ValueError):
        Huber(0.0)


def test_cross_entropy_values():
    cost = CrossEntropy()
    expected = Matrix([[1.0], [0.0]])
    activation = Matrix([[0.8], [0.2]])
    delta = cost.compute(expected, activation)
    assert delta.sum() == pytest.approx(-np.log(0.8), rel=1e-6)
    gradient = np.asarray(cost.differentiate(expected, activation, delta)).ravel()
    np.testing.assert_allclose(gradient, [-1.25, 1.25], rtol=1e-6)


def test_cost_registry_resolves_auto_by_task():
    assert isinstance(REGISTRY.resolve("auto", task_type="classification"), CrossEntropy)
    assert isinstance(REGISTRY.resolve("auto", task_type="regression"), LeastSquares)
    with pytest.raises(KeyError, match="Available cost functions"):
        REGISTRY.resolve("hinge", task_type="classification")


def test_softmax_columns_sum_to_one():
    z = Matrix([[1.0, -3.0, 1000.0], [2.0, 0.0, 1000.0], [0.5, 4.0, -1000.0]])
    a = activations.Softmax().compute(z)
    np.testing.assert_allclose(np.asarray(a).sum(axis=0), [1.0, 1.0, 1.0])
    assert np.all(np.isfinite(np.asarray(a)))


@pytest.mark.parametrize("name", ["tanh", "sigmoid", "softsign", "relu", "leaky_relu", "elu", "selu"])
def test_registered_activations_keep_shape(name):
    fn = activations.get(name)
    z = Matrix([[-2.0, -0.5, 0.0], [0.5, 1.0, 3.0]])
    a = fn.compute(z)
    assert a.shape == z.shape
    assert fn.differentiate(z, a).shape == z.shape
    assert fn.family in {activations.SATURATING, activations.RECTIFIED}


def test_activation_options_and_unknown_names():
    leaky = activations.get("leaky_relu", leakage=0.1)
    out = leaky.compute(Matrix([[-10.0, 2.0]]))
    assert out == Matrix([[-1.0, 2.0]])
    with pytest.raises(ValueError):
        activations.LeakyReLU(1.5)
    with pytest.raises(KeyError, match="Available activations"):
        activations.get("swish")
