import pytest

from layerwise.core import optimizers
from layerwise.core.matrix import Matrix
from layerwise.core.optimizers import Adam, Momentum, Stochastic
from layerwise.core.parameter import Parameter


def test_adam_first_step():
    optimizer = Adam(rate=0.001)
    parameter = Parameter(Matrix([[0.5]]))
    step = optimizer.step(parameter, Matrix([[1.0]]))
    # velocity 0.1, cache 0.001 after one step from zero state
    assert step.to_array()[0, 0] == pytest.approx(0.001 * 0.1 / (0.001**0.5 + 1e-8))
    velocity, cache = optimizer.state_for(parameter)
    assert velocity.to_array()[0, 0] == pytest.approx(0.1)
    assert cache.to_array()[0, 0] == pytest.approx(0.001)

    parameter.update(step)
    assert parameter.w.to_array()[0, 0] == pytest.approx(0.5 - 0.0031622766, abs=1e-9)


def test_state_is_keyed_by_parameter_identity():
    optimizer = Momentum(rate=0.1, decay=0.9)
    first = Parameter(Matrix([[1.0]]))
    twin = Parameter(Matrix([[1.0]]))
    gradient = Matrix([[1.0]])

    optimizer.step(first, gradient)
    second = optimizer.step(first, gradient)
    twin_step = optimizer.step(twin, gradient)

    assert second.to_array()[0, 0] == pytest.approx(0.19)
    assert twin_step.to_array()[0, 0] == pytest.approx(0.1)


def test_reset_forgets_state():
    optimizer = Adam()
    parameter = Parameter(Matrix.ones(2, 2))
    optimizer.step(parameter, Matrix.ones(2, 2))
    assert optimizer.state_for(parameter) is not None
    optimizer.reset()
    assert optimizer.state_for(parameter) is None


def test_stochastic_scales_gradient():
    step = Stochastic(rate=0.1).step(Parameter(Matrix.zeros(1, 2)), Matrix([[2.0, -4.0]]))
    assert step.to_array().tolist() == pytest.approx([[0.2, -0.4]])


@pytest.mark.parametrize(
    "kwargs",
    [{"rate": 0.0}, {"momentum_decay": 1.5}, {"rms_decay": -0.1}, {"epsilon": 0.0}],
)
def test_adam_rejects_invalid_options(kwargs):
    with pytest.raises(ValueError):
        Adam(**kwargs)


def test_build_from_config():
    assert isinstance(optimizers.build("adam"), Adam)
    momentum = optimizers.build({"name": "momentum", "rate": 0.05})
    assert isinstance(momentum, Momentum)
    assert momentum.rate == 0.05
    with pytest.raises(KeyError, match="Available optimizers"):
        optimizers.build("rmsprop")
