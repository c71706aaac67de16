import numpy as np
import pytest

from layerwise.core.activations import HyperbolicTangent, ReLU
from layerwise.core.layers import Dense, Linear, Multiclass, Placeholder
from layerwise.core.matrix import DimensionMismatch, Matrix
from layerwise.core.network import FeedForward, Snapshot
from layerwise.core.optimizers import Adam, Stochastic


def _network(seed=0):
    return FeedForward(
        Placeholder(2),
        [Dense(3, HyperbolicTangent())],
        Multiclass(["a", "b"], alpha=0.0),
        Adam(0.01),
        rng=np.random.default_rng(seed),
    )


def test_placeholder_appends_bias_row():
    layer = Placeholder(3)
    out = layer.forward(Matrix(np.arange(6, dtype=float).reshape(3, 2)))
    assert out.shape == (4, 2)
    np.testing.assert_array_equal(out.row(-1), [1.0, 1.0])
    with pytest.raises(DimensionMismatch):
        layer.forward(Matrix.ones(2, 2))
    with pytest.raises(ValueError):
        Placeholder(0)


def test_dense_init_ranges_follow_activation_family():
    rng = np.random.default_rng(1)
    rectified = Dense(5, ReLU())
    assert rectified.init(4, rng) == 6
    assert rectified.shape == (6, 4)
    assert rectified.weights.w.max_norm() <= np.sqrt(6.0 / 4)

    saturating = Dense(5, HyperbolicTangent())
    saturating.init(4, rng)
    assert saturating.weights.w.max_norm() <= np.sqrt(6.0 / (4 + 6))


def test_reinit_replaces_parameter():
    layer = Dense(2)
    layer.init(3, np.random.default_rng(0))
    before = layer.weights
    layer.init(3, np.random.default_rng(1))
    assert layer.weights is not before
    with pytest.raises(RuntimeError):
        Dense(2).shape


def test_reinit_with_new_fan_in_resizes_weights():
    layer = Dense(2)
    layer.init(3, np.random.default_rng(0))
    assert layer.shape == (3, 3)
    layer.init(7, np.random.default_rng(0))
    assert layer.shape == (3, 7)
    assert layer.fan_in == 7


def test_backward_before_forward_raises():
    layer = Dense(2)
    layer.init(3, np.random.default_rng(0))
    with pytest.raises(RuntimeError):
        layer.back(Matrix.ones(2, 3), Matrix.ones(2, 1), Stochastic())
    output = Multiclass(["A", "B"])
    output.init(3, np.random.default_rng(0))
    with pytest.raises(RuntimeError):
        output.back(["A"], Stochastic())


def test_dense_forward_keeps_bias_row():
    layer = Dense(3)
    layer.init(2, np.random.default_rng(0))
    out = layer.forward(Matrix([[0.5, -1.0], [1.0, 1.0]]))
    assert out.shape == (4, 2)
    np.testing.assert_array_equal(out.row(-1), [1.0, 1.0])


def test_output_layers_validate_options():
    with pytest.raises(ValueError):
        Multiclass(["only"])
    with pytest.raises(ValueError):
        Linear(alpha=-1.0)
    with pytest.raises(ValueError):
        Dense(0)


def test_infer_returns_row_per_sample_probabilities():
    network = _network()
    out = network.infer([[0.1, 0.2], [1.0, -1.0], [3.0, 2.0], [0.0, 0.0]])
    assert out.shape == (4, 2)
    np.testing.assert_allclose(out.sum(axis=1), np.ones(4))
    assert network.infer([]).shape == (0, 2)
    assert network.parameter_count() == 4 * 3 + 2 * 4
    assert network.depth == 3


def test_backpropagate_never_moves_dense_bias_row():
    network = _network()
    hidden = network.hidden[0]
    bias_before = hidden.weights.w.row(-1)
    weights_before = hidden.weights.w.copy()

    cost = network.feed([[0.1, 0.2], [1.0, -1.0]]).backpropagate(["a", "b"])

    assert cost > 0.0
    np.testing.assert_array_equal(hidden.weights.w.row(-1), bias_before)
    assert hidden.weights.w != weights_before


def test_backpropagate_rejects_label_count_mismatch():
    network = _network()
    network.feed([[0.1, 0.2], [1.0, -1.0]])
    with pytest.raises(DimensionMismatch):
        network.backpropagate(["a"])


def test_snapshot_round_trip_is_a_value_copy():
    network = _network()
    snapshot = Snapshot.take(network)
    saved = [state["weights"].copy() for state in snapshot.states]

    for _ in range(5):
        network.feed([[0.1, 0.2], [1.0, -1.0]]).backpropagate(["a", "b"])
    assert network.output.weights.w != saved[-1]
    assert snapshot.states[-1]["weights"] == saved[-1]

    network.restore(snapshot)
    for layer, weights in zip(network.parametric, saved):
        assert layer.weights.w == weights


def test_restore_rejects_other_topologies():
    snapshot = _network().read()
    other = FeedForward(Placeholder(2), [Dense(4)], Multiclass(["a", "b"]), Adam())
    with pytest.raises(ValueError):
        other.restore(snapshot)


def test_linear_network_fits_a_line():
    network = FeedForward(
        Placeholder(1), [], Linear(alpha=0.0), Stochastic(0.05), rng=np.random.default_rng(3)
    )
    samples = [[0.0], [1.0], [2.0], [3.0]]
    labels = [1.0, 3.0, 5.0, 7.0]
    for _ in range(1000):
        network.feed(samples).backpropagate(labels)
    np.testing.assert_allclose(network.infer([[4.0]]).ravel(), [9.0], atol=1e-3)


def test_backward_reports_pre_update_weights_and_step_norm():
    layer = Linear(alpha=0.0)
    layer.init(2, np.random.default_rng(0))
    before = layer.weights.w.copy()
    layer.forward(Matrix([[1.0, 2.0], [1.0, 1.0]]))

    result = layer.back([0.0, 0.0], Stochastic(0.1))

    assert result.weights == before
    assert layer.weights.w != before
    assert result.step_norm == pytest.approx(np.abs(np.asarray(before.subtract(layer.weights.w))).max())
    assert result.cost >= 0.0
