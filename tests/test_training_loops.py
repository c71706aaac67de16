import numpy as np

import layerwise
from layerwise.core.activations import HyperbolicTangent
from layerwise.core.layers import Dense
from layerwise.core.optimizers import Adam, Momentum
from layerwise.data import get_dataset
from layerwise.training import F1Score, MultiLayerPerceptron
from layerwise.training import pipelines


def test_moons_classifier_beats_chance():
    dataset = get_dataset("moons", n_samples=200, noise=0.1, seed=0).dataset
    estimator = MultiLayerPerceptron(
        [Dense(16, HyperbolicTangent()), Dense(8, HyperbolicTangent())],
        batch_size=20,
        optimizer=Adam(0.01),
        metric=F1Score(),
        holdout=0.2,
        window=15,
        min_change=1e-9,
        epochs=150,
        seed=1,
    )
    estimator.train(dataset)
    assert max(estimator.scores) > 0.8
    assert estimator.network.depth == 4


def test_momentum_training_reduces_cost():
    dataset = get_dataset("moons", n_samples=160, noise=0.2, seed=3).dataset
    estimator = MultiLayerPerceptron(
        [Dense(6)],
        batch_size=8,
        optimizer=Momentum(rate=0.01),
        holdout=0.5,
        window=50,
        min_change=0.0,
        epochs=20,
        seed=3,
    )
    estimator.train(dataset)
    steps = estimator.steps
    assert np.isfinite(steps).all()
    assert steps[-1] < steps[0]


def test_public_api_exports():
    assert layerwise.MultiLayerPerceptron is MultiLayerPerceptron
    assert "blobs-mlp" in layerwise.presets()
    assert callable(layerwise.run_pipeline)


def test_file_presets_are_merged_with_builtins():
    available = pipelines.presets()
    if pipelines._PRESET_DIR.exists():
        assert available["wine-mlp"]["train"]["metric"] == "mcc"
    assert {"blobs-mlp", "iris-mlp", "regression-mlp"} <= set(available)
