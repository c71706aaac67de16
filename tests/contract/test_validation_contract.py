import pytest

from layerwise.backends import Serial, ThreadPool
from layerwise.core.layers import Dense
from layerwise.core.optimizers import Adam
from layerwise.data.synthetic import make_blobs
from layerwise.training.metrics import Accuracy
from layerwise.training.trainer import MultiLayerPerceptron
from layerwise.training.validation import HoldOut, KFold


def _estimator():
    return MultiLayerPerceptron(
        [Dense(4)], batch_size=10, optimizer=Adam(0.01), epochs=10, window=10, seed=0
    )


@pytest.mark.parametrize("backend", [Serial(), ThreadPool(3)])
def test_kfold_scores_every_fold(backend):
    dataset = make_blobs(n_per_class=15, seed=2)
    validator = KFold(3, backend=backend, seed=0)
    estimator = _estimator()

    score = validator.test(estimator, dataset, Accuracy())

    assert len(validator.scores) == 3
    assert all(0.0 <= s <= 1.0 for s in validator.scores)
    assert score == pytest.approx(sum(validator.scores) / 3)
    assert estimator.network is None


def test_kfold_clones_do_not_fire_caller_callbacks():
    received = []
    estimator = _estimator()
    estimator.callbacks = [lambda epoch, metrics: received.append(epoch)]
    validator = KFold(3, backend=ThreadPool(3), seed=0)

    validator.test(estimator, make_blobs(n_per_class=15, seed=2), Accuracy())

    assert len(validator.scores) == 3
    assert received == []
    assert estimator.clone().callbacks == []


def test_holdout_trains_the_given_estimator():
    estimator = _estimator()
    score = HoldOut(0.3, stratify=True, seed=0).test(estimator, make_blobs(n_per_class=20), Accuracy())
    assert 0.0 <= score <= 1.0
    assert estimator.network is not None


def test_validator_options():
    with pytest.raises(ValueError):
        HoldOut(0.0)
    with pytest.raises(ValueError):
        KFold(1)
    with pytest.raises(ValueError):
        HoldOut(1.0).test(_estimator(), make_blobs(n_per_class=5), Accuracy())
