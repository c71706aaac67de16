"""Pure in-memory synthetic datasets."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from .dataset import Labeled
from .registry import DatasetSpec, register_dataset

DEFAULT_CENTERS = ((2.0, 2.0), (8.0, 3.0))


def make_blobs(
    centers: Sequence[Sequence[float]] = DEFAULT_CENTERS,
    labels: Sequence[str] | None = None,
    n_per_class: int = 50,
    spread: float = 0.5,
    seed: int = 0,
) -> Labeled:
    """Gaussian clusters, one per center, labeled ``A``, ``B``, ... by default."""

    rng = np.random.default_rng(seed)
    centers_arr = np.asarray(centers, dtype=np.float64)
    if labels is None:
        labels = [chr(ord("A") + i) for i in range(len(centers_arr))]
    if len(labels) != len(centers_arr):
        raise ValueError("Need exactly one label per center")
    samples = []
    targets = []
    for center, label in zip(centers_arr, labels):
        points = center + spread * rng.standard_normal((n_per_class, centers_arr.shape[1]))
        samples.append(points)
        targets.extend([label] * n_per_class)
    X = np.vstack(samples)
    order = rng.permutation(X.shape[0])
    return Labeled(X[order].tolist(), [targets[i] for i in order])


def make_moons(n_samples: int = 200, noise: float = 0.1, seed: int = 0) -> Labeled:
    """Two interleaving half circles labeled ``outer`` and ``inner``."""

    rng = np.random.default_rng(seed)
    n_outer = n_samples // 2
    n_inner = n_samples - n_outer
    outer = np.linspace(0.0, np.pi, n_outer)
    inner = np.linspace(0.0, np.pi, n_inner)
    X = np.vstack(
        [
            np.column_stack([np.cos(outer), np.sin(outer)]),
            np.column_stack([1.0 - np.cos(inner), 0.5 - np.sin(inner)]),
        ]
    )
    X = X + noise * rng.standard_normal(X.shape)
    y = ["outer"] * n_outer + ["inner"] * n_inner
    order = rng.permutation(n_samples)
    return Labeled(X[order].tolist(), [y[i] for i in order])


def make_regression(
    n_samples: int = 200,
    n_features: int = 3,
    noise: float = 0.05,
    seed: int = 0,
) -> Labeled:
    """Linear targets ``X @ w + b`` with Gaussian noise."""

    rng = np.random.default_rng(seed)
    X = rng.uniform(-1.0, 1.0, size=(n_samples, n_features))
    w = rng.uniform(-2.0, 2.0, size=n_features)
    y = X @ w + 0.5 + noise * rng.standard_normal(n_samples)
    return Labeled(X.tolist(), y.tolist())


@register_dataset("blobs")
def _blobs(
    centers: Sequence[Sequence[float]] = DEFAULT_CENTERS,
    n_per_class: int = 50,
    spread: float = 0.5,
    seed: int = 0,
    **_: object,
) -> DatasetSpec:
    return DatasetSpec(
        name="blobs",
        dataset=make_blobs(centers, n_per_class=n_per_class, spread=spread, seed=seed),
        task_type="classification",
        provenance={
            "type": "synthetic",
            "centers": [list(map(float, c)) for c in centers],
            "n_per_class": n_per_class,
            "spread": spread,
            "seed": seed,
        },
    )


@register_dataset("moons")
def _moons(n_samples: int = 200, noise: float = 0.1, seed: int = 0, **_: object) -> DatasetSpec:
    return DatasetSpec(
        name="moons",
        dataset=make_moons(n_samples, noise=noise, seed=seed),
        task_type="classification",
        provenance={"type": "synthetic", "n_samples": n_samples, "noise": noise, "seed": seed},
    )


@register_dataset("regression")
def _regression(
    n_samples: int = 200,
    n_features: int = 3,
    noise: float = 0.05,
    seed: int = 0,
    **_: object,
) -> DatasetSpec:
    return DatasetSpec(
        name="regression",
        dataset=make_regression(n_samples, n_features, noise=noise, seed=seed),
        task_type="regression",
        provenance={
            "type": "synthetic",
            "n_samples": n_samples,
            "n_features": n_features,
            "noise": noise,
            "seed": seed,
        },
    )


__all__ = ["make_blobs", "make_moons", "make_regression"]
