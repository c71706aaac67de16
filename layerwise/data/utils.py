"""Utility helpers for datasets and loaders."""

from __future__ import annotations

from typing import Any, List, Sequence, Tuple

import numpy as np


def _check_ratio(ratio: float) -> None:
    if not 0.0 <= ratio <= 1.0:
        raise ValueError(f"Split ratio must be in [0, 1], {ratio} given")


def random_indices(
    n_samples: int, ratio: float, *, rng: np.random.Generator | None = None
) -> Tuple[List[int], List[int]]:
    """Return ``(left, right)`` index lists with ``round(ratio * n)`` rows on the left.

    Without ``rng`` the original order is kept.
    """

    _check_ratio(ratio)
    order = np.arange(n_samples) if rng is None else rng.permutation(n_samples)
    n_left = min(int(round(ratio * n_samples)), n_samples)
    return order[:n_left].tolist(), order[n_left:].tolist()


def stratified_indices(
    labels: Sequence[Any], ratio: float, *, rng: np.random.Generator | None = None
) -> Tuple[List[int], List[int]]:
    """Split every label group by ``ratio`` so both sides keep the class proportions."""

    _check_ratio(ratio)
    groups: dict[Any, List[int]] = {}
    for index, label in enumerate(labels):
        groups.setdefault(label, []).append(index)

    left: List[int] = []
    right: List[int] = []
    for indices in groups.values():
        if rng is not None:
            indices = rng.permutation(indices).tolist()
        n_left = int(round(ratio * len(indices)))
        left.extend(indices[:n_left])
        right.extend(indices[n_left:])
    return left, right


def standardize(
    array: np.ndarray,
    *,
    mean: np.ndarray | None = None,
    std: np.ndarray | None = None,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Apply standard scaling returning the scaled array and parameters."""

    if mean is None or std is None:
        mean = array.mean(axis=0, keepdims=True)
        std = array.std(axis=0, keepdims=True)
        std = np.where(std == 0, 1.0, std)
    scaled = (array - mean) / std
    return scaled.astype(np.float64), mean.astype(np.float64), std.astype(np.float64)


__all__ = ["random_indices", "standardize", "stratified_indices"]
