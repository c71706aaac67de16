"""In-memory tabular datasets consumed by the estimators."""

from __future__ import annotations

from numbers import Real
from typing import Any, Iterator, List, Sequence, Tuple

import numpy as np

from ..core.types import CATEGORICAL, CONTINUOUS
from .utils import random_indices, stratified_indices


def _is_continuous(value: Any) -> bool:
    return isinstance(value, (Real, np.number)) and not isinstance(value, (bool, np.bool_))


class Unlabeled:
    """A table of samples, one row per sample."""

    def __init__(self, samples: Sequence[Sequence[Any]] | np.ndarray) -> None:
        rows = [list(row) for row in samples]
        if rows:
            width = len(rows[0])
            for offset, row in enumerate(rows):
                if len(row) != width:
                    raise ValueError(
                        f"Row {offset} has {len(row)} columns, expected {width}"
                    )
        self._samples = rows

    @property
    def samples(self) -> List[List[Any]]:
        return [list(row) for row in self._samples]

    @property
    def num_rows(self) -> int:
        return len(self._samples)

    @property
    def num_columns(self) -> int:
        return len(self._samples[0]) if self._samples else 0

    def __len__(self) -> int:
        return self.num_rows

    def column_types(self) -> List[str]:
        if not self._samples:
            return []
        return [
            CONTINUOUS if all(_is_continuous(row[c]) for row in self._samples) else CATEGORICAL
            for c in range(self.num_columns)
        ]

    def to_array(self) -> np.ndarray:
        """Return the samples as a float array (continuous columns only)."""

        return np.asarray(self._samples, dtype=np.float64).reshape(self.num_rows, self.num_columns)

    def take(self, indices: Sequence[int]) -> "Unlabeled":
        return Unlabeled([self._samples[i] for i in indices])

    def head(self, n: int = 10) -> "Unlabeled":
        return self.take(range(min(n, self.num_rows)))

    def randomize(self, rng: np.random.Generator | None = None) -> "Unlabeled":
        rng = rng if rng is not None else np.random.default_rng()
        return self.take(rng.permutation(self.num_rows).tolist())

    def split(
        self, ratio: float = 0.5, rng: np.random.Generator | None = None
    ) -> Tuple["Unlabeled", "Unlabeled"]:
        left, right = random_indices(self.num_rows, ratio, rng=rng)
        return self.take(left), self.take(right)

    def batch(self, size: int = 50) -> List["Unlabeled"]:
        return [self.take(range(i, min(i + size, self.num_rows))) for i in range(0, self.num_rows, size)]


class Labeled(Unlabeled):
    """Samples with a parallel sequence of labels."""

    def __init__(
        self,
        samples: Sequence[Sequence[Any]] | np.ndarray,
        labels: Sequence[Any] | np.ndarray,
    ) -> None:
        super().__init__(samples)
        labels = list(labels.tolist() if isinstance(labels, np.ndarray) else labels)
        if len(labels) != self.num_rows:
            raise ValueError(
                f"Number of labels ({len(labels)}) must equal the number of samples ({self.num_rows})"
            )
        self._labels = labels

    @property
    def labels(self) -> List[Any]:
        return list(self._labels)

    def possible_outcomes(self) -> List[Any]:
        """Unique labels in first-seen order."""

        return list(dict.fromkeys(self._labels))

    def take(self, indices: Sequence[int]) -> "Labeled":
        indices = list(indices)
        return Labeled([self._samples[i] for i in indices], [self._labels[i] for i in indices])

    def split(
        self, ratio: float = 0.5, rng: np.random.Generator | None = None
    ) -> Tuple["Labeled", "Labeled"]:
        """Return ``(left, right)`` where ``left`` holds ``ratio`` of the rows."""

        left, right = random_indices(self.num_rows, ratio, rng=rng)
        return self.take(left), self.take(right)

    def stratified_split(
        self, ratio: float = 0.5, rng: np.random.Generator | None = None
    ) -> Tuple["Labeled", "Labeled"]:
        """Like :meth:`split` but keeps the label proportions on both sides."""

        left, right = stratified_indices(self._labels, ratio, rng=rng)
        return self.take(left), self.take(right)

    def fold(self, k: int = 5, rng: np.random.Generator | None = None) -> List["Labeled"]:
        """Partition into ``k`` stratified folds of roughly equal size."""

        if k < 2:
            raise ValueError(f"Cannot create less than 2 folds, {k} given")
        if k > self.num_rows:
            raise ValueError(f"Cannot create {k} folds from {self.num_rows} rows")
        folds: List[List[int]] = [[] for _ in range(k)]
        order = (rng if rng is not None else np.random.default_rng()).permutation(self.num_rows)
        by_label: dict[Any, List[int]] = {}
        for index in order.tolist():
            by_label.setdefault(self._labels[index], []).append(index)
        position = 0
        for indices in by_label.values():
            for index in indices:
                folds[position % k].append(index)
                position += 1
        return [self.take(sorted(f)) for f in folds]

    def merge(self, other: "Labeled") -> "Labeled":
        return Labeled(self._samples + other._samples, self._labels + other._labels)

    def __iter__(self) -> Iterator[Tuple[List[Any], Any]]:
        return iter(zip(self.samples, self._labels))


Dataset = Unlabeled

__all__ = ["Dataset", "Labeled", "Unlabeled"]
