"""Dense two dimensional matrix primitive backed by NumPy.

NumPy broadcasts mismatched operands silently, so every binary operation here
checks shapes first and raises :class:`DimensionMismatch` instead.
"""

from __future__ import annotations

from typing import Callable, Iterable, List, Sequence, Tuple

import numpy as np


class DimensionMismatch(ValueError):
    """Raised when matrix operands have incompatible shapes."""


class Matrix:
    """Immutable-by-convention M x N matrix of floats."""

    __slots__ = ("_a",)

    def __init__(self, data: Iterable[Sequence[float]] | np.ndarray) -> None:
        a = np.array(data, dtype=np.float64)
        if a.size == 0:
            a = a.reshape(0, 0)
        if a.ndim != 2:
            raise DimensionMismatch(f"Matrix requires 2 dimensions, {a.ndim} given")
        self._a = a

    # ------------------------------------------------------------------
    # Factories

    @classmethod
    def zeros(cls, m: int, n: int) -> "Matrix":
        return cls._wrap(np.zeros((m, n), dtype=np.float64))

    @classmethod
    def ones(cls, m: int, n: int) -> "Matrix":
        return cls._wrap(np.ones((m, n), dtype=np.float64))

    @classmethod
    def from_rows(cls, rows: Iterable[Sequence[float]]) -> "Matrix":
        return cls(list(rows))

    @classmethod
    def uniform(
        cls, m: int, n: int, bound: float, rng: np.random.Generator
    ) -> "Matrix":
        """Return entries drawn independently from ``U(-bound, bound)``."""

        return cls._wrap(rng.uniform(-bound, bound, size=(m, n)))

    @classmethod
    def _wrap(cls, a: np.ndarray) -> "Matrix":
        out = cls.__new__(cls)
        out._a = a
        return out

    # ------------------------------------------------------------------
    # Shape

    @property
    def m(self) -> int:
        return int(self._a.shape[0])

    @property
    def n(self) -> int:
        return int(self._a.shape[1])

    @property
    def shape(self) -> Tuple[int, int]:
        return self.m, self.n

    def row(self, index: int) -> np.ndarray:
        return self._a[index].copy()

    def to_array(self) -> np.ndarray:
        return self._a.copy()

    def as_lists(self) -> List[List[float]]:
        return self._a.tolist()

    def copy(self) -> "Matrix":
        return self._wrap(self._a.copy())

    # ------------------------------------------------------------------
    # Linear algebra

    def multiply(self, other: "Matrix") -> "Matrix":
        if self.n != other.m:
            raise DimensionMismatch(
                f"Cannot multiply {self.m}x{self.n} by {other.m}x{other.n} matrix"
            )
        return self._wrap(self._a @ other._a)

    def transpose(self) -> "Matrix":
        return self._wrap(self._a.T.copy())

    @property
    def T(self) -> "Matrix":
        return self.transpose()

    def hadamard(self, other: "Matrix") -> "Matrix":
        self._require_same_shape(other, "hadamard product")
        return self._wrap(self._a * other._a)

    def add(self, other: "Matrix") -> "Matrix":
        self._require_same_shape(other, "add")
        return self._wrap(self._a + other._a)

    def subtract(self, other: "Matrix") -> "Matrix":
        self._require_same_shape(other, "subtract")
        return self._wrap(self._a - other._a)

    def scalar_multiply(self, scalar: float) -> "Matrix":
        return self._wrap(self._a * float(scalar))

    def scalar_add(self, scalar: float) -> "Matrix":
        return self._wrap(self._a + float(scalar))

    def map(self, fn: Callable[[np.ndarray], np.ndarray]) -> "Matrix":
        """Apply a vectorised elementwise function, keeping the shape."""

        out = np.asarray(fn(self._a), dtype=np.float64)
        if out.shape != self._a.shape:
            raise DimensionMismatch(
                f"Elementwise function changed shape {self._a.shape} to {out.shape}"
            )
        return self._wrap(out)

    def row_exclude(self, index: int) -> "Matrix":
        if not -self.m <= index < self.m:
            raise DimensionMismatch(f"Row {index} out of range for {self.m} rows")
        return self._wrap(np.delete(self._a, index, axis=0))

    def augment_below(self, other: "Matrix") -> "Matrix":
        if self.m and other.m and self.n != other.n:
            raise DimensionMismatch(
                f"Cannot stack {other.m}x{other.n} below {self.m}x{self.n} matrix"
            )
        if not self.m:
            return other.copy()
        if not other.m:
            return self.copy()
        return self._wrap(np.vstack([self._a, other._a]))

    def max_norm(self) -> float:
        """Return the largest absolute entry (0.0 for an empty matrix)."""

        if self._a.size == 0:
            return 0.0
        return float(np.max(np.abs(self._a)))

    def sum(self) -> float:
        return float(np.sum(self._a))

    # ------------------------------------------------------------------
    # Helpers

    def _require_same_shape(self, other: "Matrix", op: str) -> None:
        if self.shape != other.shape:
            raise DimensionMismatch(
                f"Cannot {op} {self.m}x{self.n} and {other.m}x{other.n} matrices"
            )

    def __array__(self, dtype=None, copy=None):
        return self._a.astype(dtype) if dtype is not None else self._a.copy()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.shape == other.shape and bool(np.array_equal(self._a, other._a))

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Matrix({self.m}x{self.n})"


__all__ = ["DimensionMismatch", "Matrix"]
