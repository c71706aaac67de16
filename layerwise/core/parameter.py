"""Trainable parameter container used as the optimizer's state key."""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field

from .matrix import Matrix

_ids = itertools.count()


@dataclass(eq=False)
class Parameter:
    """Mutable owner of one weight matrix.

    Equality and hashing are identity based so two parameters holding equal
    weights never share optimizer state.
    """

    w: Matrix
    name: str = ""
    id: int = field(default_factory=lambda: next(_ids))

    @property
    def shape(self) -> tuple[int, int]:
        return self.w.shape

    def update(self, step: Matrix) -> None:
        self.w = self.w.subtract(step)

    def __repr__(self) -> str:
        return f"Parameter(name={self.name!r}, shape={self.w.shape})"


__all__ = ["Parameter"]
