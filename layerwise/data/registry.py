"""Dataset registry and metadata contracts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, MutableMapping

from .dataset import Labeled

TASK_TYPES = ("classification", "regression")


@dataclass(frozen=True)
class DatasetSpec:
    """A registered dataset together with its provenance.

    Attributes
    ----------
    name:
        Registry identifier.
    dataset:
        The labeled samples.
    task_type:
        ``"classification"`` or ``"regression"``.
    provenance:
        Free-form description of how the data was produced so runs can be
        reproduced from their manifest.
    """

    name: str
    dataset: Labeled
    task_type: str
    provenance: Dict[str, Any] = field(default_factory=dict)

    @property
    def num_features(self) -> int:
        return self.dataset.num_columns


DatasetFactory = Callable[..., DatasetSpec]


_REGISTRY: MutableMapping[str, DatasetFactory] = {}


def register_dataset(
    name: str | None = None,
    factory: DatasetFactory | None = None,
) -> Callable[[DatasetFactory], DatasetFactory] | DatasetFactory:
    """Register a dataset factory.

    ``register_dataset`` can be used both as a decorator::

        @register_dataset("blobs")
        def make_blobs(**kwargs):
            ...

    or directly::

        register_dataset("blobs", make_blobs)
    """

    def _decorator(func: DatasetFactory) -> DatasetFactory:
        _REGISTRY[str(name or func.__name__)] = func
        return func

    if factory is not None:
        return _decorator(factory)
    if name is None:
        raise TypeError("register_dataset requires a name when used without a decorator")
    return _decorator


def get_dataset(dataset: str, /, **options: Any) -> DatasetSpec:
    """Build the :class:`DatasetSpec` registered under ``dataset``."""

    if dataset not in _REGISTRY:
        available = ", ".join(sorted(_REGISTRY))
        raise KeyError(f"Unknown dataset {dataset!r}. Available datasets: {available}")

    spec = _REGISTRY[dataset](**options)
    _validate_spec(spec)
    return spec


def available_datasets() -> Iterable[str]:
    """Return the sorted list of available dataset identifiers."""

    return sorted(_REGISTRY)


def _validate_spec(spec: DatasetSpec) -> None:
    if spec.task_type not in TASK_TYPES:
        raise ValueError(f"Invalid task type: {spec.task_type}")
    if spec.dataset.num_rows == 0:
        raise ValueError(f"Dataset {spec.name!r} is empty")
    if spec.task_type == "classification" and len(spec.dataset.possible_outcomes()) < 2:
        raise ValueError(f"Classification dataset {spec.name!r} needs at least 2 classes")


__all__ = [
    "DatasetSpec",
    "TASK_TYPES",
    "available_datasets",
    "get_dataset",
    "register_dataset",
]
