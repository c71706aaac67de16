"""Datasets, splitting helpers and the dataset registry."""

# Ensure built-in datasets register themselves when the package is imported.
from . import csv_generic as _csv_generic  # noqa: F401
from . import synthetic as _synthetic  # noqa: F401
from . import toy as _toy  # noqa: F401
from .dataset import Dataset, Labeled, Unlabeled
from .registry import DatasetSpec, available_datasets, get_dataset, register_dataset

__all__ = [
    "Dataset",
    "DatasetSpec",
    "Labeled",
    "Unlabeled",
    "available_datasets",
    "get_dataset",
    "register_dataset",
]
