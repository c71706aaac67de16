"""Generic CSV loader for classification and regression tables."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd

from .dataset import Labeled
from .registry import DatasetSpec, register_dataset
from .utils import standardize


def load_csv(
    path: str | Path,
    target_col: str,
    *,
    task_type: str = "classification",
    one_hot: bool = False,
    standardize_inputs: bool = False,
) -> tuple[Labeled, dict]:
    """Read ``path`` into a :class:`Labeled` dataset.

    Non numeric columns are kept as strings unless ``one_hot`` expands them
    into indicator columns. Returns the dataset and a normalization record.
    """

    df = pd.read_csv(path)
    if target_col not in df.columns:
        raise KeyError(f"Target column {target_col!r} not found in CSV")
    target = df.pop(target_col)
    if one_hot:
        df = pd.get_dummies(df, dtype=np.float64)

    normalization: dict[str, dict[str, list[float]]] = {}
    numeric = df.select_dtypes(include="number").columns
    if standardize_inputs and len(numeric):
        scaled, mean, std = standardize(df[numeric].to_numpy(dtype=np.float64))
        df[numeric] = scaled
        normalization["inputs"] = {
            "mean": mean.flatten().tolist(),
            "std": std.flatten().tolist(),
        }

    samples = df.astype(object).to_numpy().tolist()
    if task_type == "regression":
        labels = target.astype(np.float64).tolist()
    else:
        labels = target.astype(str).tolist()
    return Labeled(samples, labels), normalization


@register_dataset("csv")
def _csv(
    *,
    csv_path: str | Path,
    target_col: str = "target",
    task_type: str = "classification",
    one_hot: bool = False,
    standardize_inputs: bool = False,
    **_: object,
) -> DatasetSpec:
    dataset, normalization = load_csv(
        csv_path,
        target_col,
        task_type=task_type,
        one_hot=one_hot,
        standardize_inputs=standardize_inputs,
    )
    return DatasetSpec(
        name="csv",
        dataset=dataset,
        task_type=task_type,
        provenance={
            "path": str(csv_path),
            "target_col": target_col,
            "one_hot": one_hot,
            "standardize_inputs": standardize_inputs,
            "normalization": normalization,
        },
    )


__all__ = ["load_csv"]
