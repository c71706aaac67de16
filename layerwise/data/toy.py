"""Small reference datasets bundled with scikit-learn (no download needed)."""

from __future__ import annotations

from sklearn.datasets import load_diabetes, load_iris, load_wine

from .dataset import Labeled
from .registry import DatasetSpec, register_dataset
from .utils import standardize


def _bunch_to_labeled(bunch, *, standardize_inputs: bool, regression: bool) -> Labeled:
    X = bunch.data
    if standardize_inputs:
        X, _, _ = standardize(X)
    if regression:
        labels = [float(y) for y in bunch.target]
    else:
        labels = [str(bunch.target_names[i]) for i in bunch.target]
    return Labeled(X.tolist(), labels)


@register_dataset("iris")
def _iris(standardize_inputs: bool = True, **_: object) -> DatasetSpec:
    bunch = load_iris()
    return DatasetSpec(
        name="iris",
        dataset=_bunch_to_labeled(bunch, standardize_inputs=standardize_inputs, regression=False),
        task_type="classification",
        provenance={"source": "sklearn.datasets.load_iris", "standardize_inputs": standardize_inputs},
    )


@register_dataset("wine")
def _wine(standardize_inputs: bool = True, **_: object) -> DatasetSpec:
    bunch = load_wine()
    return DatasetSpec(
        name="wine",
        dataset=_bunch_to_labeled(bunch, standardize_inputs=standardize_inputs, regression=False),
        task_type="classification",
        provenance={"source": "sklearn.datasets.load_wine", "standardize_inputs": standardize_inputs},
    )


@register_dataset("diabetes")
def _diabetes(standardize_inputs: bool = True, **_: object) -> DatasetSpec:
    bunch = load_diabetes()
    return DatasetSpec(
        name="diabetes",
        dataset=_bunch_to_labeled(bunch, standardize_inputs=standardize_inputs, regression=True),
        task_type="regression",
        provenance={"source": "sklearn.datasets.load_diabetes", "standardize_inputs": standardize_inputs},
    )


__all__: list[str] = []
