"""Config-driven training runs: dataset, estimator, callbacks and artifacts."""

from __future__ import annotations

import json
import math
import time
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence

from ..backends import build as build_backend
from ..core import activations, optimizers
from ..core.costs import REGISTRY as COSTS
from ..core.layers import Dense
from ..core.types import RunResult
from ..data import registry
from ..reporting.artifacts import write_config, write_manifest
from ..reporting.metrics import CsvSink, JsonlSink
from ..reporting.plots import PlotAdapter
from ..reporting.summary import write_summary
from . import metrics as metric_registry
from .trainer import MLPRegressor, MultiLayerPerceptron
from .validation import HoldOut, KFold

_PRESETS: Dict[str, Mapping[str, object]] = {
    "blobs-mlp": {
        "data": {"name": "blobs", "options": {"n_per_class": 50, "seed": 0}},
        "model": {
            "task": "classification",
            "hidden": [{"neurons": 4, "activation": "leaky_relu"}],
        },
        "train": {
            "epochs": 100,
            "batch_size": 10,
            "optimizer": {"name": "adam", "rate": 0.01},
            "window": 10,
            "min_change": 1e-8,
            "seed": 0,
            "run_dir": "runs/blobs-mlp",
            "enable_plots": False,
        },
    },
    "moons-mlp": {
        "data": {"name": "moons", "options": {"n_samples": 200, "noise": 0.1, "seed": 0}},
        "model": {
            "task": "classification",
            "hidden": [
                {"neurons": 16, "activation": "relu"},
                {"neurons": 8, "activation": "relu"},
            ],
        },
        "train": {
            "epochs": 200,
            "batch_size": 20,
            "optimizer": {"name": "adam", "rate": 0.005},
            "metric": "f1",
            "window": 10,
            "seed": 1,
            "run_dir": "runs/moons-mlp",
            "enable_plots": False,
        },
    },
    "iris-mlp": {
        "data": {"name": "iris", "options": {"standardize_inputs": True}},
        "model": {"task": "classification", "hidden": [10]},
        "train": {
            "epochs": 200,
            "batch_size": 16,
            "optimizer": {"name": "adam", "rate": 0.01},
            "holdout": 0.2,
            "window": 10,
            "seed": 7,
            "run_dir": "runs/iris-mlp",
            "enable_plots": False,
        },
    },
    "regression-mlp": {
        "data": {"name": "regression", "options": {"n_samples": 200, "n_features": 3, "seed": 0}},
        "model": {"task": "regression", "hidden": [{"neurons": 8, "activation": "tanh"}]},
        "train": {
            "epochs": 200,
            "batch_size": 20,
            "optimizer": {"name": "adam", "rate": 0.01},
            "cost": "least_squares",
            "window": 10,
            "seed": 3,
            "run_dir": "runs/regression-mlp",
            "enable_plots": False,
        },
    },
    "blobs-kfold": {
        "data": {"name": "blobs", "options": {"n_per_class": 30, "seed": 2}},
        "model": {"task": "classification", "hidden": [4]},
        "train": {
            "epochs": 30,
            "batch_size": 10,
            "optimizer": {"name": "adam", "rate": 0.01},
            "seed": 2,
            "run_dir": "runs/blobs-kfold",
            "enable_plots": False,
        },
        "validate": {"method": "kfold", "k": 3, "backend": "threads"},
    },
}

_PRESET_DIR = Path(__file__).resolve().parents[2] / "configs" / "presets"
_FILE_PRESETS_CACHE: Dict[str, Mapping[str, object]] | None = None
_REQUIRED = {"data", "model", "train"}


def read_config_file(path: str | Path) -> Mapping[str, object]:
    """Decode a JSON or YAML config file into a mapping."""

    path = Path(path)
    text = path.read_text()
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        try:
            import yaml  # type: ignore
        except ImportError as exc:  # pragma: no cover - optional dependency
            raise RuntimeError("PyYAML is required to load YAML configs") from exc
        data = yaml.safe_load(text) or {}
    elif suffix == ".json":
        data = json.loads(text or "{}")
    else:
        raise ValueError(f"Unsupported config file type: {path.suffix}")

    if not isinstance(data, Mapping):
        raise TypeError(f"Config {path.name} must decode to a mapping")
    return data


def _file_presets() -> Dict[str, Mapping[str, object]]:
    global _FILE_PRESETS_CACHE
    if _FILE_PRESETS_CACHE is None:
        found: Dict[str, Mapping[str, object]] = {}
        if _PRESET_DIR.exists():
            for file in sorted(_PRESET_DIR.iterdir()):
                if file.suffix.lower() not in {".yaml", ".yml", ".json"}:
                    continue
                data = read_config_file(file)
                missing = _REQUIRED - set(data)
                if missing:
                    raise KeyError(
                        f"Preset {file.name} is missing required sections: {', '.join(sorted(missing))}"
                    )
                found[file.stem] = json.loads(json.dumps(data))
        _FILE_PRESETS_CACHE = found
    return {name: deepcopy(cfg) for name, cfg in _FILE_PRESETS_CACHE.items()}


def presets() -> Mapping[str, Mapping[str, object]]:
    combined: Dict[str, Mapping[str, object]] = {name: deepcopy(cfg) for name, cfg in _PRESETS.items()}
    combined.update(_file_presets())
    return combined


def load_preset(name: str) -> Mapping[str, object]:
    available = presets()
    if name not in available:
        raise KeyError(f"Unknown preset {name!r}. Available presets: {', '.join(sorted(available))}")
    return available[name]


# ----------------------------------------------------------------------
# Builders


def build_hidden(entries: Sequence[object]) -> List[Dense]:
    """Turn ``[8, {"neurons": 4, "activation": "tanh"}]`` into Dense layers."""

    layers = []
    for entry in entries:
        if isinstance(entry, Mapping):
            activation = entry.get("activation", "relu")
            if isinstance(activation, Mapping):
                options = dict(activation)
                function = activations.get(str(options.pop("name")), **options)
            else:
                function = activations.get(str(activation))
            layers.append(Dense(int(entry["neurons"]), function))
        else:
            layers.append(Dense(int(entry), activations.get("relu")))
    return layers


def build_estimator(
    model_cfg: Mapping[str, Any],
    train_cfg: Mapping[str, Any],
    task_type: str,
    callbacks: Sequence[object] = (),
) -> MultiLayerPerceptron | MLPRegressor:
    task = str(model_cfg.get("task", task_type))
    if task != task_type:
        raise ValueError(f"Model task {task!r} does not match the {task_type} dataset")

    metric = None
    if "metric" in train_cfg:
        metric = metric_registry.get(str(train_cfg["metric"]))
        if not metric_registry.compatible(metric, task):
            raise ValueError(f"Metric {metric.name!r} cannot score a {task} estimator")

    options: Dict[str, Any] = {
        "batch_size": int(train_cfg.get("batch_size", 50)),
        "optimizer": optimizers.build(train_cfg.get("optimizer", "adam")),
        "alpha": float(train_cfg.get("alpha", 1e-4)),
        "cost_function": COSTS.resolve(str(train_cfg.get("cost", "auto")), task_type=task),
        "min_change": float(train_cfg.get("min_change", 1e-4)),
        "metric": metric,
        "holdout": float(train_cfg.get("holdout", 0.1)),
        "window": int(train_cfg.get("window", 3)),
        "epochs": int(train_cfg.get("epochs", 1000)),
        "seed": train_cfg.get("seed"),
        "callbacks": list(callbacks),
    }
    hidden = build_hidden(model_cfg.get("hidden", []))
    if task == "classification":
        return MultiLayerPerceptron(hidden, **options)
    if task == "regression":
        return MLPRegressor(hidden, **options)
    raise ValueError(f"Unknown task type: {task}")


def build_validator(validate_cfg: Mapping[str, Any], seed: int | None) -> HoldOut | KFold:
    method = str(validate_cfg.get("method", "holdout"))
    if method == "holdout":
        return HoldOut(
            float(validate_cfg.get("ratio", 0.2)),
            stratify=bool(validate_cfg.get("stratify", False)),
            seed=seed,
        )
    if method == "kfold":
        backend = build_backend(
            str(validate_cfg.get("backend", "serial")), validate_cfg.get("workers")
        )
        return KFold(int(validate_cfg.get("k", 5)), backend=backend, seed=seed)
    raise ValueError(f"Unknown validation method: {method}")


# ----------------------------------------------------------------------
# Runs


def run_pipeline(config: Mapping[str, object]) -> RunResult:
    missing = _REQUIRED - set(config)
    if missing:
        raise KeyError(f"Config is missing required sections: {', '.join(sorted(missing))}")

    data_cfg = dict(config["data"])  # type: ignore[arg-type]
    model_cfg = dict(config["model"])  # type: ignore[arg-type]
    train_cfg = dict(config["train"])  # type: ignore[arg-type]
    validate_cfg = config.get("validate")

    spec = registry.get_dataset(str(data_cfg["name"]), **dict(data_cfg.get("options", {})))
    seed = train_cfg.get("seed")

    run_dir = _resolve_run_dir(train_cfg, spec.name, spec.task_type)
    run_dir.mkdir(parents=True, exist_ok=True)

    train_jsonl = JsonlSink(run_dir / "metrics_train.jsonl", split="train", seed=seed)
    train_csv = CsvSink(run_dir / "metrics_train.csv", split="train")
    plots = PlotAdapter(run_dir, enable_plots=bool(train_cfg.get("enable_plots", False)))

    estimator = build_estimator(
        model_cfg, train_cfg, spec.task_type, callbacks=[train_jsonl, train_csv, plots]
    )

    _print_startup_summary(
        dataset_name=spec.name,
        task_type=spec.task_type,
        rows=spec.dataset.num_rows,
        features=spec.num_features,
        hidden=[repr(layer) for layer in estimator.hidden],
        optimizer=repr(estimator.optimizer),
        cost=type(estimator.cost_function).__name__,
        metric=estimator.metric.name,
    )

    estimator.train(spec.dataset)
    plots.close()

    validation_score = math.nan
    if validate_cfg:
        validator = build_validator(dict(validate_cfg), seed)  # type: ignore[arg-type]
        validation_score = validator.test(estimator.clone(), spec.dataset, estimator.metric)

    resolved = _safe_config(config)
    manifest = write_manifest(
        run_dir / "manifest.json",
        config=resolved,
        dataset_provenance=spec.provenance,
        estimator={
            **estimator.params(),
            "parameters": estimator.network.parameter_count() if estimator.network else 0,
        },
    )
    summary_path = write_summary(
        train_jsonl.path, run_dir / "summary.json", tail=int(train_cfg.get("summary_tail", 32))
    )
    write_config(run_dir / "config.json", resolved)

    scores = estimator.scores
    return RunResult(
        epochs=len(estimator.steps),
        metrics_path=str(train_jsonl.path),
        manifest_path=manifest,
        summary_path=summary_path,
        best_score=max(scores) if scores else math.nan,
        validation_score=validation_score,
    )


def _resolve_run_dir(train_cfg: Mapping[str, object], dataset: str, task_type: str) -> Path:
    if "run_dir" in train_cfg:
        return Path(str(train_cfg["run_dir"]))
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return Path("runs") / timestamp / dataset / task_type


def _safe_config(config: Mapping[str, object]) -> Dict[str, object]:
    return json.loads(json.dumps(config))


def _print_startup_summary(
    *,
    dataset_name: str,
    task_type: str,
    rows: int,
    features: int,
    hidden: Sequence[str],
    optimizer: str,
    cost: str,
    metric: str,
) -> None:
    print("=== layerwise run ===")
    print(f"Dataset       : {dataset_name} ({rows} rows, {features} features)")
    print(f"Task          : {task_type}")
    print(f"Hidden        : {', '.join(hidden) or '-'}")
    print(f"Optimizer     : {optimizer}")
    print(f"Cost          : {cost}")
    print(f"Metric        : {metric}")
    print("=====================")


__all__ = [
    "build_estimator",
    "build_hidden",
    "build_validator",
    "load_preset",
    "presets",
    "read_config_file",
    "run_pipeline",
]
