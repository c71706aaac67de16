import json
import math
from pathlib import Path

import pytest

from layerwise.training import pipelines


def _config(tmp_path, **train):
    config = json.loads(json.dumps(pipelines.load_preset("blobs-mlp")))
    config["train"].update({"epochs": 5, "run_dir": str(tmp_path / "run"), **train})
    return config


def test_pipeline_writes_artifacts(tmp_path):
    result = pipelines.run_pipeline(_config(tmp_path, seed=11))

    run_dir = tmp_path / "run"
    for name in ("metrics_train.jsonl", "metrics_train.csv", "manifest.json", "summary.json", "config.json"):
        assert (run_dir / name).exists(), name

    records = [json.loads(line) for line in Path(result.metrics_path).read_text().splitlines()]
    assert len(records) == result.epochs
    assert {"cost", "score"} <= set(records[0])

    manifest = json.loads(Path(result.manifest_path).read_text())
    assert manifest["config"]["train"]["seed"] == 11
    assert manifest["dataset"]["type"] == "synthetic"
    assert manifest["estimator"]["parameters"] > 0

    summary = json.loads(Path(result.summary_path).read_text())
    assert summary["epochs"] == result.epochs
    assert 0.0 <= result.best_score <= 1.0
    assert math.isnan(result.validation_score)


def test_regression_pipeline(tmp_path):
    config = json.loads(json.dumps(pipelines.load_preset("regression-mlp")))
    config["train"].update({"epochs": 5, "run_dir": str(tmp_path / "reg")})
    result = pipelines.run_pipeline(config)
    assert 1 <= result.epochs <= 5


def test_kfold_validation_in_pipeline(tmp_path):
    config = json.loads(json.dumps(pipelines.load_preset("blobs-kfold")))
    config["train"].update({"epochs": 3, "run_dir": str(tmp_path / "kfold")})
    result = pipelines.run_pipeline(config)
    assert 0.0 <= result.validation_score <= 1.0


def test_build_hidden_accepts_ints_and_mappings():
    layers = pipelines.build_hidden(
        [8, {"neurons": 4, "activation": "tanh"}, {"neurons": 2, "activation": {"name": "elu", "alpha": 0.5}}]
    )
    assert [layer.neurons for layer in layers] == [8, 4, 2]
    assert type(layers[0].activation).__name__ == "ReLU"
    assert layers[2].activation.alpha == 0.5


def test_config_errors(tmp_path):
    config = _config(tmp_path)
    config["model"]["task"] = "regression"
    with pytest.raises(ValueError):
        pipelines.run_pipeline(config)

    config = _config(tmp_path, metric="r2")
    with pytest.raises(ValueError):
        pipelines.run_pipeline(config)

    with pytest.raises(KeyError):
        pipelines.run_pipeline({"data": {"name": "blobs"}})
    with pytest.raises(KeyError, match="Available presets"):
        pipelines.load_preset("missing")


def test_yaml_config_file(tmp_path):
    path = tmp_path / "run.yaml"
    path.write_text(
        "data:\n  name: moons\n  options:\n    n_samples: 60\n"
        "model:\n  task: classification\n  hidden: [4]\n"
        f"train:\n  epochs: 2\n  run_dir: {tmp_path / 'yaml'}\n"
    )
    config = pipelines.read_config_file(path)
    assert config["model"]["hidden"] == [4]
    result = pipelines.run_pipeline(config)
    assert result.epochs >= 1

    other = tmp_path / "run.toml"
    other.write_text("[data]\n")
    with pytest.raises(ValueError):
        pipelines.read_config_file(other)
