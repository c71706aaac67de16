"""Command line entry point for layerwise training runs."""

from __future__ import annotations

import argparse
import json
import math
from pathlib import Path
from typing import Iterable

from layerwise.training import pipelines


def _format_result(result) -> str:
    payload = {
        "epochs": result.epochs,
        "metrics": result.metrics_path,
        "manifest": result.manifest_path,
    }
    if getattr(result, "summary_path", ""):
        payload["summary"] = result.summary_path
    for key in ("best_score", "validation_score"):
        value = getattr(result, key, math.nan)
        if not math.isnan(value):
            payload[key] = value
    return json.dumps(payload, sort_keys=True)


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    preset_names = sorted(pipelines.presets().keys())
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--preset",
        choices=preset_names,
        default="blobs-mlp",
        help="Preset configuration to execute",
    )
    parser.add_argument("--config", type=Path, help="Optional JSON/YAML config override")
    parser.add_argument("--seed", type=int, help="Seed used for dataset splits and training")
    parser.add_argument("--epochs", type=int, help="Override the maximum number of epochs")
    parser.add_argument("--run-dir", help="Directory to write run artifacts into")
    parser.add_argument(
        "--enable-plots", action="store_true", help="Write a training curve plot"
    )
    parser.add_argument(
        "--list-presets", action="store_true", help="List available presets and exit"
    )
    parser.add_argument(
        "--dump-config", type=Path, help="Dump the resolved config to a JSON file"
    )
    return parser.parse_args(argv)


def _merge(base: dict, override: dict) -> dict:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            base[key] = _merge(dict(base[key]), value)
        else:
            base[key] = value
    return base


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)

    if args.list_presets:
        for name in sorted(pipelines.presets().keys()):
            print(name)
        raise SystemExit(0)

    config = json.loads(json.dumps(pipelines.load_preset(args.preset)))

    if args.config:
        override = json.loads(json.dumps(pipelines.read_config_file(args.config)))
        if {"data", "model", "train"} <= set(override.keys()):
            config = override
        else:
            config = _merge(config, override)

    train = config.setdefault("train", {})
    if args.seed is not None:
        train["seed"] = int(args.seed)
    if args.epochs is not None:
        train["epochs"] = int(args.epochs)
    if args.run_dir:
        train["run_dir"] = args.run_dir
    if args.enable_plots:
        train["enable_plots"] = True

    if args.dump_config:
        args.dump_config.parent.mkdir(parents=True, exist_ok=True)
        args.dump_config.write_text(json.dumps(config, indent=2))

    print(_format_result(pipelines.run_pipeline(config)))


if __name__ == "__main__":
    main()
