"""Deterministic run summaries computed from a metrics JSONL file."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, Mapping, Sequence

import numpy as np

_SKIP = {"epoch", "seed"}


def compute_auc(points: Sequence[float]) -> float:
    """Area under ``points`` along an implicit unit-spaced epoch axis."""

    if len(points) < 2:
        return 0.0
    y = np.asarray(points, dtype=np.float64)
    return float(np.sum((y[1:] + y[:-1]) / 2.0))


def read_records(path: str | Path) -> list[dict]:
    path = Path(path)
    if not path.exists():
        return []
    return [json.loads(line) for line in path.read_text().splitlines() if line.strip()]


def _series(records: Iterable[Mapping[str, object]]) -> dict[str, list[float]]:
    series: dict[str, list[float]] = {}
    for record in records:
        for key, value in record.items():
            if key in _SKIP or isinstance(value, bool):
                continue
            if isinstance(value, (int, float)):
                series.setdefault(key, []).append(float(value))
    return series


def summarize(records: list[Mapping[str, object]], tail: int = 32) -> dict:
    tail_window = min(tail, len(records))
    metrics = {}
    for name, values in sorted(_series(records).items()):
        arr = np.asarray(values, dtype=np.float64)
        metrics[name] = {
            "min": float(arr.min()),
            "max": float(arr.max()),
            "mean": float(arr.mean()),
            "last": float(arr[-1]),
            "tail_auc": compute_auc(arr[-tail_window:].tolist()),
        }
    best_epoch = None
    scores = [r for r in records if isinstance(r.get("score"), (int, float))]
    if scores:
        best_epoch = int(max(scores, key=lambda r: r["score"])["epoch"])
    return {
        "version": 1,
        "epochs": len(records),
        "best_epoch": best_epoch,
        "tail_window": tail_window,
        "metrics": metrics,
    }


def write_summary(metrics_jsonl: str | Path, out_summary_json: str | Path, *, tail: int = 32) -> str:
    """Write a summary of ``metrics_jsonl`` with sorted keys."""

    out_path = Path(out_summary_json)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    summary = summarize(read_records(metrics_jsonl), tail=tail)
    out_path.write_text(json.dumps(summary, sort_keys=True, indent=2))
    return str(out_path)


__all__ = ["compute_auc", "read_records", "summarize", "write_summary"]
