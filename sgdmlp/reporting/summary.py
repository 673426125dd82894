"""Deterministic run summaries."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Mapping, Sequence

import numpy as np


def _area(y: np.ndarray, x: np.ndarray) -> float:
    trapezoid = getattr(np, "trapezoid", None)
    if callable(trapezoid):
        return float(trapezoid(y, x))
    return float(np.trapz(y, x))


def compute_auc(points: Sequence[float]) -> float:
    """Return the area-under-curve of ``points`` along an implicit step axis."""

    if not points:
        return 0.0
    y = np.asarray(points, dtype=np.float64)
    x = np.arange(len(points), dtype=np.float64)
    return _area(y, x)


def summarize_series(values: Sequence[float], *, tail: int) -> Mapping[str, float]:
    arr = np.asarray(values, dtype=np.float64)
    if arr.size == 0:
        return {}
    tail_window = min(tail, arr.size)
    return {
        "min": float(np.min(arr)),
        "max": float(np.max(arr)),
        "mean": float(np.mean(arr)),
        "last": float(arr[-1]),
        "tail_auc": compute_auc(arr[-tail_window:].tolist()),
    }


def write_summary(
    out_summary_json: str | Path,
    *,
    series: Mapping[str, Sequence[float]],
    final_metrics: Mapping[str, Mapping[str, float]],
    steps: int,
    tail: int = 32,
) -> str:
    """Write a deterministic summary of error series and final metrics."""

    out_path = Path(out_summary_json)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    longest = max((len(values) for values in series.values()), default=0)
    tail_window = min(tail, longest) if longest else 0
    summary = {
        "version": 1,
        "steps": int(steps),
        "tail_window": int(tail_window),
        "series": {name: summarize_series(values, tail=tail) for name, values in series.items()},
        "final": {split: dict(values) for split, values in final_metrics.items()},
    }
    out_path.write_text(json.dumps(summary, sort_keys=True, indent=2))
    return str(out_path)


__all__ = ["compute_auc", "summarize_series", "write_summary"]
