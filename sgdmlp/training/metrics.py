"""Regression metrics for trained networks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping

import numpy as np

from ..core import matrix as mx
from ..core.types import Array

DEFAULT_METRICS: List[str] = ["mae", "rmse", "r2"]


@dataclass(frozen=True)
class MetricResult:
    name: str
    value: float


def compute_metric(name: str, predictions: Array, targets: Array) -> MetricResult:
    key = name.lower()
    preds = mx.as_matrix(predictions)
    targs = mx.as_matrix(targets)
    diff = mx.subtract(preds, targs)
    if key == "mae":
        value = float(np.mean(np.abs(diff)))
    elif key == "rmse":
        value = float(np.sqrt(np.mean(diff**2)))
    elif key == "r2":
        mean = np.mean(targs, axis=0, keepdims=True)
        ss_res = float(np.sum(diff**2))
        ss_tot = float(np.sum((targs - mean) ** 2))
        value = 1.0 if ss_tot == 0 else float(1 - ss_res / (ss_tot + 1e-12))
    else:
        raise KeyError(f"Unknown metric: {name}")
    return MetricResult(name=key, value=value)


def compute_metrics(
    names: Iterable[str], predictions: Array, targets: Array
) -> Mapping[str, float]:
    results: Dict[str, float] = {}
    for name in names:
        metric = compute_metric(name, predictions, targets)
        results[metric.name] = metric.value
    return results


__all__ = ["DEFAULT_METRICS", "MetricResult", "compute_metric", "compute_metrics"]
