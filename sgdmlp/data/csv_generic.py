"""Generic CSV loader for regression tasks."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

import numpy as np
import pandas as pd

from .registry import Dataset, register_dataset
from .utils import deterministic_split, standardize

FIXTURE_DIR = Path(__file__).resolve().parent / "_fixtures"


def _load_csv(path: Path, target_cols: Sequence[str]) -> tuple[np.ndarray, np.ndarray]:
    df = pd.read_csv(path)
    missing = [col for col in target_cols if col not in df.columns]
    if missing:
        raise KeyError(f"Target column(s) {missing!r} not found in CSV")
    y = df[list(target_cols)].to_numpy(dtype=np.float64)
    X = df.drop(columns=list(target_cols)).to_numpy(dtype=np.float64)
    return X, y


@register_dataset("csv_regression")
def load_csv_regression(
    *,
    csv_path: str | Path | None = None,
    target_col: str | Sequence[str] = "target",
    test_split: float = 0.2,
    seed: int = 0,
    standardize_inputs: bool = True,
    standardize_targets: bool = False,
) -> Dataset:
    """Load a regression dataset from a CSV file.

    Every column other than ``target_col`` is used as an input feature.
    Standardisation statistics are computed on the full file and recorded
    in the provenance.
    """

    path = Path(csv_path) if csv_path else FIXTURE_DIR / "csv_regression_fixture.csv"
    target_cols = [target_col] if isinstance(target_col, str) else list(target_col)
    X, y = _load_csv(path, target_cols)

    normalization: dict[str, dict[str, list[float]]] = {}
    if standardize_inputs:
        X, mean, std = standardize(X)
        normalization["inputs"] = {
            "mean": mean.flatten().tolist(),
            "std": std.flatten().tolist(),
        }
    if standardize_targets:
        y, t_mean, t_std = standardize(y)
        normalization["targets"] = {
            "mean": t_mean.flatten().tolist(),
            "std": t_std.flatten().tolist(),
        }

    splits = deterministic_split(X.shape[0], test_split=test_split, seed=seed)

    provenance = {
        "type": "csv",
        "path": str(path),
        "test_split": test_split,
        "seed": seed,
        "target_col": target_cols,
        "normalization": normalization,
    }

    return Dataset(
        name="csv_regression",
        x_train=X[splits.train],
        y_train=y[splits.train],
        x_test=X[splits.test],
        y_test=y[splits.test],
        provenance=provenance,
    )


__all__ = ["load_csv_regression"]
