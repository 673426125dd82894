"""Pure in-memory synthetic regression datasets."""

from __future__ import annotations

import numpy as np

from .registry import Dataset, register_dataset
from .utils import deterministic_split


def _split(name, x, y, *, test_split, seed, provenance) -> Dataset:
    splits = deterministic_split(x.shape[0], test_split=test_split, seed=seed)
    return Dataset(
        name=name,
        x_train=x[splits.train],
        y_train=y[splits.train],
        x_test=x[splits.test],
        y_test=y[splits.test],
        provenance={**provenance, "test_split": test_split, "seed": seed},
    )


def _make_sine(freq: int, n_points: int, seed: int) -> tuple[np.ndarray, np.ndarray]:
    rng = np.random.default_rng(seed)
    x = np.linspace(-1.0, 1.0, n_points, dtype=np.float64).reshape(-1, 1)
    y_true = np.sin(freq * np.pi * x)
    noise = 0.05 * rng.standard_normal(size=y_true.shape)
    return x, y_true + noise


@register_dataset("synthetic")
def make_sine(
    freq: int = 1,
    n_points: int = 256,
    seed: int = 0,
    test_split: float = 0.2,
) -> Dataset:
    """Noisy ``sin(freq * pi * x)`` on ``[-1, 1]``."""

    x, y = _make_sine(freq=freq, n_points=n_points, seed=seed)
    provenance = {"type": "synthetic", "freq": freq, "n_points": n_points}
    return _split("synthetic", x, y, test_split=test_split, seed=seed, provenance=provenance)


@register_dataset("linear")
def make_linear(
    slope: float = 2.0,
    intercept: float = 0.0,
    n_points: int = 64,
    low: float = -1.0,
    high: float = 1.0,
    n_features: int = 1,
    noise: float = 0.0,
    seed: int = 0,
    test_split: float = 0.2,
) -> Dataset:
    """``y = slope * sum(x) + intercept`` with optional Gaussian noise.

    The defaults give the doubling map ``y = 2x``, which a ``[1, 1]`` network
    can represent exactly.
    """

    rng = np.random.default_rng(seed)
    x = rng.uniform(low, high, size=(n_points, n_features))
    y = slope * x.sum(axis=1, keepdims=True) + intercept
    if noise > 0:
        y = y + noise * rng.standard_normal(size=y.shape)
    provenance = {
        "type": "linear",
        "slope": slope,
        "intercept": intercept,
        "n_points": n_points,
        "n_features": n_features,
        "noise": noise,
    }
    return _split("linear", x, y, test_split=test_split, seed=seed, provenance=provenance)


__all__ = ["make_linear", "make_sine"]
