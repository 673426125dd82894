"""Regularised squared-error cost."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from . import matrix as mx
from .errors import InvalidConfigurationError
from .types import Array


def squared_error(targets: Array, outputs: Array) -> float:
    """Halved mean squared error, ``1/(2M) * sum((Y - O)**2)``."""

    y = mx.as_matrix(targets)
    o = mx.as_matrix(outputs)
    diff = mx.subtract(y, o)
    m = y.shape[0]
    if m < 1:
        raise InvalidConfigurationError("Cannot evaluate the cost of zero examples")
    return float(np.sum(mx.hadamard(diff, diff)) / (2.0 * m))


def regularization_penalty(weights: Sequence[Array], lam: float, m: int) -> float:
    """L2 penalty ``lam/(2M) * sum(W[:, 1:]**2)`` over every layer."""

    if lam < 0:
        raise InvalidConfigurationError(f"Regularisation strength must be >= 0, got {lam}")
    if m < 1:
        raise InvalidConfigurationError(f"Example count must be positive, got {m}")
    total = 0.0
    for W in weights:
        non_bias = mx.drop_first_column(mx.as_matrix(W))
        total += float(np.sum(non_bias * non_bias))
    return lam * total / (2.0 * m)


def cost(targets: Array, outputs: Array, weights: Sequence[Array], lam: float) -> float:
    """Total cost: halved MSE plus the L2 penalty (bias columns excluded).

    Scalar ``targets``/``outputs`` are promoted to ``1x1`` matrices.
    """

    y = mx.as_matrix(targets)
    return squared_error(y, outputs) + regularization_penalty(weights, lam, y.shape[0])


__all__ = ["cost", "regularization_penalty", "squared_error"]
