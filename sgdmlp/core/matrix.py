"""Shape-safe dense matrix helpers.

The network code works on plain 2-D ``numpy.ndarray`` values. NumPy happily
broadcasts mismatched operands (``(M, 1) - (M,)`` silently becomes ``(M, M)``),
so every element-wise helper here insists on identical shapes and raises
:class:`~sgdmlp.core.errors.ShapeMismatchError` otherwise. The only implicit
promotion is :func:`as_matrix`, which lifts scalars to ``1x1`` and vectors to a
single column.
"""

from __future__ import annotations

from typing import Iterable, Sequence

import numpy as np

from .errors import ShapeMismatchError
from .types import Array


def as_matrix(value: object) -> Array:
    """Return ``value`` as a 2-D float64 matrix."""

    arr = np.asarray(value, dtype=np.float64)
    if arr.ndim == 0:
        return arr.reshape(1, 1)
    if arr.ndim == 1:
        return arr.reshape(-1, 1)
    if arr.ndim != 2:
        raise ShapeMismatchError(f"Expected at most 2 dimensions, got shape {arr.shape}")
    return arr


def _require_2d(a: Array, name: str = "operand") -> None:
    if np.ndim(a) != 2:
        raise ShapeMismatchError(f"{name} must be 2-D, got shape {np.shape(a)}")


def _require_same_shape(a: Array, b: Array, op: str) -> None:
    _require_2d(a, "left operand")
    _require_2d(b, "right operand")
    if a.shape != b.shape:
        raise ShapeMismatchError(f"Cannot {op} matrices of shape {a.shape} and {b.shape}")


def shape_of(a: Array) -> tuple[int, int]:
    _require_2d(a)
    return int(a.shape[0]), int(a.shape[1])


def transpose(a: Array) -> Array:
    _require_2d(a)
    return a.T


def matmul(a: Array, b: Array) -> Array:
    _require_2d(a, "left operand")
    _require_2d(b, "right operand")
    if a.shape[1] != b.shape[0]:
        raise ShapeMismatchError(f"Cannot multiply matrices of shape {a.shape} and {b.shape}")
    return a @ b


def hadamard(a: Array, b: Array) -> Array:
    _require_same_shape(a, b, "element-wise multiply")
    return a * b


def add(a: Array, b: Array) -> Array:
    _require_same_shape(a, b, "add")
    return a + b


def subtract(a: Array, b: Array) -> Array:
    _require_same_shape(a, b, "subtract")
    return a - b


def scale(a: Array, factor: float) -> Array:
    _require_2d(a)
    return a * float(factor)


def select_rows(a: Array, indices: Sequence[int] | Array) -> Array:
    _require_2d(a)
    idx = np.asarray(indices, dtype=np.intp)
    if idx.size and (idx.min() < -a.shape[0] or idx.max() >= a.shape[0]):
        raise ShapeMismatchError(f"Row index out of range for matrix with {a.shape[0]} rows")
    return a[idx]


def drop_first_column(a: Array) -> Array:
    """Return ``a`` without its leading (bias) column."""

    _require_2d(a)
    if a.shape[1] == 0:
        raise ShapeMismatchError("Cannot drop a column from an empty matrix")
    return a[:, 1:]


def prepend_column(a: Array, value: float = 1.0) -> Array:
    _require_2d(a)
    column = np.full((a.shape[0], 1), value, dtype=np.float64)
    return np.hstack([column, a])


def prepend_row(a: Array, value: float = 1.0) -> Array:
    _require_2d(a)
    row = np.full((1, a.shape[1]), value, dtype=np.float64)
    return np.vstack([row, a])


def submatrix(a: Array, rows: slice, cols: slice) -> Array:
    _require_2d(a)
    return a[rows, cols]


def from_rows(rows: Iterable[Iterable[float]]) -> Array:
    """Build a matrix from a sequence of equal-length rows."""

    materialised = [list(row) for row in rows]
    if not materialised:
        raise ShapeMismatchError("Cannot build a matrix from zero rows")
    width = len(materialised[0])
    for row in materialised:
        if len(row) != width:
            raise ShapeMismatchError("All rows must have the same length")
    return np.asarray(materialised, dtype=np.float64).reshape(len(materialised), width)


def flatten(a: Array) -> Array:
    """Row-major view of ``a`` as a 1-D sequence of scalars."""

    _require_2d(a)
    return a.reshape(-1)


__all__ = [
    "as_matrix",
    "shape_of",
    "transpose",
    "matmul",
    "hadamard",
    "add",
    "subtract",
    "scale",
    "select_rows",
    "drop_first_column",
    "prepend_column",
    "prepend_row",
    "submatrix",
    "from_rows",
    "flatten",
]
