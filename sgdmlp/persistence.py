"""Plain-text persistence for weight matrices.

File layout, one record per line::

    sgdmlp-weights 1
    layers <k>
    matrix <rows> <cols>
    <rows lines of space separated floats>
    ...

Floats are written with ``repr`` so a save/load round trip is exact.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterator, List, Sequence

import numpy as np

from .core import matrix as mx
from .core.errors import ModelFormatError
from .core.types import Array, Weights

MAGIC = "sgdmlp-weights"
FORMAT_VERSION = 1


def _format_row(row: Array) -> str:
    return " ".join(repr(float(value)) for value in row)


def dumps_weights(weights: Sequence[Array]) -> str:
    lines = [f"{MAGIC} {FORMAT_VERSION}", f"layers {len(weights)}"]
    for W in weights:
        W = mx.as_matrix(W)
        rows, cols = mx.shape_of(W)
        lines.append(f"matrix {rows} {cols}")
        lines.extend(_format_row(row) for row in W)
    return "\n".join(lines) + "\n"


def _expect(tokens: List[str], keyword: str, count: int, lineno: int) -> List[int]:
    if len(tokens) != count + 1 or tokens[0] != keyword:
        raise ModelFormatError(f"Line {lineno}: expected '{keyword}' header")
    try:
        values = [int(tok) for tok in tokens[1:]]
    except ValueError as exc:
        raise ModelFormatError(f"Line {lineno}: non-integer value in '{keyword}' header") from exc
    if any(value < 0 for value in values):
        raise ModelFormatError(f"Line {lineno}: negative value in '{keyword}' header")
    return values


def _numbered(text: str) -> Iterator[tuple[int, List[str]]]:
    for lineno, line in enumerate(text.splitlines(), start=1):
        tokens = line.split()
        if tokens:
            yield lineno, tokens


def loads_weights(text: str) -> Weights:
    lines = _numbered(text)
    try:
        lineno, tokens = next(lines)
        if tokens[0] != MAGIC:
            raise ModelFormatError("Missing weight file header")
        version = _expect(tokens, MAGIC, 1, lineno)[0]
        if version != FORMAT_VERSION:
            raise ModelFormatError(f"Unsupported weight file version {version}")
        lineno, tokens = next(lines)
        (n_layers,) = _expect(tokens, "layers", 1, lineno)
        weights: Weights = []
        for _ in range(n_layers):
            lineno, tokens = next(lines)
            rows, cols = _expect(tokens, "matrix", 2, lineno)
            data = []
            for _ in range(rows):
                lineno, tokens = next(lines)
                if len(tokens) != cols:
                    raise ModelFormatError(
                        f"Line {lineno}: expected {cols} values, got {len(tokens)}"
                    )
                try:
                    data.append([float(tok) for tok in tokens])
                except ValueError as exc:
                    raise ModelFormatError(f"Line {lineno}: invalid number") from exc
            weights.append(np.asarray(data, dtype=np.float64).reshape(rows, cols))
    except StopIteration:
        raise ModelFormatError("Unexpected end of weight file") from None
    for lineno, _ in lines:
        raise ModelFormatError(f"Line {lineno}: trailing data after last matrix")
    return weights


def save_weights(weights: Sequence[Array], path: str | Path) -> str:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dumps_weights(weights), encoding="utf-8")
    return str(path)


def load_weights(path: str | Path) -> Weights:
    return loads_weights(Path(path).read_text(encoding="utf-8"))


__all__ = ["dumps_weights", "load_weights", "loads_weights", "save_weights"]
