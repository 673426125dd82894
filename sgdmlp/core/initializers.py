"""Weight initialisation."""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from .network import validate_architecture
from .types import Weights


def init_epsilon(l_in: int, l_out: int) -> float:
    """Half-width of the uniform range for a ``l_in -> l_out`` transition."""

    return math.sqrt(6.0) / math.sqrt(l_in + l_out)


def _as_generator(rng: np.random.Generator | int | None) -> np.random.Generator:
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


def init_weights(
    layer_dims: Sequence[int],
    rng: np.random.Generator | int | None = None,
) -> Weights:
    """Return one ``(L_out, L_in + 1)`` matrix per layer transition.

    Entries are drawn from ``Uniform[-eps, eps]`` with
    ``eps = sqrt(6) / sqrt(L_in + L_out)``; column 0 holds the bias weights.
    Pass a seeded generator (or an int seed) for reproducible draws.
    """

    dims = validate_architecture(layer_dims)
    generator = _as_generator(rng)
    weights: Weights = []
    for l_in, l_out in zip(dims[:-1], dims[1:]):
        eps = init_epsilon(l_in, l_out)
        weights.append(generator.uniform(-eps, eps, size=(l_out, l_in + 1)))
    return weights


__all__ = ["init_epsilon", "init_weights"]
