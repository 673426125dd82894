"""Mini-batch index sampling."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

import numpy as np

from ..core.errors import InvalidConfigurationError
from ..core.types import Array


class MiniBatchSampler(Protocol):
    """Source of mini-batch row indices."""

    def sample(self, population: int, size: int) -> Array:
        """Return ``size`` distinct row indices drawn from ``range(population)``."""


@dataclass
class RandomSampler:
    """Uniform sampling without replacement backed by a NumPy generator."""

    rng: np.random.Generator = field(default_factory=np.random.default_rng)

    @classmethod
    def from_seed(cls, seed: int | None) -> "RandomSampler":
        return cls(np.random.default_rng(seed))

    def sample(self, population: int, size: int) -> Array:
        if not 1 <= size <= population:
            raise InvalidConfigurationError(
                f"Mini-batch size {size} must be between 1 and the number of examples ({population})"
            )
        return self.rng.choice(population, size=size, replace=False)


__all__ = ["MiniBatchSampler", "RandomSampler"]
