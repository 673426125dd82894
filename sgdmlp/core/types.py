"""Core typing contracts for sgdmlp."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, NamedTuple, Optional, Tuple

import numpy as np

Array = np.ndarray
Weights = List[Array]
Architecture = Tuple[int, ...]


@dataclass(frozen=True)
class Batch:
    """A single mini-batch of data."""

    inputs: Array
    targets: Array


@dataclass(frozen=True)
class ForwardState:
    """Tensors captured during one forward pass.

    ``activations[0]`` is the bias-augmented input, ``activations[i]`` for
    hidden layers is the bias-augmented activated output, and
    ``activations[-1]`` is the raw linear output of the last layer.
    ``preactivations`` is index-aligned with ``activations``; its first entry
    is ``None`` because the input layer has no pre-activation.
    """

    output: Array
    activations: List[Array]
    preactivations: List[Optional[Array]]

    def __iter__(self) -> Iterator[object]:
        return iter((self.output, self.activations, self.preactivations))


class TrainResult(NamedTuple):
    """Outcome of :func:`sgdmlp.training.trainer.train`."""

    weights: Weights
    train_errors: List[float]
    test_errors: List[float]
    steps: int

    def as_tuple(self) -> tuple[Weights, List[float], List[float]]:
        return self.weights, self.train_errors, self.test_errors


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :func:`sgdmlp.training.pipelines.run_pipeline`."""

    steps: int
    weights_path: str
    metrics_path: str
    manifest_path: str
    summary_path: str = ""
