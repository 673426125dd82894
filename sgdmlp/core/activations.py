"""Activation functions and their derivatives."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable

import numpy as np

from .errors import InvalidConfigurationError
from .types import Array

ArrayFn = Callable[[Array], Array]


def relu(x: Array) -> Array:
    """Return the ReLU activation."""

    return np.maximum(x, 0.0)


def relu_derivative(x: Array) -> Array:
    """Subgradient of ReLU; zero at the origin."""

    return (x > 0).astype(np.float64)


def sigmoid(x: Array) -> Array:
    """Logistic sigmoid.

    Overflow in ``exp`` for large negative inputs is not an error: the result
    saturates at 0.0 instead of raising.
    """

    with np.errstate(over="ignore"):
        return 1.0 / (1.0 + np.exp(-x))


def sigmoid_derivative(x: Array) -> Array:
    s = sigmoid(x)
    return s * (1.0 - s)


def identity(x: Array) -> Array:
    return x


def identity_derivative(x: Array) -> Array:
    return np.ones_like(x, dtype=np.float64)


@dataclass(frozen=True)
class Activation:
    """A pointwise function paired with its derivative."""

    name: str
    fn: ArrayFn
    derivative: ArrayFn

    def __call__(self, x: Array) -> Array:
        return self.fn(x)


RELU = Activation("relu", relu, relu_derivative)
SIGMOID = Activation("sigmoid", sigmoid, sigmoid_derivative)
IDENTITY = Activation("identity", identity, identity_derivative)

ACTIVATIONS: Dict[str, Activation] = {
    RELU.name: RELU,
    SIGMOID.name: SIGMOID,
    IDENTITY.name: IDENTITY,
}

DEFAULT_ACTIVATION = RELU.name


def get_activation(name: str | Activation) -> Activation:
    """Resolve ``name`` to a registered :class:`Activation`."""

    if isinstance(name, Activation):
        return name
    key = str(name).lower().strip()
    if key not in ACTIVATIONS:
        available = ", ".join(available_activations())
        raise InvalidConfigurationError(
            f"Unknown activation {name!r}. Available activations: {available}"
        )
    return ACTIVATIONS[key]


def available_activations() -> Iterable[str]:
    return sorted(ACTIVATIONS)


__all__ = [
    "Activation",
    "ACTIVATIONS",
    "DEFAULT_ACTIVATION",
    "IDENTITY",
    "RELU",
    "SIGMOID",
    "available_activations",
    "get_activation",
    "identity",
    "identity_derivative",
    "relu",
    "relu_derivative",
    "sigmoid",
    "sigmoid_derivative",
]
