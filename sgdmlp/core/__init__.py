"""Core numerical primitives for sgdmlp."""

from . import activations, cost, errors, initializers, matrix, network, propagation, types

__all__ = [
    "activations",
    "cost",
    "errors",
    "initializers",
    "matrix",
    "network",
    "propagation",
    "types",
]
