"""Network architecture description and weight-shape checks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

from .activations import DEFAULT_ACTIVATION, IDENTITY, Activation, get_activation
from .errors import InvalidConfigurationError, ShapeMismatchError
from .types import Architecture, Array


def validate_architecture(layer_dims: Sequence[int]) -> Architecture:
    """Return ``layer_dims`` as a tuple after checking it describes a network."""

    dims = tuple(layer_dims)
    if len(dims) < 2:
        raise InvalidConfigurationError(
            f"Architecture needs at least an input and an output layer, got {list(dims)}"
        )
    for width in dims:
        if isinstance(width, bool) or not isinstance(width, (int, np.integer)):
            raise InvalidConfigurationError(f"Layer widths must be integers, got {width!r}")
        if width < 1:
            raise InvalidConfigurationError(f"Layer widths must be positive, got {width}")
    return tuple(int(width) for width in dims)


@dataclass(frozen=True)
class NetworkDescription:
    """Architecture plus the activation used by every hidden layer.

    The output layer is always the identity: the network is a regressor and
    its last pre-activation is the prediction.
    """

    layer_dims: Sequence[int]
    activation: str | Activation = DEFAULT_ACTIVATION
    hidden_activation: Activation = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "layer_dims", validate_architecture(self.layer_dims))
        object.__setattr__(self, "hidden_activation", get_activation(self.activation))
        object.__setattr__(self, "activation", self.hidden_activation.name)

    @property
    def num_layers(self) -> int:
        """Number of weight matrices (layer transitions)."""

        return len(self.layer_dims) - 1

    def is_output(self, layer: int) -> bool:
        return layer == self.num_layers - 1

    def layer_activation(self, layer: int) -> Activation:
        """Activation applied to the output of weight matrix ``layer``."""

        if not 0 <= layer < self.num_layers:
            raise IndexError(f"Layer {layer} out of range for {self.num_layers} layers")
        return IDENTITY if self.is_output(layer) else self.hidden_activation

    def weight_shapes(self) -> list[tuple[int, int]]:
        dims = self.layer_dims
        return [(dims[i + 1], dims[i] + 1) for i in range(self.num_layers)]

    def parameter_count(self) -> int:
        return int(sum(rows * cols for rows, cols in self.weight_shapes()))

    def check_weights(self, weights: Sequence[Array]) -> None:
        """Raise :class:`ShapeMismatchError` unless ``weights`` fit this network."""

        expected = self.weight_shapes()
        if len(weights) != len(expected):
            raise ShapeMismatchError(
                f"Expected {len(expected)} weight matrices, got {len(weights)}"
            )
        for idx, (W, shape) in enumerate(zip(weights, expected)):
            if np.shape(W) != shape:
                raise ShapeMismatchError(
                    f"Weight matrix {idx} has shape {np.shape(W)}, expected {shape}"
                )


__all__ = ["NetworkDescription", "validate_architecture"]
