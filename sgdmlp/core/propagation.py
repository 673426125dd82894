"""Forward and backward propagation through the dense network."""

from __future__ import annotations

from typing import List, Optional, Sequence

from . import matrix as mx
from .network import NetworkDescription
from .types import Array, ForwardState, Weights


def forward(
    weights: Sequence[Array], inputs: Array, network: NetworkDescription
) -> ForwardState:
    """Propagate ``inputs`` (rows are examples) through ``weights``.

    Hidden outputs are activated and bias-augmented; the output layer is the
    identity and is returned as-is, so ``activations[-1]`` equals
    ``preactivations[-1]``.
    """

    network.check_weights(weights)
    x = mx.as_matrix(inputs)
    activations: List[Array] = [mx.prepend_column(x)]
    preactivations: List[Optional[Array]] = [None]
    for layer, W in enumerate(weights):
        z = mx.matmul(activations[-1], mx.transpose(W))
        preactivations.append(z)
        a = network.layer_activation(layer)(z)
        if network.is_output(layer):
            activations.append(a)
        else:
            activations.append(mx.prepend_column(a))
    return ForwardState(
        output=activations[-1],
        activations=activations,
        preactivations=preactivations,
    )


def predict(weights: Sequence[Array], inputs: Array, network: NetworkDescription) -> Array:
    return forward(weights, inputs, network).output


def backprop_deltas(
    weights: Sequence[Array],
    state: ForwardState,
    targets: Array,
    network: NetworkDescription,
) -> List[Array]:
    """Error signal for each layer, index-aligned with ``weights``."""

    y = mx.as_matrix(targets)
    last = network.num_layers - 1
    deltas: List[Array] = [None] * network.num_layers  # type: ignore[list-item]
    # Squared loss paired with the identity output: derivative is O - Y.
    out_deriv = network.layer_activation(last).derivative(state.preactivations[last + 1])
    deltas[last] = mx.hadamard(mx.subtract(state.output, y), out_deriv)
    for layer in reversed(range(last)):
        back = mx.matmul(deltas[layer + 1], mx.drop_first_column(weights[layer + 1]))
        deriv = network.layer_activation(layer).derivative(state.preactivations[layer + 1])
        deltas[layer] = mx.hadamard(back, deriv)
    return deltas


def backward(
    lam: float,
    weights: Sequence[Array],
    state: ForwardState,
    targets: Array,
    network: NetworkDescription,
) -> Weights:
    """Return the gradient of the regularised cost for every weight matrix.

    The bias column (column 0) of each gradient is left un-regularised.
    """

    network.check_weights(weights)
    m = state.output.shape[0]
    deltas = backprop_deltas(weights, state, targets, network)
    grads: Weights = []
    for layer, W in enumerate(weights):
        grad = mx.scale(mx.matmul(mx.transpose(deltas[layer]), state.activations[layer]), 1.0 / m)
        penalty = mx.scale(mx.drop_first_column(W), lam / m)
        grad[:, 1:] = mx.add(grad[:, 1:], penalty)
        grads.append(grad)
    return grads


__all__ = ["backprop_deltas", "backward", "forward", "predict"]
