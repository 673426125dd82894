"""
Forward/backward propagation and cost tests.

The gradient check compares the analytic gradient from ``backward`` with a
centered finite difference of ``cost``:

    dJ/dw ~= (J(w + eps) - J(w - eps)) / (2 eps)
"""

import numpy as np
import pytest

from sgdmlp.core.cost import cost, regularization_penalty, squared_error
from sgdmlp.core.errors import InvalidConfigurationError, ShapeMismatchError
from sgdmlp.core.initializers import init_weights
from sgdmlp.core.network import NetworkDescription
from sgdmlp.core.propagation import backprop_deltas, backward, forward, predict


def _problem(dims, activation="relu", n=5, seed=0):
    rng = np.random.default_rng(seed)
    network = NetworkDescription(layer_dims=dims, activation=activation)
    weights = init_weights(dims, rng=rng)
    x = rng.standard_normal((n, dims[0]))
    y = rng.standard_normal((n, dims[-1]))
    return network, weights, x, y


def numerical_gradient(f, weights, epsilon=1e-5):
    grads = []
    for W in weights:
        grad = np.zeros_like(W)
        it = np.nditer(W, flags=["multi_index"])
        while not it.finished:
            idx = it.multi_index
            original = W[idx]
            W[idx] = original + epsilon
            loss_plus = f(weights)
            W[idx] = original - epsilon
            loss_minus = f(weights)
            W[idx] = original
            grad[idx] = (loss_plus - loss_minus) / (2 * epsilon)
            it.iternext()
        grads.append(grad)
    return grads


def test_forward_shapes_and_bias_augmentation():
    network, weights, x, _ = _problem([2, 3, 4, 1])
    state = forward(weights, x, network)
    assert len(state.activations) == 4
    assert len(state.preactivations) == 4
    assert state.preactivations[0] is None
    assert np.array_equal(state.activations[0][:, 0], np.ones(x.shape[0]))
    assert np.array_equal(state.activations[0][:, 1:], x)
    assert state.activations[1].shape == (5, 4)
    assert state.activations[2].shape == (5, 5)
    assert np.array_equal(state.activations[1][:, 0], np.ones(5))
    assert state.output.shape == (5, 1)


def test_output_layer_is_not_activated():
    network, weights, x, _ = _problem([2, 3, 1])
    # Force a negative pre-activation at the output to make ReLU visible
    weights[-1][:, 0] = -100.0
    output, activations, preactivations = forward(weights, x, network)
    assert np.array_equal(activations[-1], preactivations[-1])
    assert np.all(output < 0)


def test_hidden_layer_uses_configured_activation():
    network, weights, x, _ = _problem([2, 3, 1], activation="sigmoid")
    state = forward(weights, x, network)
    expected = 1.0 / (1.0 + np.exp(-state.preactivations[1]))
    assert np.allclose(state.activations[1][:, 1:], expected)


def test_forward_rejects_wrong_input_width():
    network, weights, x, _ = _problem([2, 3, 1])
    with pytest.raises(ShapeMismatchError):
        forward(weights, np.hstack([x, x]), network)


def test_predict_matches_forward_output():
    network, weights, x, _ = _problem([3, 4, 2])
    assert np.array_equal(predict(weights, x, network), forward(weights, x, network).output)


def test_cost_of_perfect_prediction_is_zero():
    network, weights, _, y = _problem([2, 3, 2])
    assert cost(y, y, weights, 0.0) == 0.0


def test_cost_value_on_small_example():
    y = np.array([[1.0], [3.0]])
    o = np.array([[0.0], [1.0]])
    W = np.array([[5.0, 1.0, 2.0]])
    # (1 + 4) / (2 * 2) + 0.5 * (1 + 4) / (2 * 2); bias 5.0 is not penalised
    assert cost(y, o, [W], 0.5) == pytest.approx(1.25 + 0.625)


def test_cost_of_zero_examples_is_rejected():
    with pytest.raises(InvalidConfigurationError):
        squared_error(np.zeros((0, 1)), np.zeros((0, 1)))


def test_cost_promotes_scalars():
    assert cost(3.0, 1.0, [], 0.0) == pytest.approx(2.0)
    assert squared_error(np.array(2.0), np.array([[2.0]])) == 0.0


def test_cost_rejects_mismatched_shapes_and_negative_lambda():
    with pytest.raises(ShapeMismatchError):
        cost(np.ones((3, 1)), np.ones((3, 2)), [], 0.0)
    with pytest.raises(InvalidConfigurationError):
        cost(np.ones((3, 1)), np.ones((3, 1)), [], -1.0)


def test_regularization_ignores_bias_column():
    _, weights, _, _ = _problem([2, 3, 1])
    before = regularization_penalty(weights, 0.7, 5)
    perturbed = [W.copy() for W in weights]
    for W in perturbed:
        W[:, 0] += 10.0
    assert regularization_penalty(perturbed, 0.7, 5) == pytest.approx(before)
    perturbed[0][0, 1] += 1.0
    assert regularization_penalty(perturbed, 0.7, 5) != pytest.approx(before)


@pytest.mark.parametrize("activation", ["sigmoid", "relu"])
@pytest.mark.parametrize("lam", [0.0, 0.5])
def test_gradients_match_finite_differences(activation, lam):
    network, weights, x, y = _problem([2, 3, 1], activation=activation, seed=42)

    state = forward(weights, x, network)
    analytic = backward(lam, weights, state, y, network)

    def loss_fn(ws):
        return cost(y, forward(ws, x, network).output, ws, lam)

    numeric = numerical_gradient(loss_fn, [W.copy() for W in weights])
    for a, n, W in zip(analytic, numeric, weights):
        assert a.shape == W.shape
        assert np.max(np.abs(a - n)) < 1e-4


def test_gradients_match_for_deeper_multi_output_network():
    network, weights, x, y = _problem([3, 4, 3, 2], activation="sigmoid", n=6, seed=3)
    lam = 0.1
    state = forward(weights, x, network)
    analytic = backward(lam, weights, state, y, network)

    def loss_fn(ws):
        return cost(y, forward(ws, x, network).output, ws, lam)

    numeric = numerical_gradient(loss_fn, [W.copy() for W in weights])
    for a, n in zip(analytic, numeric):
        assert np.max(np.abs(a - n)) < 1e-4


def test_output_delta_is_prediction_error():
    network, weights, x, y = _problem([2, 3, 2])
    state = forward(weights, x, network)
    deltas = backprop_deltas(weights, state, y, network)
    assert len(deltas) == len(weights)
    assert np.allclose(deltas[-1], state.output - y)
    assert deltas[0].shape == (x.shape[0], 3)


def test_bias_gradient_is_not_regularised():
    network, weights, x, y = _problem([2, 3, 1])
    state = forward(weights, x, network)
    plain = backward(0.0, weights, state, y, network)
    regularised = backward(2.0, weights, state, y, network)
    m = x.shape[0]
    for p, r, W in zip(plain, regularised, weights):
        assert np.allclose(p[:, 0], r[:, 0])
        assert np.allclose(r[:, 1:] - p[:, 1:], 2.0 / m * W[:, 1:])


def test_backward_does_not_mutate_weights():
    network, weights, x, y = _problem([2, 3, 1])
    snapshot = [W.copy() for W in weights]
    backward(1.0, weights, forward(weights, x, network), y, network)
    for W, S in zip(weights, snapshot):
        assert np.array_equal(W, S)


def test_full_batch_gradient_is_order_independent():
    network, weights, x, y = _problem([2, 3, 1], n=8)
    perm = np.random.default_rng(5).permutation(x.shape[0])
    first = backward(0.1, weights, forward(weights, x, network), y, network)
    second = backward(0.1, weights, forward(weights, x[perm], network), y[perm], network)
    for a, b in zip(first, second):
        assert np.allclose(a, b)
