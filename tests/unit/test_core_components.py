import warnings

import numpy as np
import pytest

from sgdmlp.core import matrix as mx
from sgdmlp.core.activations import (
    available_activations,
    get_activation,
    relu,
    relu_derivative,
    sigmoid,
    sigmoid_derivative,
)
from sgdmlp.core.errors import InvalidConfigurationError, ShapeMismatchError
from sgdmlp.core.initializers import init_epsilon, init_weights
from sgdmlp.core.network import NetworkDescription


def test_relu_and_derivative():
    x = np.array([[-1.0, 0.0, 2.5]])
    assert np.array_equal(relu(x), np.array([[0.0, 0.0, 2.5]]))
    # Subgradient at zero is zero
    assert np.array_equal(relu_derivative(x), np.array([[0.0, 0.0, 1.0]]))


def test_sigmoid_derivative_matches_closed_form():
    x = np.linspace(-3.0, 3.0, 7).reshape(1, -1)
    s = 1.0 / (1.0 + np.exp(-x))
    assert np.allclose(sigmoid(x), s)
    assert np.allclose(sigmoid_derivative(x), s * (1 - s))


def test_sigmoid_saturates_without_raising():
    x = np.array([[-1000.0, 1000.0]])
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        out = sigmoid(x)
    assert out[0, 0] == 0.0
    assert out[0, 1] == 1.0


def test_activation_lift_preserves_shape():
    x = np.arange(12, dtype=np.float64).reshape(3, 4) - 6
    for name in ("relu", "sigmoid", "identity"):
        act = get_activation(name)
        assert act(x).shape == x.shape
        assert act.derivative(x).shape == x.shape


def test_unknown_activation_is_rejected():
    assert list(available_activations()) == ["identity", "relu", "sigmoid"]
    with pytest.raises(InvalidConfigurationError, match="identity, relu, sigmoid"):
        get_activation("tanh")


def test_initializer_shape_and_range():
    weights = init_weights([3, 5], rng=0)
    assert len(weights) == 1
    assert weights[0].shape == (5, 4)
    eps = init_epsilon(3, 5)
    assert eps == pytest.approx(np.sqrt(6) / np.sqrt(8))
    assert np.all(np.abs(weights[0]) <= eps)


def test_initializer_one_matrix_per_transition():
    dims = [4, 6, 3, 2]
    weights = init_weights(dims, rng=np.random.default_rng(1))
    assert [W.shape for W in weights] == [(6, 5), (3, 7), (2, 4)]
    for W, (l_in, l_out) in zip(weights, zip(dims[:-1], dims[1:])):
        assert np.all(np.abs(W) <= init_epsilon(l_in, l_out))


def test_initializer_is_reproducible_with_seed():
    first = init_weights([2, 3, 1], rng=7)
    second = init_weights([2, 3, 1], rng=7)
    for a, b in zip(first, second):
        assert np.array_equal(a, b)


@pytest.mark.parametrize("dims", [[3], [], [2, 0, 1], [2, -1]])
def test_invalid_architectures_are_rejected(dims):
    with pytest.raises(InvalidConfigurationError):
        NetworkDescription(layer_dims=dims)


def test_output_layer_is_identity():
    network = NetworkDescription(layer_dims=[2, 4, 4, 1], activation="sigmoid")
    assert network.layer_activation(0).name == "sigmoid"
    assert network.layer_activation(1).name == "sigmoid"
    assert network.layer_activation(2).name == "identity"
    assert network.parameter_count() == 4 * 3 + 4 * 5 + 1 * 5


def test_check_weights_rejects_wrong_shapes():
    network = NetworkDescription(layer_dims=[2, 3, 1])
    weights = init_weights([2, 3, 1], rng=0)
    network.check_weights(weights)
    with pytest.raises(ShapeMismatchError):
        network.check_weights([weights[0], np.zeros((1, 3))])
    with pytest.raises(ShapeMismatchError):
        network.check_weights(weights[:1])


def test_matrix_helpers_refuse_to_broadcast():
    column = np.ones((3, 1))
    with pytest.raises(ShapeMismatchError):
        mx.subtract(column, np.ones((1, 3)))
    with pytest.raises(ShapeMismatchError):
        mx.hadamard(column, np.ones((3, 2)))
    with pytest.raises(ShapeMismatchError):
        mx.matmul(np.ones((2, 3)), np.ones((2, 3)))


def test_matrix_promotion_and_bias_columns():
    assert mx.as_matrix(3.0).shape == (1, 1)
    assert mx.as_matrix([1.0, 2.0]).shape == (2, 1)
    a = mx.from_rows([[1, 2], [3, 4]])
    augmented = mx.prepend_column(a)
    assert np.array_equal(augmented[:, 0], np.ones(2))
    assert np.array_equal(mx.drop_first_column(augmented), a)
    assert np.array_equal(mx.prepend_row(a, 0.0)[0], np.zeros(2))
    assert np.array_equal(mx.select_rows(a, [1]), np.array([[3.0, 4.0]]))
    assert np.array_equal(mx.flatten(a), np.array([1.0, 2.0, 3.0, 4.0]))
    assert np.array_equal(mx.submatrix(augmented, slice(0, 1), slice(1, None)), np.array([[1.0, 2.0]]))
    assert mx.submatrix(a, slice(1, 2), slice(0, 1)).shape == (1, 1)
    with pytest.raises(ShapeMismatchError):
        mx.from_rows([[1, 2], [3]])
