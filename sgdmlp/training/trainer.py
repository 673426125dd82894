"""Mini-batch gradient-descent training loop."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Sequence

import numpy as np

from ..core import matrix as mx
from ..core.activations import DEFAULT_ACTIVATION, Activation
from ..core.cost import cost
from ..core.errors import InvalidConfigurationError, ShapeMismatchError
from ..core.network import NetworkDescription
from ..core.propagation import backward, forward
from ..core.types import Array, Batch, TrainResult, Weights
from .sampling import MiniBatchSampler, RandomSampler

logger = logging.getLogger(__name__)

# Learning-rate decay is disabled: the step divisor 1 + (t - 1) * 0.0 is always 1.
LEARNING_RATE_DECAY = 0.0

GradientHook = Callable[[int, Weights], None]
StopSignal = Callable[[int], bool]


@dataclass
class SGDOptimizer:
    """Plain gradient descent producing a fresh weight list every step."""

    lr: float
    decay: float = LEARNING_RATE_DECAY

    def step_size(self, t: int) -> float:
        return self.lr / (1.0 + (t - 1) * self.decay)

    def step(self, weights: Sequence[Array], grads: Sequence[Array], t: int) -> Weights:
        rate = self.step_size(t)
        return [mx.subtract(W, mx.scale(G, rate)) for W, G in zip(weights, grads)]


class Trainer:
    """Run the fixed-length SGD state machine over a train/test split.

    Each iteration samples a mini-batch without replacement, runs a forward
    and backward pass and replaces the weights. With ``debug`` enabled the
    batch cost and the full test-set cost are recorded before every update.
    """

    def __init__(
        self,
        network: NetworkDescription,
        optimizer: SGDOptimizer,
        sampler: MiniBatchSampler | None = None,
        callbacks: Sequence[object] | None = None,
    ) -> None:
        self.network = network
        self.optimizer = optimizer
        self.sampler = sampler or RandomSampler()
        self.callbacks = list(callbacks or [])

    def run(
        self,
        initial_weights: Sequence[Array],
        x_train: Array,
        y_train: Array,
        x_test: Array,
        y_test: Array,
        *,
        mini_batch_size: int,
        lam: float,
        max_iterations: int,
        debug: bool = False,
        gradient_hook: GradientHook | None = None,
        should_stop: StopSignal | None = None,
    ) -> TrainResult:
        x_train, y_train = self._check_split("train", x_train, y_train)
        x_test, y_test = self._check_split("test", x_test, y_test)
        self.network.check_weights(initial_weights)
        n_examples = x_train.shape[0]
        mini_batch_size, lam, max_iterations, _ = check_hyperparameters(
            mini_batch_size,
            n_examples,
            lam,
            max_iterations,
            learning_rate=self.optimizer.lr,
            n_test=x_test.shape[0],
            debug=debug,
        )

        weights: Weights = [np.array(W, dtype=np.float64) for W in initial_weights]
        train_errors: List[float] = []
        test_errors: List[float] = []
        logger.debug(
            "Training %s for %d updates, batch=%d, lambda=%g, lr=%g",
            list(self.network.layer_dims),
            max_iterations - 1,
            mini_batch_size,
            lam,
            self.optimizer.lr,
        )

        t = 1
        while t < max_iterations:
            if should_stop is not None and should_stop(t):
                logger.debug("Stop requested before iteration %d", t)
                break
            indices = self.sampler.sample(n_examples, mini_batch_size)
            batch = Batch(mx.select_rows(x_train, indices), mx.select_rows(y_train, indices))

            state = forward(weights, batch.inputs, self.network)
            if debug:
                train_cost = cost(batch.targets, state.output, weights, lam)
                test_output = forward(weights, x_test, self.network).output
                test_cost = cost(y_test, test_output, weights, lam)
                train_errors.append(train_cost)
                test_errors.append(test_cost)
                self._emit_step(t, {"train_cost": train_cost, "test_cost": test_cost})

            grads = backward(lam, weights, state, batch.targets, self.network)
            if gradient_hook is not None:
                gradient_hook(t, grads)
            weights = self.optimizer.step(weights, grads, t)
            t += 1

        return TrainResult(
            weights=weights,
            train_errors=train_errors,
            test_errors=test_errors,
            steps=t - 1,
        )

    # ------------------------------------------------------------------
    # Internal helpers

    def _check_split(self, split: str, x: Array, y: Array) -> tuple[Array, Array]:
        x = mx.as_matrix(x)
        y = mx.as_matrix(y)
        dims = self.network.layer_dims
        if x.shape[0] != y.shape[0]:
            raise ShapeMismatchError(
                f"{split} inputs have {x.shape[0]} rows but targets have {y.shape[0]}"
            )
        if x.shape[1] != dims[0]:
            raise ShapeMismatchError(
                f"{split} inputs have {x.shape[1]} columns, architecture expects {dims[0]}"
            )
        if y.shape[1] != dims[-1]:
            raise ShapeMismatchError(
                f"{split} targets have {y.shape[1]} columns, architecture expects {dims[-1]}"
            )
        return x, y

    def _emit_step(self, step: int, metrics: dict[str, float]) -> None:
        for callback in self.callbacks:
            if hasattr(callback, "on_step"):
                callback.on_step(step, metrics)  # type: ignore[attr-defined]
            elif callable(callback):
                callback(step, metrics)


def _require_count(name: str, value: object, minimum: int = 1) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float, np.integer, np.floating)):
        raise InvalidConfigurationError(f"{name} must be an integer, got {value!r}")
    if not np.isfinite(value) or int(value) != value:
        raise InvalidConfigurationError(f"{name} must be an integer, got {value!r}")
    if int(value) < minimum:
        raise InvalidConfigurationError(f"{name} must be >= {minimum}, got {value!r}")
    return int(value)


def _require_finite(name: str, value: object) -> float:
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise InvalidConfigurationError(f"{name} must be a number, got {value!r}") from exc
    if not np.isfinite(number):
        raise InvalidConfigurationError(f"{name} must be finite, got {value!r}")
    return number


def check_hyperparameters(
    mini_batch_size: object,
    n_examples: int,
    lam: object,
    max_iterations: object,
    *,
    learning_rate: object = 0.0,
    n_test: int | None = None,
    debug: bool = False,
) -> tuple[int, float, int, float]:
    """Validate training settings before any iteration runs.

    Returns the normalised ``(mini_batch_size, lam, max_iterations,
    learning_rate)``. Debug runs score the full test split every iteration,
    so they need at least one test example.
    """

    if n_examples < 1:
        raise InvalidConfigurationError("Training set is empty")
    batch = _require_count("mini_batch_size", mini_batch_size)
    if batch > n_examples:
        raise InvalidConfigurationError(
            f"Mini-batch size {batch} must be between 1 and {n_examples}"
        )
    lam_value = _require_finite("lambda", lam)
    if lam_value < 0:
        raise InvalidConfigurationError(f"Regularisation strength must be >= 0, got {lam}")
    iterations = _require_count("max_iterations", max_iterations)
    rate = _require_finite("learning_rate", learning_rate)
    if debug and n_test is not None and n_test < 1:
        raise InvalidConfigurationError(
            "Debug mode records the test cost but the test split is empty"
        )
    return batch, lam_value, iterations, rate


def train(
    mini_batch_size: int,
    initial_weights: Sequence[Array],
    layer_dims: Sequence[int],
    lam: float,
    x_train: Array,
    y_train: Array,
    x_test: Array,
    y_test: Array,
    learning_rate: float,
    max_iterations: int,
    debug: bool = False,
    *,
    activation: str | Activation = DEFAULT_ACTIVATION,
    sampler: MiniBatchSampler | None = None,
    seed: int | None = None,
    gradient_hook: GradientHook | None = None,
    callbacks: Sequence[object] | None = None,
    should_stop: StopSignal | None = None,
) -> TrainResult:
    """Train a network and return its final weights and error series.

    Exactly ``max_iterations - 1`` updates are applied. ``seed`` is only used
    when no ``sampler`` is supplied. The error series stay empty unless
    ``debug`` is set.
    """

    network = NetworkDescription(layer_dims=layer_dims, activation=activation)
    trainer = Trainer(
        network=network,
        optimizer=SGDOptimizer(lr=learning_rate),
        sampler=sampler or RandomSampler.from_seed(seed),
        callbacks=callbacks,
    )
    return trainer.run(
        initial_weights,
        x_train,
        y_train,
        x_test,
        y_test,
        mini_batch_size=mini_batch_size,
        lam=lam,
        max_iterations=max_iterations,
        debug=debug,
        gradient_hook=gradient_hook,
        should_stop=should_stop,
    )


__all__ = ["LEARNING_RATE_DECAY", "SGDOptimizer", "Trainer", "check_hyperparameters", "train"]
