"""sgdmlp public API."""

from .core import activations  # noqa: F401
from .core import types  # noqa: F401
from .core.cost import cost, regularization_penalty
from .core.errors import (
    InvalidConfigurationError,
    ModelFormatError,
    SgdMlpError,
    ShapeMismatchError,
)
from .core.initializers import init_weights
from .core.network import NetworkDescription
from .core.propagation import backward, forward, predict
from .core.types import ForwardState, TrainResult
from .persistence import load_weights, save_weights
from .training.pipelines import load_preset, presets, run_pipeline
from .training.sampling import RandomSampler
from .training.trainer import Trainer, train

__version__ = "0.1.0"

__all__ = [
    "ForwardState",
    "InvalidConfigurationError",
    "ModelFormatError",
    "NetworkDescription",
    "RandomSampler",
    "SgdMlpError",
    "ShapeMismatchError",
    "TrainResult",
    "Trainer",
    "activations",
    "backward",
    "cost",
    "forward",
    "init_weights",
    "load_preset",
    "load_weights",
    "predict",
    "presets",
    "regularization_penalty",
    "run_pipeline",
    "save_weights",
    "train",
    "types",
]
