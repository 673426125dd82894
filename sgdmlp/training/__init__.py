"""Training loop, sampling and config-driven pipelines."""

from .sampling import MiniBatchSampler, RandomSampler
from .trainer import LEARNING_RATE_DECAY, SGDOptimizer, Trainer, check_hyperparameters, train

__all__ = [
    "LEARNING_RATE_DECAY",
    "MiniBatchSampler",
    "RandomSampler",
    "SGDOptimizer",
    "Trainer",
    "check_hyperparameters",
    "train",
]
