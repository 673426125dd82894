"""Dataset registry and metadata contracts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, MutableMapping

import numpy as np

from ..core.types import Array


@dataclass(frozen=True)
class Dataset:
    """A train/test split of a regression dataset.

    Attributes
    ----------
    name:
        Registry identifier the dataset was built from.
    x_train, y_train, x_test, y_test:
        2-D float arrays with one example per row.
    provenance:
        Free-form metadata (generator parameters, source path, normalisation)
        recorded in run manifests.
    """

    name: str
    x_train: Array
    y_train: Array
    x_test: Array
    y_test: Array
    provenance: Dict[str, Any] = field(default_factory=dict)

    @property
    def d_in(self) -> int:
        return int(self.x_train.shape[1])

    @property
    def d_out(self) -> int:
        return int(self.y_train.shape[1])

    @property
    def splits(self) -> Dict[str, int]:
        return {"train": int(self.x_train.shape[0]), "test": int(self.x_test.shape[0])}


DatasetFactory = Callable[..., Dataset]


_REGISTRY: MutableMapping[str, DatasetFactory] = {}


def register_dataset(
    name: str | None = None,
    factory: DatasetFactory | None = None,
) -> Callable[[DatasetFactory], DatasetFactory] | DatasetFactory:
    """Register a dataset factory.

    ``register_dataset`` can be used both as a decorator::

        @register_dataset("linear")
        def make_linear(**kwargs):
            ...

    or directly::

        register_dataset("linear", make_linear)
    """

    def _decorator(func: DatasetFactory) -> DatasetFactory:
        _REGISTRY[str(name or func.__name__)] = func
        return func

    if factory is not None:
        return _decorator(factory)
    if name is None:
        raise TypeError("register_dataset requires a name when used without a decorator")
    return _decorator


def get_dataset(name: str, /, **options: Any) -> Dataset:
    """Build the dataset registered under ``name``."""

    if name not in _REGISTRY:
        available = ", ".join(available_datasets())
        raise KeyError(f"Unknown dataset: {name}. Available datasets: {available}")
    dataset = _REGISTRY[name](**options)
    _validate(dataset)
    return dataset


def available_datasets() -> Iterable[str]:
    """Return the sorted list of available dataset identifiers."""

    return sorted(_REGISTRY)


def _validate(dataset: Dataset) -> None:
    for split, x, y in (
        ("train", dataset.x_train, dataset.y_train),
        ("test", dataset.x_test, dataset.y_test),
    ):
        if np.ndim(x) != 2 or np.ndim(y) != 2:
            raise ValueError(f"Dataset {dataset.name!r} {split} arrays must be 2-D")
        if x.shape[0] != y.shape[0]:
            raise ValueError(
                f"Dataset {dataset.name!r} {split} split has {x.shape[0]} inputs "
                f"but {y.shape[0]} targets"
            )
    if dataset.x_train.shape[1] != dataset.x_test.shape[1]:
        raise ValueError(f"Dataset {dataset.name!r} train/test input widths differ")
    if dataset.y_train.shape[1] != dataset.y_test.shape[1]:
        raise ValueError(f"Dataset {dataset.name!r} train/test target widths differ")


get = get_dataset

__all__ = [
    "Dataset",
    "available_datasets",
    "get",
    "get_dataset",
    "register_dataset",
]
