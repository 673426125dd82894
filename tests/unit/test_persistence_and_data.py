import json

import numpy as np
import pytest

from sgdmlp.core.errors import ModelFormatError
from sgdmlp.core.initializers import init_weights
from sgdmlp.data import available_datasets, get_dataset
from sgdmlp.data.utils import deterministic_split
from sgdmlp.persistence import dumps_weights, load_weights, loads_weights, save_weights
from sgdmlp.reporting.plots import PlotAdapter
from sgdmlp.reporting.summary import compute_auc, write_summary
from sgdmlp.training.metrics import compute_metrics


def test_weights_survive_save_and_load_exactly(tmp_path):
    weights = init_weights([3, 4, 2], rng=0)
    path = save_weights(weights, tmp_path / "model" / "weights.txt")
    loaded = load_weights(path)
    assert len(loaded) == 2
    for original, restored in zip(weights, loaded):
        assert restored.shape == original.shape
        assert np.array_equal(restored, original)


def test_weight_file_is_line_oriented():
    text = dumps_weights([np.array([[0.5, -1.0, 2.0]])])
    assert text.splitlines() == [
        "sgdmlp-weights 1",
        "layers 1",
        "matrix 1 3",
        "0.5 -1.0 2.0",
    ]


@pytest.mark.parametrize(
    "text",
    [
        "",
        "not-a-model 1\n",
        "sgdmlp-weights 2\nlayers 0\n",
        "sgdmlp-weights 1\nlayers 1\nmatrix 2 2\n1 2\n",
        "sgdmlp-weights 1\nlayers 1\nmatrix 1 2\n1 2 3\n",
        "sgdmlp-weights 1\nlayers 1\nmatrix 1 2\n1 x\n",
        "sgdmlp-weights 1\nlayers 1\nmatrix 1 1\n1\n2\n",
    ],
)
def test_malformed_weight_files_are_rejected(text):
    with pytest.raises(ModelFormatError):
        loads_weights(text)


def test_builtin_datasets_are_registered():
    assert {"linear", "synthetic", "csv_regression"} <= set(available_datasets())
    with pytest.raises(KeyError):
        get_dataset("does-not-exist")


def test_linear_dataset_follows_its_formula():
    ds = get_dataset("linear", slope=2.0, intercept=1.0, n_points=20, test_split=0.25)
    assert ds.splits == {"train": 15, "test": 5}
    assert np.allclose(ds.y_train, 2.0 * ds.x_train + 1.0)
    assert ds.d_in == 1 and ds.d_out == 1
    assert ds.provenance["slope"] == 2.0


def test_synthetic_dataset_is_deterministic():
    first = get_dataset("synthetic", freq=2, n_points=64, seed=3)
    second = get_dataset("synthetic", freq=2, n_points=64, seed=3)
    assert np.array_equal(first.x_train, second.x_train)
    assert np.array_equal(first.y_test, second.y_test)


def test_csv_fixture_loads_with_standardised_inputs():
    ds = get_dataset("csv_regression", test_split=0.25, seed=1)
    assert ds.d_in == 2
    assert ds.d_out == 1
    assert ds.splits == {"train": 30, "test": 10}
    inputs = np.vstack([ds.x_train, ds.x_test])
    assert np.allclose(inputs.mean(axis=0), 0.0, atol=1e-9)
    assert ds.provenance["normalization"]["inputs"]["std"]


def test_deterministic_split_partitions_indices():
    splits = deterministic_split(10, test_split=0.3, seed=0)
    assert splits.sizes == {"train": 7, "test": 3}
    assert sorted(np.concatenate([splits.train, splits.test]).tolist()) == list(range(10))
    with pytest.raises(ValueError):
        deterministic_split(10, test_split=1.0)


def test_regression_metrics():
    targets = np.array([[1.0], [2.0], [3.0]])
    metrics = compute_metrics(["mae", "rmse", "r2"], targets + 1.0, targets)
    assert metrics["mae"] == pytest.approx(1.0)
    assert metrics["rmse"] == pytest.approx(1.0)
    assert metrics["r2"] == pytest.approx(1 - 3.0 / 2.0)
    with pytest.raises(KeyError):
        compute_metrics(["accuracy"], targets, targets)


def test_summary_is_deterministic(tmp_path):
    series = {"train_cost": [3.0, 2.0, 1.0], "test_cost": []}
    final = {"test": {"mae": 0.5}}
    a = write_summary(tmp_path / "a.json", series=series, final_metrics=final, steps=3, tail=2)
    b = write_summary(tmp_path / "b.json", series=series, final_metrics=final, steps=3, tail=2)
    assert open(a).read() == open(b).read()
    payload = json.loads(open(a).read())
    assert payload["series"]["train_cost"]["last"] == 1.0
    assert payload["series"]["train_cost"]["tail_auc"] == pytest.approx(1.5)
    assert payload["tail_window"] == 2
    assert payload["series"]["test_cost"] == {}
    assert compute_auc([1.0]) == 0.0
    assert compute_auc([]) == 0.0
    assert compute_auc([0.0, 2.0, 4.0]) == pytest.approx(4.0)

    wide = write_summary(tmp_path / "c.json", series=series, final_metrics=final, steps=3, tail=32)
    assert json.loads(open(wide).read())["tail_window"] == 3


def test_plot_adapter_headless(tmp_path):
    adapter = PlotAdapter(tmp_path, enable_plots=True)
    adapter.on_step(1, {"train_cost": 1.0, "test_cost": 1.2})
    adapter.on_step(2, {"train_cost": 0.5, "test_cost": 0.7})
    path = adapter.close()
    assert path is not None
    assert (tmp_path / "cost.png").exists()


def test_plot_adapter_disabled_writes_nothing(tmp_path):
    adapter = PlotAdapter(tmp_path / "off")
    adapter.on_step(1, {"train_cost": 1.0})
    assert adapter.close() is None
    assert not (tmp_path / "off").exists()
