"""Config-driven training runs with on-disk artifacts."""

from __future__ import annotations

import json
import time
from copy import deepcopy
from pathlib import Path
from typing import Dict, List, Mapping, Sequence

import numpy as np

from ..core.cost import cost
from ..core.errors import InvalidConfigurationError
from ..core.initializers import init_weights
from ..core.network import NetworkDescription
from ..core.propagation import predict
from ..core.types import RunResult, Weights
from ..data import registry
from ..persistence import load_weights, save_weights
from ..reporting.artifacts import write_manifest
from ..reporting.metrics import CsvSink, JsonlSink
from ..reporting.plots import PlotAdapter
from ..reporting.summary import write_summary
from .metrics import DEFAULT_METRICS, compute_metrics
from .sampling import RandomSampler
from .trainer import SGDOptimizer, Trainer, check_hyperparameters

_PRESETS: Dict[str, Mapping[str, object]] = {
    "linear-identity": {
        "data": {
            "name": "linear",
            "options": {"slope": 2.0, "n_points": 64, "seed": 0},
        },
        "model": {"hidden": [], "activation": "relu"},
        "train": {
            "batch_size": 16,
            "lambda": 0.0,
            "lr": 0.1,
            "max_iterations": 400,
            "seed": 0,
            "debug": True,
            "run_dir": "runs/linear-identity",
            "enable_plots": False,
        },
    },
    "sine-relu": {
        "data": {
            "name": "synthetic",
            "options": {"freq": 1, "n_points": 256, "seed": 0},
        },
        "model": {"hidden": [16], "activation": "relu"},
        "train": {
            "batch_size": 32,
            "lambda": 1e-4,
            "lr": 0.05,
            "max_iterations": 2000,
            "seed": 7,
            "debug": True,
            "run_dir": "runs/sine-relu",
            "enable_plots": False,
        },
    },
    "sine-sigmoid": {
        "data": {
            "name": "synthetic",
            "options": {"freq": 1, "n_points": 256, "seed": 0},
        },
        "model": {"hidden": [16, 16], "activation": "sigmoid"},
        "train": {
            "batch_size": 32,
            "lambda": 1e-4,
            "lr": 0.2,
            "max_iterations": 3000,
            "seed": 11,
            "debug": True,
            "run_dir": "runs/sine-sigmoid",
            "enable_plots": False,
        },
    },
    "csv-regression": {
        "data": {"name": "csv_regression", "options": {"seed": 0}},
        "model": {"hidden": [8], "activation": "relu"},
        "train": {
            "batch_size": 8,
            "lambda": 1e-3,
            "lr": 0.05,
            "max_iterations": 1000,
            "seed": 3,
            "debug": False,
            "run_dir": "runs/csv-regression",
            "enable_plots": False,
        },
    },
    "lambda-sweep": {
        "sweep": {"lambdas": [0.0, 0.01, 0.1], "seeds": [0, 1]},
        "data": {
            "name": "synthetic",
            "options": {"freq": 1, "n_points": 128, "seed": 0},
        },
        "model": {"hidden": [8], "activation": "relu"},
        "train": {
            "batch_size": 16,
            "lr": 0.05,
            "max_iterations": 300,
            "debug": True,
            "run_dir": "runs/lambda-sweep",
            "enable_plots": False,
        },
    },
}

_PRESET_DIR = Path(__file__).resolve().parents[2] / "configs" / "presets"
_FILE_PRESETS_CACHE: Dict[str, Mapping[str, object]] | None = None

REQUIRED_SECTIONS = {"data", "model", "train"}


def read_config_file(path: Path) -> Mapping[str, object]:
    """Decode a JSON or YAML config file into a mapping."""

    text = path.read_text()
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        import yaml

        data = yaml.safe_load(text) or {}
    elif suffix == ".json":
        data = json.loads(text or "{}")
    else:
        raise ValueError(f"Unsupported config file type: {path.suffix}")

    if not isinstance(data, Mapping):
        raise TypeError(f"Config {path.name} must decode to a mapping")
    return data


def _file_presets() -> Dict[str, Mapping[str, object]]:
    global _FILE_PRESETS_CACHE
    if _FILE_PRESETS_CACHE is None:
        presets: Dict[str, Mapping[str, object]] = {}
        if _PRESET_DIR.exists():
            for file in sorted(_PRESET_DIR.iterdir()):
                if file.suffix.lower() not in {".yaml", ".yml", ".json"}:
                    continue
                data = read_config_file(file)
                missing = REQUIRED_SECTIONS - set(data)
                if missing:
                    missing_str = ", ".join(sorted(missing))
                    raise KeyError(f"Preset {file.name} is missing required sections: {missing_str}")
                presets[file.stem] = json.loads(json.dumps(data))
        _FILE_PRESETS_CACHE = presets
    return {name: deepcopy(cfg) for name, cfg in _FILE_PRESETS_CACHE.items()}


def presets() -> Mapping[str, Mapping[str, object]]:
    combined: Dict[str, Mapping[str, object]] = {}
    combined.update({name: deepcopy(cfg) for name, cfg in _PRESETS.items()})
    combined.update(_file_presets())
    return combined


def load_preset(name: str) -> Mapping[str, object]:
    file_overrides = _file_presets()
    if name in file_overrides:
        return file_overrides[name]
    try:
        return deepcopy(_PRESETS[name])
    except KeyError as exc:
        raise KeyError(f"Unknown preset: {name}") from exc


def run_pipeline(config: Mapping[str, object]) -> RunResult | List[RunResult]:
    if "sweep" in config:
        return _run_sweep(config)
    return _train_single(config)


def _run_sweep(config: Mapping[str, object]) -> List[RunResult]:
    sweep_cfg = config["sweep"]
    base_dir = Path(str(config.get("train", {}).get("run_dir", "runs/sweep")))
    results: List[RunResult] = []
    for lam in sweep_cfg.get("lambdas", [0.0]):
        for seed in sweep_cfg.get("seeds", [0]):
            cfg = deepcopy(dict(config))
            cfg.pop("sweep", None)
            train_cfg = cfg.setdefault("train", {})
            train_cfg.update({"lambda": lam, "seed": seed})
            train_cfg["run_dir"] = str(base_dir / f"lambda{lam:g}_seed{seed}")
            results.append(_train_single(cfg))
    return results


def _train_single(config: Mapping[str, object]) -> RunResult:
    missing = REQUIRED_SECTIONS - set(config)
    if missing:
        raise KeyError(f"Config is missing required sections: {', '.join(sorted(missing))}")
    data_cfg = dict(config["data"])
    model_cfg = dict(config["model"])
    train_cfg = dict(config["train"])

    dataset = registry.get_dataset(str(data_cfg["name"]), **dict(data_cfg.get("options", {})))

    d_in = int(model_cfg.get("d_in", dataset.d_in))
    d_out = int(model_cfg.get("d_out", dataset.d_out))
    if d_in != dataset.d_in:
        raise InvalidConfigurationError(f"Configured d_in={d_in} but dataset has {dataset.d_in}")
    if d_out != dataset.d_out:
        raise InvalidConfigurationError(f"Configured d_out={d_out} but dataset has {dataset.d_out}")

    hidden_dims = _build_hidden(model_cfg)
    dims = [d_in, *hidden_dims, d_out]
    network = NetworkDescription(layer_dims=dims, activation=str(model_cfg.get("activation", "relu")))

    seed = int(train_cfg.get("seed", 0))
    debug = bool(train_cfg.get("debug", False))
    batch_size, lam, max_iterations, lr = check_hyperparameters(
        train_cfg.get("batch_size", min(32, dataset.splits["train"])),
        dataset.splits["train"],
        train_cfg.get("lambda", 0.0),
        train_cfg.get("max_iterations", 1000),
        learning_rate=train_cfg.get("lr", 0.01),
        n_test=dataset.splits["test"],
        debug=debug,
    )

    if train_cfg.get("init_weights"):
        initial = load_weights(str(train_cfg["init_weights"]))
    else:
        initial = init_weights(dims, rng=np.random.default_rng(seed))
    network.check_weights(initial)

    run_dir = _resolve_run_dir(train_cfg, dataset.name)
    run_dir.mkdir(parents=True, exist_ok=True)

    _print_startup_summary(
        dataset_name=dataset.name,
        dims=dims,
        activation=network.activation,
        lam=lam,
        lr=lr,
        batch_size=batch_size,
        max_iterations=max_iterations,
        param_count=network.parameter_count(),
    )

    jsonl = JsonlSink(run_dir / "metrics.jsonl", seed=seed)
    csv_sink = CsvSink(run_dir / "metrics.csv")
    plots = PlotAdapter(run_dir, enable_plots=bool(train_cfg.get("enable_plots", False)))

    trainer = Trainer(
        network=network,
        optimizer=SGDOptimizer(lr=lr),
        # Offset keeps batch draws independent of the initial weight draws.
        sampler=RandomSampler.from_seed(seed + 1),
        callbacks=[jsonl, csv_sink, plots],
    )
    result = trainer.run(
        initial,
        dataset.x_train,
        dataset.y_train,
        dataset.x_test,
        dataset.y_test,
        mini_batch_size=batch_size,
        lam=lam,
        max_iterations=max_iterations,
        debug=debug,
    )
    plots.close()

    weights_path = save_weights(result.weights, run_dir / "weights.txt")
    final_metrics = {
        "train": _evaluate(result.weights, network, dataset.x_train, dataset.y_train, lam),
        "test": _evaluate(result.weights, network, dataset.x_test, dataset.y_test, lam),
    }
    (run_dir / "metrics_final.json").write_text(json.dumps(final_metrics, indent=2, sort_keys=True))

    safe_config = _safe_config(config, hidden_dims)
    manifest = write_manifest(
        run_dir / "manifest.json",
        config=safe_config,
        dataset_provenance=dataset.provenance,
        layer_dims=dims,
        steps=result.steps,
    )
    summary_path = write_summary(
        run_dir / "summary.json",
        series={"train_cost": result.train_errors, "test_cost": result.test_errors},
        final_metrics=final_metrics,
        steps=result.steps,
        tail=int(train_cfg.get("summary_tail", 32)),
    )
    (run_dir / "config.json").write_text(json.dumps(safe_config, indent=2))

    return RunResult(
        steps=result.steps,
        weights_path=weights_path,
        metrics_path=str(jsonl.path),
        manifest_path=manifest,
        summary_path=summary_path,
    )


def _evaluate(
    weights: Weights, network: NetworkDescription, x: np.ndarray, y: np.ndarray, lam: float
) -> Mapping[str, float]:
    if x.shape[0] == 0:
        return {}
    output = predict(weights, x, network)
    metrics = dict(compute_metrics(DEFAULT_METRICS, output, y))
    metrics["cost"] = cost(y, output, weights, lam)
    return metrics


def _resolve_run_dir(train_cfg: Mapping[str, object], dataset: str) -> Path:
    if "run_dir" in train_cfg:
        return Path(str(train_cfg["run_dir"]))
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return Path("runs") / timestamp / dataset


def _build_hidden(config: Mapping[str, object]) -> List[int]:
    if "hidden" in config:
        return [int(h) for h in config["hidden"]]  # type: ignore[union-attr]
    hidden_dim = int(config.get("hidden_dim", 16))
    depth = int(config.get("depth", 1))
    return [hidden_dim for _ in range(depth)]


def _safe_config(config: Mapping[str, object], hidden_dims: Sequence[int]) -> Mapping[str, object]:
    copied = json.loads(json.dumps(config))
    copied.setdefault("model", {})["hidden"] = list(hidden_dims)
    return copied


def _print_startup_summary(
    *,
    dataset_name: str,
    dims: Sequence[int],
    activation: str,
    lam: float,
    lr: float,
    batch_size: int,
    max_iterations: int,
    param_count: int,
) -> None:
    print("=== sgdmlp run ===")
    print(f"Dataset       : {dataset_name}")
    print(f"Architecture  : {list(dims)}")
    print(f"Activation    : {activation}")
    print(f"Lambda        : {lam}")
    print(f"Learning rate : {lr}")
    print(f"Batch size    : {batch_size}")
    print(f"Iterations    : {max_iterations}")
    print(f"Parameters    : {param_count}")
    print("==================")


__all__ = ["load_preset", "presets", "read_config_file", "run_pipeline"]
