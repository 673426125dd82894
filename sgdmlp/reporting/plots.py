"""Headless-safe plotting of error curves."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Mapping


class PlotAdapter:
    """Collect per-step costs and optionally render them with matplotlib."""

    def __init__(self, run_dir: str | Path, enable_plots: bool = False):
        self.enable_plots = enable_plots
        self.run_dir = Path(run_dir)
        self._history: Dict[str, List[tuple[int, float]]] = {}
        if self.enable_plots:
            self.run_dir.mkdir(parents=True, exist_ok=True)

    def on_step(self, step: int, metrics: Mapping[str, float]) -> None:
        if not self.enable_plots:
            return
        for name, value in metrics.items():
            self._history.setdefault(name, []).append((int(step), float(value)))

    def close(self) -> str | None:
        if not self.enable_plots or not self._history:
            return None
        import matplotlib

        matplotlib.use("Agg", force=True)
        import matplotlib.pyplot as plt  # imported lazily for headless safety

        fig, ax = plt.subplots()
        for name in sorted(self._history):
            steps, values = zip(*self._history[name])
            ax.plot(steps, values, label=name)
        ax.set_xlabel("Iteration")
        ax.set_ylabel("Cost")
        ax.set_title("Training curve")
        ax.legend()
        plot_path = self.run_dir / "cost.png"
        fig.savefig(plot_path)
        plt.close(fig)
        return str(plot_path)

    __call__ = on_step


__all__ = ["PlotAdapter"]
