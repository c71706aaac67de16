"""Headless-safe training curve plots."""

from __future__ import annotations

from pathlib import Path
from typing import List, Mapping, Tuple


class PlotAdapter:
    """Collect cost and score per epoch and draw them on :meth:`close`."""

    def __init__(self, run_dir: str | Path, enable_plots: bool = False):
        self.enable_plots = enable_plots
        self.run_dir = Path(run_dir)
        self._history: List[Tuple[int, float, float]] = []
        if self.enable_plots:
            self.run_dir.mkdir(parents=True, exist_ok=True)

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        if not self.enable_plots:
            return
        self._history.append(
            (epoch, float(metrics.get("cost", 0.0)), float(metrics.get("score", 0.0)))
        )

    def close(self) -> str | None:
        if not self.enable_plots or not self._history:
            return None
        import matplotlib

        matplotlib.use("Agg", force=True)
        import matplotlib.pyplot as plt  # imported lazily for headless safety

        epochs, costs, scores = zip(*self._history)
        fig, (top, bottom) = plt.subplots(2, 1, sharex=True)
        top.plot(epochs, costs)
        top.set_ylabel("Cost")
        top.set_title("Training Curve")
        bottom.plot(epochs, scores, color="tab:orange")
        bottom.set_xlabel("Epoch")
        bottom.set_ylabel("Validation score")
        plot_path = self.run_dir / "training.png"
        fig.savefig(plot_path)
        plt.close(fig)
        return str(plot_path)

    __call__ = on_epoch


__all__ = ["PlotAdapter"]
