"""Matplotlib-based chart helpers for LotteryYieldLab."""

from __future__ import annotations

import pandas as pd


class Visualizer:
    """Collection of static helpers that turn analytics outputs into charts."""

    @staticmethod
    def _plt():
        try:
            import matplotlib.pyplot as plt
        except Exception as exc:  # pragma: no cover
            raise RuntimeError(
                "matplotlib is required for visualization. Install via pip."
            ) from exc
        return plt

    @staticmethod
    def _finish(plt, save_path: str | None, show: bool) -> None:
        plt.tight_layout()
        if save_path:
            plt.savefig(save_path, bbox_inches="tight")
        if show:
            plt.show()

    @staticmethod
    def line_apy_history(
        history: pd.DataFrame,
        title: str = "APY per Draw",
        *,
        save_path: str | None = None,
        show: bool = True,
    ) -> None:
        """Plot per-draw APY with weekly NGR on a secondary axis.

        ``history`` is the frame returned by
        :func:`~lottery_yield_lab.analytics.history.apy_history`.
        """
        if history.empty:
            return
        plt = Visualizer._plt()
        fig, ax = plt.subplots(figsize=(10, 6))
        ax.plot(history["draw_number"], history["apy"], label="APY (%)")
        ax.set_xlabel("Draw")
        ax.set_ylabel("APY (%)")
        ax2 = ax.twinx()
        ax2.bar(history["draw_number"], history["ngr"], alpha=0.3, label="NGR (USD)")
        ax2.set_ylabel("NGR (USD)")
        ax.set_title(title)
        Visualizer._finish(plt, save_path, show)

    @staticmethod
    def heatmap_sensitivity(
        grid: pd.DataFrame,
        title: str = "APY Sensitivity",
        *,
        save_path: str | None = None,
        show: bool = True,
    ) -> None:
        """Render the NGR x price APY grid from ``sensitivity_frame``."""
        if grid.empty:
            return
        plt = Visualizer._plt()
        fig, ax = plt.subplots(figsize=(8, 6))
        image = ax.imshow(grid.to_numpy(), aspect="auto", origin="lower", cmap="viridis")
        ax.set_xticks(range(len(grid.columns)))
        ax.set_xticklabels([f"{c:g}x" for c in grid.columns])
        ax.set_yticks(range(len(grid.index)))
        ax.set_yticklabels([f"{i:g}x" for i in grid.index])
        ax.set_xlabel("Price multiplier")
        ax.set_ylabel("NGR multiplier")
        fig.colorbar(image, ax=ax, label="APY (%)")
        ax.set_title(title)
        Visualizer._finish(plt, save_path, show)

    @staticmethod
    def bar_earnings(
        earnings: pd.DataFrame,
        title: str = "Earnings per Draw",
        *,
        save_path: str | None = None,
        show: bool = True,
    ) -> None:
        if earnings.empty:
            return
        ordered = earnings.sort_values("draw_number")
        plt = Visualizer._plt()
        plt.figure(figsize=(10, 6))
        plt.bar(ordered["draw_number"].astype(str), ordered["earned"])
        plt.title(title)
        plt.xlabel("Draw")
        plt.ylabel("Earned (USD)")
        plt.xticks(rotation=45, ha="right")
        Visualizer._finish(plt, save_path, show)

    @staticmethod
    def line_chart(
        data: pd.DataFrame | pd.Series,
        *,
        title: str,
        ylabel: str,
        save_path: str | None = None,
        show: bool = True,
    ) -> None:
        """Plot time-series data as a line chart."""
        df = data.to_frame() if isinstance(data, pd.Series) else data
        if df.empty:
            return
        plt = Visualizer._plt()
        plt.figure(figsize=(10, 6))
        for col in df.columns:
            plt.plot(df.index, df[col], label=col)
        if len(df.columns) > 1:
            plt.legend()
        plt.xlabel("Date")
        plt.ylabel(ylabel)
        plt.title(title)
        Visualizer._finish(plt, save_path, show)


__all__ = ["Visualizer"]
