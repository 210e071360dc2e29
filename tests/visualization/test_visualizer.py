"""Tests for visualization helpers capturing Matplotlib interactions."""

from __future__ import annotations

from typing import Any

import pandas as pd
import pytest

from lottery_yield_lab.analytics.history import apy_history, sensitivity_frame
from lottery_yield_lab.visualization import Visualizer


def _materialise(value: Any) -> Any:
    if isinstance(value, (pd.Series, pd.Index)):
        return value.tolist()
    return value


class MatplotlibSpy:
    """Spy recording every pyplot, figure and axes call made by Visualizer.

    Calls on the figure and axes returned by ``subplots`` (and on a
    ``twinx`` axis) are recorded with ``fig.``, ``ax.`` and ``ax2.`` prefixes.
    """

    def __init__(self, calls: list | None = None, prefix: str = "") -> None:
        self.calls: list[tuple[str, tuple[Any, ...], dict[str, Any]]] = (
            calls if calls is not None else []
        )
        self.prefix = prefix

    def __getattr__(self, name: str):
        def _record(*args: Any, **kwargs: Any) -> Any:
            self.calls.append((self.prefix + name, tuple(_materialise(a) for a in args), kwargs))
            if name == "subplots":
                return MatplotlibSpy(self.calls, "fig."), MatplotlibSpy(self.calls, "ax.")
            if name == "twinx":
                return MatplotlibSpy(self.calls, "ax2.")
            return None

        return _record

    def get_call(self, name: str) -> tuple[str, tuple[Any, ...], dict[str, Any]]:
        for call in self.calls:
            if call[0] == name:
                return call
        msg = f"no call named {name!r} recorded"
        raise AssertionError(msg)

    def names(self) -> list[str]:
        return [call[0] for call in self.calls]


@pytest.fixture()
def spy(monkeypatch: pytest.MonkeyPatch) -> MatplotlibSpy:
    canvas = MatplotlibSpy()
    monkeypatch.setattr(Visualizer, "_plt", staticmethod(lambda: canvas))
    return canvas


def test_line_apy_history_plots_apy_and_ngr(spy: MatplotlibSpy, draw_factory) -> None:
    history = apy_history(
        [draw_factory(2, ngr=350_000), draw_factory(1, ngr=700_000)],
        price_usd=0.3,
        total_tickets=1_000_000,
    )

    Visualizer.line_apy_history(history, title="History", show=False)

    plot_call = spy.get_call("ax.plot")
    assert plot_call[1][0] == [1, 2]
    assert plot_call[1][1] == pytest.approx(history["apy"].tolist())
    bar_call = spy.get_call("ax2.bar")
    assert bar_call[1][1] == [700_000, 350_000]
    assert spy.get_call("ax.set_title")[1][0] == "History"
    assert "show" not in spy.names()


def test_heatmap_sensitivity_labels_multipliers(spy: MatplotlibSpy) -> None:
    grid = sensitivity_frame(
        700_000, 0.3, 1_000_000, ngr_multipliers=[0.5, 1.0], price_multipliers=[1.0, 2.0, 4.0]
    )

    Visualizer.heatmap_sensitivity(grid, show=False, save_path="grid.png")

    image_call = spy.get_call("ax.imshow")
    assert image_call[1][0].shape == (2, 3)
    assert spy.get_call("ax.set_xticklabels")[1][0] == ["1x", "2x", "4x"]
    assert spy.get_call("ax.set_yticklabels")[1][0] == ["0.5x", "1x"]
    assert spy.get_call("savefig")[1][0] == "grid.png"
    assert "fig.colorbar" in spy.names()


def test_bar_earnings_orders_by_draw(spy: MatplotlibSpy) -> None:
    earnings = pd.DataFrame({"draw_number": [12, 10, 11], "earned": [3.0, 1.0, 2.0]})

    Visualizer.bar_earnings(earnings, title="Earned", show=True)

    bar_call = spy.get_call("bar")
    assert bar_call[1][0] == ["10", "11", "12"]
    assert bar_call[1][1] == [1.0, 2.0, 3.0]
    assert spy.get_call("title")[1][0] == "Earned"
    assert "show" in spy.names()


def test_line_chart_plots_each_series(spy: MatplotlibSpy) -> None:
    data = pd.DataFrame(
        {"apy": [150.0, 160.0], "moving_average": [140.0, 145.0]},
        index=pd.date_range("2025-12-19", periods=2, freq="7D"),
    )

    Visualizer.line_chart(data, title="APY", ylabel="APY (%)", show=False)

    plot_calls = [call for call in spy.calls if call[0] == "plot"]
    assert len(plot_calls) == 2
    for column, call in zip(data.columns, plot_calls, strict=True):
        assert call[1][1] == data[column].tolist()
        assert call[2]["label"] == column
    assert spy.get_call("ylabel")[1][0] == "APY (%)"
    assert "legend" in spy.names()


@pytest.mark.parametrize(
    "method",
    [Visualizer.line_apy_history, Visualizer.heatmap_sensitivity, Visualizer.bar_earnings],
)
def test_empty_frames_draw_nothing(spy: MatplotlibSpy, method) -> None:
    method(pd.DataFrame(), show=True)
    assert spy.calls == []
