from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

import pytest

from lottery_yield_demo import apply_env_overrides, build_assembler, load_config, main, run_once
from lottery_yield_lab import Visualizer, global_apy
from lottery_yield_lab.sources import (
    DrawCSVSource,
    HistoryLotteryStatsSource,
    HistoryNGRStatsSource,
    LotteryHistorySource,
    PriceProviderChain,
    StaticLotteryStatsSource,
)

ROOT = Path(__file__).resolve().parents[1]
SAMPLE = ROOT / "src" / "sample_draws.csv"


def test_loads_config_file() -> None:
    cfg = load_config(ROOT / "configs" / "demo.toml")
    assert cfg["sources"]["mode"] == "csv"
    assert cfg["sources"]["draws_csv"].endswith("sample_draws.csv")
    assert cfg["sources"]["price_usd"] == 0.30
    assert cfg["sources"]["total_tickets"] == 600_000
    assert cfg["analysis"]["price_multipliers"] == [0.5, 1.0, 1.5, 2.0]
    assert cfg["output"]["show"] is False
    assert cfg["output"]["charts"] == ["apy_history", "apy_trend", "sensitivity", "earnings"]
    assert Path(cfg["sources"]["draws_csv"]).resolve() == SAMPLE
    # untouched defaults survive the merge
    assert cfg["sources"]["cache_ttl"] == 300.0


def test_missing_config_falls_back_to_defaults(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        cfg = load_config(tmp_path / "nope.toml")
    assert cfg["sources"]["draws_csv"] == str(SAMPLE)
    assert cfg["assembler"]["refresh_interval"] == 60.0
    assert "not found" in caplog.text


def test_env_overrides(caplog: pytest.LogCaptureFixture) -> None:
    cfg = load_config(None)
    env = {
        "LOTTERY_YIELD_BASE_URL": "https://dashboard.test",
        "LOTTERY_YIELD_OUTDIR": "/tmp/out",
        "LOTTERY_YIELD_STAKE": "25000",
        "LOTTERY_YIELD_PRICE": "cheap",
    }
    with caplog.at_level(logging.WARNING):
        apply_env_overrides(cfg, env)

    assert cfg["sources"]["mode"] == "http"
    assert cfg["sources"]["base_url"] == "https://dashboard.test"
    assert cfg["output"]["outdir"] == "/tmp/out"
    assert cfg["analysis"]["stake"] == 25_000.0
    assert cfg["sources"]["price_usd"] is None
    assert "LOTTERY_YIELD_PRICE" in caplog.text


def test_build_assembler_csv_mode() -> None:
    cfg = load_config(None)
    cfg["sources"].update({"price_usd": 0.3, "total_tickets": 600_000})
    assembler = build_assembler(cfg)
    assert isinstance(assembler.history, DrawCSVSource)
    assert isinstance(assembler.ngr_stats, HistoryNGRStatsSource)
    assert isinstance(assembler.lottery_stats, StaticLotteryStatsSource)
    assert isinstance(assembler.price, PriceProviderChain)
    assert [p.name for p in assembler.price.providers] == ["static"]


def test_build_assembler_http_mode() -> None:
    cfg = load_config(None)
    cfg["sources"].update({"mode": "http", "base_url": "https://dashboard.test/", "price_usd": 0.3})
    assembler = build_assembler(cfg)
    assert isinstance(assembler.history, LotteryHistorySource)
    assert assembler.history.base_url == "https://dashboard.test"
    assert [p.name for p in assembler.price.providers] == ["shuffle", "coingecko", "static"]


def test_build_assembler_rejects_unknown_mode() -> None:
    cfg = load_config(None)
    cfg["sources"]["mode"] = "carrier-pigeon"
    with pytest.raises(ValueError):
        build_assembler(cfg)


def test_run_once_over_sample_history() -> None:
    cfg = load_config(None)
    cfg["sources"].update({"price_usd": 0.3, "total_tickets": 600_000})

    state = asyncio.run(run_once(cfg))

    assert state.error is None
    assert state.data is not None
    ngr = (286_498.75 + 198_240.70 + 1_246_662.55 + 251_922.70) / 4
    assert state.data.source_data.current_4week_ngr == pytest.approx(ngr)
    assert state.data.current_apy == pytest.approx(global_apy(ngr, 600_000, 0.3))
    assert len(state.history) == 16


def test_main_writes_reports(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    cfg_path = tmp_path / "demo.toml"
    outdir = tmp_path / "out"
    cfg_path.write_text(
        "\n".join(
            [
                "[sources]",
                'mode = "csv"',
                f"draws_csv = {str(SAMPLE)!r}",
                "price_usd = 0.3",
                "total_tickets = 600000",
                "[output]",
                f"outdir = {str(outdir)!r}",
                "charts = []",
            ]
        )
    )
    monkeypatch.setenv("LOTTERY_YIELD_CONFIG", str(cfg_path))
    monkeypatch.setattr(sys, "argv", ["lottery-yield-demo"])

    main()

    printed = capsys.readouterr().out
    assert "Current APY:" in printed
    assert (outdir / "apy_history.csv").exists()
    assert (outdir / "sensitivity.csv").exists()


def test_relative_csv_path_is_resolved_against_config_file(tmp_path: Path) -> None:
    cfg_path = tmp_path / "conf" / "demo.toml"
    cfg_path.parent.mkdir()
    cfg_path.write_text('[sources]\ndraws_csv = "../data/draws.csv"\n')

    cfg = load_config(cfg_path)

    assert Path(cfg["sources"]["draws_csv"]) == tmp_path / "conf" / ".." / "data" / "draws.csv"


def test_build_assembler_csv_mode_reads_tickets_from_history() -> None:
    assembler = build_assembler(load_config(None))
    assert isinstance(assembler.lottery_stats, HistoryLotteryStatsSource)


def test_run_once_with_default_config() -> None:
    cfg = load_config(None)
    cfg["sources"]["price_usd"] = 0.3

    state = asyncio.run(run_once(cfg))

    latest = DrawCSVSource(str(SAMPLE)).load()[0]
    assert state.error is None
    assert state.data is not None
    assert state.data.source_data.total_tickets == latest.total_tickets


def test_main_draws_apy_trend(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    cfg_path = tmp_path / "demo.toml"
    cfg_path.write_text(
        "\n".join(
            [
                "[sources]",
                "price_usd = 0.3",
                f"draws_csv = {str(SAMPLE)!r}",
                "[output]",
                "show = false",
                'charts = ["apy_trend"]',
            ]
        )
    )
    frames = []
    monkeypatch.setattr(Visualizer, "line_chart", staticmethod(lambda data, **kw: frames.append((data, kw))))
    monkeypatch.setenv("LOTTERY_YIELD_CONFIG", str(cfg_path))
    monkeypatch.setattr(sys, "argv", ["lottery-yield-demo"])

    main()

    assert len(frames) == 1
    data, kwargs = frames[0]
    assert list(data.columns) == ["apy", "moving_average"]
    assert len(data) == 16
    assert data["moving_average"].iloc[0] == pytest.approx(data["apy"].iloc[0])
    assert kwargs["show"] is False
