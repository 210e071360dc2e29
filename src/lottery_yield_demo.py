from __future__ import annotations

import asyncio
import logging
import os
import sys
import tomllib
from pathlib import Path
from typing import Any, cast

import httpx

from lottery_yield_lab import (
    APYAssembler,
    APYState,
    CoinGeckoPriceSource,
    DrawCSVSource,
    HistoryLotteryStatsSource,
    HistoryNGRStatsSource,
    LotteryHistorySource,
    LotteryNGRStatsSource,
    LotteryStatsSource,
    PriceProviderChain,
    ShufflePriceSource,
    StaticLotteryStatsSource,
    StaticPriceSource,
    TTLCache,
    Visualizer,
    apy_history,
    historical_earnings,
    sensitivity_frame,
    simple_yield_for_stake,
    yield_for_stake,
)
from lottery_yield_lab.reporting import history_report

logger = logging.getLogger(__name__)


def load_config(path: str | Path | None) -> dict[str, Any]:
    """Load configuration from a TOML file and merge with defaults.

    Parameters
    ----------
    path:
        Optional path to a configuration file. When ``None`` or missing, the
        built-in defaults are used.

    Returns
    -------
    dict[str, Any]
        Configuration dictionary with any file overrides applied.
    """

    default: dict[str, Any] = {
        "sources": {
            "mode": "csv",
            "base_url": "http://localhost:3000",
            "draws_csv": str(Path(__file__).with_name("sample_draws.csv")),
            "price_usd": None,
            "total_tickets": 0,
            "timeout": 8.0,
            "cache_ttl": 300.0,
        },
        "assembler": {"refresh_interval": 60.0, "source_timeout": 8.0},
        "analysis": {
            "stake": 10_000.0,
            "ngr_multipliers": [0.5, 0.75, 1.0, 1.25, 1.5, 2.0],
            "price_multipliers": [0.5, 0.75, 1.0, 1.25, 1.5, 2.0],
        },
        "output": {"outdir": None, "show": True, "charts": ["apy_history", "sensitivity"]},
    }

    cfg_path = Path(path) if path else None

    if cfg_path and cfg_path.is_file():
        with open(cfg_path, "rb") as f:
            file_cfg = tomllib.load(f)
        for k, v in file_cfg.items():
            if isinstance(v, dict) and k in default and isinstance(default[k], dict):
                cast(dict, default[k]).update(v)
            else:
                default[k] = v
        # relative paths in a config file are relative to that file
        draws_csv = Path(default["sources"]["draws_csv"])
        if not draws_csv.is_absolute():
            default["sources"]["draws_csv"] = str(cfg_path.parent / draws_csv)
    elif cfg_path:
        logger.warning("Config file not found at %s. Using defaults.", cfg_path)

    return default


def apply_env_overrides(cfg: dict[str, Any], environ: dict[str, str] | None = None) -> dict[str, Any]:
    """Apply ``LOTTERY_YIELD_*`` environment variables on top of ``cfg``."""

    env = os.environ if environ is None else environ
    sources = cfg.setdefault("sources", {})
    if base_url := env.get("LOTTERY_YIELD_BASE_URL"):
        sources["base_url"] = base_url
        sources["mode"] = "http"
    if draws_csv := env.get("LOTTERY_YIELD_DRAWS_CSV"):
        sources["draws_csv"] = draws_csv
        sources["mode"] = "csv"
    if outdir := env.get("LOTTERY_YIELD_OUTDIR"):
        cfg.setdefault("output", {})["outdir"] = outdir
    for var, section, key in (
        ("LOTTERY_YIELD_STAKE", "analysis", "stake"),
        ("LOTTERY_YIELD_PRICE", "sources", "price_usd"),
    ):
        raw = env.get(var)
        if not raw:
            continue
        try:
            cfg.setdefault(section, {})[key] = float(raw)
        except ValueError:
            logger.warning("Ignoring %s=%r: not a number", var, raw)
    return cfg


def build_assembler(cfg: dict[str, Any], client: httpx.AsyncClient | None = None) -> APYAssembler:
    """Wire sources for the configured mode into an :class:`APYAssembler`."""

    src = cfg.get("sources", {})
    asm = cfg.get("assembler", {})
    mode = str(src.get("mode", "csv"))
    timeout = float(src.get("timeout", 8.0))
    price_usd = src.get("price_usd")

    static_price = [StaticPriceSource(float(price_usd))] if price_usd else []
    live_price = [ShufflePriceSource(client=client), CoinGeckoPriceSource(client=client)]

    if mode == "csv":
        history = DrawCSVSource(str(src["draws_csv"]))
        ngr = HistoryNGRStatsSource(history)
        total_tickets = int(src.get("total_tickets") or 0)
        stats = (
            StaticLotteryStatsSource(total_tickets)
            if total_tickets > 0
            else HistoryLotteryStatsSource(history)
        )
        price = PriceProviderChain(static_price or live_price)
    elif mode == "http":
        base_url = str(src["base_url"])
        cache = TTLCache(float(src.get("cache_ttl", 300.0)))
        http_kwargs: dict[str, Any] = {"client": client, "timeout": timeout}
        coingecko = CoinGeckoPriceSource(**http_kwargs)
        history = LotteryHistorySource(base_url, price_history=coingecko, cache=cache, **http_kwargs)
        ngr = LotteryNGRStatsSource(base_url, cache=cache, **http_kwargs)
        stats = LotteryStatsSource(base_url, **http_kwargs)
        price = PriceProviderChain([*live_price, *static_price])
    else:
        raise ValueError(f"Unknown source mode: {mode!r}")

    return APYAssembler(
        ngr,
        stats,
        price,
        history,
        refresh_interval=float(asm.get("refresh_interval", 60.0)),
        source_timeout=float(asm.get("source_timeout", timeout)),
    )


async def run_once(cfg: dict[str, Any]) -> APYState:
    """Run a single refresh cycle and return the resulting state."""

    timeout = float(cfg.get("sources", {}).get("timeout", 8.0))
    async with httpx.AsyncClient(timeout=timeout) as client:
        assembler = build_assembler(cfg, client)
        try:
            return await assembler.refresh()
        finally:
            await assembler.close()


def main() -> None:
    """Run the demo using configuration from file or environment variables."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    cfg_file = os.getenv("LOTTERY_YIELD_CONFIG") or (sys.argv[1] if len(sys.argv) > 1 else None)
    cfg = apply_env_overrides(load_config(cfg_file))

    state = asyncio.run(run_once(cfg))
    if state.error:
        print(f"APY refresh failed: {state.error}")
    data = state.data
    if data is None:
        return

    src = data.source_data
    print(f"Current APY:      {data.current_apy:.2f}%")
    print(f"Last week APY:    {data.last_week_apy:.2f}%")
    print(f"Prior 4-week APY: {data.prior_4week_apy:.2f}% ({data.apy_change:+.2f}%)")
    if data.highest_apy.draw_number:
        print(
            f"Highest APY:      {data.highest_apy.apy:.2f}% "
            f"(draw #{data.highest_apy.draw_number}, {data.highest_apy.weeks_ago} weeks ago)"
        )

    analysis = cfg.get("analysis", {})
    stake = float(analysis.get("stake", 10_000.0))
    ev = yield_for_stake(stake, src.price_usd, src.current_4week_ngr, src.total_tickets)
    simple = simple_yield_for_stake(stake, src.price_usd, src.current_4week_ngr, src.total_tickets)
    print(
        f"Stake {stake:,.0f} tokens ({ev.ticket_count} tickets, ${ev.staking_value_usd:,.2f}): "
        f"EV ${ev.annual_expected_usd:,.2f}/yr ({ev.effective_apy:.2f}%), "
        f"pro rata ${simple.annual_expected_usd:,.2f}/yr ({simple.effective_apy:.2f}%)"
    )

    draws = list(state.history)
    ngr_multipliers = analysis.get("ngr_multipliers", [1.0])
    price_multipliers = analysis.get("price_multipliers", [1.0])

    out = cfg.get("output", {})
    outdir = Path(out["outdir"]) if out.get("outdir") else None
    show = bool(out.get("show", True)) if not outdir else False
    charts = out.get("charts", [])

    if outdir:
        paths = history_report(
            draws,
            outdir,
            stake=stake,
            price_usd=src.price_usd,
            total_tickets=src.total_tickets,
            base_ngr=src.current_4week_ngr,
            ngr_multipliers=ngr_multipliers,
            price_multipliers=price_multipliers,
        )
        for name, path in paths.items():
            print(f"Wrote {name}: {path}")

    history = apy_history(draws, src.price_usd, src.total_tickets)
    if "apy_history" in charts:
        Visualizer.line_apy_history(
            history,
            save_path=str(outdir / "apy_history.png") if outdir else None,
            show=show,
        )
    if "apy_trend" in charts and not history.empty:
        trend = history.set_index("date")[["apy"]].assign(
            moving_average=lambda f: f["apy"].rolling(4, min_periods=1).mean()
        )
        Visualizer.line_chart(
            trend,
            title="Weekly APY and 4-draw moving average",
            ylabel="APY (%)",
            save_path=str(outdir / "apy_trend.png") if outdir else None,
            show=show,
        )
    if "sensitivity" in charts:
        Visualizer.heatmap_sensitivity(
            sensitivity_frame(
                src.current_4week_ngr,
                src.price_usd,
                src.total_tickets,
                ngr_multipliers=ngr_multipliers,
                price_multipliers=price_multipliers,
            ),
            save_path=str(outdir / "sensitivity.png") if outdir else None,
            show=show,
        )
    if "earnings" in charts:
        Visualizer.bar_earnings(
            historical_earnings(stake, draws).to_dataframe(),
            title=f"Earnings of {stake:,.0f} tokens per draw",
            save_path=str(outdir / "earnings.png") if outdir else None,
            show=show,
        )


if __name__ == "__main__":
    main()
