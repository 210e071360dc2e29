from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path

import pandas as pd

from .analytics.history import (
    apy_history,
    historical_earnings,
    moving_average_apy,
    ngr_averages,
    sensitivity_frame,
)
from .core import DEFAULT_MULTIPLIERS, Draw, DrawRepository


def _ensure_outdir(outdir: str | Path) -> Path:
    p = Path(outdir)
    p.mkdir(parents=True, exist_ok=True)
    return p


def summary_frame(
    draws: DrawRepository,
    *,
    stake: float,
    price_usd: float,
    total_tickets: float,
) -> pd.DataFrame:
    """One-row overview of the history: averages, moving-average APY and totals."""

    if not len(draws):
        return pd.DataFrame()
    averages = ngr_averages(list(draws))
    earnings = historical_earnings(stake, draws)
    return pd.DataFrame(
        [
            {
                "draws": len(draws),
                "latest_draw": draws[0].draw_number,
                "avg_ngr_4week": averages.current_4week_avg,
                "avg_ngr_prior_4week": averages.prior_4week_avg,
                "moving_average_apy": moving_average_apy(list(draws), price_usd, total_tickets),
                "stake": stake,
                "total_earned": earnings.total(),
                "estimated_ticket_draws": sum(1 for d in draws if d.tickets_estimated),
            }
        ]
    )


def history_report(
    draws: Iterable[Draw],
    outdir: str | Path,
    *,
    stake: float,
    price_usd: float,
    total_tickets: float,
    base_ngr: float | None = None,
    ngr_multipliers: Sequence[float] = DEFAULT_MULTIPLIERS,
    price_multipliers: Sequence[float] = DEFAULT_MULTIPLIERS,
    now: pd.Timestamp | None = None,
) -> dict[str, Path]:
    """Write file-first CSV outputs describing a draw history.

    Parameters
    ----------
    draws:
        Draws in any order. Draws dated at or after ``now`` (default: current
        UTC time) are still pending and left out of every report.
    outdir:
        Directory where CSV reports are written.
    stake:
        Token stake used for the earnings backfill.
    price_usd, total_tickets:
        Fallbacks for draws lacking their own price or ticket count, and the
        base of the sensitivity grid.
    base_ngr:
        Weekly NGR at the centre of the sensitivity grid. Defaults to the
        current 4-week average of ``draws``.

    Returns
    -------
    dict[str, Path]
        Mapping of report name (``apy_history``, ``earnings``, ``sensitivity``,
        ``summary``) to the written file.
    """

    out = _ensure_outdir(outdir)
    repo = DrawRepository(draws).completed(now)
    paths: dict[str, Path] = {}

    history = apy_history(repo, price_usd, total_tickets, now=now)
    paths["apy_history"] = out / "apy_history.csv"
    history.to_csv(paths["apy_history"], index=False)

    earnings = historical_earnings(stake, repo).to_dataframe()
    paths["earnings"] = out / "earnings.csv"
    earnings.to_csv(paths["earnings"], index=False)

    if base_ngr is None:
        base_ngr = ngr_averages(list(repo)).current_4week_avg if len(repo) else 0.0
    grid = sensitivity_frame(
        base_ngr,
        price_usd,
        total_tickets,
        ngr_multipliers=ngr_multipliers,
        price_multipliers=price_multipliers,
    )
    paths["sensitivity"] = out / "sensitivity.csv"
    grid.to_csv(paths["sensitivity"])

    summary = summary_frame(repo, stake=stake, price_usd=price_usd, total_tickets=total_tickets)
    paths["summary"] = out / "summary.csv"
    summary.to_csv(paths["summary"], index=False)

    return paths


__all__ = ["history_report", "summary_frame"]
