"""Aggregations over past draws: moving averages, sensitivity grids, backfills."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
import math

import pandas as pd

from ..core.constants import (
    CANONICAL_STAKE,
    DEFAULT_MULTIPLIERS,
    DEFAULT_PRIZEPOOL_SPLIT,
    MAX_APY,
    TICKETS_PER_MILLION_POOL,
    TOKENS_PER_TICKET,
    WEEKS_PER_YEAR,
)
from ..core.models import Draw, DrawEarning, NGRStats, SensitivityCell
from ..core.repositories import DrawRepository
from .yields import global_apy, simple_yield_for_stake, ticket_count

MOVING_AVERAGE_WINDOW = 4


def moving_average_apy(
    draws: Sequence[Draw],
    price_usd: float,
    total_tickets: float,
) -> float:
    """Pool-share APY of a 1000-token stake using the mean pool of recent draws.

    ``draws`` must be ordered newest first; up to the latest four are averaged.
    """

    if not draws:
        return 0.0

    recent = list(draws[:MOVING_AVERAGE_WINDOW])
    avg_pool = math.fsum(d.total_pool_usd for d in recent) / len(recent)

    staking_value = CANONICAL_STAKE * price_usd
    if total_tickets <= 0 or staking_value <= 0:
        return 0.0

    user_share = (CANONICAL_STAKE / TOKENS_PER_TICKET) / total_tickets
    annual = avg_pool * user_share * WEEKS_PER_YEAR
    return annual / staking_value * 100.0


def sensitivity_table(
    base_ngr_usd: float,
    base_price_usd: float,
    total_tickets: float,
    ngr_multipliers: Sequence[float] = DEFAULT_MULTIPLIERS,
    price_multipliers: Sequence[float] = DEFAULT_MULTIPLIERS,
) -> list[list[SensitivityCell]]:
    """APY grid over scaled NGR (rows) and scaled price (columns)."""

    table: list[list[SensitivityCell]] = []
    for ngr_mult in ngr_multipliers:
        row: list[SensitivityCell] = []
        for price_mult in price_multipliers:
            result = simple_yield_for_stake(
                CANONICAL_STAKE,
                base_price_usd * price_mult,
                base_ngr_usd * ngr_mult,
                total_tickets,
            )
            row.append(
                SensitivityCell(
                    ngr_multiplier=ngr_mult,
                    price_multiplier=price_mult,
                    apy=result.effective_apy,
                )
            )
        table.append(row)
    return table


def sensitivity_frame(
    base_ngr_usd: float,
    base_price_usd: float,
    total_tickets: float,
    ngr_multipliers: Sequence[float] = DEFAULT_MULTIPLIERS,
    price_multipliers: Sequence[float] = DEFAULT_MULTIPLIERS,
) -> pd.DataFrame:
    """:func:`sensitivity_table` pivoted into a DataFrame of APY values."""

    table = sensitivity_table(
        base_ngr_usd,
        base_price_usd,
        total_tickets,
        ngr_multipliers=ngr_multipliers,
        price_multipliers=price_multipliers,
    )
    records = [
        {"ngr_multiplier": c.ngr_multiplier, "price_multiplier": c.price_multiplier, "apy": c.apy}
        for row in table
        for c in row
    ]
    if not records:
        return pd.DataFrame()
    df = pd.DataFrame(records)
    return df.pivot(index="ngr_multiplier", columns="price_multiplier", values="apy")


class HistoricalEarnings:
    """What a fixed stake would have earned in each past draw.

    Iterating is lazy and can be repeated; results follow the input order.
    """

    def __init__(self, stake: float, draws: Iterable[Draw]) -> None:
        self.stake = stake
        self.ticket_count = ticket_count(stake)
        self._draws = draws if isinstance(draws, Sequence) else list(draws)

    def __iter__(self) -> Iterator[DrawEarning]:
        for draw in self._draws:
            share = self.ticket_count / draw.total_tickets if draw.total_tickets > 0 else 0.0
            yield DrawEarning(draw=draw, earned=draw.total_pool_usd * share)

    def __len__(self) -> int:
        return len(self._draws)

    def total(self) -> float:
        return math.fsum(row.earned for row in self)

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame(
            [
                {
                    "draw_number": row.draw.draw_number,
                    "date": row.draw.date,
                    "total_pool_usd": row.draw.total_pool_usd,
                    "total_tickets": row.draw.total_tickets,
                    "earned": row.earned,
                }
                for row in self
            ],
            columns=["draw_number", "date", "total_pool_usd", "total_tickets", "earned"],
        )


def historical_earnings(stake: float, draws: Iterable[Draw]) -> HistoricalEarnings:
    return HistoricalEarnings(stake, draws)


def ngr_averages(draws: Sequence[Draw]) -> NGRStats:
    """Current (latest 4 draws) and prior (draws 5-8) average weekly NGR.

    The prior window falls back to the current average when history is too
    short to fill it.
    """

    current = [d.effective_ngr for d in draws[:MOVING_AVERAGE_WINDOW]]
    prior = [d.effective_ngr for d in draws[MOVING_AVERAGE_WINDOW : 2 * MOVING_AVERAGE_WINDOW]]
    current_avg = math.fsum(current) / len(current) if current else 0.0
    prior_avg = math.fsum(prior) / len(prior) if prior else current_avg
    return NGRStats(current_4week_avg=current_avg, prior_4week_avg=prior_avg)


def estimate_tickets_from_pool(prize_pool_usd: float) -> int:
    """Rough ticket count for a pool size; an approximation, not observed data."""

    if not math.isfinite(prize_pool_usd) or prize_pool_usd <= 0:
        return 0
    return int(math.floor(prize_pool_usd / 1_000_000 * TICKETS_PER_MILLION_POOL))


def closest_price(prices: pd.Series, timestamp: pd.Timestamp) -> float:
    """Price from ``prices`` (indexed by timestamp) nearest to ``timestamp``."""

    if prices is None or prices.empty:
        return 0.0
    deltas = abs(pd.DatetimeIndex(prices.index) - timestamp)
    return float(prices.iloc[int(deltas.argmin())])


def apy_history(
    draws: Iterable[Draw],
    price_usd: float,
    total_tickets: float,
    default_split: str = DEFAULT_PRIZEPOOL_SPLIT,
    now: pd.Timestamp | None = None,
) -> pd.DataFrame:
    """Per-draw APY series in ascending draw order, capped at :data:`MAX_APY`.

    Only draws completed before ``now`` (default: current UTC time) are
    included. Draw-level price and ticket count are used when present,
    falling back to ``price_usd`` and ``total_tickets``.
    """

    columns = ["draw_number", "date", "ngr", "price", "apy", "apy_scaled"]
    rows: list[dict[str, object]] = []
    for draw in reversed(list(DrawRepository(draws).completed(now))):
        ngr = draw.effective_ngr
        price = draw.price_at_draw or price_usd
        tickets = draw.total_tickets or total_tickets
        apy = 0.0
        if math.isfinite(ngr) and tickets > 0 and price > 0:
            apy = min(global_apy(ngr, tickets, price, draw.prizepool_split or default_split), MAX_APY)
        rows.append(
            {
                "draw_number": draw.draw_number,
                "date": draw.date,
                "ngr": ngr,
                "price": price,
                "apy": apy,
                "apy_scaled": apy / 100.0,
            }
        )
    return pd.DataFrame(rows, columns=columns)


__all__ = [
    "HistoricalEarnings",
    "apy_history",
    "closest_price",
    "estimate_tickets_from_pool",
    "historical_earnings",
    "moving_average_apy",
    "ngr_averages",
    "sensitivity_frame",
    "sensitivity_table",
]
