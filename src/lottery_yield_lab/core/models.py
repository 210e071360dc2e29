"""Immutable data models used throughout LotteryYieldLab."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

import pandas as pd


@dataclass(frozen=True)
class PrizeTier:
    """One prize category of the weekly draw."""

    tier: int
    name: str
    match_count: float
    prize_percentage: float  # share of the pool, in percent
    odds: float  # "1 in N" chance for a single ticket


@dataclass(frozen=True)
class Draw:
    """A completed (or scheduled) weekly lottery draw."""

    draw_number: int
    date: pd.Timestamp
    total_pool_usd: float
    ngr_usd: float
    total_tickets: int
    prizepool_split: str = ""
    jackpot_won: bool = False
    jackpot_amount: float = 0.0
    jackpotted: float = 0.0
    price_at_draw: float | None = None  # token price close to the draw date
    adjusted_ngr_usd: float | None = None  # NGR net of jackpot replenishment
    tickets_estimated: bool = False  # True if total_tickets came from the pool heuristic

    @property
    def effective_ngr(self) -> float:
        if self.adjusted_ngr_usd is not None:
            return self.adjusted_ngr_usd
        return self.ngr_usd

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["effective_ngr"] = self.effective_ngr
        return data


@dataclass(frozen=True)
class YieldResult:
    """Expected yield of a stake for one weekly draw, annualised."""

    weekly_expected_usd: float
    annual_expected_usd: float
    effective_apy: float  # percent
    ticket_count: int
    staking_value_usd: float


@dataclass(frozen=True)
class HighestAPY:
    apy: float = 0.0
    weeks_ago: int = 0
    draw_number: int = 0


@dataclass(frozen=True)
class SourceData:
    """Inputs a snapshot was computed from, kept for verification."""

    current_4week_ngr: float
    total_tickets: float
    price_usd: float
    timestamp: float


@dataclass(frozen=True)
class APYData:
    """Validated APY snapshot produced by one assembler cycle.

    All APY figures are percentages within ``[MIN_APY, MAX_APY]``.
    """

    current_apy: float
    last_week_apy: float
    prior_4week_apy: float
    apy_change: float
    highest_apy: HighestAPY
    source_data: SourceData

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PriceQuote:
    usd: float
    usd_24h_change: float = 0.0
    source: str = "custom"
    last_updated: float = 0.0  # unix epoch


@dataclass(frozen=True)
class NGRStats:
    current_4week_avg: float
    prior_4week_avg: float


@dataclass(frozen=True)
class LotteryStats:
    """Current state of the upcoming draw."""

    total_tickets: int
    total_staked: float = 0.0
    current_prize_pool: float = 0.0
    draw_number: int = 0
    next_draw_timestamp: float = 0.0
    jackpot_amount: float = 0.0


@dataclass(frozen=True)
class SensitivityCell:
    ngr_multiplier: float
    price_multiplier: float
    apy: float


@dataclass(frozen=True)
class DrawEarning:
    draw: Draw
    earned: float


@dataclass(frozen=True)
class APYState:
    """Read model exposed by :class:`~lottery_yield_lab.pipeline.APYAssembler`."""

    data: APYData | None = None
    is_loading: bool = False
    error: str | None = None
    last_fetch_timestamp: float | None = None
    history: tuple[Draw, ...] = field(default=(), repr=False)


__all__ = [
    "APYData",
    "APYState",
    "Draw",
    "DrawEarning",
    "HighestAPY",
    "LotteryStats",
    "NGRStats",
    "PriceQuote",
    "PrizeTier",
    "SensitivityCell",
    "SourceData",
    "YieldResult",
]
