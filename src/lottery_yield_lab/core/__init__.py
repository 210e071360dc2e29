"""Core data structures for :mod:`lottery_yield_lab`.

This subpackage groups the fundamental models, the prize-tier table and the
draw repository so they can be shared without importing the entire public
interface exposed in :mod:`lottery_yield_lab.__init__`.
"""

from __future__ import annotations

from .constants import (
    CANONICAL_STAKE,
    DEFAULT_MULTIPLIERS,
    DEFAULT_PRIZEPOOL_SPLIT,
    MAX_APY,
    MIN_APY,
    NGR_POOL_PERCENTAGE,
    PRIZE_TIERS,
    TICKETS_PER_MILLION_POOL,
    TOKENS_PER_TICKET,
    WEEKS_PER_YEAR,
    prize_tier,
)
from .models import (
    APYData,
    APYState,
    Draw,
    DrawEarning,
    HighestAPY,
    LotteryStats,
    NGRStats,
    PriceQuote,
    PrizeTier,
    SensitivityCell,
    SourceData,
    YieldResult,
)
from .repositories import DrawRepository

__all__ = [
    "APYData",
    "APYState",
    "CANONICAL_STAKE",
    "DEFAULT_MULTIPLIERS",
    "DEFAULT_PRIZEPOOL_SPLIT",
    "Draw",
    "DrawEarning",
    "DrawRepository",
    "HighestAPY",
    "LotteryStats",
    "MAX_APY",
    "MIN_APY",
    "NGRStats",
    "NGR_POOL_PERCENTAGE",
    "PRIZE_TIERS",
    "PriceQuote",
    "PrizeTier",
    "SensitivityCell",
    "SourceData",
    "TICKETS_PER_MILLION_POOL",
    "TOKENS_PER_TICKET",
    "WEEKS_PER_YEAR",
    "YieldResult",
    "prize_tier",
]
