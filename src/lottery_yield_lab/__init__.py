"""
LotteryYieldLab: yield and APY analytics for staked weekly lottery tickets.

Design goals:
- Pure, total yield math (expected value per ticket, pool-share APY)
- Immutable data model (Draw, APYData) + light repository
- Async adapters for price, NGR stats, lottery stats and draw history
- One assembler combining the sources into validated APY snapshots
- Matplotlib visualizations (single-plot functions) and CSV reports
"""

from __future__ import annotations

import logging

from . import analytics, reporting
from .analytics.history import (
    HistoricalEarnings,
    apy_history,
    historical_earnings,
    moving_average_apy,
    ngr_averages,
    sensitivity_frame,
    sensitivity_table,
)
from .analytics.yields import (
    expected_value_per_ticket,
    global_apy,
    historical_apy,
    simple_yield_for_stake,
    ticket_count,
    yield_for_stake,
    yield_per_thousand,
)
from .core import (
    PRIZE_TIERS,
    APYData,
    APYState,
    Draw,
    DrawRepository,
    LotteryStats,
    NGRStats,
    PriceQuote,
    YieldResult,
)
from .errors import (
    BoundsViolation,
    LotteryYieldError,
    SourceUnavailable,
    ValidationFailure,
)
from .pipeline import APYAssembler, assemble_apy_data
from .sources import (
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
)
from .visualization import Visualizer

logger = logging.getLogger(__name__)

__all__ = [
    "APYAssembler",
    "APYData",
    "APYState",
    "BoundsViolation",
    "CoinGeckoPriceSource",
    "Draw",
    "DrawCSVSource",
    "DrawRepository",
    "HistoricalEarnings",
    "HistoryLotteryStatsSource",
    "HistoryNGRStatsSource",
    "LotteryHistorySource",
    "LotteryNGRStatsSource",
    "LotteryStats",
    "LotteryStatsSource",
    "LotteryYieldError",
    "NGRStats",
    "PRIZE_TIERS",
    "PriceProviderChain",
    "PriceQuote",
    "ShufflePriceSource",
    "SourceUnavailable",
    "StaticLotteryStatsSource",
    "StaticPriceSource",
    "TTLCache",
    "ValidationFailure",
    "Visualizer",
    "YieldResult",
    "analytics",
    "apy_history",
    "assemble_apy_data",
    "expected_value_per_ticket",
    "global_apy",
    "historical_apy",
    "historical_earnings",
    "moving_average_apy",
    "ngr_averages",
    "reporting",
    "sensitivity_frame",
    "sensitivity_table",
    "simple_yield_for_stake",
    "ticket_count",
    "yield_for_stake",
    "yield_per_thousand",
]
