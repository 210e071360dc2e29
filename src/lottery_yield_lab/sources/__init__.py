"""Data source adapters used by :mod:`lottery_yield_lab`."""

from __future__ import annotations

from typing import Protocol

from ..core import Draw, LotteryStats, NGRStats, PriceQuote
from .base import HTTPSource
from .cache import TTLCache
from .csv import DrawCSVSource
from .lottery import (
    HistoryLotteryStatsSource,
    HistoryNGRStatsSource,
    LotteryHistorySource,
    LotteryNGRStatsSource,
    LotteryStatsSource,
    StaticLotteryStatsSource,
    parse_draw,
)
from .price import CoinGeckoPriceSource, PriceProviderChain, ShufflePriceSource, StaticPriceSource


class PriceProvider(Protocol):
    """Adapter returning the current token price."""

    async def fetch(self) -> PriceQuote: ...


class NGRStatsProvider(Protocol):
    """Adapter returning current and prior 4-week NGR averages."""

    async def fetch(self) -> NGRStats: ...


class LotteryStatsProvider(Protocol):
    """Adapter returning stats of the upcoming draw."""

    async def fetch(self) -> LotteryStats: ...


class DrawHistoryProvider(Protocol):
    """Adapter returning past draws, newest first."""

    async def fetch(self) -> list[Draw]: ...


__all__ = [
    "CoinGeckoPriceSource",
    "DrawCSVSource",
    "DrawHistoryProvider",
    "HTTPSource",
    "HistoryLotteryStatsSource",
    "HistoryNGRStatsSource",
    "LotteryHistorySource",
    "LotteryNGRStatsSource",
    "LotteryStatsProvider",
    "LotteryStatsSource",
    "NGRStatsProvider",
    "PriceProvider",
    "PriceProviderChain",
    "ShufflePriceSource",
    "StaticLotteryStatsSource",
    "StaticPriceSource",
    "TTLCache",
    "parse_draw",
]
