"""Adapters for the lottery history and lottery stats routes."""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import pandas as pd

from ..analytics.history import closest_price, estimate_tickets_from_pool, ngr_averages
from ..core import Draw, DrawRepository, LotteryStats, NGRStats
from ..errors import SourceUnavailable
from .base import HTTPSource, as_float

if TYPE_CHECKING:
    from . import DrawHistoryProvider
    from .price import CoinGeckoPriceSource

logger = logging.getLogger(__name__)

SINGLES_POOL_SHARE = 0.85  # share of single-ticket sales added to the pool


def parse_draw(record: Mapping[str, Any], prices: pd.Series | None = None) -> Draw:
    """Build a :class:`Draw` from one lottery-history record.

    Missing ticket counts are estimated from the pool size and flagged.
    ``prices`` (a timestamp-indexed series) fills in the price at draw time
    when the record does not carry one.
    """

    if "drawNumber" not in record or not record.get("date"):
        raise ValueError(f"draw record missing drawNumber/date: {dict(record)}")

    draw_date = pd.to_datetime(record["date"], utc=True)
    pool = as_float(record.get("prizePool", record.get("totalPoolUSD")), 0.0)

    ngr = as_float(record.get("totalNGRContribution", record.get("ngrUSD")))
    if math.isnan(ngr):
        ngr_added = as_float(record.get("ngrAdded"), 0.0)
        singles = as_float(record.get("singlesAdded"), 0.0)
        ngr = ngr_added + singles * SINGLES_POOL_SHARE

    tickets = int(as_float(record.get("totalTickets"), 0.0))
    estimated = False
    if tickets <= 0:
        tickets = estimate_tickets_from_pool(pool)
        estimated = True

    price = as_float(record.get("shflPriceAtDraw", record.get("priceAtDraw")), 0.0)
    if price <= 0 and prices is not None and not prices.empty:
        price = closest_price(prices, draw_date)

    adjusted = as_float(record.get("adjustedNGR", record.get("adjustedNgrUSD")))

    return Draw(
        draw_number=int(record["drawNumber"]),
        date=draw_date,
        total_pool_usd=pool,
        ngr_usd=ngr,
        total_tickets=tickets,
        prizepool_split=str(record.get("prizepoolSplit") or ""),
        jackpot_won=bool(record.get("jackpotWon", False)),
        jackpot_amount=as_float(record.get("jackpotAmount"), 0.0),
        jackpotted=as_float(record.get("jackpotted"), 0.0),
        price_at_draw=price if price > 0 else None,
        adjusted_ngr_usd=None if math.isnan(adjusted) else adjusted,
        tickets_estimated=estimated,
    )


class LotteryHistorySource(HTTPSource):
    """Draw history from ``GET {base_url}/api/lottery-history``."""

    name = "lottery-history"
    PATH = "/api/lottery-history"

    def __init__(
        self,
        base_url: str,
        *,
        price_history: "CoinGeckoPriceSource | None" = None,
        history_days: int = 365,
        **kwargs: Any,
    ) -> None:
        super().__init__(base_url, **kwargs)
        self.price_history = price_history
        self.history_days = history_days

    async def _load_prices(self) -> pd.Series | None:
        if self.price_history is None:
            return None
        try:
            return await self.price_history.fetch_history(self.history_days)
        except SourceUnavailable as exc:
            logger.warning("Price history unavailable, draws keep their own prices: %s", exc)
            return None

    async def fetch(self) -> list[Draw]:
        raw, prices = await asyncio.gather(self._get_json(self.PATH), self._load_prices())
        if not isinstance(raw, Mapping) or not raw.get("success") or raw.get("draws") is None:
            raise SourceUnavailable(self.name, "response has no draws")

        draws: list[Draw] = []
        for record in raw["draws"]:
            try:
                draws.append(parse_draw(record, prices))
            except (TypeError, ValueError) as exc:
                raise SourceUnavailable(self.name, f"malformed draw: {exc}") from exc

        estimated = sum(1 for d in draws if d.tickets_estimated)
        if estimated:
            logger.info("%d of %d draws use estimated ticket counts", estimated, len(draws))
        return list(DrawRepository(draws))


class LotteryNGRStatsSource(HTTPSource):
    """Current and prior 4-week NGR averages from the history route's stats block."""

    name = "ngr-stats"
    PATH = "/api/lottery-history"

    async def fetch(self) -> NGRStats:
        raw = await self._get_json(self.PATH, {"stats_only": "true"})
        stats = (raw or {}).get("stats") if isinstance(raw, Mapping) else None
        if not isinstance(stats, Mapping):
            raise SourceUnavailable(self.name, "response has no stats block")
        return NGRStats(
            current_4week_avg=as_float(stats.get("avgWeeklyNGR_4week")),
            prior_4week_avg=as_float(stats.get("avgWeeklyNGR_prior4week")),
        )


class HistoryNGRStatsSource:
    """Derive NGR averages from any draw history provider."""

    name = "ngr-stats"

    def __init__(self, history: "DrawHistoryProvider") -> None:
        self.history = history

    async def fetch(self) -> NGRStats:
        draws = await self.history.fetch()
        if not draws:
            raise SourceUnavailable(self.name, "no draws to average")
        return ngr_averages(list(DrawRepository(draws)))


class HistoryLotteryStatsSource:
    """Ticket count of the most recent draw that has one."""

    name = "lottery-stats"

    def __init__(self, history: "DrawHistoryProvider") -> None:
        self.history = history

    async def fetch(self) -> LotteryStats:
        draws = await self.history.fetch()
        for draw in DrawRepository(draws):
            if draw.total_tickets > 0:
                if draw.tickets_estimated:
                    logger.info("Using estimated ticket count of draw #%d", draw.draw_number)
                return LotteryStats(total_tickets=draw.total_tickets)
        raise SourceUnavailable(self.name, "no draw with a ticket count")


class LotteryStatsSource(HTTPSource):
    """Upcoming-draw stats from ``GET {base_url}/api/lottery-stats``."""

    name = "lottery-stats"
    PATH = "/api/lottery-stats"

    async def fetch(self) -> LotteryStats:
        raw = await self._get_json(self.PATH)
        if not isinstance(raw, Mapping) or not raw.get("success") or not raw.get("stats"):
            raise SourceUnavailable(self.name, "response has no stats block")
        stats = raw["stats"]
        tickets = as_float(stats.get("totalTickets"))
        return LotteryStats(
            total_tickets=int(tickets) if math.isfinite(tickets) else 0,
            total_staked=as_float(stats.get("totalSHFLStaked"), 0.0),
            current_prize_pool=as_float(stats.get("currentPrizePool"), 0.0),
            draw_number=int(as_float(stats.get("drawNumber"), 0.0)),
            next_draw_timestamp=as_float(stats.get("nextDrawTimestamp"), 0.0),
            jackpot_amount=as_float(stats.get("jackpotAmount"), 0.0),
        )


class StaticLotteryStatsSource:
    """Ticket count supplied by configuration rather than fetched."""

    name = "static"

    def __init__(self, total_tickets: int) -> None:
        self.total_tickets = int(total_tickets)

    async def fetch(self) -> LotteryStats:
        return LotteryStats(total_tickets=self.total_tickets)


__all__ = [
    "HistoryLotteryStatsSource",
    "HistoryNGRStatsSource",
    "LotteryHistorySource",
    "LotteryNGRStatsSource",
    "LotteryStatsSource",
    "StaticLotteryStatsSource",
    "parse_draw",
]
