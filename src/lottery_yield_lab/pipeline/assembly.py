"""Pure construction of a validated :class:`APYData` snapshot."""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Iterable

import pandas as pd

from ..analytics.yields import global_apy
from ..core import (
    DEFAULT_PRIZEPOOL_SPLIT,
    MAX_APY,
    MIN_APY,
    APYData,
    Draw,
    DrawRepository,
    HighestAPY,
    LotteryStats,
    NGRStats,
    SourceData,
)
from ..errors import BoundsViolation, ValidationFailure

logger = logging.getLogger(__name__)


def is_valid_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def apy_in_bounds(apy: float | None) -> bool:
    return apy is not None and is_valid_number(apy) and MIN_APY <= apy <= MAX_APY


def _require_positive(label: str, value: object) -> float:
    if not is_valid_number(value) or value <= 0:  # type: ignore[operator]
        raise ValidationFailure(f"Invalid {label}: {value}")
    return float(value)  # type: ignore[arg-type]


def draw_apy(draw: Draw, total_tickets: float, price_usd: float, split: str) -> float | None:
    """APY implied by a single draw.

    Fields missing on the draw fall back to the aggregate ticket count, the
    current price and ``split``. Returns ``None`` when the inputs are unusable.
    """

    ngr = draw.effective_ngr
    tickets = draw.total_tickets or total_tickets
    price = draw.price_at_draw or price_usd
    if not (is_valid_number(ngr) and is_valid_number(tickets) and is_valid_number(price)):
        return None
    if tickets <= 0 or price <= 0:
        return None
    return global_apy(ngr, tickets, price, draw.prizepool_split or split)


def assemble_apy_data(
    ngr_stats: NGRStats | None,
    lottery_stats: LotteryStats | None,
    price_usd: float | None,
    draws: Iterable[Draw],
    *,
    now: pd.Timestamp | None = None,
    timestamp: float | None = None,
) -> APYData:
    """Validate the four inputs and derive every APY figure from them.

    Raises
    ------
    ValidationFailure
        When NGR, ticket count or price is missing, non-finite or not positive.
    BoundsViolation
        When the current APY falls outside ``[MIN_APY, MAX_APY]``.
    """

    current_ngr = _require_positive(
        "current4WeekNGR", ngr_stats.current_4week_avg if ngr_stats else None
    )
    total_tickets = _require_positive(
        "totalTickets", lottery_stats.total_tickets if lottery_stats else None
    )
    price = _require_positive("price", price_usd)
    prior_ngr = ngr_stats.prior_4week_avg if ngr_stats else None

    repo = DrawRepository(draws)
    latest = repo.latest()
    split = latest.prizepool_split if latest and latest.prizepool_split else DEFAULT_PRIZEPOOL_SPLIT

    current_apy = global_apy(current_ngr, total_tickets, price, split)
    if not apy_in_bounds(current_apy):
        raise BoundsViolation("Current APY", current_apy)
    logger.debug("Current APY %.4f%% (split %s)", current_apy, split)

    completed = repo.completed(now)

    last_week_apy = current_apy
    if len(completed):
        candidate = draw_apy(completed[0], total_tickets, price, split)
        if candidate is not None:
            if apy_in_bounds(candidate):
                last_week_apy = candidate
            else:
                logger.debug("Last week APY %s out of bounds, using current", candidate)

    prior_4week_apy = current_apy
    if is_valid_number(prior_ngr) and prior_ngr > 0:  # type: ignore[operator]
        candidate = global_apy(float(prior_ngr), total_tickets, price, split)  # type: ignore[arg-type]
        if apy_in_bounds(candidate):
            prior_4week_apy = candidate
        else:
            logger.debug("Prior 4-week APY %s out of bounds, using current", candidate)

    apy_change = 0.0
    if prior_4week_apy > 0:
        apy_change = (current_apy - prior_4week_apy) / prior_4week_apy * 100.0
        if not math.isfinite(apy_change):
            apy_change = 0.0

    highest = HighestAPY()
    for weeks_ago, draw in enumerate(completed):
        candidate = draw_apy(draw, total_tickets, price, split)
        if apy_in_bounds(candidate) and candidate > highest.apy:  # type: ignore[operator]
            highest = HighestAPY(apy=candidate, weeks_ago=weeks_ago, draw_number=draw.draw_number)  # type: ignore[arg-type]

    return APYData(
        current_apy=current_apy,
        last_week_apy=last_week_apy,
        prior_4week_apy=prior_4week_apy,
        apy_change=apy_change,
        highest_apy=highest,
        source_data=SourceData(
            current_4week_ngr=current_ngr,
            total_tickets=total_tickets,
            price_usd=price,
            timestamp=timestamp if timestamp is not None else time.time(),
        ),
    )


__all__ = ["apy_in_bounds", "assemble_apy_data", "draw_apy", "is_valid_number"]
