"""Expected-value yield math for staked lottery tickets.

Every function here is pure and total: degenerate inputs (no tickets, empty
pool, zero price) yield ``0`` rather than raising, because "no yield" is a
valid answer for a staker.
"""

from __future__ import annotations

import math

from ..core.constants import (
    CANONICAL_STAKE,
    DEFAULT_PRIZEPOOL_SPLIT,
    NGR_POOL_PERCENTAGE,
    PRIZE_TIERS,
    TOKENS_PER_TICKET,
    WEEKS_PER_YEAR,
)
from ..core.models import YieldResult


def _coerce_float(value: object) -> float:
    """Best-effort conversion to ``float`` returning ``nan`` on failure."""

    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return float("nan")


def ticket_count(stake: float) -> int:
    """Number of tickets earned by ``stake`` tokens."""

    value = _coerce_float(stake)
    if not math.isfinite(value) or value <= 0.0:
        return 0
    return int(math.floor(value / TOKENS_PER_TICKET))


def expected_value_per_ticket(total_pool_usd: float, total_tickets: float) -> float:
    """Expected USD value of one ticket across all prize tiers.

    This is a simplified model: each tier's winner count is taken to be its
    statistical expectation ``tickets / odds``, floored at one winner so a
    sparse draw never produces an unbounded prize per winner.
    """

    if total_tickets <= 0:
        return 0.0

    expected = 0.0
    for tier in PRIZE_TIERS:
        probability = 1.0 / tier.odds
        tier_pool = total_pool_usd * (tier.prize_percentage / 100.0)
        expected_winners = max(1.0, total_tickets * probability)
        expected += probability * (tier_pool / expected_winners)
    return expected


def _zero_yield(staking_value_usd: float) -> YieldResult:
    return YieldResult(
        weekly_expected_usd=0.0,
        annual_expected_usd=0.0,
        effective_apy=0.0,
        ticket_count=0,
        staking_value_usd=staking_value_usd,
    )


def _annualise(weekly_expected_usd: float, tickets: int, staking_value_usd: float) -> YieldResult:
    annual = weekly_expected_usd * WEEKS_PER_YEAR
    apy = (annual / staking_value_usd) * 100.0 if staking_value_usd > 0 else 0.0
    return YieldResult(
        weekly_expected_usd=weekly_expected_usd,
        annual_expected_usd=annual,
        effective_apy=apy,
        ticket_count=tickets,
        staking_value_usd=staking_value_usd,
    )


def yield_for_stake(
    stake: float,
    price_usd: float,
    weekly_ngr_usd: float,
    total_tickets_in_pool: float,
) -> YieldResult:
    """Expected yield of ``stake`` tokens under the tier-weighted EV model."""

    staking_value = stake * price_usd
    tickets = ticket_count(stake)
    if tickets == 0 or total_tickets_in_pool <= 0:
        return _zero_yield(staking_value)

    weekly_pool = weekly_ngr_usd * NGR_POOL_PERCENTAGE
    weekly = expected_value_per_ticket(weekly_pool, total_tickets_in_pool) * tickets
    return _annualise(weekly, tickets, staking_value)


def simple_yield_for_stake(
    stake: float,
    price_usd: float,
    weekly_ngr_usd: float,
    total_tickets_in_pool: float,
) -> YieldResult:
    """Expected yield assuming the pool is shared pro rata by ticket count."""

    staking_value = stake * price_usd
    tickets = ticket_count(stake)
    if tickets == 0 or total_tickets_in_pool <= 0:
        return _zero_yield(staking_value)

    weekly_pool = weekly_ngr_usd * NGR_POOL_PERCENTAGE
    weekly = weekly_pool * (tickets / total_tickets_in_pool)
    return _annualise(weekly, tickets, staking_value)


def parse_prizepool_split(split: str | None) -> tuple[float, ...]:
    """Parse a dash-separated split such as ``"30-14-8-9-7-6-5-10-11"``.

    The first entry is the jackpot share. Empty or malformed strings fall back
    to :data:`DEFAULT_PRIZEPOOL_SPLIT`.
    """

    for candidate in ((split or "").strip(), DEFAULT_PRIZEPOOL_SPLIT):
        if not candidate:
            continue
        parts = [_coerce_float(part) for part in candidate.split("-")]
        if all(math.isfinite(p) and p >= 0.0 for p in parts):
            return tuple(parts)
    raise ValueError(f"Malformed default prize pool split: {DEFAULT_PRIZEPOOL_SPLIT}")


def non_jackpot_share(split: str | None) -> float:
    """Fraction of the pool paid to non-jackpot categories."""

    parts = parse_prizepool_split(split)
    return math.fsum(parts[1:]) / 100.0


def yield_per_thousand(ngr_usd: float, total_tickets: float, split: str | None) -> float:
    """Weekly USD return of :data:`CANONICAL_STAKE` tokens, jackpot excluded."""

    ngr = _coerce_float(ngr_usd)
    tickets = _coerce_float(total_tickets)
    if not math.isfinite(ngr) or not math.isfinite(tickets) or tickets <= 0.0:
        return 0.0
    per_ticket = ngr * non_jackpot_share(split) / tickets
    return per_ticket * (CANONICAL_STAKE / TOKENS_PER_TICKET)


def historical_apy(weekly_yield_per_thousand: float, price_usd: float) -> float:
    """Annualise a weekly per-1000-token yield at ``price_usd`` into a percentage."""

    price = _coerce_float(price_usd)
    if not math.isfinite(price) or price <= 0.0:
        return 0.0
    staking_value = CANONICAL_STAKE * price
    return weekly_yield_per_thousand * WEEKS_PER_YEAR / staking_value * 100.0


def global_apy(
    ngr_usd: float,
    total_tickets: float,
    price_usd: float,
    split: str | None = DEFAULT_PRIZEPOOL_SPLIT,
) -> float:
    """APY of any stake from a week's NGR contribution, ticket count and split.

    ``ngr_usd`` is the NGR contributed to the prize pool for the week. Only the
    non-jackpot categories are counted, since the jackpot mostly rolls over.
    """

    return historical_apy(yield_per_thousand(ngr_usd, total_tickets, split), price_usd)


__all__ = [
    "expected_value_per_ticket",
    "global_apy",
    "historical_apy",
    "non_jackpot_share",
    "parse_prizepool_split",
    "simple_yield_for_stake",
    "ticket_count",
    "yield_for_stake",
    "yield_per_thousand",
]
