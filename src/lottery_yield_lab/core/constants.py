"""Core constants shared across LotteryYieldLab modules."""

from __future__ import annotations

from .models import PrizeTier

# Prize tiers of the weekly staking lottery, ordered from jackpot downwards.
#
# ``odds`` is the "1 in N" denominator for a single ticket. The percentages do
# not add up to 100: whatever is not won rolls over into the next jackpot.
PRIZE_TIERS: tuple[PrizeTier, ...] = (
    PrizeTier(tier=1, name="Jackpot", match_count=6, prize_percentage=50, odds=15_890_700),
    PrizeTier(tier=2, name="5+1 Match", match_count=5.5, prize_percentage=15, odds=2_648_450),
    PrizeTier(tier=3, name="5 Match", match_count=5, prize_percentage=10, odds=39_312),
    PrizeTier(tier=4, name="4+1 Match", match_count=4.5, prize_percentage=8, odds=9_828),
    PrizeTier(tier=5, name="4 Match", match_count=4, prize_percentage=7, odds=728),
    PrizeTier(tier=6, name="3+1 Match", match_count=3.5, prize_percentage=5, odds=364),
    PrizeTier(tier=7, name="3 Match", match_count=3, prize_percentage=3, odds=45.6),
    PrizeTier(tier=8, name="2+1 Match", match_count=2.5, prize_percentage=2, odds=22.8),
)

TOKENS_PER_TICKET = 50
NGR_POOL_PERCENTAGE = 0.15  # share of weekly NGR funding the prize pool
WEEKS_PER_YEAR = 52

# Jackpot share first, then the remaining categories of the draw.
DEFAULT_PRIZEPOOL_SPLIT = "30-14-8-9-7-6-5-10-11"

MIN_APY = 0.0
MAX_APY = 500.0

# Heuristic used only when a draw record carries no ticket count.
TICKETS_PER_MILLION_POOL = 400_000

CANONICAL_STAKE = 1_000.0
DEFAULT_MULTIPLIERS: tuple[float, ...] = (0.5, 0.75, 1.0, 1.25, 1.5, 2.0)


def prize_tier(tier: int) -> PrizeTier:
    """Return the :class:`PrizeTier` with the given tier number."""

    for entry in PRIZE_TIERS:
        if entry.tier == tier:
            return entry
    raise KeyError(f"Unknown prize tier: {tier}")


__all__ = [
    "CANONICAL_STAKE",
    "DEFAULT_MULTIPLIERS",
    "DEFAULT_PRIZEPOOL_SPLIT",
    "MAX_APY",
    "MIN_APY",
    "NGR_POOL_PERCENTAGE",
    "PRIZE_TIERS",
    "TICKETS_PER_MILLION_POOL",
    "TOKENS_PER_TICKET",
    "WEEKS_PER_YEAR",
    "prize_tier",
]
