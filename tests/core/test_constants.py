import math

import pytest

from lottery_yield_lab.core import (
    DEFAULT_PRIZEPOOL_SPLIT,
    NGR_POOL_PERCENTAGE,
    PRIZE_TIERS,
    TOKENS_PER_TICKET,
    prize_tier,
)


def test_prize_tiers_are_ordered_from_jackpot_down() -> None:
    assert [t.tier for t in PRIZE_TIERS] == list(range(1, 9))
    assert PRIZE_TIERS[0].name == "Jackpot"
    odds = [t.odds for t in PRIZE_TIERS]
    assert odds == sorted(odds, reverse=True)
    assert all(t.odds >= 1 for t in PRIZE_TIERS)


def test_prize_percentages_cover_the_pool() -> None:
    assert math.fsum(t.prize_percentage for t in PRIZE_TIERS) == pytest.approx(100.0)


def test_prize_tier_lookup() -> None:
    assert prize_tier(8).name == "2+1 Match"
    assert prize_tier(8).odds == pytest.approx(22.8)
    with pytest.raises(KeyError):
        prize_tier(9)


def test_protocol_constants() -> None:
    assert TOKENS_PER_TICKET == 50
    assert NGR_POOL_PERCENTAGE == pytest.approx(0.15)
    assert DEFAULT_PRIZEPOOL_SPLIT.split("-")[0] == "30"
