"""Exception hierarchy raised at the source and assembler boundaries.

The pure math in :mod:`lottery_yield_lab.analytics` never raises; degenerate
inputs produce zero yield instead.
"""

from __future__ import annotations


class LotteryYieldError(Exception):
    """Base class for all LotteryYieldLab errors."""


class SourceUnavailable(LotteryYieldError):
    """An upstream fetch failed, timed out or returned an unusable payload."""

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"{source} unavailable: {reason}")
        self.source = source
        self.reason = reason


class ValidationFailure(LotteryYieldError, ValueError):
    """A required input is missing, non-finite or non-positive."""


class BoundsViolation(ValidationFailure):
    """A computed APY falls outside the accepted sanity range."""

    def __init__(self, label: str, value: float) -> None:
        super().__init__(f"{label} out of bounds: {value}")
        self.label = label
        self.value = value


class Superseded(LotteryYieldError):
    """A refresh cycle was discarded because a newer one started."""


__all__ = [
    "BoundsViolation",
    "LotteryYieldError",
    "SourceUnavailable",
    "Superseded",
    "ValidationFailure",
]
