"""In-memory repository for lottery draws."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

import pandas as pd

from .models import Draw


def as_utc(ts: pd.Timestamp) -> pd.Timestamp:
    """Localise naive timestamps to UTC, convert aware ones."""

    ts = pd.Timestamp(ts)
    if ts.tzinfo is None:
        return ts.tz_localize("UTC")
    return ts.tz_convert("UTC")


class DrawRepository:
    """Lightweight in-memory draw collection with pandas export.

    Draws are kept newest first (descending ``draw_number``), which is the
    order every aggregation helper expects.
    """

    def __init__(self, draws: Iterable[Draw] | None = None) -> None:
        self._draws: list[Draw] = []
        if draws:
            self.extend(draws)

    def add(self, draw: Draw) -> None:
        self.extend([draw])

    def extend(self, items: Iterable[Draw]) -> None:
        by_number = {d.draw_number: d for d in self._draws}
        for draw in items:
            by_number[draw.draw_number] = draw
        self._draws = sorted(by_number.values(), key=lambda d: d.draw_number, reverse=True)

    def completed(self, now: pd.Timestamp | None = None) -> "DrawRepository":
        """Return draws dated strictly before ``now`` (default: current UTC time).

        Naive dates on either side are read as UTC.
        """

        cutoff = as_utc(now) if now is not None else pd.Timestamp.now(tz="UTC")
        return DrawRepository(d for d in self._draws if as_utc(d.date) < cutoff)

    def latest(self) -> Draw | None:
        return self._draws[0] if self._draws else None

    def get(self, draw_number: int) -> Draw | None:
        for draw in self._draws:
            if draw.draw_number == draw_number:
                return draw
        return None

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame([draw.to_dict() for draw in self._draws])

    def __len__(self) -> int:
        return len(self._draws)

    def __iter__(self) -> Iterator[Draw]:
        return iter(self._draws)

    def __getitem__(self, index: int) -> Draw:
        return self._draws[index]


__all__ = ["DrawRepository"]
