"""CSV-backed draw history."""

from __future__ import annotations

import asyncio

import pandas as pd

from ..analytics.history import estimate_tickets_from_pool
from ..core import Draw, DrawRepository
from ..errors import SourceUnavailable


def _optional_float(value: object) -> float | None:
    if value is None or pd.isna(value):
        return None
    return float(value)  # type: ignore[arg-type]


class DrawCSVSource:
    """Load draws from a CSV with one row per draw.

    Required columns are ``draw_number``, ``date``, ``total_pool_usd``,
    ``ngr_usd`` and ``total_tickets``; the remaining :class:`Draw` fields are
    optional.
    """

    name = "csv"
    REQUIRED = {"draw_number", "date", "total_pool_usd", "ngr_usd", "total_tickets"}

    def __init__(self, path: str) -> None:
        self.path = path

    def load(self) -> list[Draw]:
        df = pd.read_csv(self.path)
        missing = self.REQUIRED.difference(df.columns)
        if missing:
            raise ValueError(f"CSV missing columns: {sorted(missing)}")
        df["date"] = pd.to_datetime(df["date"], utc=True)

        draws: list[Draw] = []
        for _, r in df.iterrows():
            pool = float(r["total_pool_usd"])
            tickets = int(r["total_tickets"]) if pd.notna(r["total_tickets"]) else 0
            estimated = tickets <= 0
            if estimated:
                tickets = estimate_tickets_from_pool(pool)
            price = _optional_float(r.get("price_at_draw"))
            split = r.get("prizepool_split")
            won = r.get("jackpot_won")
            draws.append(
                Draw(
                    draw_number=int(r["draw_number"]),
                    date=pd.Timestamp(r["date"]),
                    total_pool_usd=pool,
                    ngr_usd=float(r["ngr_usd"]),
                    total_tickets=tickets,
                    prizepool_split=str(split) if pd.notna(split) else "",
                    jackpot_won=bool(won) if pd.notna(won) else False,
                    jackpot_amount=_optional_float(r.get("jackpot_amount")) or 0.0,
                    jackpotted=_optional_float(r.get("jackpotted")) or 0.0,
                    price_at_draw=price if price is not None and price > 0 else None,
                    adjusted_ngr_usd=_optional_float(r.get("adjusted_ngr_usd")),
                    tickets_estimated=estimated,
                )
            )
        return list(DrawRepository(draws))

    async def fetch(self) -> list[Draw]:
        try:
            return await asyncio.to_thread(self.load)
        except (OSError, ValueError) as exc:
            raise SourceUnavailable(self.name, str(exc)) from exc


__all__ = ["DrawCSVSource"]
