"""Token price adapters and the ordered provider chain."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import pandas as pd

from ..core import PriceQuote
from ..errors import SourceUnavailable
from .base import HTTPSource, as_float

if TYPE_CHECKING:
    from . import PriceProvider

logger = logging.getLogger(__name__)


def _valid_quote(quote: PriceQuote | None) -> bool:
    return quote is not None and quote.usd > 0


class ShufflePriceSource(HTTPSource):
    """GraphQL ``tokenInfo`` query against the operator's public API."""

    name = "shuffle"
    URL = "https://shuffle.com/main-api/graphql/api/graphql"
    TOKEN_INFO_QUERY = (
        "query tokenInfo { tokenInfo { priceInUsd twentyFourHourPercentageChange "
        "burnedTokens circulatingSupply __typename } }"
    )

    def __init__(self, url: str | None = None, *, timeout: float = 5.0, **kwargs: Any) -> None:
        super().__init__(url or self.URL, timeout=timeout, **kwargs)

    async def fetch(self) -> PriceQuote:
        raw = await self._post_json(
            "",
            {"operationName": "tokenInfo", "query": self.TOKEN_INFO_QUERY, "variables": {}},
        )
        info = ((raw or {}).get("data") or {}).get("tokenInfo") or {}
        usd = as_float(info.get("priceInUsd"))
        if not usd > 0:
            raise SourceUnavailable(self.name, "tokenInfo carried no usable price")
        return PriceQuote(
            usd=usd,
            usd_24h_change=as_float(info.get("twentyFourHourPercentageChange"), 0.0),
            source=self.name,
            last_updated=datetime.now(tz=UTC).timestamp(),
        )


class CoinGeckoPriceSource(HTTPSource):
    """CoinGecko simple price and market chart endpoints."""

    name = "coingecko"
    URL = "https://api.coingecko.com/api/v3"
    COIN_ID = "shuffle-2"

    def __init__(
        self,
        url: str | None = None,
        *,
        coin_id: str | None = None,
        timeout: float = 5.0,
        **kwargs: Any,
    ) -> None:
        super().__init__(url or self.URL, timeout=timeout, **kwargs)
        self.coin_id = coin_id or self.COIN_ID

    async def fetch(self) -> PriceQuote:
        raw = await self._get_json(
            "/simple/price",
            {
                "ids": self.coin_id,
                "vs_currencies": "usd",
                "include_24hr_change": "true",
                "include_last_updated_at": "true",
            },
        )
        entry = (raw or {}).get(self.coin_id) or {}
        usd = as_float(entry.get("usd"))
        if not usd > 0:
            raise SourceUnavailable(self.name, f"no price for {self.coin_id}")
        updated = as_float(entry.get("last_updated_at"), datetime.now(tz=UTC).timestamp())
        return PriceQuote(
            usd=usd,
            usd_24h_change=as_float(entry.get("usd_24h_change"), 0.0),
            source=self.name,
            last_updated=updated,
        )

    async def fetch_history(self, days: int = 365) -> pd.Series:
        """Daily USD prices for the last ``days`` days, indexed by UTC timestamp."""

        raw = await self._get_json(
            f"/coins/{self.coin_id}/market_chart",
            {"vs_currency": "usd", "days": int(days)},
        )
        points = (raw or {}).get("prices") or []
        if not points:
            return pd.Series(dtype=float, name="price")
        df = pd.DataFrame(points, columns=["timestamp", "price"])
        index = pd.to_datetime(df["timestamp"], unit="ms", utc=True)
        return pd.Series(df["price"].astype(float).to_numpy(), index=index, name="price").sort_index()


class StaticPriceSource:
    """Price supplied by configuration rather than fetched."""

    name = "static"

    def __init__(self, usd: float) -> None:
        self.usd = float(usd)

    async def fetch(self) -> PriceQuote:
        if not self.usd > 0:
            raise SourceUnavailable(self.name, f"configured price {self.usd} is not positive")
        return PriceQuote(usd=self.usd, source=self.name)


class PriceProviderChain:
    """Try price providers in order and return the first usable quote.

    Every provider either yields a positive quote or counts as a failure; when
    all of them fail a single :class:`SourceUnavailable` lists the reasons.
    """

    name = "price"

    def __init__(self, providers: Sequence["PriceProvider"]) -> None:
        if not providers:
            raise ValueError("PriceProviderChain needs at least one provider")
        self.providers = list(providers)

    async def fetch(self) -> PriceQuote:
        failures: list[str] = []
        for provider in self.providers:
            label = getattr(provider, "name", provider.__class__.__name__)
            try:
                quote = await provider.fetch()
            except SourceUnavailable as exc:
                logger.warning("Price provider %s failed: %s", label, exc.reason)
                failures.append(f"{label}: {exc.reason}")
                continue
            if _valid_quote(quote):
                return quote
            logger.warning("Price provider %s returned an unusable quote: %s", label, quote)
            failures.append(f"{label}: unusable quote")
        raise SourceUnavailable(self.name, "; ".join(failures))


__all__ = [
    "CoinGeckoPriceSource",
    "PriceProviderChain",
    "ShufflePriceSource",
    "StaticPriceSource",
]
