"""Shared HTTP plumbing for LotteryYieldLab data sources."""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from typing import Any

import httpx

from ..errors import SourceUnavailable
from .cache import TTLCache

logger = logging.getLogger(__name__)

NO_CACHE_HEADERS = {"Cache-Control": "no-cache, no-store, must-revalidate"}


def as_float(value: Any, default: float = float("nan")) -> float:
    """Convert API scalars (often strings) to ``float``; ``default`` on failure."""

    if value is None or isinstance(value, bool):
        return default
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    return result if math.isfinite(result) else default


class HTTPSource:
    """Base class for async JSON-over-HTTP adapters.

    A shared :class:`httpx.AsyncClient` may be injected; otherwise a
    short-lived client is opened per request. Any transport error, non-2xx
    status or undecodable body surfaces as :class:`SourceUnavailable`.
    """

    name = "http"

    def __init__(
        self,
        base_url: str | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = 8.0,
        cache: TTLCache | None = None,
    ) -> None:
        self.base_url = (base_url or "").rstrip("/")
        self.client = client
        self.timeout = timeout
        self.cache = cache

    def _url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}{path}"

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        if self.client is not None:
            return await self.client.request(method, url, timeout=self.timeout, **kwargs)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.request(method, url, **kwargs)

    async def _request_json(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        payload: Mapping[str, Any] | None = None,
    ) -> Any:
        url = self._url(path)
        cache_key = (method, url, tuple(sorted((params or {}).items())))
        if self.cache is not None:
            cached = self.cache.get(cache_key)
            if cached is not None:
                logger.debug("%s cache hit for %s", self.name, url)
                return cached

        kwargs: dict[str, Any] = {"headers": dict(NO_CACHE_HEADERS)}
        if params:
            kwargs["params"] = dict(params)
        if payload is not None:
            kwargs["json"] = dict(payload)

        try:
            response = await self._send(method, url, **kwargs)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as exc:
            raise SourceUnavailable(self.name, f"HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise SourceUnavailable(self.name, str(exc) or exc.__class__.__name__) from exc
        except ValueError as exc:
            raise SourceUnavailable(self.name, "invalid JSON payload") from exc

        if self.cache is not None:
            self.cache.set(cache_key, data)
        return data

    async def _get_json(self, path: str, params: Mapping[str, Any] | None = None) -> Any:
        return await self._request_json("GET", path, params=params)

    async def _post_json(self, path: str, payload: Mapping[str, Any]) -> Any:
        return await self._request_json("POST", path, payload=payload)


__all__ = ["HTTPSource", "NO_CACHE_HEADERS", "as_float"]
