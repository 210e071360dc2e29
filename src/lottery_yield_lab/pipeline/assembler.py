"""Concurrent refresh loop that keeps an :class:`APYState` current."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import pandas as pd

from ..core import APYData, APYState, Draw
from ..errors import LotteryYieldError, SourceUnavailable, Superseded, ValidationFailure
from .assembly import assemble_apy_data

if TYPE_CHECKING:
    from ..sources import (
        DrawHistoryProvider,
        LotteryStatsProvider,
        NGRStatsProvider,
        PriceProvider,
    )

logger = logging.getLogger(__name__)


def _utc_now() -> pd.Timestamp:
    return pd.Timestamp.now(tz="UTC")


class APYAssembler:
    """Fetch the four inputs concurrently and publish validated snapshots.

    Each call to :meth:`refetch` starts a new cycle and cancels the one in
    flight. Results are committed only by the newest cycle. A failed cycle
    keeps the previous snapshot and records the error message.
    """

    def __init__(
        self,
        ngr_stats: "NGRStatsProvider",
        lottery_stats: "LotteryStatsProvider",
        price: "PriceProvider",
        history: "DrawHistoryProvider",
        *,
        refresh_interval: float = 60.0,
        source_timeout: float = 8.0,
        clock: Callable[[], float] = time.time,
        now: Callable[[], pd.Timestamp] = _utc_now,
    ) -> None:
        if refresh_interval <= 0:
            raise ValueError("refresh_interval must be positive")
        self.ngr_stats = ngr_stats
        self.lottery_stats = lottery_stats
        self.price = price
        self.history = history
        self.refresh_interval = float(refresh_interval)
        self.source_timeout = float(source_timeout)
        self._clock = clock
        self._now = now

        self._request_id = 0
        self._data: APYData | None = None
        self._history: tuple[Draw, ...] = ()
        self._error: str | None = None
        self._is_loading = False
        self._last_fetch: float | None = None
        self._current: asyncio.Task[None] | None = None
        self._timer: asyncio.Task[None] | None = None
        self._closed = False

    @property
    def state(self) -> APYState:
        return APYState(
            data=self._data,
            is_loading=self._is_loading,
            error=self._error,
            last_fetch_timestamp=self._last_fetch,
            history=self._history,
        )

    @property
    def closed(self) -> bool:
        return self._closed

    def refetch(self) -> asyncio.Task[None]:
        """Start a new refresh cycle, superseding any cycle still running."""

        if self._closed:
            raise RuntimeError("APYAssembler is closed")
        self._request_id += 1
        request_id = self._request_id
        previous = self._current
        if previous is not None and not previous.done():
            logger.debug("Cycle #%d superseded by #%d", request_id - 1, request_id)
            previous.cancel()

        self._is_loading = True
        self._error = None
        task = asyncio.get_running_loop().create_task(
            self._run_cycle(request_id), name=f"apy-cycle-{request_id}"
        )
        self._current = task
        return task

    async def refresh(self) -> APYState:
        """Run one cycle to completion and return the resulting state."""

        task = self.refetch()
        await asyncio.wait({task})
        return self.state

    async def _fetch(self, label: str, source: Any) -> Any:
        try:
            return await asyncio.wait_for(source.fetch(), timeout=self.source_timeout)
        except TimeoutError as exc:
            raise SourceUnavailable(label, f"timed out after {self.source_timeout:g}s") from exc

    async def _fetch_price(self) -> float | None:
        try:
            quote = await self._fetch("price", self.price)
        except SourceUnavailable as exc:
            logger.warning("Price unavailable: %s", exc)
            return None
        return quote.usd

    @staticmethod
    def _unpack(results: list[Any]) -> tuple[Any, Any, float | None, list[Draw]]:
        labels = ("ngr-stats", "lottery-stats", "price", "lottery-history")
        for label, result in zip(labels, results):
            if isinstance(result, LotteryYieldError):
                raise result
            if isinstance(result, BaseException):
                raise SourceUnavailable(label, str(result) or result.__class__.__name__) from result
        ngr_stats, lottery_stats, price_usd, draws = results
        return ngr_stats, lottery_stats, price_usd, list(draws)

    def _commit(self, request_id: int, data: APYData, draws: list[Draw]) -> None:
        if request_id != self._request_id or self._closed:
            raise Superseded(f"cycle #{request_id} finished after #{self._request_id}")
        self._data = data
        self._history = tuple(draws)
        self._error = None
        self._last_fetch = self._clock()
        self._is_loading = False

    def _fail(self, request_id: int, exc: Exception) -> None:
        if request_id != self._request_id or self._closed:
            raise Superseded(f"cycle #{request_id} finished after #{self._request_id}")
        self._error = str(exc)
        self._is_loading = False

    async def _run_cycle(self, request_id: int) -> None:
        logger.debug("Starting APY cycle #%d", request_id)
        results = await asyncio.gather(
            self._fetch("ngr-stats", self.ngr_stats),
            self._fetch("lottery-stats", self.lottery_stats),
            self._fetch_price(),
            self._fetch("lottery-history", self.history),
            return_exceptions=True,
        )
        try:
            try:
                ngr_stats, lottery_stats, price_usd, draws = self._unpack(results)
                data = assemble_apy_data(
                    ngr_stats,
                    lottery_stats,
                    price_usd,
                    draws,
                    now=self._now(),
                    timestamp=self._clock(),
                )
            except LotteryYieldError as exc:
                self._fail(request_id, exc)
                logger.warning("APY cycle #%d failed: %s", request_id, exc)
                return
            except Exception as exc:
                failure = ValidationFailure(f"Could not assemble APY data: {exc!r}")
                self._fail(request_id, failure)
                logger.exception("APY cycle #%d failed unexpectedly", request_id)
                return
            self._commit(request_id, data, draws)
        except Superseded as exc:
            logger.debug("Discarding stale result: %s", exc)
            return
        logger.info(
            "APY cycle #%d: current %.2f%%, last week %.2f%%, change %+.2f%%",
            request_id,
            data.current_apy,
            data.last_week_apy,
            data.apy_change,
        )

    async def _timer_loop(self) -> None:
        while not self._closed:
            self.refetch()
            await asyncio.sleep(self.refresh_interval)

    def start(self) -> None:
        """Run an initial cycle now and another every ``refresh_interval`` seconds."""

        if self._closed:
            raise RuntimeError("APYAssembler is closed")
        if self._timer is None or self._timer.done():
            self._timer = asyncio.get_running_loop().create_task(
                self._timer_loop(), name="apy-refresh-timer"
            )

    async def close(self) -> None:
        """Stop the timer and cancel any in-flight cycle; state is no longer updated."""

        self._closed = True
        pending = [t for t in (self._timer, self._current) if t is not None and not t.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        self._is_loading = False

    async def __aenter__(self) -> "APYAssembler":
        self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()


__all__ = ["APYAssembler"]
