"""
Single-flight, success-only memoization for an async producer.

Usage:
    from plantrepo.utils.single_flight import SingleFlightCache

    cache = SingleFlightCache(service.custom_plant_sort_order, on_error_fallback=lambda exc: [])
    order = await cache.get_or_await()

Concurrent callers share one in-flight attempt. A successful result is kept
for the lifetime of the cache; a failed attempt hands its waiters the
fallback value and leaves the cache empty so the next call retries.
"""

from __future__ import annotations

import asyncio
import enum
from typing import Any, AsyncIterator, Awaitable, Callable, Generic, Optional, TypeVar

from plantrepo.utils.logging import get_logger

T = TypeVar("T")

log = get_logger(__name__)


def _retrieve_exception(task: asyncio.Future[Any]) -> None:
    # waiters may all have left before a failed attempt finished
    if not task.cancelled():
        task.exception()


class CacheState(enum.Enum):
    EMPTY = "empty"
    PENDING = "pending"
    RESOLVED = "resolved"


class SingleFlightCache(Generic[T]):
    """
    Cache the first successful result of ``producer``.

    Parameters
    ----------
    producer : Callable[[], Awaitable[T]]
        Async function computing the value. Invoked at most once at a time.
    on_error_fallback : Callable[[Exception], T] | None
        Computes the value handed to the waiters of a failed attempt. It runs
        once per failed attempt and every waiter receives the same result.
        Without a fallback the failure is raised to every waiter.
    name : str
        Label used in log lines.

    Notes
    -----
    The cache belongs to the event loop it is first awaited on. The in-flight
    slot is read and written without an intervening ``await``, which is what
    makes the single-flight check atomic under asyncio scheduling.
    """

    def __init__(
        self,
        producer: Callable[[], Awaitable[T]],
        on_error_fallback: Optional[Callable[[Exception], T]] = None,
        name: str = "single-flight",
    ) -> None:
        self._producer = producer
        self._on_error_fallback = on_error_fallback
        self._name = name
        self._in_flight: Optional[asyncio.Task[T]] = None
        self._resolved = False
        self._value: Optional[T] = None

    @property
    def state(self) -> CacheState:
        if self._resolved:
            return CacheState.RESOLVED
        if self._in_flight is not None:
            return CacheState.PENDING
        return CacheState.EMPTY

    async def get_or_await(self) -> T:
        """
        Return the cached value, joining or starting a production attempt.

        Cancelling the caller abandons its wait only; the attempt keeps running
        for the other waiters and still caches a successful result.
        """
        if self._resolved:
            return self._value  # type: ignore[return-value]

        attempt = self._in_flight
        if attempt is None:
            attempt = asyncio.ensure_future(self._attempt())
            attempt.add_done_callback(_retrieve_exception)
            self._in_flight = attempt
        return await asyncio.shield(attempt)

    async def stream(self) -> AsyncIterator[T]:
        """Yield the cached-or-produced value once per iteration."""
        yield await self.get_or_await()

    async def _attempt(self) -> T:
        try:
            value = await self._producer()
        except Exception as exc:
            if self._on_error_fallback is None:
                log.warning(
                    f"[{self._name}] producer failed, no fallback configured",
                    extra={"cache": self._name, "error": str(exc)},
                )
                raise
            log.warning(
                f"[{self._name}] producer failed, serving fallback",
                extra={"cache": self._name, "error": str(exc)},
            )
            return self._on_error_fallback(exc)
        else:
            self._value = value
            self._resolved = True
            log.info(f"[{self._name}] value cached", extra={"cache": self._name})
            return value
        finally:
            self._in_flight = None


__all__ = ["CacheState", "SingleFlightCache"]
