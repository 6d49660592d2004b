"""
Live query support shared by the store adapters.
"""

from __future__ import annotations

import asyncio
from typing import AsyncIterator, Awaitable, Callable, Set, TypeVar

T = TypeVar("T")


class InvalidationTracker:
    """
    Re-run registered queries when the underlying tables change.

    Each ``observe`` subscription owns an event. ``invalidate`` sets all of
    them; an observer still busy with its previous snapshot re-queries once,
    however many invalidations arrived in the meantime.
    """

    def __init__(self) -> None:
        self._observers: Set[asyncio.Event] = set()

    @property
    def observer_count(self) -> int:
        return len(self._observers)

    def invalidate(self) -> None:
        for event in self._observers:
            event.set()

    async def observe(self, query: Callable[[], Awaitable[T]]) -> AsyncIterator[T]:
        dirty = asyncio.Event()
        dirty.set()
        self._observers.add(dirty)
        try:
            while True:
                await dirty.wait()
                dirty.clear()
                yield await query()
        finally:
            self._observers.discard(dirty)


__all__ = ["InvalidationTracker"]
