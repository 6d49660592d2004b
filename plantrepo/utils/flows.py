"""
Async stream combinators built on asyncio tasks.

Every combinator returns an async generator. Closing that generator (for
example through ``contextlib.aclosing`` or by cancelling the consuming task)
cancels the helper tasks it started, which in turn closes the upstream
generators at their current suspension point.

- ``map_latest``: transform each item, abandoning the previous unfinished
  transform or untaken result when a newer item arrives (switch-map).
- ``combine_latest``: pair the latest items of two sources whenever either
  one changes.
- ``conflate``: decouple a slow consumer from its source by keeping only the
  most recent item.
"""

from __future__ import annotations

import asyncio
from typing import (
    Any,
    AsyncIterable,
    AsyncIterator,
    Awaitable,
    Callable,
    List,
    Optional,
    Tuple,
    TypeVar,
)

A = TypeVar("A")
B = TypeVar("B")
T = TypeVar("T")
R = TypeVar("R")

_UNSET: Any = object()


async def _cancel_and_wait(*tasks: asyncio.Task[Any]) -> None:
    for task in tasks:
        task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)


async def map_latest(
    source: AsyncIterable[T], transform: Callable[[T], Awaitable[R]]
) -> AsyncIterator[R]:
    """
    Yield ``await transform(item)`` for each item of ``source``.

    When a new item arrives, the transform still running for the previous
    item is cancelled and a result the consumer has not taken yet is dropped.
    At most one result is held for the consumer.
    """
    slot: List[Any] = [_UNSET]
    outcome: List[Any] = []
    ready = asyncio.Event()

    async def run(item: T) -> None:
        try:
            value = await transform(item)
        except Exception as exc:
            outcome.append(exc)
        else:
            slot[0] = value
        ready.set()

    async def pump() -> None:
        current: Optional[asyncio.Task[None]] = None
        try:
            async for item in source:
                if current is not None and not current.done():
                    current.cancel()
                slot[0] = _UNSET
                current = asyncio.create_task(run(item))
            if current is not None:
                await current
        except Exception as exc:
            outcome.append(exc)
        else:
            outcome.append(None)
        finally:
            if current is not None and not current.done():
                current.cancel()
        ready.set()

    pump_task = asyncio.create_task(pump())
    try:
        while True:
            if slot[0] is not _UNSET:
                value, slot[0] = slot[0], _UNSET
                yield value
                continue
            if outcome:
                if outcome[0] is not None:
                    raise outcome[0]
                return
            ready.clear()
            await ready.wait()
    finally:
        await _cancel_and_wait(pump_task)


async def combine_latest(
    first: AsyncIterable[A], second: AsyncIterable[B]
) -> AsyncIterator[Tuple[A, B]]:
    """
    Yield ``(a, b)`` built from the latest item of each source.

    Nothing is yielded until both sources produced an item; afterwards every
    change yields a new pair. Changes arriving faster than the consumer reads
    are merged, so only the newest pair is yielded. Completes once both
    sources complete, or as soon as one completes without producing an item.
    """
    latest: List[Any] = [_UNSET, _UNSET]
    finished = [False, False]
    failures: List[BaseException] = []
    changed = asyncio.Event()
    version = 0

    async def pump(index: int, source: AsyncIterable[Any]) -> None:
        nonlocal version
        try:
            async for item in source:
                latest[index] = item
                version += 1
                changed.set()
        except Exception as exc:
            failures.append(exc)
        finally:
            finished[index] = True
            changed.set()

    tasks = [
        asyncio.create_task(pump(0, first)),
        asyncio.create_task(pump(1, second)),
    ]
    delivered = 0
    try:
        while True:
            if failures:
                raise failures[0]
            ready = _UNSET not in latest
            if ready and version != delivered:
                delivered = version
                yield (latest[0], latest[1])
                continue
            if all(finished) or any(
                done and value is _UNSET for done, value in zip(finished, latest)
            ):
                return
            changed.clear()
            await changed.wait()
    finally:
        await _cancel_and_wait(*tasks)


async def conflate(source: AsyncIterable[T]) -> AsyncIterator[T]:
    """
    Yield items of ``source`` through a buffer of one.

    ``source`` is drained by a background task. If the consumer is slower,
    intermediate items are overwritten and dropped; the most recent item is
    always delivered before completion or before a source error is raised.
    """
    slot: List[Any] = [_UNSET]
    outcome: List[Any] = []
    ready = asyncio.Event()

    async def pump() -> None:
        try:
            async for item in source:
                slot[0] = item
                ready.set()
        except Exception as exc:
            outcome.append(exc)
        else:
            outcome.append(None)
        ready.set()

    pump_task = asyncio.create_task(pump())
    try:
        while True:
            if slot[0] is not _UNSET:
                item, slot[0] = slot[0], _UNSET
                yield item
                continue
            if outcome:
                if outcome[0] is not None:
                    raise outcome[0]
                return
            ready.clear()
            await ready.wait()
    finally:
        await _cancel_and_wait(pump_task)


__all__ = ["combine_latest", "conflate", "map_latest"]
