"""
Combined read strategy: combine-latest of the live query and the sort order.

The store's live query and the sort order cache are observed concurrently.
Each new (plants, sort order) pair is sorted off the event loop, and the
result is conflated so a slow consumer only ever sees the newest view.

- more moving parts
+ the two sources are observed concurrently
+ re-sorts only when one of the sources actually changes
"""

from __future__ import annotations

from contextlib import aclosing
from typing import AsyncGenerator, AsyncIterator, List, Optional, Tuple

from plantrepo.domain.models import GrowZone, Plant
from plantrepo.domain.sorting import apply_sort_off_main_thread
from plantrepo.strategies.abstract import AbstractReadStrategy
from plantrepo.utils.flows import combine_latest, conflate


class CombinedReadStrategy(AbstractReadStrategy):
    name: str = "combined"
    description: str = "combine-latest of live query and sort order, sorted off-loop, conflated."

    async def _sort_pairs(
        self, pairs: AsyncGenerator[Tuple[List[Plant], List[str]], None]
    ) -> AsyncIterator[List[Plant]]:
        async with aclosing(pairs):
            async for plants, sort_order in pairs:
                yield await apply_sort_off_main_thread(plants, sort_order, self._executor)

    def observe(self, grow_zone: Optional[GrowZone] = None) -> AsyncIterator[List[Plant]]:
        pairs = combine_latest(self._source(grow_zone), self._sort_order.stream())
        return conflate(self._sort_pairs(pairs))


__all__ = ["CombinedReadStrategy"]
