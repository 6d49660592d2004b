"""
Sequential read strategy: switch to a fresh sort on every store emission.

For each new snapshot from the store, await the custom sort order (cheap once
the cache is resolved) and sort off the event loop. A newer snapshot abandons
the sort still running for the previous one.

+ simple
- the store query and the sort order fetch run one after the other
- re-awaits the sort order on every store change (memoized, so cheap)
"""

from __future__ import annotations

from typing import AsyncIterator, List, Optional

from plantrepo.domain.models import GrowZone, Plant
from plantrepo.domain.sorting import apply_sort_off_main_thread
from plantrepo.strategies.abstract import AbstractReadStrategy
from plantrepo.utils.flows import map_latest


class SequentialReadStrategy(AbstractReadStrategy):
    name: str = "sequential"
    description: str = "map-latest over the live query; awaits the sort order per emission."

    async def _sorted(self, plants: List[Plant]) -> List[Plant]:
        sort_order = await self._sort_order.get_or_await()
        return await apply_sort_off_main_thread(plants, sort_order, self._executor)

    def observe(self, grow_zone: Optional[GrowZone] = None) -> AsyncIterator[List[Plant]]:
        return map_latest(self._source(grow_zone), self._sorted)


__all__ = ["SequentialReadStrategy"]
