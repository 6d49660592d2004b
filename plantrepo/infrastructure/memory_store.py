"""
In-process plant store.

Keeps plants in a dict keyed by plant id. Used as the default store for the
CLI and as the store in tests.
"""

from __future__ import annotations

from typing import AsyncIterator, Dict, Iterable, List, Sequence

from plantrepo.domain.models import GrowZone, Plant
from plantrepo.infrastructure.live_query import InvalidationTracker
from plantrepo.utils.logging import get_logger

log = get_logger(__name__)


class InMemoryPlantStore:
    """
    PlantStore backed by a dict; queries are ordered by name.
    """

    def __init__(self, plants: Iterable[Plant] = ()) -> None:
        self._plants: Dict[str, Plant] = {plant.plant_id: plant for plant in plants}
        self._tracker = InvalidationTracker()

    def __len__(self) -> int:
        return len(self._plants)

    async def _select_all(self) -> List[Plant]:
        return sorted(self._plants.values(), key=lambda plant: plant.name)

    async def _select_by_grow_zone(self, grow_zone: GrowZone) -> List[Plant]:
        return [
            plant
            for plant in await self._select_all()
            if plant.grow_zone_number == grow_zone.number
        ]

    def observe_all(self) -> AsyncIterator[List[Plant]]:
        return self._tracker.observe(self._select_all)

    def observe_by_grow_zone(self, grow_zone: GrowZone) -> AsyncIterator[List[Plant]]:
        return self._tracker.observe(lambda: self._select_by_grow_zone(grow_zone))

    async def insert_all(self, plants: Sequence[Plant]) -> None:
        for plant in plants:
            self._plants[plant.plant_id] = plant
        log.debug("Plants stored", extra={"inserted": len(plants), "total": len(self._plants)})
        self._tracker.invalidate()


__all__ = ["InMemoryPlantStore"]
