"""
Collaborator interfaces consumed by the plant repository.

Concrete stores and services implement these protocols; the repository and
the read strategies depend only on them.
"""

from __future__ import annotations

from typing import AsyncIterator, List, Protocol, Sequence, runtime_checkable

from plantrepo.domain.models import GrowZone, Plant


@runtime_checkable
class PlantStore(Protocol):
    """
    Local persisted store with live queries.

    A live query emits an initial snapshot, then a fresh snapshot after every
    write that may affect it. Each call returns an independent subscription.
    """

    def observe_all(self) -> AsyncIterator[List[Plant]]:
        """Live snapshot of every stored plant."""
        ...

    def observe_by_grow_zone(self, grow_zone: GrowZone) -> AsyncIterator[List[Plant]]:
        """Live snapshot of the plants whose grow zone number matches."""
        ...

    async def insert_all(self, plants: Sequence[Plant]) -> None:
        """Insert plants, replacing any stored plant with the same id."""
        ...


@runtime_checkable
class PlantService(Protocol):
    """
    Remote source of plants and of the custom sort order.

    Every method raises NetworkError when the remote call fails.
    """

    async def all_plants(self) -> List[Plant]:
        ...

    async def plants_by_grow_zone(self, grow_zone: GrowZone) -> List[Plant]:
        ...

    async def custom_plant_sort_order(self) -> List[str]:
        """Plant ids in the preferred display order."""
        ...


__all__ = ["PlantService", "PlantStore"]
