"""
Abstract read-strategy interfaces for plantrepo.

A read strategy turns the store's live query and the shared custom sort order
into a live, sorted view of plants. Concrete strategies (sequential,
combined) implement the ReadStrategy protocol so the repository can pick one
by name.
"""

from __future__ import annotations

import abc
from concurrent.futures import Executor
from typing import AsyncIterator, List, Optional, Protocol, runtime_checkable

from plantrepo.domain.models import NO_GROW_ZONE, GrowZone, Plant
from plantrepo.infrastructure.ports import PlantStore
from plantrepo.utils.single_flight import SingleFlightCache


@runtime_checkable
class ReadStrategy(Protocol):
    """
    Common interface all read strategies must implement.

    Attributes
    ----------
    name : str
        A short machine-friendly identifier.
    description : str
        A human-friendly summary of the approach.
    """

    name: str
    description: str

    def observe(self, grow_zone: Optional[GrowZone] = None) -> AsyncIterator[List[Plant]]:
        """
        Live sorted view of the stored plants.

        Parameters
        ----------
        grow_zone : GrowZone | None
            Restrict the view to one grow zone; None or NO_GROW_ZONE observes
            every plant.

        Returns
        -------
        AsyncIterator[List[Plant]]
            Emits a sorted snapshot for the current store contents and again
            after store writes. Close it to stop observing.
        """
        ...


class AbstractReadStrategy(abc.ABC):
    """
    Base class wiring a strategy to its collaborators.

    Subclasses set `name` and `description` and implement `observe`.
    """

    name: str
    description: str

    def __init__(
        self,
        store: PlantStore,
        sort_order: SingleFlightCache[List[str]],
        executor: Optional[Executor] = None,
    ) -> None:
        self._store = store
        self._sort_order = sort_order
        self._executor = executor

    def _source(self, grow_zone: Optional[GrowZone]) -> AsyncIterator[List[Plant]]:
        if grow_zone is None or grow_zone == NO_GROW_ZONE:
            return self._store.observe_all()
        return self._store.observe_by_grow_zone(grow_zone)

    @abc.abstractmethod
    def observe(
        self, grow_zone: Optional[GrowZone] = None
    ) -> AsyncIterator[List[Plant]]:  # pragma: no cover - interface only
        """Return the live sorted view."""
        raise NotImplementedError


__all__ = ["AbstractReadStrategy", "ReadStrategy"]
