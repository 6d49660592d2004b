"""
Plant repository: live sorted views over the local store, refreshed from the
remote plant service.

Usage (example):
    from plantrepo.repository import open_repository

    async with open_repository(get_settings()) as repository:
        await repository.refresh_all()
        async with aclosing(repository.observe_all()) as plants:
            async for snapshot in plants:
                render(snapshot)

The custom sort order is fetched from the network at most once per
repository (see SingleFlightCache); a failed fetch falls back to an empty
order, i.e. plain alphabetical sorting, and is retried on the next read.
"""

from __future__ import annotations

from concurrent.futures import Executor, ThreadPoolExecutor
from contextlib import AsyncExitStack, asynccontextmanager
from typing import AsyncIterator, Callable, Dict, List, Optional

import httpx

from plantrepo.config import Settings
from plantrepo.domain.models import NO_GROW_ZONE, GrowZone, Plant
from plantrepo.infrastructure.memory_store import InMemoryPlantStore
from plantrepo.infrastructure.network import HttpPlantService
from plantrepo.infrastructure.ports import PlantService, PlantStore
from plantrepo.infrastructure.postgres_store import PostgresPlantStore, build_dsn
from plantrepo.refresh import AlwaysRefreshPolicy, MaxAgeRefreshPolicy, RefreshPolicy
from plantrepo.strategies.abstract import AbstractReadStrategy, ReadStrategy
from plantrepo.strategies.combined import CombinedReadStrategy
from plantrepo.strategies.sequential import SequentialReadStrategy
from plantrepo.utils.logging import get_logger
from plantrepo.utils.single_flight import SingleFlightCache

log = get_logger(__name__)

REFRESH_ALL_KEY = "all"


def _strategy_factories() -> Dict[str, Callable[..., AbstractReadStrategy]]:
    """Registry of available read strategies."""
    return {
        SequentialReadStrategy.name: SequentialReadStrategy,
        CombinedReadStrategy.name: CombinedReadStrategy,
    }


def available_strategies() -> List[str]:
    """List available read strategy names."""
    return sorted(_strategy_factories().keys())


def resolve_strategy(
    name: str,
    store: PlantStore,
    sort_order: SingleFlightCache[List[str]],
    executor: Optional[Executor] = None,
) -> ReadStrategy:
    factories = _strategy_factories()
    if name not in factories:
        raise ValueError(f"Unknown strategy '{name}'. Available: {', '.join(factories)}")
    return factories[name](store, sort_order, executor)


def _zone_key(grow_zone: GrowZone) -> str:
    return f"zone:{grow_zone.number}"


class PlantRepository:
    """
    Mediates between the local plant store and the remote plant service.

    Parameters
    ----------
    store : PlantStore
        Local store providing live queries.
    service : PlantService
        Remote source of plants and of the custom sort order.
    executor : Executor | None
        Where sorts run; None uses the event loop's default executor.
    refresh_policy : RefreshPolicy | None
        Gate for network refreshes; defaults to refreshing every time.
    default_strategy : str
        Read strategy used when ``observe_*`` is called without one.
    """

    def __init__(
        self,
        store: PlantStore,
        service: PlantService,
        executor: Optional[Executor] = None,
        refresh_policy: Optional[RefreshPolicy] = None,
        default_strategy: str = CombinedReadStrategy.name,
    ) -> None:
        if default_strategy not in _strategy_factories():
            raise ValueError(
                f"Unknown strategy '{default_strategy}'. "
                f"Available: {', '.join(available_strategies())}"
            )
        self._store = store
        self._service = service
        self._executor = executor
        self._refresh_policy = refresh_policy or AlwaysRefreshPolicy()
        self.default_strategy = default_strategy
        self._sort_order_cache: SingleFlightCache[List[str]] = SingleFlightCache(
            service.custom_plant_sort_order,
            on_error_fallback=lambda exc: [],
            name="custom-sort-order",
        )
        self._strategies: Dict[str, ReadStrategy] = {}

    def strategy(self, name: Optional[str] = None) -> ReadStrategy:
        """Return the read strategy called ``name`` (default strategy if None)."""
        key = name or self.default_strategy
        if key not in self._strategies:
            self._strategies[key] = resolve_strategy(
                key, self._store, self._sort_order_cache, self._executor
            )
        return self._strategies[key]

    def observe_all(self, strategy: Optional[str] = None) -> AsyncIterator[List[Plant]]:
        """Live view of every plant, sorted by the custom sort order."""
        return self.strategy(strategy).observe()

    def observe_by_zone(
        self, grow_zone: GrowZone, strategy: Optional[str] = None
    ) -> AsyncIterator[List[Plant]]:
        """
        Live view of the plants in ``grow_zone``, sorted by the custom sort order.

        NO_GROW_ZONE observes every plant.
        """
        return self.strategy(strategy).observe(grow_zone)

    async def custom_sort_order(self) -> List[str]:
        return await self._sort_order_cache.get_or_await()

    def _should_refresh(self, key: str) -> bool:
        return self._refresh_policy.should_refresh(key)

    async def refresh_all(self) -> None:
        """
        Update the store with every plant from the network.

        May skip the network request based on the refresh policy. Raises
        NetworkError on failure, leaving the store untouched.
        """
        if self._should_refresh(REFRESH_ALL_KEY):
            await self._fetch_recent_plants()
        else:
            log.debug("Refresh skipped by policy", extra={"key": REFRESH_ALL_KEY})

    async def refresh_zone(self, grow_zone: GrowZone) -> None:
        """
        Update the store with the plants of one grow zone from the network.
        NO_GROW_ZONE refreshes every plant.

        May skip the network request based on the refresh policy. Raises
        NetworkError on failure, leaving the store untouched.
        """
        if grow_zone == NO_GROW_ZONE:
            await self.refresh_all()
            return
        key = _zone_key(grow_zone)
        if self._should_refresh(key):
            await self._fetch_plants_for_grow_zone(grow_zone)
        else:
            log.debug("Refresh skipped by policy", extra={"key": key})

    async def _fetch_recent_plants(self) -> None:
        plants = await self._service.all_plants()
        await self._store.insert_all(plants)
        self._refresh_policy.mark_refreshed(REFRESH_ALL_KEY)
        log.info("Plants refreshed", extra={"key": REFRESH_ALL_KEY, "plants": len(plants)})

    async def _fetch_plants_for_grow_zone(self, grow_zone: GrowZone) -> None:
        plants = await self._service.plants_by_grow_zone(grow_zone)
        await self._store.insert_all(plants)
        key = _zone_key(grow_zone)
        self._refresh_policy.mark_refreshed(key)
        log.info("Plants refreshed", extra={"key": key, "plants": len(plants)})


def build_refresh_policy(settings: Settings) -> RefreshPolicy:
    if settings.refresh_max_age_seconds is None:
        return AlwaysRefreshPolicy()
    return MaxAgeRefreshPolicy(settings.refresh_max_age_seconds)


@asynccontextmanager
async def open_repository(
    settings: Settings, service: Optional[PlantService] = None
) -> AsyncIterator[PlantRepository]:
    """
    Build the repository and its collaborators from settings.

    This is the composition root: the HTTP client, the store and the sort
    executor live exactly as long as the context. Pass ``service`` to replace
    the HTTP plant service.
    """
    async with AsyncExitStack() as stack:
        if service is None:
            client = await stack.enter_async_context(
                httpx.AsyncClient(
                    base_url=settings.plants_base_url,
                    timeout=settings.network_timeout_seconds,
                )
            )
            service = HttpPlantService(client)

        store: PlantStore
        if settings.store_backend == "postgres":
            store = await stack.enter_async_context(PostgresPlantStore(build_dsn(settings)))
        else:
            store = InMemoryPlantStore()

        executor = stack.enter_context(
            ThreadPoolExecutor(max_workers=settings.sort_workers, thread_name_prefix="plant-sort")
        )
        log.debug(
            "Repository opened",
            extra={"store": settings.store_backend, "strategy": settings.read_strategy},
        )
        yield PlantRepository(
            store,
            service,
            executor=executor,
            refresh_policy=build_refresh_policy(settings),
            default_strategy=settings.read_strategy,
        )


__all__ = [
    "PlantRepository",
    "REFRESH_ALL_KEY",
    "available_strategies",
    "build_refresh_policy",
    "open_repository",
    "resolve_strategy",
]
