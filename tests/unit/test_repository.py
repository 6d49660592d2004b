from __future__ import annotations

from contextlib import aclosing
from typing import List, Sequence

import pytest

from plantrepo.config import Settings
from plantrepo.domain.models import NO_GROW_ZONE, GrowZone, Plant
from plantrepo.exceptions import NetworkError
from plantrepo.infrastructure.memory_store import InMemoryPlantStore
from plantrepo.refresh import AlwaysRefreshPolicy, MaxAgeRefreshPolicy
from plantrepo.repository import (
    PlantRepository,
    available_strategies,
    build_refresh_policy,
    open_repository,
    resolve_strategy,
)
from plantrepo.strategies import CombinedReadStrategy, SequentialReadStrategy


def _ids(plants) -> list[str]:
    return [plant.plant_id for plant in plants]


class _SpyStore(InMemoryPlantStore):
    def __init__(self) -> None:
        super().__init__()
        self.inserts: List[Sequence[Plant]] = []

    async def insert_all(self, plants: Sequence[Plant]) -> None:
        self.inserts.append(list(plants))
        await super().insert_all(plants)


class _FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_available_strategies_lists_registered_names() -> None:
    assert available_strategies() == ["combined", "sequential"]


def test_resolve_strategy(store, service) -> None:
    repository = PlantRepository(store, service)

    assert isinstance(repository.strategy("sequential"), SequentialReadStrategy)
    assert isinstance(repository.strategy(), CombinedReadStrategy)
    assert repository.strategy("sequential") is repository.strategy("sequential")

    with pytest.raises(ValueError, match="Unknown strategy"):
        resolve_strategy("parallel", store, repository._sort_order_cache)


def test_unknown_default_strategy_is_rejected(store, service) -> None:
    with pytest.raises(ValueError, match="Unknown strategy"):
        PlantRepository(store, service, default_strategy="parallel")


@pytest.mark.asyncio
async def test_refresh_all_inserts_service_plants(service_factory, plant_factory) -> None:
    remote = [plant_factory("x", "Xigua", zone=4), plant_factory("y", "Yam", zone=5)]
    store = _SpyStore()
    repository = PlantRepository(store, service_factory(plants=remote))

    await repository.refresh_all()

    assert len(store) == 2
    async with aclosing(repository.observe_all()) as view:
        assert _ids(await anext(view)) == ["x", "y"]


@pytest.mark.asyncio
async def test_failed_refresh_raises_and_leaves_store_untouched(service) -> None:
    store = _SpyStore()
    repository = PlantRepository(store, service)
    service.plants_failures = 2

    with pytest.raises(NetworkError):
        await repository.refresh_all()
    with pytest.raises(NetworkError):
        await repository.refresh_zone(GrowZone(1))

    assert store.inserts == []
    assert len(store) == 0


@pytest.mark.asyncio
async def test_refresh_zone_requests_only_that_zone(service) -> None:
    store = _SpyStore()
    repository = PlantRepository(store, service)

    await repository.refresh_zone(GrowZone(2))

    assert service.zone_calls == [GrowZone(2)]
    assert service.all_plants_calls == 0
    assert _ids(store.inserts[0]) == ["b", "d"]


@pytest.mark.asyncio
async def test_zone_view_never_contains_other_zones(service) -> None:
    repository = PlantRepository(InMemoryPlantStore(), service)
    await repository.refresh_all()

    async with aclosing(repository.observe_by_zone(GrowZone(2))) as view:
        snapshot = await anext(view)

    assert _ids(snapshot) == ["b", "d"]


@pytest.mark.asyncio
async def test_max_age_policy_skips_fresh_keys(service) -> None:
    clock = _FakeClock()
    repository = PlantRepository(
        InMemoryPlantStore(),
        service,
        refresh_policy=MaxAgeRefreshPolicy(60, clock=clock),
    )

    await repository.refresh_all()
    await repository.refresh_all()
    assert service.all_plants_calls == 1

    await repository.refresh_zone(GrowZone(1))
    assert len(service.zone_calls) == 1

    clock.now = 60
    await repository.refresh_all()
    assert service.all_plants_calls == 2


@pytest.mark.asyncio
async def test_failed_refresh_is_not_marked_fresh(service) -> None:
    repository = PlantRepository(
        InMemoryPlantStore(),
        service,
        refresh_policy=MaxAgeRefreshPolicy(60, clock=_FakeClock()),
    )
    service.plants_failures = 1

    with pytest.raises(NetworkError):
        await repository.refresh_all()
    await repository.refresh_all()

    assert service.all_plants_calls == 2


def test_max_age_policy_rejects_negative_age() -> None:
    with pytest.raises(ValueError):
        MaxAgeRefreshPolicy(-1)


@pytest.mark.asyncio
async def test_custom_sort_order_is_memoized(store, service) -> None:
    repository = PlantRepository(store, service)

    assert await repository.custom_sort_order() == ["b", "a"]
    assert await repository.custom_sort_order() == ["b", "a"]
    assert service.sort_order_calls == 1


@pytest.mark.asyncio
async def test_custom_sort_order_falls_back_to_empty(store, service) -> None:
    repository = PlantRepository(store, service)
    service.sort_order_failures = 1

    assert await repository.custom_sort_order() == []
    assert await repository.custom_sort_order() == ["b", "a"]


def test_build_refresh_policy() -> None:
    assert isinstance(build_refresh_policy(Settings()), AlwaysRefreshPolicy)

    policy = build_refresh_policy(Settings(refresh_max_age_seconds=30))
    assert isinstance(policy, MaxAgeRefreshPolicy)
    assert policy.max_age_seconds == 30


@pytest.mark.asyncio
async def test_open_repository_with_memory_store(service) -> None:
    settings = Settings(store_backend="memory", sort_workers=1, read_strategy="sequential")

    async with open_repository(settings, service=service) as repository:
        assert repository.default_strategy == "sequential"
        await repository.refresh_all()
        async with aclosing(repository.observe_all()) as view:
            snapshot = await anext(view)

    assert _ids(snapshot) == ["b", "a", "c", "d"]


@pytest.mark.asyncio
@pytest.mark.parametrize("strategy", ["sequential", "combined"])
async def test_no_grow_zone_observes_every_plant(store, service, strategy) -> None:
    repository = PlantRepository(store, service)

    async with aclosing(repository.observe_by_zone(NO_GROW_ZONE, strategy)) as view:
        snapshot = await anext(view)

    assert _ids(snapshot) == ["b", "a", "c", "d"]


@pytest.mark.asyncio
async def test_refresh_zone_with_no_grow_zone_refreshes_every_plant(service) -> None:
    store = _SpyStore()
    repository = PlantRepository(store, service)

    await repository.refresh_zone(NO_GROW_ZONE)

    assert service.all_plants_calls == 1
    assert service.zone_calls == []
    assert len(store) == 4
