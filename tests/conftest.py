"""
Pytest configuration for plantrepo.

Provides fixtures for:
- Sample plants and an in-memory store seeded with them
- A scriptable fake plant service (call counting, failures, gating)
- A sort executor
- Database settings for the PostgreSQL integration tests
"""

from __future__ import annotations

import asyncio
import os
from concurrent.futures import ThreadPoolExecutor
from typing import Generator, Iterable, List, Optional

import psycopg
import pytest

from plantrepo.config import Settings, get_settings
from plantrepo.domain.models import GrowZone, Plant
from plantrepo.exceptions import NetworkError
from plantrepo.infrastructure.memory_store import InMemoryPlantStore


def make_plant(plant_id: str, name: str, zone: int = 1) -> Plant:
    return Plant(plant_id=plant_id, name=name, grow_zone_number=zone)


class FakePlantService:
    """
    PlantService double.

    ``*_failures`` make the next N calls raise NetworkError. Set
    ``sort_order_gate`` to an asyncio.Event to hold sort order calls until
    the event is set.
    """

    def __init__(
        self,
        plants: Iterable[Plant] = (),
        sort_order: Iterable[str] = (),
    ) -> None:
        self.plants: List[Plant] = list(plants)
        self.sort_order: List[str] = list(sort_order)
        self.sort_order_failures = 0
        self.plants_failures = 0
        self.sort_order_gate: Optional[asyncio.Event] = None
        self.sort_order_calls = 0
        self.all_plants_calls = 0
        self.zone_calls: List[GrowZone] = []

    async def all_plants(self) -> List[Plant]:
        self.all_plants_calls += 1
        if self.plants_failures > 0:
            self.plants_failures -= 1
            raise NetworkError("plants unavailable")
        return list(self.plants)

    async def plants_by_grow_zone(self, grow_zone: GrowZone) -> List[Plant]:
        self.zone_calls.append(grow_zone)
        if self.plants_failures > 0:
            self.plants_failures -= 1
            raise NetworkError("plants unavailable")
        return [plant for plant in self.plants if plant.grow_zone_number == grow_zone.number]

    async def custom_plant_sort_order(self) -> List[str]:
        self.sort_order_calls += 1
        if self.sort_order_gate is not None:
            await self.sort_order_gate.wait()
        if self.sort_order_failures > 0:
            self.sort_order_failures -= 1
            raise NetworkError("sort order unavailable")
        return list(self.sort_order)


@pytest.fixture
def plant_factory():
    return make_plant


@pytest.fixture
def service_factory():
    return FakePlantService


@pytest.fixture
def apple() -> Plant:
    return make_plant("a", "Apple", zone=1)


@pytest.fixture
def banana() -> Plant:
    return make_plant("b", "Banana", zone=2)


@pytest.fixture
def cherry() -> Plant:
    return make_plant("c", "Cherry", zone=1)


@pytest.fixture
def date_palm() -> Plant:
    return make_plant("d", "Date Palm", zone=2)


@pytest.fixture
def plants(apple: Plant, banana: Plant, cherry: Plant, date_palm: Plant) -> List[Plant]:
    return [apple, banana, cherry, date_palm]


@pytest.fixture
def store(plants: List[Plant]) -> InMemoryPlantStore:
    return InMemoryPlantStore(plants)


@pytest.fixture
def service(plants: List[Plant]) -> FakePlantService:
    """Service whose custom sort order puts Banana before Apple."""
    return FakePlantService(plants=plants, sort_order=["b", "a"])


@pytest.fixture
def executor() -> Generator[ThreadPoolExecutor, None, None]:
    pool = ThreadPoolExecutor(max_workers=2, thread_name_prefix="test-sort")
    try:
        yield pool
    finally:
        pool.shutdown(wait=True)


@pytest.fixture
def fresh_settings() -> Generator[None, None, None]:
    """Clear the cached settings before and after the test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# PostgreSQL integration fixtures


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "plants"),
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    """
    Database connection string for tests.
    """
    return (
        f"postgresql://{test_settings.db_user}:{test_settings.db_password}"
        f"@{test_settings.db_host}:{test_settings.db_port}/{test_settings.db_name}"
    )


@pytest.fixture(scope="session")
def db_connection_available(test_dsn: str) -> bool:
    """
    Check if database is reachable.

    Used to conditionally skip integration tests when DB is not available.
    """
    try:
        with psycopg.connect(test_dsn, connect_timeout=5) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return True
    except psycopg.Error:
        return False


@pytest.fixture
def clean_plants_table(test_dsn: str, db_connection_available: bool) -> Generator[None, None, None]:
    """
    Drop the plants table before and after each integration test.

    Skips the test if the database is not available.
    """
    if not db_connection_available:
        pytest.skip("Database not available for integration tests")

    def _drop_table() -> None:
        with psycopg.connect(test_dsn) as conn:
            conn.execute("DROP TABLE IF EXISTS plants")

    _drop_table()
    yield
    _drop_table()
