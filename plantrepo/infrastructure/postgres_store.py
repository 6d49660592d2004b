"""
PostgreSQL plant store.

Queries and writes go through a psycopg async connection pool. Live queries
re-run when this process writes, and when any process issues
``NOTIFY plants_changed`` (every write here does), picked up by a dedicated
LISTEN connection.

Includes retry logic for transient connection failures using tenacity.
"""

from __future__ import annotations

import asyncio
from typing import Any, AsyncIterator, List, Optional, Sequence

import psycopg
from psycopg import AsyncConnection
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from plantrepo.config import Settings, get_settings
from plantrepo.domain.models import GrowZone, Plant
from plantrepo.infrastructure.live_query import InvalidationTracker
from plantrepo.utils.logging import get_logger

log = get_logger(__name__)

NOTIFY_CHANNEL = "plants_changed"

_CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS plants (
    plant_id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    grow_zone_number INTEGER NOT NULL,
    watering_interval INTEGER NOT NULL DEFAULT 7,
    image_url TEXT NOT NULL DEFAULT ''
)
"""
_CREATE_INDEX_SQL = (
    "CREATE INDEX IF NOT EXISTS plants_grow_zone_idx ON plants (grow_zone_number)"
)
_SELECT_ALL_SQL = "SELECT * FROM plants ORDER BY name"
_SELECT_BY_ZONE_SQL = "SELECT * FROM plants WHERE grow_zone_number = %s ORDER BY name"
_UPSERT_SQL = """
INSERT INTO plants (plant_id, name, description, grow_zone_number, watering_interval, image_url)
VALUES (%(plant_id)s, %(name)s, %(description)s, %(grow_zone_number)s,
        %(watering_interval)s, %(image_url)s)
ON CONFLICT (plant_id) DO UPDATE SET
    name = EXCLUDED.name,
    description = EXCLUDED.description,
    grow_zone_number = EXCLUDED.grow_zone_number,
    watering_interval = EXCLUDED.watering_interval,
    image_url = EXCLUDED.image_url
"""


def build_dsn(settings: Optional[Settings] = None) -> str:
    """Compose a DSN string from settings."""
    settings = settings or get_settings()
    return (
        f"postgresql://{settings.db_user}:{settings.db_password}"
        f"@{settings.db_host}:{settings.db_port}/{settings.db_name}"
    )


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((psycopg.OperationalError, psycopg.InterfaceError)),
    reraise=True,
)
async def connect_listener(dsn: str) -> AsyncConnection[Any]:
    """
    Open an autocommit connection suitable for LISTEN, with automatic retry.

    Retries up to 3 times with exponential backoff for transient connection errors.
    """
    return await AsyncConnection.connect(dsn, autocommit=True)


class PostgresPlantStore:
    """
    PlantStore backed by the ``plants`` table.

    Use as an async context manager, or call ``open``/``close`` explicitly:

        async with PostgresPlantStore(build_dsn()) as store:
            await store.insert_all(plants)
    """

    def __init__(
        self,
        dsn: str,
        pool_min_size: int = 1,
        pool_max_size: int = 4,
        listen: bool = True,
    ) -> None:
        self._dsn = dsn
        self._pool = AsyncConnectionPool(
            conninfo=dsn, min_size=pool_min_size, max_size=pool_max_size, open=False
        )
        self._listen_enabled = listen
        self._listener: Optional[asyncio.Task[None]] = None
        self._tracker = InvalidationTracker()

    async def open(self) -> None:
        """
        Open the pool, create the schema and start listening.

        On failure everything opened so far is closed again before the error
        propagates.
        """
        await self._pool.open()
        try:
            async with self._pool.connection() as conn:
                await conn.execute(_CREATE_TABLE_SQL)
                await conn.execute(_CREATE_INDEX_SQL)
            if self._listen_enabled:
                self._listener = asyncio.create_task(self._listen(await self._start_listener()))
        except BaseException:
            await self.close()
            raise
        log.info("Postgres plant store opened", extra={"listen": self._listen_enabled})

    async def _start_listener(self) -> AsyncConnection[Any]:
        conn = await connect_listener(self._dsn)
        try:
            await conn.execute(f"LISTEN {NOTIFY_CHANNEL}")
        except BaseException:
            await conn.close()
            raise
        return conn

    async def close(self) -> None:
        if self._listener is not None:
            self._listener.cancel()
            await asyncio.gather(self._listener, return_exceptions=True)
            self._listener = None
        await self._pool.close()

    async def __aenter__(self) -> PostgresPlantStore:
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def _listen(self, conn: AsyncConnection[Any]) -> None:
        try:
            async for _notify in conn.notifies():
                self._tracker.invalidate()
        except psycopg.OperationalError as exc:
            log.warning(
                "LISTEN connection lost; only local writes refresh live queries",
                extra={"channel": NOTIFY_CHANNEL, "error": str(exc)},
            )
        finally:
            await conn.close()

    async def _select(self, query: str, params: Sequence[Any] = ()) -> List[Plant]:
        async with self._pool.connection() as conn:
            async with conn.cursor(row_factory=dict_row) as cur:
                await cur.execute(query, params)
                rows = await cur.fetchall()
        return [Plant.model_validate(row) for row in rows]

    def observe_all(self) -> AsyncIterator[List[Plant]]:
        return self._tracker.observe(lambda: self._select(_SELECT_ALL_SQL))

    def observe_by_grow_zone(self, grow_zone: GrowZone) -> AsyncIterator[List[Plant]]:
        return self._tracker.observe(
            lambda: self._select(_SELECT_BY_ZONE_SQL, (grow_zone.number,))
        )

    async def insert_all(self, plants: Sequence[Plant]) -> None:
        if not plants:
            return
        async with self._pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.executemany(_UPSERT_SQL, [plant.model_dump() for plant in plants])
                await cur.execute(f"NOTIFY {NOTIFY_CHANNEL}")
        log.debug("Plants upserted", extra={"inserted": len(plants)})
        self._tracker.invalidate()


__all__ = ["NOTIFY_CHANNEL", "PostgresPlantStore", "build_dsn", "connect_listener"]
