"""
Infrastructure package for plantrepo.

Holds the collaborator protocols and their adapters: the in-memory and
PostgreSQL plant stores and the HTTP plant service. Keep this layer focused
on I/O and resource management, decoupled from the read strategies.
"""

from plantrepo.infrastructure.live_query import InvalidationTracker
from plantrepo.infrastructure.memory_store import InMemoryPlantStore
from plantrepo.infrastructure.network import HttpPlantService
from plantrepo.infrastructure.ports import PlantService, PlantStore
from plantrepo.infrastructure.postgres_store import PostgresPlantStore, build_dsn

__all__ = [
    "HttpPlantService",
    "InMemoryPlantStore",
    "InvalidationTracker",
    "PlantService",
    "PlantStore",
    "PostgresPlantStore",
    "build_dsn",
]
