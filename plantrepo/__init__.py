"""
plantrepo - live, custom-sorted plant lists over a local store refreshed from
a remote plant service.

This package provides:

- A single-flight, success-only cache for the custom sort order
- A sort policy that runs off the event loop thread
- Two read strategies producing live sorted views:
  sequential (map-latest) and combined (combine-latest + conflate)
- Refresh operations gated by a cache-invalidation policy
- In-memory and PostgreSQL stores and an HTTP plant service
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from plantrepo.config import Settings, get_settings
from plantrepo.domain.models import NO_GROW_ZONE, GrowZone, Plant, RankKey
from plantrepo.domain.sorting import apply_sort, apply_sort_off_main_thread
from plantrepo.exceptions import NetworkError, PlantRepositoryError
from plantrepo.infrastructure.ports import PlantService, PlantStore
from plantrepo.refresh import AlwaysRefreshPolicy, MaxAgeRefreshPolicy, RefreshPolicy
from plantrepo.repository import PlantRepository, available_strategies, open_repository
from plantrepo.strategies.abstract import AbstractReadStrategy, ReadStrategy
from plantrepo.utils.logging import configure_logging, get_logger
from plantrepo.utils.single_flight import CacheState, SingleFlightCache

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Domain
    "GrowZone",
    "NO_GROW_ZONE",
    "Plant",
    "RankKey",
    "apply_sort",
    "apply_sort_off_main_thread",
    # Errors
    "NetworkError",
    "PlantRepositoryError",
    # Collaborators
    "PlantService",
    "PlantStore",
    # Repository
    "PlantRepository",
    "available_strategies",
    "open_repository",
    "AlwaysRefreshPolicy",
    "MaxAgeRefreshPolicy",
    "RefreshPolicy",
    # Strategy abstractions
    "AbstractReadStrategy",
    "ReadStrategy",
    # Caching
    "CacheState",
    "SingleFlightCache",
    # Logging
    "configure_logging",
    "get_logger",
]
