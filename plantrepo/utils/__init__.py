"""
Utilities package for plantrepo.

Exports shared helpers for logging, single-flight caching, and async stream
combinators. Keep this package lightweight and free of domain-specific logic.
"""

from plantrepo.utils.flows import combine_latest, conflate, map_latest
from plantrepo.utils.logging import configure_logging, get_logger
from plantrepo.utils.single_flight import CacheState, SingleFlightCache

__all__ = [
    "configure_logging",
    "get_logger",
    "CacheState",
    "SingleFlightCache",
    "combine_latest",
    "conflate",
    "map_latest",
]
