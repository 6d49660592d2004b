"""
Domain package for plantrepo.

Exports the plant models and the custom sort policy. Keep this package focused
on data definitions and pure ordering logic.
"""

from plantrepo.domain.models import MAX_RANK, NO_GROW_ZONE, GrowZone, Plant, RankKey
from plantrepo.domain.sorting import apply_sort, apply_sort_off_main_thread

__all__ = [
    "GrowZone",
    "MAX_RANK",
    "NO_GROW_ZONE",
    "Plant",
    "RankKey",
    "apply_sort",
    "apply_sort_off_main_thread",
]
