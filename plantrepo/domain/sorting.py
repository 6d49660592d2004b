"""
Custom sort order for plant lists.

Plants named in the custom sort order come first, in that order; the rest
follow alphabetically by name. The off-main-thread variant hands the sort to
an executor so the event loop thread never runs it.
"""

from __future__ import annotations

import asyncio
from concurrent.futures import Executor
from typing import Dict, List, Optional, Sequence

from plantrepo.domain.models import MAX_RANK, Plant, RankKey


def rank_key(plant: Plant, positions: Dict[str, int]) -> RankKey:
    return RankKey(positions.get(plant.plant_id, MAX_RANK), plant.name)


def apply_sort(plants: Sequence[Plant], custom_sort_order: Sequence[str]) -> List[Plant]:
    """
    Return ``plants`` reordered by the custom sort order.

    The result is always a permutation of the input: nothing is dropped,
    duplicated or modified. Duplicate ids in ``custom_sort_order`` keep their
    first position.
    """
    positions: Dict[str, int] = {}
    for index, plant_id in enumerate(custom_sort_order):
        positions.setdefault(plant_id, index)
    return sorted(plants, key=lambda plant: rank_key(plant, positions))


async def apply_sort_off_main_thread(
    plants: Sequence[Plant],
    custom_sort_order: Sequence[str],
    executor: Optional[Executor] = None,
) -> List[Plant]:
    """
    Same result as :func:`apply_sort`, computed on ``executor``.

    ``executor=None`` uses the running loop's default executor.
    """
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(
        executor, apply_sort, list(plants), list(custom_sort_order)
    )


__all__ = ["apply_sort", "apply_sort_off_main_thread", "rank_key"]
