"""
Domain models for plantrepo.

Defines the plant record served by the remote service and persisted by the
local store, the grow zone partition key, and the rank key used to order
plants against a custom sort order.
"""
from __future__ import annotations

import sys
from dataclasses import dataclass

from pydantic import BaseModel, Field

# Rank given to plants missing from the custom sort order; larger than any index.
MAX_RANK = sys.maxsize


class Plant(BaseModel):
    """
    A single plant as returned by the plant service.
    """

    plant_id: str = Field(..., alias="plantId", description="Stable plant identifier.")
    name: str = Field(..., description="Display name, also the alphabetical tiebreak.")
    description: str = Field("", description="Free-form description.")
    grow_zone_number: int = Field(..., alias="growZoneNumber", description="Grow zone partition.")
    watering_interval: int = Field(7, alias="wateringInterval", description="Days between waterings.")
    image_url: str = Field("", alias="imageUrl", description="Image location.")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "arbitrary_types_allowed": False,
    }


@dataclass(frozen=True)
class GrowZone:
    number: int

    def __str__(self) -> str:
        return f"GrowZone({self.number})"


NO_GROW_ZONE = GrowZone(-1)


@dataclass(frozen=True, order=True)
class RankKey:
    """
    Total-order sort key: ``rank`` ascending, then ``tiebreak`` by code point.
    """

    rank: int
    tiebreak: str

    def compare(self, other: RankKey) -> int:
        """Return -1, 0 or 1 as self sorts before, with, or after ``other``."""
        if self < other:
            return -1
        if self > other:
            return 1
        return 0


__all__ = ["GrowZone", "MAX_RANK", "NO_GROW_ZONE", "Plant", "RankKey"]
