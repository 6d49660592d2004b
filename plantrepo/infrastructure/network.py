"""
HTTP client for the remote plant service.

The service publishes two static JSON documents under a base URL:

- ``plants.json``: every plant.
- ``custom_plant_sort_order.json``: plant references in display order.

Zone queries are served by filtering ``plants.json``.
"""

from __future__ import annotations

from typing import Any, List

import httpx
from pydantic import BaseModel, Field, TypeAdapter

from plantrepo.domain.models import GrowZone, Plant
from plantrepo.exceptions import NetworkError
from plantrepo.utils.logging import get_logger

log = get_logger(__name__)

PLANTS_PATH = "plants.json"
SORT_ORDER_PATH = "custom_plant_sort_order.json"


class PlantRef(BaseModel):
    """Entry of the custom sort order document; only the id matters."""

    plant_id: str = Field(..., alias="plantId")

    model_config = {"extra": "ignore", "populate_by_name": True}


_PLANTS = TypeAdapter(List[Plant])
_PLANT_REFS = TypeAdapter(List[PlantRef])


class HttpPlantService:
    """
    PlantService reading the JSON documents through an ``httpx.AsyncClient``.

    The client is owned by the caller and must carry the service base URL.
    """

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def _get_json(self, path: str) -> Any:
        try:
            response = await self._client.get(path)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as exc:
            raise NetworkError(f"GET {path} failed: {exc}", cause=exc) from exc
        except ValueError as exc:
            raise NetworkError(f"GET {path} returned invalid JSON", cause=exc) from exc

    async def all_plants(self) -> List[Plant]:
        payload = await self._get_json(PLANTS_PATH)
        try:
            plants = _PLANTS.validate_python(payload)
        except ValueError as exc:
            raise NetworkError(f"{PLANTS_PATH} has an unexpected shape", cause=exc) from exc
        log.debug("Fetched plants", extra={"plants": len(plants)})
        return plants

    async def plants_by_grow_zone(self, grow_zone: GrowZone) -> List[Plant]:
        plants = await self.all_plants()
        return [plant for plant in plants if plant.grow_zone_number == grow_zone.number]

    async def custom_plant_sort_order(self) -> List[str]:
        payload = await self._get_json(SORT_ORDER_PATH)
        try:
            refs = _PLANT_REFS.validate_python(payload)
        except ValueError as exc:
            raise NetworkError(f"{SORT_ORDER_PATH} has an unexpected shape", cause=exc) from exc
        return [ref.plant_id for ref in refs]


__all__ = ["HttpPlantService", "PLANTS_PATH", "PlantRef", "SORT_ORDER_PATH"]
