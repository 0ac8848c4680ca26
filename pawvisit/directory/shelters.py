"""
Shelter directory.

In production this is the remote shelters table owned by shelter
administration. Here it is an in-memory directory seeded with demo data;
scheduling only reads from it.
"""

import logging
import math
from typing import Iterable, Optional

from pawvisit.errors import NotFoundError
from pawvisit.schemas.shelter_schema import GeoPoint, Shelter

logger = logging.getLogger(__name__)

EARTH_RADIUS_MILES = 3959

_WEEKDAYS_9_TO_6 = {
    day: "9:00 AM - 6:00 PM"
    for day in ("monday", "tuesday", "wednesday", "thursday", "friday")
}
_WEEKDAYS_10_TO_5 = {
    day: "10:00 AM - 5:00 PM"
    for day in ("monday", "tuesday", "wednesday", "thursday", "friday")
}

SEED_SHELTERS: list[dict] = [
    {
        "id": "shelter-1",
        "name": "Happy Paws Shelter",
        "address": "123 Main St",
        "city": "San Francisco",
        "state": "CA",
        "zip_code": "94102",
        "phone": "(555) 123-4567",
        "email": "info@happypaws.org",
        "location": {"latitude": 37.7749, "longitude": -122.4194},
        "operating_hours": {
            **_WEEKDAYS_9_TO_6,
            "saturday": "10:00 AM - 4:00 PM",
            "sunday": "Closed",
        },
    },
    {
        "id": "shelter-2",
        "name": "Bay Area Animal Rescue",
        "address": "456 Oak Ave",
        "city": "Oakland",
        "state": "CA",
        "zip_code": "94612",
        "phone": "(555) 234-5678",
        "email": "contact@bayarearescue.org",
        "location": {"latitude": 37.8044, "longitude": -122.2712},
        "operating_hours": {
            **_WEEKDAYS_10_TO_5,
            "saturday": "11:00 AM - 3:00 PM",
            "sunday": "Closed",
        },
    },
]


def seed_shelters() -> list[Shelter]:
    return [Shelter.model_validate(record) for record in SEED_SHELTERS]


def calculate_distance(origin: GeoPoint, target: GeoPoint) -> float:
    """Great-circle (haversine) distance in miles."""
    d_lat = math.radians(target.latitude - origin.latitude)
    d_lon = math.radians(target.longitude - origin.longitude)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(origin.latitude))
        * math.cos(math.radians(target.latitude))
        * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_MILES * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


class ShelterDirectory:
    def __init__(self, shelters: Optional[Iterable[Shelter]] = None) -> None:
        records = seed_shelters() if shelters is None else list(shelters)
        self._shelters: dict[str, Shelter] = {s.id: s for s in records}

    async def get_shelter(self, shelter_id: str) -> Shelter:
        shelter = self._shelters.get(shelter_id)
        if shelter is None:
            raise NotFoundError(f"Shelter {shelter_id} not found.")
        return shelter.model_copy(deep=True)

    async def list_shelters(self) -> list[Shelter]:
        """All shelters ordered by name."""
        return sorted(
            (s.model_copy(deep=True) for s in self._shelters.values()),
            key=lambda s: s.name.casefold(),
        )

    async def nearby(self, latitude: float, longitude: float) -> list[Shelter]:
        """All shelters with ``distance`` filled in, closest first."""
        origin = GeoPoint(latitude=latitude, longitude=longitude)
        ranked = [
            s.model_copy(update={"distance": calculate_distance(origin, s.location)})
            for s in self._shelters.values()
        ]
        ranked.sort(key=lambda s: s.distance)
        logger.debug("Ranked %d shelters from (%.4f, %.4f)", len(ranked), latitude, longitude)
        return ranked
