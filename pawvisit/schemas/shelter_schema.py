"""Shelter directory and pet catalog models."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class GeoPoint(BaseModel):
    latitude: float
    longitude: float


class Shelter(BaseModel):
    """Shelter record from the directory. Immutable during scheduling."""

    id: str
    name: str
    address: str
    city: str = ""
    state: str = ""
    zip_code: str = ""
    phone: str = ""
    email: str = ""
    location: GeoPoint
    operating_hours: dict[str, str] = Field(default_factory=dict)
    distance: Optional[float] = None

    def hours_for(self, weekday: str) -> Optional[str]:
        """Hours label for a weekday name, matched case-insensitively."""
        wanted = weekday.strip().lower()
        for day, hours in self.operating_hours.items():
            if day.strip().lower() == wanted:
                return hours
        return None


class Species(str, Enum):
    DOG = "Dog"
    CAT = "Cat"
    OTHER = "Other"


class PetAvailability(str, Enum):
    AVAILABLE = "AVAILABLE"
    HOLD = "HOLD"
    ADOPTED = "ADOPTED"


class Pet(BaseModel):
    """Staff view of a pet in the shelter inventory."""

    id: str
    name: str
    species: Species
    breed: str = ""
    shelter_id: str
    availability: PetAvailability = PetAvailability.AVAILABLE
    description: str = ""
    notes: list[str] = Field(default_factory=list)


class PetAvailabilityRequest(BaseModel):
    availability: PetAvailability
    staff_id: str


class PetNoteRequest(BaseModel):
    text: str
