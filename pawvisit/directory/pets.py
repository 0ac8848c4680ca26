"""
Pet catalog for the staff console.

In-memory stand-in for the remote pets table, seeded with demo animals.
Staff can change availability and append notes; everything else is
read-only here.
"""

import asyncio
import logging
from typing import Iterable, Optional

from pawvisit.errors import NotFoundError, ValidationError
from pawvisit.schemas.shelter_schema import Pet, PetAvailability

logger = logging.getLogger(__name__)

SEED_PETS: list[dict] = [
    {
        "id": "pet-001",
        "name": "Max",
        "species": "Dog",
        "breed": "Golden Retriever Mix",
        "shelter_id": "shelter-1",
        "availability": "AVAILABLE",
        "description": "A loving and energetic Golden Retriever mix looking for an active family.",
        "notes": ["Loves swimming", "Great with children"],
    },
    {
        "id": "pet-002",
        "name": "Luna",
        "species": "Cat",
        "breed": "Domestic Shorthair",
        "shelter_id": "shelter-1",
        "availability": "AVAILABLE",
        "description": "A gentle cat who enjoys quiet companionship.",
        "notes": ["Indoor only", "Prefers calm environments"],
    },
    {
        "id": "pet-003",
        "name": "Buddy",
        "species": "Dog",
        "breed": "Labrador Retriever",
        "shelter_id": "shelter-1",
        "availability": "HOLD",
        "description": "A well-trained and calm Labrador.",
        "notes": ["On hold for adoption screening"],
    },
    {
        "id": "pet-004",
        "name": "Bella",
        "species": "Dog",
        "breed": "German Shepherd Mix",
        "shelter_id": "shelter-2",
        "availability": "ADOPTED",
        "description": "Bella has found her forever home!",
    },
    {
        "id": "pet-005",
        "name": "Whiskers",
        "species": "Cat",
        "breed": "Maine Coon Mix",
        "shelter_id": "shelter-2",
        "availability": "AVAILABLE",
        "description": "A playful young cat who loves to explore.",
        "notes": ["Very active", "Needs interactive toys"],
    },
]


def seed_pets() -> list[Pet]:
    return [Pet.model_validate(record) for record in SEED_PETS]


class PetCatalog:
    def __init__(self, pets: Optional[Iterable[Pet]] = None) -> None:
        records = seed_pets() if pets is None else list(pets)
        # dict keeps insertion order, which is the catalog's listing order
        self._pets: dict[str, Pet] = {p.id: p for p in records}
        self._lock = asyncio.Lock()

    def _require(self, pet_id: str) -> Pet:
        pet = self._pets.get(pet_id)
        if pet is None:
            raise NotFoundError(f"Pet {pet_id} not found.")
        return pet

    async def get_pet(self, pet_id: str) -> Pet:
        return self._require(pet_id).model_copy(deep=True)

    async def list_pets(self) -> list[Pet]:
        return [p.model_copy(deep=True) for p in self._pets.values()]

    async def update_availability(
        self, pet_id: str, availability: PetAvailability, staff_id: str
    ) -> Pet:
        if not staff_id.strip():
            raise ValidationError("staff_id is required")
        async with self._lock:
            pet = self._require(pet_id)
            updated = pet.model_copy(update={"availability": availability})
            self._pets[pet_id] = updated
        logger.info(
            "Pet %s availability %s -> %s by %s",
            pet_id, pet.availability.value, availability.value, staff_id,
        )
        return updated.model_copy(deep=True)

    async def add_note(self, pet_id: str, text: str) -> Pet:
        note = text.strip()
        if not note:
            raise ValidationError("Note text is required")
        async with self._lock:
            pet = self._require(pet_id)
            updated = pet.model_copy(update={"notes": [*pet.notes, note]})
            self._pets[pet_id] = updated
        logger.debug("Note added to pet %s", pet_id)
        return updated.model_copy(deep=True)
