"""
Staff query and filter engine.

Filters are declared as spec objects and turned into a single predicate:
every provided dimension is ANDed, and a set-valued dimension (statuses)
matches if any of its members does. The same predicates work over any
in-memory collection; StaffQueryService applies them to the stores.

Usage:
    spec = BookingFilterSpec(
        date_from=date(2025, 3, 1),
        date_to=date(2025, 3, 31),
        statuses={"CONFIRMED", "CHECKED_OUT"},
        search="luna",
    )
    matched = filter_bookings(bookings, spec)
"""

import datetime as dt
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, Optional, TypeVar, Union

from pawvisit.config import RetryConfig, SchedulingConfig, settings
from pawvisit.directory.pets import PetCatalog
from pawvisit.errors import ValidationError
from pawvisit.scheduling.availability import (
    DAILY_SLOT_TEMPLATE,
    build_slot_template,
    slot_index,
)
from pawvisit.schemas.booking_schema import Booking, BookingStatus, VisitStatus
from pawvisit.schemas.shelter_schema import Pet, PetAvailability, Species
from pawvisit.services.retry import retry_read
from pawvisit.stores.booking_store import BookingStore
from pawvisit.utils import matches_any, normalize_search

logger = logging.getLogger(__name__)

T = TypeVar("T")
Predicate = Callable[[T], bool]

KNOWN_STATUSES = frozenset(
    [s.value for s in BookingStatus] + [s.value for s in VisitStatus]
)


def _status_value(status: Union[str, Enum]) -> str:
    value = status.value if isinstance(status, Enum) else str(status).strip()
    if value not in KNOWN_STATUSES:
        raise ValidationError(
            f"Unknown status {value!r}. Valid statuses: {sorted(KNOWN_STATUSES)}"
        )
    return value


def _enum_or_none(enum_cls, value, label: str):
    if value is None or isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        valid = [member.value for member in enum_cls]
        raise ValidationError(f"Unknown {label} {value!r}. Valid values: {valid}") from None


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    return value


@dataclass(frozen=True)
class BookingFilterSpec:
    """Declarative booking filter. Both date bounds are mandatory."""

    date_from: Optional[dt.date]
    date_to: Optional[dt.date]
    statuses: frozenset[str] = field(default_factory=frozenset)
    search: Optional[str] = None
    pet_id: Optional[str] = None
    user_id: Optional[str] = None
    shelter_id: Optional[str] = None
    descending: bool = True

    def __post_init__(self) -> None:
        if self.date_from is None or self.date_to is None:
            raise ValidationError("Both date_from and date_to are required")
        if self.date_from > self.date_to:
            raise ValidationError(
                f"date_from {self.date_from.isoformat()} is after date_to {self.date_to.isoformat()}"
            )
        object.__setattr__(
            self, "statuses", frozenset(_status_value(s) for s in self.statuses)
        )
        object.__setattr__(self, "search", _blank_to_none(self.search))


@dataclass(frozen=True)
class PetFilterSpec:
    species: Optional[Species] = None
    availability: Optional[PetAvailability] = None
    search: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "species", _enum_or_none(Species, self.species, "species"))
        object.__setattr__(
            self,
            "availability",
            _enum_or_none(PetAvailability, self.availability, "availability"),
        )
        object.__setattr__(self, "search", _blank_to_none(self.search))


def compose(*predicates: Predicate) -> Predicate:
    """AND the given predicates. No predicates matches everything."""
    return lambda item: all(p(item) for p in predicates)


def booking_predicate(spec: BookingFilterSpec) -> Predicate[Booking]:
    predicates: list[Predicate[Booking]] = [
        lambda b: spec.date_from <= b.date <= spec.date_to,
    ]
    if spec.statuses:
        predicates.append(lambda b: b.effective_status in spec.statuses)
    if spec.pet_id:
        predicates.append(lambda b: b.pet_id == spec.pet_id)
    if spec.user_id:
        predicates.append(lambda b: b.user_id == spec.user_id)
    if spec.shelter_id:
        predicates.append(lambda b: b.shelter_id == spec.shelter_id)
    if spec.search:
        needle = normalize_search(spec.search)
        predicates.append(lambda b: matches_any(needle, b.pet_name, b.visitor_name, b.id))
    return compose(*predicates)


def pet_predicate(spec: PetFilterSpec) -> Predicate[Pet]:
    predicates: list[Predicate[Pet]] = []
    if spec.species is not None:
        predicates.append(lambda p: p.species == spec.species)
    if spec.availability is not None:
        predicates.append(lambda p: p.availability == spec.availability)
    if spec.search:
        needle = normalize_search(spec.search)
        predicates.append(lambda p: matches_any(needle, p.name, p.breed, p.id))
    return compose(*predicates)


def filter_bookings(
    bookings: Iterable[Booking],
    spec: BookingFilterSpec,
    template: tuple[str, ...] = DAILY_SLOT_TEMPLATE,
) -> list[Booking]:
    """Matching bookings ordered by date, then slot; newest first by default."""
    predicate = booking_predicate(spec)
    matched = [b for b in bookings if predicate(b)]
    return sorted(
        matched,
        key=lambda b: (b.date, slot_index(b.time_slot, template)),
        reverse=spec.descending,
    )


def filter_pets(pets: Iterable[Pet], spec: PetFilterSpec) -> list[Pet]:
    """Matching pets in input order."""
    predicate = pet_predicate(spec)
    return [p for p in pets if predicate(p)]


class StaffQueryService:
    """Runs filter specs against the booking store and pet catalog."""

    def __init__(
        self,
        bookings: BookingStore,
        pets: PetCatalog,
        retry_config: Optional[RetryConfig] = None,
        scheduling: Optional[SchedulingConfig] = None,
    ) -> None:
        self._bookings = bookings
        self._pets = pets
        self._retry = retry_config or settings.retry
        scheduling = scheduling or settings.scheduling
        self.template = build_slot_template(
            scheduling.slot_first_hour, scheduling.slot_last_hour
        )

    async def search_bookings(self, spec: BookingFilterSpec) -> list[Booking]:
        candidates = await retry_read(
            lambda: self._bookings.list_between(spec.date_from, spec.date_to),
            description="booking search",
            config=self._retry,
        )
        results = filter_bookings(candidates, spec, self.template)
        logger.debug("Booking search matched %d of %d", len(results), len(candidates))
        return results

    async def search_pets(self, spec: PetFilterSpec) -> list[Pet]:
        pets = await retry_read(
            self._pets.list_pets, description="pet search", config=self._retry
        )
        return filter_pets(pets, spec)
