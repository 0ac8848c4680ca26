"""
Slot availability for a shelter on a given day.

A day is a fixed template of hourly slot labels ("9:00 AM" ... "6:00 PM").
Closed weekdays yield nothing; otherwise every slot held by a pending or
confirmed booking is removed. Template order is always preserved.

Usage:
    calculator = SlotAvailabilityCalculator(booking_store)
    slots = await calculator.available_slots(shelter, date(2025, 3, 3))
"""

from __future__ import annotations

import datetime as dt
import logging
from typing import TYPE_CHECKING, Iterable, Optional

from pawvisit.config import SchedulingConfig, settings
from pawvisit.scheduling.calendar import weekday_name
from pawvisit.schemas.shelter_schema import Shelter

if TYPE_CHECKING:
    from pawvisit.stores.booking_store import BookingStore

logger = logging.getLogger(__name__)

CLOSED_SENTINEL = "closed"


def format_slot_label(hour: int) -> str:
    """Render a 24h hour as a slot label, e.g. 13 -> '1:00 PM'."""
    suffix = "AM" if hour < 12 else "PM"
    return f"{hour % 12 or 12}:00 {suffix}"


def build_slot_template(first_hour: int, last_hour: int) -> tuple[str, ...]:
    """Ordered hourly labels from first_hour to last_hour inclusive."""
    return tuple(format_slot_label(h) for h in range(first_hour, last_hour + 1))


DAILY_SLOT_TEMPLATE = build_slot_template(
    settings.scheduling.slot_first_hour, settings.scheduling.slot_last_hour
)


def slot_index(label: str, template: tuple[str, ...] = DAILY_SLOT_TEMPLATE) -> int:
    """Position of a label in the template; unknown labels sort last."""
    try:
        return template.index(label)
    except ValueError:
        return len(template)


def is_closed_label(hours: str) -> bool:
    return hours.strip().lower() == CLOSED_SENTINEL


def is_open_on(shelter: Shelter, day: dt.date, missing_hours_policy: str = "open") -> bool:
    """Whether the shelter takes visits on ``day``.

    A weekday with no hours entry falls back to ``missing_hours_policy``.
    """
    weekday = weekday_name(day)
    hours = shelter.hours_for(weekday)
    if hours is None:
        logger.warning(
            "Shelter %s has no hours for %s, treating as %s",
            shelter.id, weekday, missing_hours_policy,
        )
        return missing_hours_policy == "open"
    return not is_closed_label(hours)


def available_slots(
    shelter: Shelter,
    day: dt.date,
    claimed: Iterable[str],
    *,
    template: tuple[str, ...] = DAILY_SLOT_TEMPLATE,
    missing_hours_policy: str = "open",
) -> list[str]:
    """Template slots for ``day`` minus the ``claimed`` ones, in template order."""
    if not is_open_on(shelter, day, missing_hours_policy):
        return []
    taken = set(claimed)
    return [slot for slot in template if slot not in taken]


class SlotAvailabilityCalculator:
    """Reads claimed slots from the booking store and applies the template.

    The result is a snapshot. It is never used as a lock: the store's
    conditional insert is the only guard against double booking.
    """

    def __init__(self, bookings: BookingStore, config: Optional[SchedulingConfig] = None) -> None:
        self._bookings = bookings
        self._config = config or settings.scheduling
        self.template = build_slot_template(
            self._config.slot_first_hour, self._config.slot_last_hour
        )

    def is_open(self, shelter: Shelter, day: dt.date) -> bool:
        return is_open_on(shelter, day, self._config.missing_hours_policy)

    def is_template_slot(self, label: str) -> bool:
        return label in self.template

    async def available_slots(self, shelter: Shelter, day: dt.date) -> list[str]:
        if not self.is_open(shelter, day):
            logger.debug("Shelter %s closed on %s", shelter.id, day.isoformat())
            return []
        claimed = await self._bookings.claimed_slots(shelter.id, day)
        slots = [slot for slot in self.template if slot not in claimed]
        logger.debug(
            "Shelter %s on %s: %d free of %d",
            shelter.id, day.isoformat(), len(slots), len(self.template),
        )
        return slots
