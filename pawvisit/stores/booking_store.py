"""
In-memory booking persistence.

Stands in for the remote bookings table. Every method is a coroutine so
callers treat it like the network-backed store it replaces. Writes take a
single lock, which makes the slot check-and-insert and every conditional
status update atomic at the single-record level.
"""

from __future__ import annotations

import asyncio
import datetime as dt
import logging
from typing import Any, NamedTuple, Optional

from pawvisit.errors import InvalidTransitionError, NotFoundError, SlotConflictError
from pawvisit.scheduling.calendar import Clock, SystemClock
from pawvisit.schemas.booking_schema import Booking, BookingStatus, VisitStatus
from pawvisit.utils import generate_ref

logger = logging.getLogger(__name__)

# Statuses that hold a slot
ACTIVE_STATUSES = frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED})


class BookingSnapshot(NamedTuple):
    """The state a caller last observed. Used as a write precondition."""

    status: BookingStatus
    visit_status: Optional[VisitStatus]

    @classmethod
    def of(cls, booking: Booking) -> BookingSnapshot:
        return cls(booking.status, booking.visit_status)


class BookingStore:
    """Booking records keyed by id with a conditional insert on the slot tuple."""

    def __init__(self, clock: Optional[Clock] = None) -> None:
        self._bookings: dict[str, Booking] = {}
        self._lock = asyncio.Lock()
        self._clock = clock or SystemClock()

    def _slot_holder(self, shelter_id: str, day: dt.date, slot: str) -> Optional[Booking]:
        for booking in self._bookings.values():
            if (
                booking.shelter_id == shelter_id
                and booking.date == day
                and booking.time_slot == slot
                and booking.status in ACTIVE_STATUSES
            ):
                return booking
        return None

    def _require(self, booking_id: str) -> Booking:
        booking = self._bookings.get(booking_id)
        if booking is None:
            raise NotFoundError(f"Booking {booking_id} not found.")
        return booking

    async def create(
        self,
        pet_id: str,
        user_id: str,
        shelter_id: str,
        day: dt.date,
        slot: str,
        *,
        pet_name: Optional[str] = None,
        visitor_name: Optional[str] = None,
    ) -> Booking:
        """Insert a pending booking unless an active one already holds the slot."""
        async with self._lock:
            holder = self._slot_holder(shelter_id, day, slot)
            if holder is not None:
                logger.warning(
                    "Slot conflict: %s %s %s already held by %s",
                    shelter_id, day.isoformat(), slot, holder.id,
                )
                raise SlotConflictError(
                    f"Slot {slot} on {day.isoformat()} at shelter {shelter_id} is already booked."
                )

            booking = Booking(
                id=generate_ref("BK"),
                pet_id=pet_id,
                user_id=user_id,
                shelter_id=shelter_id,
                date=day,
                time_slot=slot,
                status=BookingStatus.PENDING,
                pet_name=pet_name,
                visitor_name=visitor_name,
                created_at=self._clock.now(),
            )
            self._bookings[booking.id] = booking

        logger.info(
            "Booking created: %s for pet %s on %s at %s",
            booking.id, pet_id, day.isoformat(), slot,
        )
        return booking.model_copy(deep=True)

    async def get(self, booking_id: str) -> Booking:
        return self._require(booking_id).model_copy(deep=True)

    async def list_by_user(self, user_id: str) -> list[Booking]:
        """A user's bookings, most recent visit date first."""
        owned = [b for b in self._bookings.values() if b.user_id == user_id]
        owned.sort(key=lambda b: (b.date, b.created_at), reverse=True)
        return [b.model_copy(deep=True) for b in owned]

    async def list_between(self, date_from: dt.date, date_to: dt.date) -> list[Booking]:
        return [
            b.model_copy(deep=True)
            for b in self._bookings.values()
            if date_from <= b.date <= date_to
        ]

    async def list_all(self) -> list[Booking]:
        return [b.model_copy(deep=True) for b in self._bookings.values()]

    async def claimed_slots(self, shelter_id: str, day: dt.date) -> set[str]:
        """Slot labels held by pending or confirmed bookings for (shelter, day)."""
        return {
            b.time_slot
            for b in self._bookings.values()
            if b.shelter_id == shelter_id and b.date == day and b.status in ACTIVE_STATUSES
        }

    async def cancel(
        self, booking_id: str, expected: Optional[BookingSnapshot] = None
    ) -> Booking:
        """Mark a booking cancelled. Cancelling twice returns the record unchanged."""
        async with self._lock:
            current = self._require(booking_id)
            if current.status == BookingStatus.CANCELLED:
                logger.info("Booking %s already cancelled", booking_id)
                return current.model_copy(deep=True)
            if expected is not None and BookingSnapshot.of(current) != expected:
                raise InvalidTransitionError(
                    f"Booking {booking_id} changed before cancellation: "
                    f"expected {_describe(expected)}, found {_describe(BookingSnapshot.of(current))}."
                )
            updated = current.model_copy(
                update={"status": BookingStatus.CANCELLED, "updated_at": self._clock.now()}
            )
            self._bookings[booking_id] = updated

        logger.info("Booking cancelled: %s", booking_id)
        return updated.model_copy(deep=True)

    async def compare_and_set(
        self, booking_id: str, expected: BookingSnapshot, **changes: Any
    ) -> Booking:
        """Apply ``changes`` only if the booking is still in the ``expected`` state."""
        async with self._lock:
            current = self._require(booking_id)
            actual = BookingSnapshot.of(current)
            if actual != expected:
                logger.warning(
                    "Stale write on %s: expected %s, found %s",
                    booking_id, _describe(expected), _describe(actual),
                )
                raise InvalidTransitionError(
                    f"Booking {booking_id} is {_describe(actual)}, "
                    f"not {_describe(expected)}."
                )
            updated = current.model_copy(update={**changes, "updated_at": self._clock.now()})
            self._bookings[booking_id] = updated
        return updated.model_copy(deep=True)

    async def update_notes(
        self, booking_id: str, text: str, expected: Optional[BookingSnapshot] = None
    ) -> Booking:
        """Replace the staff note, optionally only while the booking is in ``expected``.

        Last write wins between notes; status is untouched.
        """
        async with self._lock:
            current = self._require(booking_id)
            actual = BookingSnapshot.of(current)
            if expected is not None and actual != expected:
                logger.warning(
                    "Stale note on %s: expected %s, found %s",
                    booking_id, _describe(expected), _describe(actual),
                )
                raise InvalidTransitionError(
                    f"Booking {booking_id} is {_describe(actual)}, "
                    f"not {_describe(expected)}."
                )
            updated = current.model_copy(update={"notes": text, "updated_at": self._clock.now()})
            self._bookings[booking_id] = updated
        return updated.model_copy(deep=True)


def _describe(snapshot: BookingSnapshot) -> str:
    if snapshot.visit_status is None:
        return snapshot.status.value
    return f"{snapshot.status.value}/{snapshot.visit_status.value}"
