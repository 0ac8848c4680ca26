"""
Booking lifecycle controller.

Owns every write to a booking after it is requested:

    pending -> confirmed -> (visit) CONFIRMED -> CHECKED_OUT -> RETURNED | NO_SHOW
    pending | confirmed -> cancelled   (before the visit is under way)

Each write is validated first and then applied with a conditional update
against the state the controller read, so a staff action that raced
another one is rejected instead of silently overwriting it. Reads are
retried once on upstream failure; writes never are.
"""

import datetime as dt
from typing import Optional

from pawvisit.config import AppConfig, settings
from pawvisit.directory.pets import PetCatalog
from pawvisit.directory.shelters import ShelterDirectory
from pawvisit.errors import InvalidTransitionError, ValidationError
from pawvisit.logging_context import get_request_logger
from pawvisit.scheduling.availability import SlotAvailabilityCalculator, slot_index
from pawvisit.scheduling.calendar import Clock, SystemClock
from pawvisit.scheduling.state_machine import VisitStateMachine
from pawvisit.schemas.booking_schema import (
    Booking,
    BookingStatus,
    StatusChange,
    VisitStatus,
)
from pawvisit.schemas.rewards_schema import FeedbackReceipt, FeedbackSubmission
from pawvisit.services.retry import retry_read
from pawvisit.services.rewards import RewardsIntegration
from pawvisit.stores.booking_store import BookingSnapshot, BookingStore

logger = get_request_logger(__name__)

MIN_RATING = 1
MAX_RATING = 5


def _require_text(name: str, value: Optional[str]) -> str:
    if value is None or not value.strip():
        raise ValidationError(f"{name} is required")
    return value.strip()


class BookingLifecycleController:
    """Creates bookings and drives them through booking and visit states."""

    def __init__(
        self,
        bookings: BookingStore,
        shelters: ShelterDirectory,
        pets: PetCatalog,
        rewards: RewardsIntegration,
        *,
        clock: Optional[Clock] = None,
        config: Optional[AppConfig] = None,
    ) -> None:
        self._bookings = bookings
        self._shelters = shelters
        self._pets = pets
        self._rewards = rewards
        self._clock = clock or SystemClock()
        self._config = config or settings
        self.calculator = SlotAvailabilityCalculator(bookings, self._config.scheduling)

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #

    async def get_booking(self, booking_id: str) -> Booking:
        return await retry_read(
            lambda: self._bookings.get(booking_id),
            description=f"get booking {booking_id}",
            config=self._config.retry,
        )

    async def list_user_bookings(self, user_id: str) -> list[Booking]:
        return await retry_read(
            lambda: self._bookings.list_by_user(user_id),
            description=f"list bookings for {user_id}",
            config=self._config.retry,
        )

    async def available_slots(self, shelter_id: str, day: dt.date) -> list[str]:
        """Free slots for a shelter on a day. A snapshot, not a reservation."""
        shelter = await retry_read(
            lambda: self._shelters.get_shelter(shelter_id),
            description=f"get shelter {shelter_id}",
            config=self._config.retry,
        )
        return await retry_read(
            lambda: self.calculator.available_slots(shelter, day),
            description=f"slots for {shelter_id} on {day.isoformat()}",
            config=self._config.retry,
        )

    async def today_visits(self, shelter_id: Optional[str] = None) -> list[Booking]:
        """Confirmed visits for today in slot order, optionally for one shelter."""
        today = self._clock.today()
        bookings = await retry_read(
            lambda: self._bookings.list_between(today, today),
            description="today's visits",
            config=self._config.retry,
        )
        visits = [
            b
            for b in bookings
            if b.status == BookingStatus.CONFIRMED
            and (shelter_id is None or b.shelter_id == shelter_id)
        ]
        visits.sort(key=lambda b: slot_index(b.time_slot, self.calculator.template))
        return visits

    # ------------------------------------------------------------------ #
    # Booking-level writes
    # ------------------------------------------------------------------ #

    async def create_booking(
        self,
        pet_id: str,
        user_id: str,
        shelter_id: str,
        day: dt.date,
        slot: str,
        *,
        visitor_name: Optional[str] = None,
    ) -> Booking:
        """Validate a request and insert a pending booking.

        Availability is not re-checked here; the store's conditional
        insert decides, and raises SlotConflictError if the slot is taken.
        """
        pet_id = _require_text("pet_id", pet_id)
        user_id = _require_text("user_id", user_id)
        shelter_id = _require_text("shelter_id", shelter_id)
        slot = _require_text("time_slot", slot)

        if not self.calculator.is_template_slot(slot):
            raise ValidationError(
                f"Unknown time slot {slot!r}. Valid slots: {list(self.calculator.template)}"
            )
        if day < self._clock.today():
            raise ValidationError(f"Cannot book a visit in the past ({day.isoformat()})")

        shelter = await self._shelters.get_shelter(shelter_id)
        pet = await self._pets.get_pet(pet_id)
        if not self.calculator.is_open(shelter, day):
            raise ValidationError(f"{shelter.name} is closed on {day.isoformat()}")

        booking = await self._bookings.create(
            pet.id,
            user_id,
            shelter.id,
            day,
            slot,
            pet_name=pet.name,
            visitor_name=visitor_name,
        )
        logger.info("Booking %s requested by %s", booking.id, user_id)
        return booking

    async def confirm_booking(self, booking_id: str, *, staff_id: Optional[str] = None) -> Booking:
        """pending -> confirmed; the visit starts in CONFIRMED."""
        booking = await self._bookings.get(booking_id)
        if booking.status != BookingStatus.PENDING:
            raise InvalidTransitionError(
                f"Booking {booking_id} is {booking.status.value}; only pending bookings can be confirmed."
            )
        entry = StatusChange(
            status=VisitStatus.CONFIRMED, timestamp=self._clock.now(), staff_id=staff_id
        )
        confirmed = await self._bookings.compare_and_set(
            booking_id,
            BookingSnapshot.of(booking),
            status=BookingStatus.CONFIRMED,
            visit_status=VisitStatus.CONFIRMED,
            status_history=[*booking.status_history, entry],
        )
        logger.info("Booking %s confirmed", booking_id)
        return confirmed

    async def cancel_booking(self, booking_id: str) -> Booking:
        """Cancel before the visit is under way. A second cancel is a no-op."""
        booking = await self._bookings.get(booking_id)
        if booking.status == BookingStatus.CANCELLED:
            return booking
        if booking.visit_status not in (None, VisitStatus.CONFIRMED):
            raise InvalidTransitionError(
                f"Booking {booking_id} visit is {booking.visit_status.value}; it can no longer be cancelled."
            )
        if booking.date < self._clock.today():
            raise InvalidTransitionError(
                f"Booking {booking_id} was for {booking.date.isoformat()}; past visits cannot be cancelled."
            )
        return await self._bookings.cancel(booking_id, expected=BookingSnapshot.of(booking))

    # ------------------------------------------------------------------ #
    # Visit-level writes (staff)
    # ------------------------------------------------------------------ #

    async def transition_visit(
        self,
        booking_id: str,
        new_status: VisitStatus,
        staff_id: str,
        *,
        expected_status: VisitStatus,
    ) -> Booking:
        """Move a visit forward, provided it is still in ``expected_status``."""
        staff_id = _require_text("staff_id", staff_id)
        booking = await self._bookings.get(booking_id)

        if booking.status != BookingStatus.CONFIRMED or booking.visit_status is None:
            raise InvalidTransitionError(
                f"Booking {booking_id} is {booking.status.value}; visits start once confirmed."
            )
        if booking.visit_status != expected_status:
            logger.warning(
                "Stale status change on %s by %s: expected %s, current %s",
                booking_id, staff_id, expected_status.value, booking.visit_status.value,
            )
            raise InvalidTransitionError(
                f"Booking {booking_id} is {booking.visit_status.value}, not {expected_status.value}."
            )
        if booking.date > self._clock.today():
            raise InvalidTransitionError(
                f"Visit {booking_id} is scheduled for {booking.date.isoformat()}; it has not started."
            )

        machine = VisitStateMachine(booking.visit_status, booking.status_history)
        machine.transition(new_status, staff_id=staff_id, at=self._clock.now())

        updated = await self._bookings.compare_and_set(
            booking_id,
            BookingSnapshot(BookingStatus.CONFIRMED, expected_status),
            visit_status=machine.current_state,
            status_history=machine.get_history(),
        )
        logger.info(
            "Visit %s: %s -> %s by %s",
            booking_id, expected_status.value, new_status.value, staff_id,
        )
        return updated

    async def add_note(self, booking_id: str, text: str) -> Booking:
        """Replace the staff note. Allowed until the booking is cancelled or the visit ends."""
        note = _require_text("text", text)
        booking = await self._bookings.get(booking_id)
        if booking.status == BookingStatus.CANCELLED:
            raise InvalidTransitionError(f"Booking {booking_id} is cancelled.")
        if booking.visit_status in VisitStateMachine.TERMINAL_STATES:
            raise InvalidTransitionError(
                f"Visit {booking_id} is {booking.visit_status.value}; notes are closed."
            )
        updated = await self._bookings.update_notes(
            booking_id, note, expected=BookingSnapshot.of(booking)
        )
        logger.debug("Note updated on %s", booking_id)
        return updated

    async def submit_feedback(
        self, booking_id: str, submission: FeedbackSubmission
    ) -> FeedbackReceipt:
        """Accept visitor feedback for a returned visit and credit rewards once."""
        if not MIN_RATING <= submission.rating <= MAX_RATING:
            raise ValidationError(
                f"Rating must be between {MIN_RATING} and {MAX_RATING}, got {submission.rating}"
            )
        booking = await self._bookings.get(booking_id)
        if booking.visit_status != VisitStatus.RETURNED:
            current = booking.visit_status.value if booking.visit_status else booking.status.value
            raise InvalidTransitionError(
                f"Feedback requires a returned visit; booking {booking_id} is {current}."
            )
        receipt = await self._rewards.credit_for_feedback(booking, submission)
        logger.info(
            "Feedback for %s credited %d points to %s",
            booking_id, receipt.points_earned, booking.user_id,
        )
        return receipt
