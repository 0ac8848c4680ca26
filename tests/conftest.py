"""Shared test fixtures and helpers."""

import datetime as dt
from typing import Optional

import pytest

from pawvisit.config import AppConfig, RetryConfig, RewardsConfig, SchedulingConfig
from pawvisit.errors import UpstreamUnavailableError
from pawvisit.scheduling.calendar import FixedClock
from pawvisit.schemas.booking_schema import Booking, BookingStatus, VisitStatus
from pawvisit.schemas.shelter_schema import GeoPoint, Shelter
from pawvisit.services.engine import build_engine
from pawvisit.services.lifecycle import BookingLifecycleController
from pawvisit.stores.booking_store import BookingStore
from pawvisit.stores.rewards_ledger import RewardsLedger

MONDAY = dt.date(2025, 3, 3)
TUESDAY = dt.date(2025, 3, 4)
SUNDAY = dt.date(2025, 3, 9)

SHELTER_ID = "shelter-1"

TEST_CONFIG = AppConfig(
    scheduling=SchedulingConfig(slot_first_hour=9, slot_last_hour=18, missing_hours_policy="open"),
    rewards=RewardsConfig(feedback_points=50, points_per_level=100),
    retry=RetryConfig(read_attempts=2, read_backoff_sec=0.0),
)

TEMPLATE = [
    "9:00 AM", "10:00 AM", "11:00 AM", "12:00 PM", "1:00 PM",
    "2:00 PM", "3:00 PM", "4:00 PM", "5:00 PM", "6:00 PM",
]


@pytest.fixture
def clock():
    return FixedClock(dt.datetime(2025, 3, 3, 8, 0, tzinfo=dt.timezone.utc))


@pytest.fixture
def engine(clock):
    return build_engine(clock=clock, config=TEST_CONFIG)


@pytest.fixture
def lifecycle(engine):
    return engine.lifecycle


@pytest.fixture
def booking_store(clock):
    return BookingStore(clock)


def make_shelter(
    shelter_id: str = "shelter-test",
    hours: Optional[dict[str, str]] = None,
) -> Shelter:
    """Helper to create a Shelter open 9-6 every day unless overridden."""
    if hours is None:
        hours = {
            day: "9:00 AM - 6:00 PM"
            for day in ("monday", "tuesday", "wednesday", "thursday",
                        "friday", "saturday", "sunday")
        }
    return Shelter(
        id=shelter_id,
        name="Test Shelter",
        address="1 Test Lane",
        location=GeoPoint(latitude=37.77, longitude=-122.41),
        operating_hours=hours,
    )


def make_booking(
    booking_id: str = "BK-000001",
    date: dt.date = MONDAY,
    time_slot: str = "10:00 AM",
    status: BookingStatus = BookingStatus.CONFIRMED,
    visit_status: Optional[VisitStatus] = VisitStatus.CONFIRMED,
    pet_id: str = "pet-001",
    pet_name: Optional[str] = "Max",
    visitor_name: Optional[str] = "Sarah Johnson",
    user_id: str = "user-001",
    shelter_id: str = SHELTER_ID,
) -> Booking:
    """Helper to create a Booking record for pure filter tests."""
    return Booking(
        id=booking_id,
        pet_id=pet_id,
        user_id=user_id,
        shelter_id=shelter_id,
        date=date,
        time_slot=time_slot,
        status=status,
        visit_status=visit_status,
        pet_name=pet_name,
        visitor_name=visitor_name,
        created_at=dt.datetime(2025, 3, 1, tzinfo=dt.timezone.utc),
    )


async def book_and_confirm(
    lifecycle: BookingLifecycleController,
    slot: str = "10:00 AM",
    day: dt.date = MONDAY,
    pet_id: str = "pet-001",
    user_id: str = "user-001",
) -> Booking:
    """Create a booking at shelter-1 and confirm it."""
    booking = await lifecycle.create_booking(pet_id, user_id, SHELTER_ID, day, slot)
    return await lifecycle.confirm_booking(booking.id, staff_id="staff-001")


async def returned_visit(
    lifecycle: BookingLifecycleController,
    slot: str = "10:00 AM",
    day: dt.date = MONDAY,
    pet_id: str = "pet-001",
    user_id: str = "user-001",
) -> Booking:
    """Drive a booking all the way to RETURNED."""
    booking = await book_and_confirm(lifecycle, slot, day, pet_id, user_id)
    await lifecycle.transition_visit(
        booking.id, VisitStatus.CHECKED_OUT, "staff-001",
        expected_status=VisitStatus.CONFIRMED,
    )
    return await lifecycle.transition_visit(
        booking.id, VisitStatus.RETURNED, "staff-002",
        expected_status=VisitStatus.CHECKED_OUT,
    )


class FlakyBookingStore(BookingStore):
    """BookingStore whose reads fail a fixed number of times before working."""

    def __init__(self, clock, read_failures: int = 1, write_failures: int = 0) -> None:
        super().__init__(clock)
        self.read_failures = read_failures
        self.write_failures = write_failures
        self.read_calls = 0
        self.write_calls = 0

    def _maybe_fail_read(self) -> None:
        self.read_calls += 1
        if self.read_failures > 0:
            self.read_failures -= 1
            raise UpstreamUnavailableError("bookings table timed out")

    async def get(self, booking_id):
        self._maybe_fail_read()
        return await super().get(booking_id)

    async def list_between(self, date_from, date_to):
        self._maybe_fail_read()
        return await super().list_between(date_from, date_to)

    async def create(self, *args, **kwargs):
        self.write_calls += 1
        if self.write_failures > 0:
            self.write_failures -= 1
            raise UpstreamUnavailableError("bookings table timed out")
        return await super().create(*args, **kwargs)


class InterleavingBookingStore(BookingStore):
    """BookingStore that runs a hook right after the next ``get`` returns.

    Lets a test commit a competing write between a caller's read and its
    conditional write, the window a network round-trip would open.
    """

    def __init__(self, clock) -> None:
        super().__init__(clock)
        self.after_get = None

    async def get(self, booking_id):
        booking = await super().get(booking_id)
        hook, self.after_get = self.after_get, None
        if hook is not None:
            await hook()
        return booking


class FailingRewardsLedger(RewardsLedger):
    """RewardsLedger whose first ``failures`` credits raise UpstreamUnavailableError."""

    def __init__(self, config=None, clock=None, failures: int = 1) -> None:
        super().__init__(config, clock)
        self.failures = failures

    async def credit_points(self, user_id, amount, action):
        if self.failures > 0:
            self.failures -= 1
            raise UpstreamUnavailableError("rewards ledger timed out")
        return await super().credit_points(user_id, amount, action)
