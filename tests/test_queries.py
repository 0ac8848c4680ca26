"""Tests for staff booking and pet filters."""

import datetime as dt

import pytest

from pawvisit.config import RetryConfig, SchedulingConfig
from pawvisit.directory.pets import PetCatalog, seed_pets
from pawvisit.errors import ValidationError
from pawvisit.scheduling.availability import build_slot_template
from pawvisit.schemas.booking_schema import BookingStatus, VisitStatus
from pawvisit.schemas.shelter_schema import PetAvailability, Species
from pawvisit.services.queries import (
    BookingFilterSpec,
    PetFilterSpec,
    StaffQueryService,
    filter_bookings,
    filter_pets,
)
from tests.conftest import MONDAY, SHELTER_ID, TUESDAY, book_and_confirm, make_booking

MARCH_1 = dt.date(2025, 3, 1)
MARCH_31 = dt.date(2025, 3, 31)


@pytest.fixture
def bookings():
    return [
        make_booking("BK-AAAAAA", MONDAY, "2:00 PM", pet_name="Max", visitor_name="Sarah Johnson"),
        make_booking("BK-BBBBBB", MONDAY, "9:00 AM", pet_id="pet-002", pet_name="Luna",
                     visitor_name="Tom Lee", visit_status=VisitStatus.CHECKED_OUT),
        make_booking("BK-CCCCCC", TUESDAY, "10:00 AM", status=BookingStatus.PENDING,
                     visit_status=None, pet_name="Buddy", visitor_name="Ana Ruiz"),
        make_booking("BK-DDDDDD", TUESDAY, "11:00 AM", status=BookingStatus.CANCELLED,
                     visit_status=None, pet_name="Luna", pet_id="pet-002"),
        make_booking("BK-EEEEEE", dt.date(2025, 4, 2), "9:00 AM", pet_name="Max"),
    ]


def _spec(**kwargs) -> BookingFilterSpec:
    return BookingFilterSpec(date_from=MARCH_1, date_to=MARCH_31, **kwargs)


class TestBookingFilterSpec:
    def test_both_bounds_required(self):
        with pytest.raises(ValidationError, match="date_from and date_to"):
            BookingFilterSpec(date_from=MARCH_1, date_to=None)

    def test_reversed_bounds_rejected(self):
        with pytest.raises(ValidationError):
            BookingFilterSpec(date_from=MARCH_31, date_to=MARCH_1)

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError, match="Unknown status"):
            _spec(statuses={"LOST"})

    def test_enum_statuses_normalized(self):
        spec = _spec(statuses={VisitStatus.RETURNED, BookingStatus.PENDING})
        assert spec.statuses == frozenset({"RETURNED", "pending"})

    def test_blank_search_ignored(self):
        assert _spec(search="   ").search is None


class TestFilterBookings:
    def test_date_window_only(self, bookings):
        result = filter_bookings(bookings, _spec())
        assert "BK-EEEEEE" not in [b.id for b in result]
        assert len(result) == 4

    def test_newest_first_then_latest_slot(self, bookings):
        result = filter_bookings(bookings, _spec())
        assert [b.id for b in result] == ["BK-DDDDDD", "BK-CCCCCC", "BK-AAAAAA", "BK-BBBBBB"]

    def test_ascending_order(self, bookings):
        result = filter_bookings(bookings, _spec(descending=False))
        assert [b.id for b in result] == ["BK-BBBBBB", "BK-AAAAAA", "BK-CCCCCC", "BK-DDDDDD"]

    def test_status_set_is_any_of(self, bookings):
        result = filter_bookings(bookings, _spec(statuses={"CHECKED_OUT", "pending"}))
        assert {b.id for b in result} == {"BK-BBBBBB", "BK-CCCCCC"}

    def test_cancelled_status(self, bookings):
        result = filter_bookings(bookings, _spec(statuses={"cancelled"}))
        assert [b.id for b in result] == ["BK-DDDDDD"]

    def test_search_matches_pet_name_case_insensitively(self, bookings):
        result = filter_bookings(bookings, _spec(search="LUNA"))
        assert {b.id for b in result} == {"BK-BBBBBB", "BK-DDDDDD"}

    def test_search_matches_visitor_and_id(self, bookings):
        assert [b.id for b in filter_bookings(bookings, _spec(search="ruiz"))] == ["BK-CCCCCC"]
        assert [b.id for b in filter_bookings(bookings, _spec(search="bk-aaa"))] == ["BK-AAAAAA"]

    def test_dimensions_are_anded(self, bookings):
        result = filter_bookings(bookings, _spec(search="luna", statuses={"cancelled"}))
        assert [b.id for b in result] == ["BK-DDDDDD"]

    def test_pet_filter(self, bookings):
        result = filter_bookings(bookings, _spec(pet_id="pet-002"))
        assert {b.id for b in result} == {"BK-BBBBBB", "BK-DDDDDD"}

    def test_no_match(self, bookings):
        assert filter_bookings(bookings, _spec(search="nobody")) == []

    def test_orders_by_configured_slot_template(self):
        early_day = [
            make_booking("BK-000008", MONDAY, "8:00 AM"),
            make_booking("BK-000009", MONDAY, "9:00 AM"),
            make_booking("BK-000007", MONDAY, "7:00 AM"),
        ]
        result = filter_bookings(
            early_day, _spec(descending=False), build_slot_template(7, 18)
        )
        assert [b.time_slot for b in result] == ["7:00 AM", "8:00 AM", "9:00 AM"]


class TestFilterPets:
    def test_species(self):
        result = filter_pets(seed_pets(), PetFilterSpec(species=Species.CAT))
        assert [p.name for p in result] == ["Luna", "Whiskers"]

    def test_species_from_string(self):
        assert PetFilterSpec(species="Dog").species == Species.DOG

    def test_availability(self):
        result = filter_pets(seed_pets(), PetFilterSpec(availability=PetAvailability.AVAILABLE))
        assert [p.id for p in result] == ["pet-001", "pet-002", "pet-005"]

    def test_search_breed(self):
        result = filter_pets(seed_pets(), PetFilterSpec(search="retriever"))
        assert [p.name for p in result] == ["Max", "Buddy"]

    def test_combined(self):
        spec = PetFilterSpec(species="Dog", availability="AVAILABLE")
        assert [p.name for p in filter_pets(seed_pets(), spec)] == ["Max"]

    def test_no_filters_keeps_catalog_order(self):
        assert [p.id for p in filter_pets(seed_pets(), PetFilterSpec())] == [
            "pet-001", "pet-002", "pet-003", "pet-004", "pet-005",
        ]

    def test_invalid_species(self):
        with pytest.raises(ValidationError, match="species"):
            PetFilterSpec(species="Dragon")


class TestStaffQueryService:
    @pytest.mark.asyncio
    async def test_search_bookings_against_store(self, engine, lifecycle):
        await book_and_confirm(lifecycle, slot="9:00 AM")
        await lifecycle.create_booking("pet-002", "user-002", SHELTER_ID, TUESDAY, "9:00 AM")
        result = await engine.queries.search_bookings(_spec(statuses={"CONFIRMED"}))
        assert [b.pet_name for b in result] == ["Max"]

    @pytest.mark.asyncio
    async def test_search_pets_reflects_updates(self, engine):
        await engine.pets.update_availability("pet-002", PetAvailability.HOLD, "staff-001")
        result = await engine.queries.search_pets(PetFilterSpec(availability="HOLD"))
        assert [p.name for p in result] == ["Luna", "Buddy"]

    @pytest.mark.asyncio
    async def test_search_bookings_uses_configured_hours(self, booking_store):
        for slot in ("8:00 AM", "9:00 AM", "7:00 AM"):
            await booking_store.create("pet-001", "user-001", SHELTER_ID, MONDAY, slot)
        queries = StaffQueryService(
            booking_store,
            PetCatalog(),
            RetryConfig(read_attempts=2, read_backoff_sec=0.0),
            SchedulingConfig(slot_first_hour=7, slot_last_hour=18),
        )
        result = await queries.search_bookings(_spec(descending=False))
        assert [b.time_slot for b in result] == ["7:00 AM", "8:00 AM", "9:00 AM"]
