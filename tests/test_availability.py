"""Tests for slot template and availability computation."""

import pytest

from pawvisit.config import SchedulingConfig
from pawvisit.scheduling.availability import (
    SlotAvailabilityCalculator,
    available_slots,
    build_slot_template,
    format_slot_label,
    slot_index,
)
from pawvisit.schemas.booking_schema import VisitStatus
from tests.conftest import (
    MONDAY,
    SHELTER_ID,
    SUNDAY,
    TEMPLATE,
    TUESDAY,
    book_and_confirm,
    make_shelter,
)

TEMPLATE_TUPLE = tuple(TEMPLATE)


class TestSlotTemplate:
    @pytest.mark.parametrize(
        "hour, label",
        [(0, "12:00 AM"), (9, "9:00 AM"), (12, "12:00 PM"), (13, "1:00 PM"), (18, "6:00 PM")],
    )
    def test_format_slot_label(self, hour, label):
        assert format_slot_label(hour) == label

    def test_default_template_has_ten_hourly_slots(self):
        assert list(build_slot_template(9, 18)) == TEMPLATE

    def test_slot_index_unknown_sorts_last(self):
        assert slot_index("9:00 AM", TEMPLATE_TUPLE) == 0
        assert slot_index("7:30 PM", TEMPLATE_TUPLE) == len(TEMPLATE)


class TestPureAvailability:
    def test_closed_weekday_returns_empty(self):
        shelter = make_shelter(hours={"sunday": "Closed", "monday": "9:00 AM - 6:00 PM"})
        assert available_slots(shelter, SUNDAY, [], template=TEMPLATE_TUPLE) == []

    def test_closed_sentinel_is_case_insensitive(self):
        shelter = make_shelter(hours={"monday": "  CLOSED "})
        assert available_slots(shelter, MONDAY, [], template=TEMPLATE_TUPLE) == []

    def test_open_day_with_no_claims_returns_full_template(self):
        shelter = make_shelter()
        assert available_slots(shelter, MONDAY, [], template=TEMPLATE_TUPLE) == TEMPLATE

    def test_claimed_slots_removed_in_template_order(self):
        shelter = make_shelter()
        claimed = ["5:00 PM", "9:00 AM", "1:00 PM"]
        result = available_slots(shelter, MONDAY, claimed, template=TEMPLATE_TUPLE)
        assert result == [s for s in TEMPLATE if s not in claimed]
        assert len(result) == len(TEMPLATE) - 3

    def test_missing_weekday_defaults_to_open(self):
        shelter = make_shelter(hours={"tuesday": "9:00 AM - 6:00 PM"})
        assert available_slots(shelter, MONDAY, [], template=TEMPLATE_TUPLE) == TEMPLATE

    def test_missing_weekday_with_closed_policy(self):
        shelter = make_shelter(hours={"tuesday": "9:00 AM - 6:00 PM"})
        result = available_slots(
            shelter, MONDAY, [], template=TEMPLATE_TUPLE, missing_hours_policy="closed"
        )
        assert result == []

    def test_hours_keys_match_case_insensitively(self):
        shelter = make_shelter(hours={"Sunday": "Closed"})
        assert available_slots(shelter, SUNDAY, [], template=TEMPLATE_TUPLE) == []


class TestCalculatorWithBookings:
    @pytest.mark.asyncio
    async def test_monday_with_confirmed_ten_am(self, lifecycle):
        booking = await book_and_confirm(lifecycle, slot="10:00 AM", day=MONDAY)
        assert booking.visit_status == VisitStatus.CONFIRMED

        slots = await lifecycle.available_slots(SHELTER_ID, MONDAY)
        assert len(slots) == 9
        assert "10:00 AM" not in slots
        assert slots == [s for s in TEMPLATE if s != "10:00 AM"]

    @pytest.mark.asyncio
    async def test_pending_booking_blocks_slot(self, lifecycle):
        await lifecycle.create_booking("pet-001", "user-001", SHELTER_ID, MONDAY, "2:00 PM")
        slots = await lifecycle.available_slots(SHELTER_ID, MONDAY)
        assert "2:00 PM" not in slots

    @pytest.mark.asyncio
    async def test_cancelled_booking_frees_slot(self, lifecycle):
        booking = await lifecycle.create_booking(
            "pet-001", "user-001", SHELTER_ID, MONDAY, "2:00 PM"
        )
        await lifecycle.cancel_booking(booking.id)
        slots = await lifecycle.available_slots(SHELTER_ID, MONDAY)
        assert slots == TEMPLATE

    @pytest.mark.asyncio
    async def test_booking_first_free_slot_removes_it(self, lifecycle):
        before = await lifecycle.available_slots(SHELTER_ID, MONDAY)
        await lifecycle.create_booking("pet-002", "user-002", SHELTER_ID, MONDAY, before[0])
        after = await lifecycle.available_slots(SHELTER_ID, MONDAY)
        assert before[0] not in after
        assert after == before[1:]

    @pytest.mark.asyncio
    async def test_other_days_and_shelters_do_not_block(self, lifecycle):
        await lifecycle.create_booking("pet-001", "user-001", SHELTER_ID, TUESDAY, "9:00 AM")
        await lifecycle.create_booking("pet-005", "user-001", "shelter-2", MONDAY, "9:00 AM")
        slots = await lifecycle.available_slots(SHELTER_ID, MONDAY)
        assert slots == TEMPLATE

    @pytest.mark.asyncio
    async def test_seeded_shelter_closed_on_sunday(self, lifecycle):
        assert await lifecycle.available_slots(SHELTER_ID, SUNDAY) == []

    @pytest.mark.asyncio
    async def test_calculator_uses_configured_template(self, booking_store):
        config = SchedulingConfig(slot_first_hour=10, slot_last_hour=12, missing_hours_policy="open")
        calculator = SlotAvailabilityCalculator(booking_store, config)
        slots = await calculator.available_slots(make_shelter(), MONDAY)
        assert slots == ["10:00 AM", "11:00 AM", "12:00 PM"]

    @pytest.mark.asyncio
    async def test_calculator_closed_policy_for_missing_hours(self, booking_store):
        config = SchedulingConfig(slot_first_hour=9, slot_last_hour=18, missing_hours_policy="closed")
        calculator = SlotAvailabilityCalculator(booking_store, config)
        shelter = make_shelter(hours={})
        assert await calculator.available_slots(shelter, MONDAY) == []
