"""HTTP routes for visitors and the staff console."""

import datetime as dt
from typing import Optional

from fastapi import APIRouter, Query, Request

from pawvisit.schemas.booking_schema import (
    Booking,
    BookingRequest,
    ConfirmRequest,
    NoteRequest,
    VisitStatusRequest,
)
from pawvisit.schemas.report_schema import ReportsData
from pawvisit.schemas.rewards_schema import FeedbackReceipt, FeedbackSubmission, RewardLedger
from pawvisit.schemas.shelter_schema import (
    Pet,
    PetAvailabilityRequest,
    PetNoteRequest,
    Shelter,
)
from pawvisit.services.engine import Engine
from pawvisit.services.queries import BookingFilterSpec, PetFilterSpec

router = APIRouter()


def _engine(request: Request) -> Engine:
    return request.app.state.engine


@router.get("/health")
async def health_check() -> dict[str, str]:
    return {"status": "ok"}


# --- Shelters & slots ---


@router.get("/shelters")
async def list_shelters(request: Request) -> list[Shelter]:
    return await _engine(request).shelters.list_shelters()


@router.get("/shelters/nearby")
async def nearby_shelters(request: Request, lat: float, lng: float) -> list[Shelter]:
    return await _engine(request).shelters.nearby(lat, lng)


@router.get("/shelters/{shelter_id}")
async def get_shelter(shelter_id: str, request: Request) -> Shelter:
    return await _engine(request).shelters.get_shelter(shelter_id)


@router.get("/shelters/{shelter_id}/slots")
async def get_slots(shelter_id: str, date: dt.date, request: Request) -> dict:
    slots = await _engine(request).lifecycle.available_slots(shelter_id, date)
    return {"shelter_id": shelter_id, "date": date.isoformat(), "slots": slots}


# --- Bookings ---


@router.post("/bookings", status_code=201)
async def create_booking(body: BookingRequest, request: Request) -> Booking:
    return await _engine(request).lifecycle.create_booking(
        body.pet_id,
        body.user_id,
        body.shelter_id,
        body.date,
        body.time_slot,
        visitor_name=body.visitor_name,
    )


@router.get("/bookings")
async def search_bookings(
    request: Request,
    date_from: Optional[dt.date] = None,
    date_to: Optional[dt.date] = None,
    status: list[str] = Query(default=[]),
    search: Optional[str] = None,
    pet_id: Optional[str] = None,
    user_id: Optional[str] = None,
    shelter_id: Optional[str] = None,
) -> list[Booking]:
    spec = BookingFilterSpec(
        date_from=date_from,
        date_to=date_to,
        statuses=frozenset(status),
        search=search,
        pet_id=pet_id,
        user_id=user_id,
        shelter_id=shelter_id,
    )
    return await _engine(request).queries.search_bookings(spec)


@router.get("/bookings/{booking_id}")
async def get_booking(booking_id: str, request: Request) -> Booking:
    return await _engine(request).lifecycle.get_booking(booking_id)


@router.get("/users/{user_id}/bookings")
async def list_user_bookings(user_id: str, request: Request) -> list[Booking]:
    return await _engine(request).lifecycle.list_user_bookings(user_id)


@router.post("/bookings/{booking_id}/confirm")
async def confirm_booking(
    booking_id: str, request: Request, body: Optional[ConfirmRequest] = None
) -> Booking:
    staff_id = body.staff_id if body else None
    return await _engine(request).lifecycle.confirm_booking(booking_id, staff_id=staff_id)


@router.post("/bookings/{booking_id}/cancel")
async def cancel_booking(booking_id: str, request: Request) -> Booking:
    return await _engine(request).lifecycle.cancel_booking(booking_id)


# --- Visits (staff) ---


@router.get("/visits/today")
async def today_visits(request: Request, shelter_id: Optional[str] = None) -> list[Booking]:
    return await _engine(request).lifecycle.today_visits(shelter_id)


@router.post("/visits/{booking_id}/status")
async def update_visit_status(
    booking_id: str, body: VisitStatusRequest, request: Request
) -> Booking:
    return await _engine(request).lifecycle.transition_visit(
        booking_id,
        body.new_status,
        body.staff_id,
        expected_status=body.expected_status,
    )


@router.post("/visits/{booking_id}/note")
async def add_visit_note(booking_id: str, body: NoteRequest, request: Request) -> Booking:
    return await _engine(request).lifecycle.add_note(booking_id, body.text)


# --- Feedback & rewards ---


@router.post("/feedback/{booking_id}", status_code=201)
async def submit_feedback(
    booking_id: str, body: FeedbackSubmission, request: Request
) -> FeedbackReceipt:
    return await _engine(request).lifecycle.submit_feedback(booking_id, body)


@router.get("/rewards/{user_id}")
async def get_rewards(user_id: str, request: Request) -> RewardLedger:
    return await _engine(request).ledger.get(user_id)


# --- Pets (staff) ---


@router.get("/pets")
async def search_pets(
    request: Request,
    species: Optional[str] = None,
    availability: Optional[str] = None,
    search: Optional[str] = None,
) -> list[Pet]:
    spec = PetFilterSpec(species=species, availability=availability, search=search)
    return await _engine(request).queries.search_pets(spec)


@router.post("/pets/{pet_id}/availability")
async def update_pet_availability(
    pet_id: str, body: PetAvailabilityRequest, request: Request
) -> Pet:
    return await _engine(request).pets.update_availability(
        pet_id, body.availability, body.staff_id
    )


@router.post("/pets/{pet_id}/notes")
async def add_pet_note(pet_id: str, body: PetNoteRequest, request: Request) -> Pet:
    return await _engine(request).pets.add_note(pet_id, body.text)


# --- Reports (staff) ---


@router.get("/reports")
async def get_reports(request: Request, weeks: int = 8) -> ReportsData:
    return await _engine(request).reports.build(weeks)
