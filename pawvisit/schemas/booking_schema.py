"""Booking, visit status, and request models."""

import datetime as dt
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class BookingStatus(str, Enum):
    """Booking-level lifecycle."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class VisitStatus(str, Enum):
    """Staff-facing operational status of a confirmed visit."""

    CONFIRMED = "CONFIRMED"
    CHECKED_OUT = "CHECKED_OUT"
    RETURNED = "RETURNED"
    NO_SHOW = "NO_SHOW"


class StatusChange(BaseModel):
    """Audit entry recorded on every visit status transition."""

    status: VisitStatus
    timestamp: dt.datetime
    staff_id: Optional[str] = None


class Booking(BaseModel):
    """A visit booking for one pet at one shelter slot."""

    id: str
    pet_id: str
    user_id: str
    shelter_id: str
    date: dt.date
    time_slot: str
    status: BookingStatus = BookingStatus.PENDING
    visit_status: Optional[VisitStatus] = None
    notes: Optional[str] = None
    pet_name: Optional[str] = None
    visitor_name: Optional[str] = None
    status_history: list[StatusChange] = Field(default_factory=list)
    created_at: dt.datetime
    updated_at: Optional[dt.datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status != BookingStatus.CANCELLED

    @property
    def effective_status(self) -> str:
        """Visit status once confirmed, booking status before that or after cancel."""
        if self.status == BookingStatus.CONFIRMED and self.visit_status is not None:
            return self.visit_status.value
        return self.status.value


class BookingRequest(BaseModel):
    """Body of ``POST /bookings``."""

    pet_id: str
    user_id: str
    shelter_id: str
    date: dt.date
    time_slot: str
    visitor_name: Optional[str] = None


class VisitStatusRequest(BaseModel):
    """Body of ``POST /visits/{booking_id}/status``."""

    new_status: VisitStatus
    staff_id: str
    expected_status: VisitStatus


class ConfirmRequest(BaseModel):
    staff_id: Optional[str] = None


class NoteRequest(BaseModel):
    text: str
