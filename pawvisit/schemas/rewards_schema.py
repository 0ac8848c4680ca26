"""Feedback and rewards ledger models."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class FeedbackSubmission(BaseModel):
    """Visitor feedback as submitted. Rating range is checked by the controller."""

    rating: int
    visit_experience: Optional[str] = None
    pet_interaction: Optional[str] = None
    would_recommend: Optional[bool] = None


class Feedback(FeedbackSubmission):
    """Stored feedback, 1:1 with a booking."""

    booking_id: str
    user_id: str
    pet_id: str
    submitted_at: datetime


class RewardActivity(BaseModel):
    """One append-only ledger entry."""

    id: str
    action: str
    points: int
    date: datetime


class RewardLedger(BaseModel):
    """Per-user points total, derived level, and earning history."""

    user_id: str
    points: int = 0
    level: int = 1
    history: list[RewardActivity] = Field(default_factory=list)


class FeedbackReceipt(BaseModel):
    """Result of a successful feedback submission."""

    booking_id: str
    points_earned: int
    ledger: RewardLedger
