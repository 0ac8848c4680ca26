"""Staff report models."""

import datetime as dt
from typing import Optional

from pydantic import BaseModel, Field


class WeekData(BaseModel):
    """One week bucket. Only the field relevant to the series is set."""

    week_label: str
    week_start: dt.date
    count: Optional[int] = None
    submitted_pct: Optional[int] = None
    pct: Optional[int] = None


class TopPet(BaseModel):
    pet_id: str
    name: str
    visits: int
    avg_rating: Optional[float] = None


class ReportsData(BaseModel):
    """Weekly operational report for the staff console."""

    weeks: int
    visits_per_week: list[WeekData] = Field(default_factory=list)
    feedback_rate: list[WeekData] = Field(default_factory=list)
    no_show_rate: list[WeekData] = Field(default_factory=list)
    top_pets: list[TopPet] = Field(default_factory=list)
