"""
Weekly operational reports for the staff console.

Four series computed from booking and feedback records over the last
N weeks (Monday-based, ending with the current week):

- visits per week: non-cancelled bookings
- feedback rate: % of RETURNED visits that have feedback
- no-show rate: % of finished visits (RETURNED or NO_SHOW) that were NO_SHOW
- top pets: most visited pets across the window, with average rating
"""

import datetime as dt
import logging
from collections import defaultdict
from typing import Optional

from pawvisit.errors import ValidationError
from pawvisit.scheduling.calendar import Clock, SystemClock, week_start
from pawvisit.schemas.booking_schema import Booking, VisitStatus
from pawvisit.schemas.report_schema import ReportsData, TopPet, WeekData
from pawvisit.stores.booking_store import BookingStore
from pawvisit.stores.feedback_store import FeedbackStore

logger = logging.getLogger(__name__)

ALLOWED_WEEK_RANGES = (4, 8, 12)
TOP_PETS_LIMIT = 5
FINISHED_STATES = frozenset({VisitStatus.RETURNED, VisitStatus.NO_SHOW})


def _percent(part: int, whole: int) -> int:
    return round(100 * part / whole) if whole else 0


class ReportService:
    def __init__(
        self,
        bookings: BookingStore,
        feedback: FeedbackStore,
        clock: Optional[Clock] = None,
    ) -> None:
        self._bookings = bookings
        self._feedback = feedback
        self._clock = clock or SystemClock()

    async def build(self, weeks: int = 8) -> ReportsData:
        if weeks not in ALLOWED_WEEK_RANGES:
            raise ValidationError(f"weeks must be one of {ALLOWED_WEEK_RANGES}, got {weeks}")

        first = week_start(self._clock.today()) - dt.timedelta(weeks=weeks - 1)
        last = first + dt.timedelta(weeks=weeks, days=-1)
        bookings = [b for b in await self._bookings.list_between(first, last) if b.is_active]
        feedback = {f.booking_id: f for f in await self._feedback.list_all()}

        by_week: dict[dt.date, list[Booking]] = defaultdict(list)
        for booking in bookings:
            by_week[week_start(booking.date)].append(booking)

        report = ReportsData(weeks=weeks)
        for index in range(weeks):
            start = first + dt.timedelta(weeks=index)
            label = f"Week {index + 1}"
            week = by_week.get(start, [])
            returned = [b for b in week if b.visit_status == VisitStatus.RETURNED]
            finished = [b for b in week if b.visit_status in FINISHED_STATES]
            no_shows = [b for b in finished if b.visit_status == VisitStatus.NO_SHOW]
            with_feedback = [b for b in returned if b.id in feedback]

            report.visits_per_week.append(
                WeekData(week_label=label, week_start=start, count=len(week))
            )
            report.feedback_rate.append(
                WeekData(
                    week_label=label,
                    week_start=start,
                    submitted_pct=_percent(len(with_feedback), len(returned)),
                )
            )
            report.no_show_rate.append(
                WeekData(
                    week_label=label,
                    week_start=start,
                    pct=_percent(len(no_shows), len(finished)),
                )
            )

        report.top_pets = self._top_pets(bookings, feedback)
        logger.debug("Report over %d weeks from %s: %d bookings", weeks, first, len(bookings))
        return report

    @staticmethod
    def _top_pets(bookings: list[Booking], feedback: dict) -> list[TopPet]:
        visits: dict[str, int] = defaultdict(int)
        names: dict[str, str] = {}
        ratings: dict[str, list[int]] = defaultdict(list)
        for booking in bookings:
            visits[booking.pet_id] += 1
            names[booking.pet_id] = booking.pet_name or booking.pet_id
            if booking.id in feedback:
                ratings[booking.pet_id].append(feedback[booking.id].rating)

        ranked = sorted(visits, key=lambda pet_id: (-visits[pet_id], names[pet_id]))
        return [
            TopPet(
                pet_id=pet_id,
                name=names[pet_id],
                visits=visits[pet_id],
                avg_rating=(
                    round(sum(ratings[pet_id]) / len(ratings[pet_id]), 1)
                    if ratings[pet_id]
                    else None
                ),
            )
            for pet_id in ranked[:TOP_PETS_LIMIT]
        ]
