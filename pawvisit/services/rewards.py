"""Feedback-to-rewards integration.

The ledger appends blindly, so the at-most-once guarantee lives here:
feedback is stored with an insert-if-absent and points are only credited
when that insert wins.
"""

import logging
from typing import Optional

from pawvisit.config import RewardsConfig, settings
from pawvisit.errors import InvalidTransitionError
from pawvisit.scheduling.calendar import Clock, SystemClock
from pawvisit.schemas.booking_schema import Booking
from pawvisit.schemas.rewards_schema import Feedback, FeedbackReceipt, FeedbackSubmission
from pawvisit.stores.feedback_store import FeedbackStore
from pawvisit.stores.rewards_ledger import RewardsLedger

logger = logging.getLogger(__name__)

FEEDBACK_ACTION = "Feedback Submitted"


class RewardsIntegration:
    def __init__(
        self,
        feedback: FeedbackStore,
        ledger: RewardsLedger,
        config: Optional[RewardsConfig] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._feedback = feedback
        self._ledger = ledger
        self._config = config or settings.rewards
        self._clock = clock or SystemClock()

    async def credit_for_feedback(
        self, booking: Booking, submission: FeedbackSubmission
    ) -> FeedbackReceipt:
        """Record feedback for a completed visit and credit the visitor once.

        Raises:
            InvalidTransitionError: If feedback already exists for the booking.

        If the ledger credit fails the stored feedback is removed again and
        the error propagates.
        """
        record = Feedback(
            **submission.model_dump(),
            booking_id=booking.id,
            user_id=booking.user_id,
            pet_id=booking.pet_id,
            submitted_at=self._clock.now(),
        )
        if not await self._feedback.add_if_absent(record):
            logger.warning("Duplicate feedback rejected for booking %s", booking.id)
            raise InvalidTransitionError(f"Feedback already submitted for booking {booking.id}.")

        points = self._config.feedback_points
        try:
            ledger = await self._ledger.credit_points(booking.user_id, points, FEEDBACK_ACTION)
        except Exception:
            # feedback and credit are applied together or not at all
            await self._feedback.remove(booking.id)
            logger.error("Credit failed for booking %s, feedback withdrawn", booking.id)
            raise
        return FeedbackReceipt(booking_id=booking.id, points_earned=points, ledger=ledger)
