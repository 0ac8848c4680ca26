"""In-memory feedback records, at most one per booking."""

import asyncio
import logging
from typing import Optional

from pawvisit.schemas.rewards_schema import Feedback

logger = logging.getLogger(__name__)


class FeedbackStore:
    def __init__(self) -> None:
        self._feedback: dict[str, Feedback] = {}
        self._lock = asyncio.Lock()

    async def add_if_absent(self, feedback: Feedback) -> bool:
        """Store feedback unless the booking already has some. Returns True if stored."""
        async with self._lock:
            if feedback.booking_id in self._feedback:
                return False
            self._feedback[feedback.booking_id] = feedback.model_copy(deep=True)
        logger.info("Feedback recorded for booking %s", feedback.booking_id)
        return True

    async def remove(self, booking_id: str) -> None:
        async with self._lock:
            removed = self._feedback.pop(booking_id, None)
        if removed is not None:
            logger.info("Feedback removed for booking %s", booking_id)

    async def get(self, booking_id: str) -> Optional[Feedback]:
        feedback = self._feedback.get(booking_id)
        return feedback.model_copy(deep=True) if feedback else None

    async def list_all(self) -> list[Feedback]:
        return [f.model_copy(deep=True) for f in self._feedback.values()]
