"""
Per-user rewards ledger.

Append-only: every credit adds a history entry and re-derives the level
from the new total. The ledger does not deduplicate; callers decide
whether a credit is allowed.
"""

import asyncio
import logging
from typing import Optional

from pawvisit.config import RewardsConfig, settings
from pawvisit.errors import ValidationError
from pawvisit.scheduling.calendar import Clock, SystemClock
from pawvisit.schemas.rewards_schema import RewardActivity, RewardLedger
from pawvisit.utils import generate_ref

logger = logging.getLogger(__name__)


class RewardsLedger:
    def __init__(
        self, config: Optional[RewardsConfig] = None, clock: Optional[Clock] = None
    ) -> None:
        self._config = config or settings.rewards
        self._clock = clock or SystemClock()
        self._ledgers: dict[str, RewardLedger] = {}
        self._lock = asyncio.Lock()

    def level_for(self, points: int) -> int:
        return points // self._config.points_per_level + 1

    def _ensure(self, user_id: str) -> RewardLedger:
        ledger = self._ledgers.get(user_id)
        if ledger is None:
            ledger = RewardLedger(user_id=user_id, points=0, level=1)
            self._ledgers[user_id] = ledger
            logger.debug("Ledger created for user %s", user_id)
        return ledger

    async def get(self, user_id: str) -> RewardLedger:
        """Return the user's ledger, creating an empty one on first access."""
        async with self._lock:
            return self._ensure(user_id).model_copy(deep=True)

    async def credit_points(self, user_id: str, amount: int, action: str) -> RewardLedger:
        if amount < 1:
            raise ValidationError(f"Reward amount must be positive, got {amount}")
        if not action.strip():
            raise ValidationError("Reward action is required")

        async with self._lock:
            ledger = self._ensure(user_id)
            points = ledger.points + amount
            entry = RewardActivity(
                id=generate_ref("RW"), action=action, points=amount, date=self._clock.now()
            )
            updated = ledger.model_copy(
                update={
                    "points": points,
                    "level": self.level_for(points),
                    "history": [*ledger.history, entry],
                }
            )
            self._ledgers[user_id] = updated

        logger.info(
            "Credited %d points to %s for '%s' (total %d, level %d)",
            amount, user_id, action, updated.points, updated.level,
        )
        return updated.model_copy(deep=True)
