"""
Finite state machine for the staff-facing visit lifecycle.

A confirmed booking enters CONFIRMED. Staff then move it strictly forward:

    CONFIRMED -> CHECKED_OUT -> RETURNED
    CONFIRMED -> NO_SHOW
    CHECKED_OUT -> NO_SHOW

RETURNED and NO_SHOW are terminal. Every accepted transition is appended
to the status history with the acting staff member.

Usage:
    sm = VisitStateMachine(booking.visit_status, booking.status_history)
    sm.transition(VisitStatus.CHECKED_OUT, staff_id="staff-001", at=now)
    assert sm.current_state == VisitStatus.CHECKED_OUT
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from pawvisit.errors import InvalidTransitionError
from pawvisit.schemas.booking_schema import StatusChange, VisitStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VisitTransition:
    """A single valid status transition."""
    from_state: VisitStatus
    to_state: VisitStatus


class VisitStateMachine:
    """
    Forward-only visit state machine over a booking's current status.

    Every transition must be listed in TRANSITIONS. Anything else,
    including moving backwards or re-entering CONFIRMED, is rejected
    with the list of statuses that are allowed from here.
    """

    TRANSITIONS: list[VisitTransition] = [
        # --- Visit day ---
        VisitTransition(VisitStatus.CONFIRMED, VisitStatus.CHECKED_OUT),
        VisitTransition(VisitStatus.CONFIRMED, VisitStatus.NO_SHOW),

        # --- Pet out with visitor ---
        VisitTransition(VisitStatus.CHECKED_OUT, VisitStatus.RETURNED),
        VisitTransition(VisitStatus.CHECKED_OUT, VisitStatus.NO_SHOW),
    ]

    TERMINAL_STATES: frozenset[VisitStatus] = frozenset(
        {VisitStatus.RETURNED, VisitStatus.NO_SHOW}
    )

    def __init__(
        self,
        current: VisitStatus = VisitStatus.CONFIRMED,
        history: Optional[list[StatusChange]] = None,
    ) -> None:
        self._current_state = current
        self._history: list[StatusChange] = list(history or [])

    @property
    def current_state(self) -> VisitStatus:
        return self._current_state

    def transition(
        self, to_state: VisitStatus, staff_id: str, at: datetime
    ) -> VisitStatus:
        """
        Move to ``to_state`` and record who did it.

        Returns:
            The new visit status.

        Raises:
            InvalidTransitionError: If no transition exists from the current state.
        """
        if not self.can_transition(self._current_state, to_state):
            valid = [s.value for s in self.get_valid_targets()]
            raise InvalidTransitionError(
                f"No valid transition from '{self._current_state.value}' "
                f"to '{to_state.value}'. Valid targets: {valid}"
            )

        old_state = self._current_state
        self._current_state = to_state
        self._history.append(StatusChange(status=to_state, timestamp=at, staff_id=staff_id))

        logger.debug(
            "Visit transition: %s -> %s (staff: %s)",
            old_state.value, to_state.value, staff_id,
        )
        return self._current_state

    @classmethod
    def can_transition(cls, from_state: VisitStatus, to_state: VisitStatus) -> bool:
        return any(
            t.from_state == from_state and t.to_state == to_state for t in cls.TRANSITIONS
        )

    def get_valid_targets(self) -> list[VisitStatus]:
        """Return all statuses reachable from the current state."""
        return [t.to_state for t in self.TRANSITIONS if t.from_state == self._current_state]

    def get_history(self) -> list[StatusChange]:
        """Return the full status history, oldest first."""
        return list(self._history)

    def get_status_trace(self) -> list[str]:
        return [entry.status.value for entry in self._history]

    def is_terminal(self) -> bool:
        return self._current_state in self.TERMINAL_STATES
