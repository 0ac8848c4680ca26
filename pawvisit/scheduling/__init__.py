from pawvisit.scheduling.availability import (
    DAILY_SLOT_TEMPLATE,
    SlotAvailabilityCalculator,
    available_slots,
)
from pawvisit.scheduling.calendar import FixedClock, SystemClock, weekday_name
from pawvisit.scheduling.state_machine import VisitStateMachine

__all__ = [
    "DAILY_SLOT_TEMPLATE",
    "SlotAvailabilityCalculator",
    "available_slots",
    "FixedClock",
    "SystemClock",
    "weekday_name",
    "VisitStateMachine",
]
