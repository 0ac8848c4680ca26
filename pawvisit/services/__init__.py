from pawvisit.services.engine import Engine, build_engine
from pawvisit.services.lifecycle import BookingLifecycleController
from pawvisit.services.queries import BookingFilterSpec, PetFilterSpec, StaffQueryService
from pawvisit.services.reports import ReportService
from pawvisit.services.rewards import RewardsIntegration

__all__ = [
    "Engine",
    "build_engine",
    "BookingLifecycleController",
    "BookingFilterSpec",
    "PetFilterSpec",
    "StaffQueryService",
    "ReportService",
    "RewardsIntegration",
]
