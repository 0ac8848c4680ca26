"""Explicit wiring of stores, directory, and services.

There is no global store: whoever needs the engine builds one and passes
it along (the API keeps it on ``app.state.engine``).
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from pawvisit.config import AppConfig, settings
from pawvisit.directory.pets import PetCatalog
from pawvisit.directory.shelters import ShelterDirectory
from pawvisit.scheduling.calendar import Clock, SystemClock
from pawvisit.schemas.shelter_schema import Pet, Shelter
from pawvisit.services.lifecycle import BookingLifecycleController
from pawvisit.services.queries import StaffQueryService
from pawvisit.services.reports import ReportService
from pawvisit.services.rewards import RewardsIntegration
from pawvisit.stores.booking_store import BookingStore
from pawvisit.stores.feedback_store import FeedbackStore
from pawvisit.stores.rewards_ledger import RewardsLedger


@dataclass
class Engine:
    clock: Clock
    bookings: BookingStore
    feedback: FeedbackStore
    ledger: RewardsLedger
    shelters: ShelterDirectory
    pets: PetCatalog
    lifecycle: BookingLifecycleController
    queries: StaffQueryService
    reports: ReportService


def build_engine(
    *,
    clock: Optional[Clock] = None,
    config: Optional[AppConfig] = None,
    shelters: Optional[Iterable[Shelter]] = None,
    pets: Optional[Iterable[Pet]] = None,
    bookings: Optional[BookingStore] = None,
    ledger: Optional[RewardsLedger] = None,
) -> Engine:
    """Build a fully wired engine. Directory and catalog default to seed data."""
    clock = clock or SystemClock()
    config = config or settings

    booking_store = bookings or BookingStore(clock)
    feedback_store = FeedbackStore()
    ledger = ledger or RewardsLedger(config.rewards, clock)
    directory = ShelterDirectory(shelters)
    catalog = PetCatalog(pets)
    rewards = RewardsIntegration(feedback_store, ledger, config.rewards, clock)

    return Engine(
        clock=clock,
        bookings=booking_store,
        feedback=feedback_store,
        ledger=ledger,
        shelters=directory,
        pets=catalog,
        lifecycle=BookingLifecycleController(
            booking_store, directory, catalog, rewards, clock=clock, config=config
        ),
        queries=StaffQueryService(booking_store, catalog, config.retry, config.scheduling),
        reports=ReportService(booking_store, feedback_store, clock),
    )
