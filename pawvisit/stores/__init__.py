from pawvisit.stores.booking_store import BookingSnapshot, BookingStore
from pawvisit.stores.feedback_store import FeedbackStore
from pawvisit.stores.rewards_ledger import RewardsLedger

__all__ = ["BookingStore", "BookingSnapshot", "FeedbackStore", "RewardsLedger"]
