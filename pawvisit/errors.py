"""Typed failures raised by the booking engine.

Every failure surfaces to the caller as one of these kinds. The API layer
maps ``kind`` to a response body and ``status_code`` to the HTTP status.
"""


class PawVisitError(Exception):
    """Base class for all engine failures."""

    kind = "error"
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(PawVisitError):
    """A referenced booking, pet, or shelter does not exist."""

    kind = "not_found"
    status_code = 404


class SlotConflictError(PawVisitError):
    """An active booking already holds the (shelter, date, slot) tuple."""

    kind = "slot_conflict"
    status_code = 409


class InvalidTransitionError(PawVisitError):
    """A state-machine precondition failed."""

    kind = "invalid_transition"
    status_code = 409


class ValidationError(PawVisitError):
    """Malformed input: missing bounds, out-of-range values, empty fields."""

    kind = "validation_error"
    status_code = 422


class UpstreamUnavailableError(PawVisitError):
    """A persistence or directory call failed or timed out."""

    kind = "upstream_unavailable"
    status_code = 503
