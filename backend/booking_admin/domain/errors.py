from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .services import BookingDecision


class DomainError(Exception):
    pass


class MalformedInputError(DomainError):
    """Input of the wrong type or range (e.g. non-integer guest counts)."""

    kind = "MALFORMED_INPUT"


class PackageNotFoundError(DomainError):
    pass


class BookingNotFoundError(DomainError):
    pass


class BookingRejectedError(DomainError):
    def __init__(self, decision: BookingDecision) -> None:
        super().__init__(decision.detail or str(decision.reason))
        self.decision = decision


class SlotConflictError(BookingRejectedError):
    """The bookings store refused a booking that passed local validation."""


class BackendError(DomainError):
    """The booking backend answered with a non-success status."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"backend returned {status_code}: {message}")
        self.status_code = status_code
        self.message = message


class BackendUnavailableError(DomainError):
    """The booking backend could not be reached or timed out."""
