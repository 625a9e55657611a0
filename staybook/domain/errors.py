"""Exception taxonomy shared by the booking, hotel and recommendation services."""

from __future__ import annotations

from typing import Any, Optional

from staybook.domain.models import GuestPool, HotelCapacity, RejectionReason


class BookingServiceError(Exception):
    """Base class for user-facing rejections."""

    code = "booking_error"

    def to_detail(self) -> dict[str, Any]:
        return {"code": self.code, "message": str(self)}


class ValidationError(BookingServiceError, ValueError):
    """Raised when request fields fail domain validation."""

    code = "validation_error"


class InvalidDateRangeError(ValidationError):
    """Raised when check_in is not strictly before check_out."""

    code = "invalid_date_range"


class NotFoundError(BookingServiceError):
    code = "not_found"


class HotelNotFoundError(NotFoundError):
    code = "hotel_not_found"

    def __init__(self, hotel_id: int) -> None:
        super().__init__(f"Hotel {hotel_id} not found")
        self.hotel_id = hotel_id


class BookingNotFoundError(NotFoundError):
    code = "booking_not_found"

    def __init__(self, booking_id: int) -> None:
        super().__init__(f"Booking {booking_id} not found")
        self.booking_id = booking_id


class UnauthorizedError(BookingServiceError):
    """Raised when the caller does not own the resource or lacks the role."""

    code = "unauthorized"


class AdmissionError(BookingServiceError):
    """A booking request that cannot be admitted against hotel capacity."""

    def __init__(
        self,
        reason: RejectionReason,
        *,
        capacity: HotelCapacity,
        requested_adults: int,
        requested_children: int,
        message: Optional[str] = None,
        available: Optional[dict[str, int]] = None,
    ) -> None:
        super().__init__(message or reason.value.replace("_", " "))
        self.reason = reason
        self.capacity = capacity
        self.requested_adults = requested_adults
        self.requested_children = requested_children
        self.available = available or {}

    @property
    def code(self) -> str:  # type: ignore[override]
        return self.reason.value

    @property
    def pool(self) -> GuestPool:
        return self.reason.pool

    def to_detail(self) -> dict[str, Any]:
        detail = {
            "code": self.code,
            "pool": self.pool.value,
            "message": str(self),
            "hotel_capacity": {
                "adult_count": self.capacity.adult_capacity,
                "child_count": self.capacity.child_capacity,
            },
            "requested_capacity": {
                "adult_count": self.requested_adults,
                "child_count": self.requested_children,
            },
        }
        if self.available:
            detail["available"] = dict(self.available)
        return detail


class StaticCapacityExceededError(AdmissionError):
    """The request alone cannot fit the hotel, regardless of other bookings."""


class DynamicAvailabilityExceededError(AdmissionError):
    """The request conflicts with overlapping bookings already admitted."""


class LedgerUnavailableError(Exception):
    """Infrastructure failure of the booking store; not an admission outcome."""
