"""Domain models for hotel capacity, the booking ledger and admission results."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Union


class UserRole(str, Enum):
    USER = "user"
    HOTEL_OWNER = "hotel owner"
    ADMIN = "admin"


class GuestPool(str, Enum):
    """Capacity pool a rejection applies to."""

    ADULT = "adult"
    CHILD = "child"
    TOTAL = "total"


class RejectionReason(str, Enum):
    ADULT_CAPACITY_EXCEEDED = "adult_capacity_exceeded"
    CHILD_CAPACITY_EXCEEDED = "child_capacity_exceeded"
    TOTAL_CAPACITY_EXCEEDED = "total_capacity_exceeded"
    INSUFFICIENT_ADULT_AVAILABILITY = "insufficient_adult_availability"
    INSUFFICIENT_CHILD_AVAILABILITY = "insufficient_child_availability"
    INSUFFICIENT_AVAILABILITY = "insufficient_availability"

    @property
    def is_static(self) -> bool:
        return self in _STATIC_REASONS

    @property
    def pool(self) -> GuestPool:
        return _REASON_POOLS[self]


_STATIC_REASONS = frozenset(
    {
        RejectionReason.ADULT_CAPACITY_EXCEEDED,
        RejectionReason.CHILD_CAPACITY_EXCEEDED,
        RejectionReason.TOTAL_CAPACITY_EXCEEDED,
    }
)

_REASON_POOLS = {
    RejectionReason.ADULT_CAPACITY_EXCEEDED: GuestPool.ADULT,
    RejectionReason.CHILD_CAPACITY_EXCEEDED: GuestPool.CHILD,
    RejectionReason.TOTAL_CAPACITY_EXCEEDED: GuestPool.TOTAL,
    RejectionReason.INSUFFICIENT_ADULT_AVAILABILITY: GuestPool.ADULT,
    RejectionReason.INSUFFICIENT_CHILD_AVAILABILITY: GuestPool.CHILD,
    RejectionReason.INSUFFICIENT_AVAILABILITY: GuestPool.TOTAL,
}


class AdmissionState(str, Enum):
    QUOTED = "QUOTED"
    CAPACITY_CHECKED = "CAPACITY_CHECKED"
    PERSISTED = "PERSISTED"
    REJECTED = "REJECTED"


@dataclass(frozen=True)
class HotelCapacity:
    adult_capacity: int
    child_capacity: int

    @property
    def total_capacity(self) -> int:
        return self.adult_capacity + self.child_capacity


@dataclass(frozen=True)
class DateRange:
    """Half-open stay interval ``[check_in, check_out)``."""

    check_in: date
    check_out: date

    def overlaps(self, other: "DateRange") -> bool:
        return self.check_in < other.check_out and other.check_in < self.check_out

    @property
    def nights(self) -> int:
        return (self.check_out - self.check_in).days


@dataclass(frozen=True)
class Hotel:
    hotel_id: int
    owner_id: str
    name: str
    city: str
    country: str
    description: str
    type: str
    adult_capacity: int
    child_capacity: int
    facilities: tuple[str, ...]
    price_per_night: Decimal
    star_rating: int
    image_urls: tuple[str, ...]
    last_updated: datetime

    @property
    def capacity(self) -> HotelCapacity:
        return HotelCapacity(
            adult_capacity=self.adult_capacity,
            child_capacity=self.child_capacity,
        )


@dataclass(frozen=True)
class PayerIdentity:
    user_id: str
    first_name: str
    last_name: str
    email: str


@dataclass(frozen=True)
class BookingRecord:
    booking_id: int
    hotel_id: int
    user_id: str
    first_name: str
    last_name: str
    email: str
    adult_count: int
    child_count: int
    check_in: date
    check_out: date
    total_cost: Decimal
    created_at: datetime

    @property
    def stay(self) -> DateRange:
        return DateRange(check_in=self.check_in, check_out=self.check_out)


@dataclass(frozen=True)
class AvailabilityBreakdown:
    total_booked_adults: int
    total_booked_children: int
    available_adults: int
    available_children: int
    available_capacity: int
    is_fully_booked: bool
    is_adults_fully_booked: bool
    is_children_fully_booked: bool
    max_adults: int
    max_children: int
    max_capacity: int
    total_booked_guests: int
    overlapping_bookings: int


@dataclass(frozen=True)
class Admitted:
    breakdown: AvailabilityBreakdown


@dataclass(frozen=True)
class Rejected:
    reason: RejectionReason
    breakdown: AvailabilityBreakdown | None = None


AdmissionDecision = Union[Admitted, Rejected]


@dataclass(frozen=True)
class BookingQuote:
    hotel_id: int
    adult_count: int
    child_count: int
    nights: int
    price_per_night: Decimal
    total_cost: Decimal
    currency: str


@dataclass(frozen=True)
class HotelSearchCriteria:
    destination: str | None = None
    adult_count: int | None = None
    child_count: int | None = None
    facilities: tuple[str, ...] = ()
    types: tuple[str, ...] = ()
    stars: tuple[int, ...] = ()
    max_price: Decimal | None = None
    sort_option: str | None = None
    page: int = 1


@dataclass(frozen=True)
class HotelSearchPage:
    hotels: list[Hotel]
    total: int
    page: int
    pages: int
    availability: dict[int, AvailabilityBreakdown] = field(default_factory=dict)
