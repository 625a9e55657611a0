"""Pure availability arithmetic and admission decisions over a hotel's overlap set."""

from __future__ import annotations

from datetime import date
from typing import Iterable

from staybook.domain.models import (
    AdmissionDecision,
    Admitted,
    AvailabilityBreakdown,
    BookingRecord,
    DateRange,
    HotelCapacity,
    Rejected,
    RejectionReason,
)


def overlaps(first: DateRange, second: DateRange) -> bool:
    """Half-open overlap: a checkout on day X leaves day X free for a check-in."""
    return first.overlaps(second)


def compute_availability(
    capacity: HotelCapacity,
    check_in: date,
    check_out: date,
    overlapping_bookings: Iterable[BookingRecord],
) -> AvailabilityBreakdown:
    """Summarise remaining capacity for ``[check_in, check_out)``.

    ``overlapping_bookings`` is the overlap set already selected by the ledger
    query. Numbers are allowed to go negative when a hotel is over capacity;
    callers render that instead of failing.
    """
    del check_in, check_out
    bookings = list(overlapping_bookings)
    booked_adults = sum(booking.adult_count for booking in bookings)
    booked_children = sum(booking.child_count for booking in bookings)

    available_adults = capacity.adult_capacity - booked_adults
    available_children = capacity.child_capacity - booked_children
    available_capacity = capacity.total_capacity - (booked_adults + booked_children)

    return AvailabilityBreakdown(
        total_booked_adults=booked_adults,
        total_booked_children=booked_children,
        available_adults=available_adults,
        available_children=available_children,
        available_capacity=available_capacity,
        is_fully_booked=available_capacity <= 0,
        is_adults_fully_booked=available_adults <= 0,
        is_children_fully_booked=available_children <= 0,
        max_adults=capacity.adult_capacity,
        max_children=capacity.child_capacity,
        max_capacity=capacity.total_capacity,
        total_booked_guests=booked_adults + booked_children,
        overlapping_bookings=len(bookings),
    )


def check_static_capacity(
    capacity: HotelCapacity,
    requested_adults: int,
    requested_children: int,
) -> RejectionReason | None:
    """First failing static check, ignoring every other booking."""
    if requested_adults > capacity.adult_capacity:
        return RejectionReason.ADULT_CAPACITY_EXCEEDED
    if requested_children > capacity.child_capacity:
        return RejectionReason.CHILD_CAPACITY_EXCEEDED
    if requested_adults + requested_children > capacity.total_capacity:
        return RejectionReason.TOTAL_CAPACITY_EXCEEDED
    return None


def check_live_availability(
    breakdown: AvailabilityBreakdown,
    requested_adults: int,
    requested_children: int,
) -> RejectionReason | None:
    if requested_adults > breakdown.available_adults:
        return RejectionReason.INSUFFICIENT_ADULT_AVAILABILITY
    if requested_children > breakdown.available_children:
        return RejectionReason.INSUFFICIENT_CHILD_AVAILABILITY
    if requested_adults + requested_children > breakdown.available_capacity:
        return RejectionReason.INSUFFICIENT_AVAILABILITY
    return None


def evaluate_admission(
    capacity: HotelCapacity,
    stay: DateRange,
    overlapping_bookings: Iterable[BookingRecord],
    requested_adults: int,
    requested_children: int,
) -> AdmissionDecision:
    """Run static then live checks; the first failing check decides."""
    static_reason = check_static_capacity(capacity, requested_adults, requested_children)
    if static_reason is not None:
        return Rejected(reason=static_reason)

    breakdown = compute_availability(
        capacity,
        stay.check_in,
        stay.check_out,
        overlapping_bookings,
    )
    live_reason = check_live_availability(breakdown, requested_adults, requested_children)
    if live_reason is not None:
        return Rejected(reason=live_reason, breakdown=breakdown)
    return Admitted(breakdown=breakdown)


def describe_rejection(
    reason: RejectionReason,
    capacity: HotelCapacity,
    requested_adults: int,
    requested_children: int,
    breakdown: AvailabilityBreakdown | None = None,
) -> str:
    """Human-readable message for each of the rejection reasons."""
    requested_total = requested_adults + requested_children
    if reason is RejectionReason.ADULT_CAPACITY_EXCEEDED:
        return (
            f"Adult capacity exceeded. Hotel can accommodate {capacity.adult_capacity} "
            f"adults. You requested {requested_adults} adults."
        )
    if reason is RejectionReason.CHILD_CAPACITY_EXCEEDED:
        return (
            f"Children capacity exceeded. Hotel can accommodate {capacity.child_capacity} "
            f"children. You requested {requested_children} children."
        )
    if reason is RejectionReason.TOTAL_CAPACITY_EXCEEDED:
        return (
            f"Guest capacity exceeded. Hotel can accommodate {capacity.total_capacity} "
            f"guests ({capacity.adult_capacity} adults + {capacity.child_capacity} "
            f"children). You requested {requested_total} guests."
        )

    available_adults = breakdown.available_adults if breakdown else 0
    available_children = breakdown.available_children if breakdown else 0
    available_total = breakdown.available_capacity if breakdown else 0
    if reason is RejectionReason.INSUFFICIENT_ADULT_AVAILABILITY:
        return (
            f"Only {max(available_adults, 0)} adult places remain for these dates. "
            f"You requested {requested_adults} adults."
        )
    if reason is RejectionReason.INSUFFICIENT_CHILD_AVAILABILITY:
        return (
            f"Only {max(available_children, 0)} child places remain for these dates. "
            f"You requested {requested_children} children."
        )
    return (
        f"Only {max(available_total, 0)} guest places remain for these dates. "
        f"You requested {requested_total} guests."
    )
