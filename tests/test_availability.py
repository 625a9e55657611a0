from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from staybook.domain.availability import compute_availability, overlaps
from staybook.domain.models import BookingRecord, DateRange, HotelCapacity


def _booking(
    booking_id: int,
    adults: int,
    children: int,
    check_in: date,
    check_out: date,
) -> BookingRecord:
    return BookingRecord(
        booking_id=booking_id,
        hotel_id=1,
        user_id=f"user-{booking_id}",
        first_name="Test",
        last_name="Guest",
        email="guest@example.com",
        adult_count=adults,
        child_count=children,
        check_in=check_in,
        check_out=check_out,
        total_cost=Decimal("0"),
        created_at=datetime(2025, 12, 1),
    )


def test_checkout_day_is_free_for_next_check_in() -> None:
    first = DateRange(date(2026, 1, 1), date(2026, 1, 5))
    second = DateRange(date(2026, 1, 5), date(2026, 1, 6))
    assert overlaps(first, second) is False
    assert overlaps(second, first) is False


def test_partial_and_nested_ranges_overlap() -> None:
    outer = DateRange(date(2026, 1, 1), date(2026, 1, 10))
    assert overlaps(outer, DateRange(date(2026, 1, 3), date(2026, 1, 4)))
    assert overlaps(outer, DateRange(date(2025, 12, 30), date(2026, 1, 2)))
    assert overlaps(outer, outer)


def test_empty_hotel_is_fully_available() -> None:
    capacity = HotelCapacity(adult_capacity=4, child_capacity=2)
    breakdown = compute_availability(capacity, date(2026, 1, 1), date(2026, 1, 2), [])

    assert breakdown.total_booked_adults == 0
    assert breakdown.total_booked_children == 0
    assert breakdown.available_adults == 4
    assert breakdown.available_children == 2
    assert breakdown.available_capacity == 6
    assert breakdown.is_fully_booked is False
    assert breakdown.is_adults_fully_booked is False
    assert breakdown.is_children_fully_booked is False
    assert breakdown.max_capacity == 6
    assert breakdown.overlapping_bookings == 0


def test_sums_overlapping_bookings_per_pool() -> None:
    capacity = HotelCapacity(adult_capacity=4, child_capacity=2)
    bookings = [
        _booking(1, 2, 1, date(2026, 1, 1), date(2026, 1, 5)),
        _booking(2, 1, 0, date(2026, 1, 3), date(2026, 1, 4)),
    ]
    breakdown = compute_availability(capacity, date(2026, 1, 3), date(2026, 1, 6), bookings)

    assert breakdown.total_booked_adults == 3
    assert breakdown.total_booked_children == 1
    assert breakdown.available_adults == 1
    assert breakdown.available_children == 1
    assert breakdown.available_capacity == 2
    assert breakdown.total_booked_guests == 4
    assert breakdown.overlapping_bookings == 2


def test_child_pool_fully_booked_while_adults_remain() -> None:
    capacity = HotelCapacity(adult_capacity=4, child_capacity=1)
    bookings = [_booking(1, 1, 1, date(2026, 1, 1), date(2026, 1, 3))]
    breakdown = compute_availability(capacity, date(2026, 1, 1), date(2026, 1, 3), bookings)

    assert breakdown.is_children_fully_booked is True
    assert breakdown.is_adults_fully_booked is False
    assert breakdown.is_fully_booked is False


def test_over_capacity_goes_negative_without_failing() -> None:
    """A capacity reduced below existing bookings reports negative availability."""
    capacity = HotelCapacity(adult_capacity=2, child_capacity=0)
    bookings = [_booking(1, 3, 0, date(2026, 1, 1), date(2026, 1, 3))]
    breakdown = compute_availability(capacity, date(2026, 1, 1), date(2026, 1, 3), bookings)

    assert breakdown.available_adults == -1
    assert breakdown.available_capacity == -1
    assert breakdown.is_fully_booked is True
    assert breakdown.is_adults_fully_booked is True


def test_same_inputs_give_same_breakdown() -> None:
    capacity = HotelCapacity(adult_capacity=5, child_capacity=3)
    bookings = [_booking(1, 2, 2, date(2026, 2, 1), date(2026, 2, 4))]
    first = compute_availability(capacity, date(2026, 2, 2), date(2026, 2, 3), bookings)
    second = compute_availability(capacity, date(2026, 2, 2), date(2026, 2, 3), list(bookings))
    assert first == second
