"""Tests for hotel listing, stay and guest-count validation.

Covers each validation branch in validate_hotel_draft() plus the stay and
guest-count guards used before every admission.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from staybook.domain.constraints import (
    HotelDraft,
    validate_guest_counts,
    validate_hotel_draft,
    validate_stay,
)
from staybook.domain.errors import InvalidDateRangeError, ValidationError
from staybook.domain.models import DateRange


def valid_draft(**overrides) -> HotelDraft:
    """Return a valid baseline HotelDraft, optionally overriding fields."""
    defaults = {
        "name": "Harbour View Inn",
        "city": "Bristol",
        "country": "United Kingdom",
        "description": "Quiet rooms overlooking the harbour.",
        "type": "Budget",
        "adult_capacity": 4,
        "child_capacity": 2,
        "facilities": ("Free WiFi", "Parking"),
        "price_per_night": Decimal("100"),
        "star_rating": 3,
    }
    defaults.update(overrides)
    return HotelDraft(**defaults)


# --- Baseline pass ---

def test_valid_draft_passes() -> None:
    """A fully valid draft must not raise."""
    validate_hotel_draft(valid_draft())


def test_zero_child_capacity_is_allowed() -> None:
    validate_hotel_draft(valid_draft(child_capacity=0))


def test_free_hotel_is_allowed() -> None:
    validate_hotel_draft(valid_draft(price_per_night=Decimal("0")))


# --- text fields ---

@pytest.mark.parametrize(
    ("field", "value"),
    [
        ("name", "ab"),
        ("name", "  ab  "),
        ("city", "X"),
        ("country", " "),
        ("description", "too short"),
        ("type", "B"),
    ],
)
def test_short_text_fields_raise(field: str, value: str) -> None:
    with pytest.raises(ValidationError):
        validate_hotel_draft(valid_draft(**{field: value}))


# --- capacities ---

def test_adult_capacity_zero_raises() -> None:
    with pytest.raises(ValidationError):
        validate_hotel_draft(valid_draft(adult_capacity=0))


def test_child_capacity_negative_raises() -> None:
    with pytest.raises(ValidationError):
        validate_hotel_draft(valid_draft(child_capacity=-1))


# --- facilities, price, stars ---

def test_no_facilities_raises() -> None:
    with pytest.raises(ValidationError):
        validate_hotel_draft(valid_draft(facilities=()))


def test_blank_facilities_raise() -> None:
    with pytest.raises(ValidationError):
        validate_hotel_draft(valid_draft(facilities=("  ",)))


def test_negative_price_raises() -> None:
    with pytest.raises(ValidationError):
        validate_hotel_draft(valid_draft(price_per_night=Decimal("-0.01")))


@pytest.mark.parametrize("stars", [0, 6])
def test_star_rating_out_of_range_raises(stars: int) -> None:
    with pytest.raises(ValidationError):
        validate_hotel_draft(valid_draft(star_rating=stars))


def test_validation_error_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        validate_hotel_draft(valid_draft(star_rating=9))


# --- stays ---

def test_validate_stay_returns_range() -> None:
    stay = validate_stay(date(2026, 1, 1), date(2026, 1, 3))
    assert stay == DateRange(check_in=date(2026, 1, 1), check_out=date(2026, 1, 3))
    assert stay.nights == 2


def test_same_day_stay_raises() -> None:
    with pytest.raises(InvalidDateRangeError) as exc_info:
        validate_stay(date(2026, 1, 1), date(2026, 1, 1))
    assert exc_info.value.code == "invalid_date_range"


def test_reversed_stay_raises() -> None:
    with pytest.raises(InvalidDateRangeError):
        validate_stay(date(2026, 1, 5), date(2026, 1, 1))


# --- guest counts ---

def test_children_only_party_is_allowed() -> None:
    validate_guest_counts(0, 2)


def test_empty_party_raises() -> None:
    with pytest.raises(ValidationError):
        validate_guest_counts(0, 0)


def test_negative_guest_count_raises() -> None:
    with pytest.raises(ValidationError):
        validate_guest_counts(-1, 3)
