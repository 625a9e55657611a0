"""Domain-level validation rules for hotels, stays and guest counts."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from staybook.domain.errors import InvalidDateRangeError, ValidationError
from staybook.domain.models import DateRange


@dataclass(frozen=True)
class HotelDraft:
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
    image_urls: tuple[str, ...] = ()


def validate_hotel_draft(draft: HotelDraft) -> None:
    if len(draft.name.strip()) < 3:
        raise ValidationError("Hotel name must be at least 3 characters long")
    if len(draft.city.strip()) < 2:
        raise ValidationError("City must be at least 2 characters long")
    if len(draft.country.strip()) < 2:
        raise ValidationError("Country must be at least 2 characters long")
    if len(draft.description.strip()) < 10:
        raise ValidationError("Description must be at least 10 characters long")
    if len(draft.type.strip()) < 2:
        raise ValidationError("Hotel type must be at least 2 characters long")
    if draft.adult_capacity < 1:
        raise ValidationError("Adult count must be at least 1")
    if draft.child_capacity < 0:
        raise ValidationError("Child count cannot be negative")
    if not [facility for facility in draft.facilities if facility.strip()]:
        raise ValidationError("At least one facility must be selected")
    if draft.price_per_night < 0:
        raise ValidationError("Price per night cannot be negative")
    if not 1 <= draft.star_rating <= 5:
        raise ValidationError("Star rating must be between 1 and 5")


def validate_stay(check_in: date, check_out: date) -> DateRange:
    if check_in >= check_out:
        raise InvalidDateRangeError(
            f"check_in ({check_in.isoformat()}) must be before check_out ({check_out.isoformat()})"
        )
    return DateRange(check_in=check_in, check_out=check_out)


def validate_guest_counts(adult_count: int, child_count: int) -> None:
    if adult_count < 0 or child_count < 0:
        raise ValidationError("Guest counts cannot be negative")
    if adult_count + child_count < 1:
        raise ValidationError("A booking must include at least one guest")
