"""Booking admission: capacity checks, quotation and ledger writes."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from staybook.domain.availability import (
    check_static_capacity,
    describe_rejection,
    evaluate_admission,
)
from staybook.domain.constraints import validate_guest_counts, validate_stay
from staybook.domain.errors import (
    AdmissionError,
    BookingNotFoundError,
    DynamicAvailabilityExceededError,
    HotelNotFoundError,
    StaticCapacityExceededError,
    UnauthorizedError,
)
from staybook.domain.models import (
    AdmissionState,
    AvailabilityBreakdown,
    BookingQuote,
    BookingRecord,
    Hotel,
    HotelCapacity,
    PayerIdentity,
    Rejected,
    RejectionReason,
    UserRole,
)
from staybook.domain.pricing import count_nights, quote
from staybook.repository.data_repository import DataRepository
from staybook.services.auth_service import Actor
from staybook.utils.config import Settings, get_settings
from staybook.utils.logger import format_fields, get_logger


logger = get_logger(__name__)


@dataclass(frozen=True)
class UserBooking:
    """A user's booking joined with the hotel it belongs to."""

    hotel: Hotel
    booking: BookingRecord


def _admission_error(
    reason: RejectionReason,
    capacity: HotelCapacity,
    requested_adults: int,
    requested_children: int,
    breakdown: AvailabilityBreakdown | None = None,
) -> AdmissionError:
    error_type = (
        StaticCapacityExceededError if reason.is_static else DynamicAvailabilityExceededError
    )
    available: dict[str, int] = {}
    if breakdown is not None:
        available = {
            "adult_count": breakdown.available_adults,
            "child_count": breakdown.available_children,
            "total": breakdown.available_capacity,
        }
    return error_type(
        reason,
        capacity=capacity,
        requested_adults=requested_adults,
        requested_children=requested_children,
        message=describe_rejection(
            reason,
            capacity,
            requested_adults,
            requested_children,
            breakdown,
        ),
        available=available,
    )


class BookingAdmissionService:
    """Turns booking requests into ledger entries or structured rejections."""

    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)

    def quote_booking(
        self,
        *,
        hotel_id: int,
        adult_count: int,
        child_count: int,
        check_in: date,
        check_out: date,
    ) -> BookingQuote:
        """Price a stay after the static capacity checks; nothing is written.

        This is the amount handed to the external payment collaborator
        before the booking write request is made.
        """
        validate_guest_counts(adult_count, child_count)
        stay = validate_stay(check_in, check_out)
        hotel = self._repository.get_hotel(hotel_id)
        if hotel is None:
            raise HotelNotFoundError(hotel_id)

        reason = check_static_capacity(hotel.capacity, adult_count, child_count)
        if reason is not None:
            raise _admission_error(reason, hotel.capacity, adult_count, child_count)

        nights = count_nights(stay.check_in, stay.check_out)
        return BookingQuote(
            hotel_id=hotel_id,
            adult_count=adult_count,
            child_count=child_count,
            nights=nights,
            price_per_night=hotel.price_per_night,
            total_cost=quote(hotel.price_per_night, adult_count, nights),
            currency=self._settings.currency,
        )

    def attempt_booking(
        self,
        *,
        hotel_id: int,
        adult_count: int,
        child_count: int,
        check_in: date,
        check_out: date,
        payer: PayerIdentity,
    ) -> BookingRecord:
        """Admit and persist a booking, or raise the first failing rejection.

        Capacity, the overlap set and the insert all happen inside one ledger
        transaction, so two concurrent requests for the last slot cannot both
        be admitted.
        """
        validate_guest_counts(adult_count, child_count)
        stay = validate_stay(check_in, check_out)
        nights = count_nights(stay.check_in, stay.check_out)

        with self._repository.ledger_transaction(hotel_id) as ledger:
            terms = ledger.get_hotel_terms()
            if terms is None:
                raise HotelNotFoundError(hotel_id)
            capacity, price_per_night = terms
            total_cost: Decimal = quote(price_per_night, adult_count, nights)
            state = AdmissionState.QUOTED
            logger.debug(
                "Booking quoted | %s",
                format_fields(hotel_id=hotel_id, state=state.value, total_cost=total_cost),
            )

            decision = evaluate_admission(
                capacity,
                stay,
                ledger.list_overlapping_bookings(stay),
                adult_count,
                child_count,
            )
            state = AdmissionState.CAPACITY_CHECKED
            logger.debug(
                "Booking capacity checked | %s",
                format_fields(
                    hotel_id=hotel_id,
                    state=state.value,
                    decision=type(decision).__name__,
                ),
            )
            if isinstance(decision, Rejected):
                state = AdmissionState.REJECTED
                logger.info(
                    "Booking rejected | %s",
                    format_fields(
                        hotel_id=hotel_id,
                        state=state.value,
                        reason=decision.reason.value,
                        adults=adult_count,
                        children=child_count,
                        check_in=stay.check_in.isoformat(),
                        check_out=stay.check_out.isoformat(),
                    ),
                )
                raise _admission_error(
                    decision.reason,
                    capacity,
                    adult_count,
                    child_count,
                    decision.breakdown,
                )

            booking = ledger.append_booking(
                payer=payer,
                adult_count=adult_count,
                child_count=child_count,
                stay=stay,
                total_cost=total_cost,
            )

        state = AdmissionState.PERSISTED
        logger.info(
            "Booking admitted | %s",
            format_fields(
                booking_id=booking.booking_id,
                hotel_id=hotel_id,
                user_id=payer.user_id,
                state=state.value,
                nights=nights,
                total_cost=total_cost,
            ),
        )
        return booking

    def list_user_bookings(self, user_id: str) -> list[UserBooking]:
        """User's bookings joined with their hotels; orphaned bookings are skipped."""
        bookings = self._repository.list_bookings_for_user(user_id)
        hotels = {
            hotel.hotel_id: hotel
            for hotel in self._repository.list_hotels_by_ids(
                sorted({booking.hotel_id for booking in bookings})
            )
        }
        return [
            UserBooking(hotel=hotels[booking.hotel_id], booking=booking)
            for booking in bookings
            if booking.hotel_id in hotels
        ]

    def list_hotel_bookings(self, *, hotel_id: int, actor: Actor) -> list[BookingRecord]:
        hotel = self._repository.get_hotel(hotel_id)
        if hotel is None:
            raise HotelNotFoundError(hotel_id)
        if actor.role is not UserRole.ADMIN and hotel.owner_id != actor.user_id:
            raise UnauthorizedError("Hotel not found or not authorized")
        return self._repository.list_bookings_for_hotel(hotel_id)

    def cancel_booking(self, *, hotel_id: int, booking_id: int, actor: Actor) -> BookingRecord:
        """Remove a booking for its guest, the hotel's owner, or an admin.

        Cancelling only frees capacity, so it runs outside the ledger
        transaction used for admissions.
        """
        booking = self._repository.get_booking(booking_id)
        if booking is None or booking.hotel_id != hotel_id:
            raise BookingNotFoundError(booking_id)

        if actor.role is UserRole.USER:
            if booking.user_id != actor.user_id:
                raise UnauthorizedError("Booking not found or not authorized")
        elif actor.role is UserRole.HOTEL_OWNER:
            hotel = self._repository.get_hotel(hotel_id)
            if hotel is None:
                raise HotelNotFoundError(hotel_id)
            if hotel.owner_id != actor.user_id:
                raise UnauthorizedError("Hotel not found or not authorized")

        if not self._repository.delete_booking(booking_id):
            raise BookingNotFoundError(booking_id)
        logger.info(
            "Booking cancelled | %s",
            format_fields(
                booking_id=booking_id,
                hotel_id=hotel_id,
                cancelled_by=actor.user_id,
                role=actor.role.value,
            ),
        )
        return booking
