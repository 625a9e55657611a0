"""HTTP controller layer for quotes, booking admission and cancellation."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from staybook.controllers.dependencies import (
    error_response,
    get_booking_service,
    require_roles,
)
from staybook.controllers.hotel_controller import HotelResponse, to_hotel_response
from staybook.domain.errors import (
    DynamicAvailabilityExceededError,
    LedgerUnavailableError,
    NotFoundError,
    StaticCapacityExceededError,
    UnauthorizedError,
    ValidationError,
)
from staybook.domain.models import BookingRecord, PayerIdentity, UserRole
from staybook.services.auth_service import Actor
from staybook.services.booking_service import BookingAdmissionService
from staybook.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(tags=["bookings"])


class StayRequest(BaseModel):
    adult_count: int = Field(ge=0)
    child_count: int = Field(ge=0)
    check_in: date
    check_out: date


class QuoteResponse(BaseModel):
    hotel_id: int = Field(gt=0)
    adult_count: int = Field(ge=0)
    child_count: int = Field(ge=0)
    nights: int = Field(ge=1)
    price_per_night: Decimal
    total_cost: Decimal
    currency: str


class CreateBookingRequest(StayRequest):
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: str = Field(min_length=3, pattern=r"^[^@\s]+@[^@\s]+$")


class BookingResponse(BaseModel):
    booking_id: int = Field(gt=0)
    hotel_id: int = Field(gt=0)
    user_id: str
    first_name: str
    last_name: str
    email: str
    adult_count: int = Field(ge=0)
    child_count: int = Field(ge=0)
    check_in: date
    check_out: date
    total_cost: Decimal
    created_at: datetime


class UserBookingResponse(HotelResponse):
    bookings: list[BookingResponse]


class CancelResponse(BaseModel):
    message: str
    booking_id: int


def to_booking_response(booking: BookingRecord) -> BookingResponse:
    return BookingResponse(
        booking_id=booking.booking_id,
        hotel_id=booking.hotel_id,
        user_id=booking.user_id,
        first_name=booking.first_name,
        last_name=booking.last_name,
        email=booking.email,
        adult_count=booking.adult_count,
        child_count=booking.child_count,
        check_in=booking.check_in,
        check_out=booking.check_out,
        total_cost=booking.total_cost,
        created_at=booking.created_at,
    )


def _store_unavailable(exc: LedgerUnavailableError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail={"code": "store_unavailable", "message": str(exc)},
    )


@router.post(
    "/hotels/{hotel_id}/bookings/quote",
    response_model=QuoteResponse,
    status_code=status.HTTP_200_OK,
)
def quote_booking(
    hotel_id: int,
    payload: StayRequest,
    _: Actor = Depends(require_roles(UserRole.USER)),
    service: BookingAdmissionService = Depends(get_booking_service),
) -> QuoteResponse:
    """Amount to hand to the payment collaborator; static capacity checks only."""
    try:
        result = service.quote_booking(
            hotel_id=hotel_id,
            adult_count=payload.adult_count,
            child_count=payload.child_count,
            check_in=payload.check_in,
            check_out=payload.check_out,
        )
    except (StaticCapacityExceededError, ValidationError) as exc:
        raise error_response(status.HTTP_400_BAD_REQUEST, exc) from exc
    except NotFoundError as exc:
        raise error_response(status.HTTP_404_NOT_FOUND, exc) from exc
    except LedgerUnavailableError as exc:
        raise _store_unavailable(exc) from exc
    return QuoteResponse(
        hotel_id=result.hotel_id,
        adult_count=result.adult_count,
        child_count=result.child_count,
        nights=result.nights,
        price_per_night=result.price_per_night,
        total_cost=result.total_cost,
        currency=result.currency,
    )


@router.post(
    "/hotels/{hotel_id}/bookings",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_booking(
    hotel_id: int,
    payload: CreateBookingRequest,
    actor: Actor = Depends(require_roles(UserRole.USER)),
    service: BookingAdmissionService = Depends(get_booking_service),
) -> BookingResponse:
    """Admit a booking; rejections carry a code per capacity pool."""
    try:
        booking = service.attempt_booking(
            hotel_id=hotel_id,
            adult_count=payload.adult_count,
            child_count=payload.child_count,
            check_in=payload.check_in,
            check_out=payload.check_out,
            payer=PayerIdentity(
                user_id=actor.user_id,
                first_name=payload.first_name,
                last_name=payload.last_name,
                email=payload.email,
            ),
        )
    except StaticCapacityExceededError as exc:
        raise error_response(status.HTTP_400_BAD_REQUEST, exc) from exc
    except DynamicAvailabilityExceededError as exc:
        raise error_response(status.HTTP_409_CONFLICT, exc) from exc
    except ValidationError as exc:
        raise error_response(status.HTTP_400_BAD_REQUEST, exc) from exc
    except NotFoundError as exc:
        raise error_response(status.HTTP_404_NOT_FOUND, exc) from exc
    except LedgerUnavailableError as exc:
        raise _store_unavailable(exc) from exc
    except Exception as exc:  # pragma: no cover
        logger.exception("Unexpected booking admission failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="something went wrong",
        ) from exc
    return to_booking_response(booking)


@router.get(
    "/my-bookings",
    response_model=list[UserBookingResponse],
    status_code=status.HTTP_200_OK,
)
def my_bookings(
    actor: Actor = Depends(require_roles(UserRole.USER)),
    service: BookingAdmissionService = Depends(get_booking_service),
) -> list[UserBookingResponse]:
    try:
        entries = service.list_user_bookings(actor.user_id)
    except LedgerUnavailableError as exc:
        raise _store_unavailable(exc) from exc
    return [
        UserBookingResponse(
            **to_hotel_response(entry.hotel).model_dump(),
            bookings=[to_booking_response(entry.booking)],
        )
        for entry in entries
    ]


@router.delete(
    "/my-bookings/{hotel_id}/{booking_id}",
    response_model=CancelResponse,
    status_code=status.HTTP_200_OK,
)
def cancel_my_booking(
    hotel_id: int,
    booking_id: int,
    actor: Actor = Depends(require_roles(UserRole.USER)),
    service: BookingAdmissionService = Depends(get_booking_service),
) -> CancelResponse:
    try:
        service.cancel_booking(hotel_id=hotel_id, booking_id=booking_id, actor=actor)
    except NotFoundError as exc:
        raise error_response(status.HTTP_404_NOT_FOUND, exc) from exc
    except UnauthorizedError as exc:
        raise error_response(status.HTTP_403_FORBIDDEN, exc) from exc
    except LedgerUnavailableError as exc:
        raise _store_unavailable(exc) from exc
    return CancelResponse(message="Booking cancelled", booking_id=booking_id)


@router.get(
    "/my-hotels/{hotel_id}/bookings",
    response_model=list[BookingResponse],
    status_code=status.HTTP_200_OK,
)
def hotel_bookings(
    hotel_id: int,
    actor: Actor = Depends(require_roles(UserRole.HOTEL_OWNER, UserRole.ADMIN)),
    service: BookingAdmissionService = Depends(get_booking_service),
) -> list[BookingResponse]:
    try:
        bookings = service.list_hotel_bookings(hotel_id=hotel_id, actor=actor)
    except NotFoundError as exc:
        raise error_response(status.HTTP_404_NOT_FOUND, exc) from exc
    except UnauthorizedError as exc:
        raise error_response(status.HTTP_403_FORBIDDEN, exc) from exc
    except LedgerUnavailableError as exc:
        raise _store_unavailable(exc) from exc
    return [to_booking_response(booking) for booking in bookings]


@router.delete(
    "/my-hotels/{hotel_id}/bookings/{booking_id}",
    response_model=CancelResponse,
    status_code=status.HTTP_200_OK,
)
def cancel_hotel_booking(
    hotel_id: int,
    booking_id: int,
    actor: Actor = Depends(require_roles(UserRole.HOTEL_OWNER, UserRole.ADMIN)),
    service: BookingAdmissionService = Depends(get_booking_service),
) -> CancelResponse:
    try:
        service.cancel_booking(hotel_id=hotel_id, booking_id=booking_id, actor=actor)
    except NotFoundError as exc:
        raise error_response(status.HTTP_404_NOT_FOUND, exc) from exc
    except UnauthorizedError as exc:
        raise error_response(status.HTTP_403_FORBIDDEN, exc) from exc
    except LedgerUnavailableError as exc:
        raise _store_unavailable(exc) from exc
    return CancelResponse(message="Booking cancelled by hotel owner", booking_id=booking_id)
