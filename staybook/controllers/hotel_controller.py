"""HTTP controller layer for hotel search, detail, availability and management."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field, field_validator

from staybook.controllers.dependencies import (
    error_response,
    get_availability_service,
    get_current_actor,
    get_hotel_service,
    get_recommendation_service,
    require_roles,
)
from staybook.domain.constraints import HotelDraft
from staybook.domain.errors import (
    LedgerUnavailableError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from staybook.domain.models import (
    AvailabilityBreakdown,
    Hotel,
    HotelSearchCriteria,
    UserRole,
)
from staybook.services.auth_service import Actor
from staybook.services.availability_service import AvailabilityService
from staybook.services.hotel_service import HotelService
from staybook.services.recommendation_service import Recommendation, RecommendationService
from staybook.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(tags=["hotels"])

SORT_OPTIONS = ("starRating", "pricePerNightAsc", "pricePerNightDesc")


class AvailabilityResponse(BaseModel):
    is_fully_booked: bool
    available_capacity: int
    total_booked_guests: int
    max_capacity: int
    overlapping_bookings: int = Field(ge=0)
    total_booked_adults: int = Field(ge=0)
    total_booked_children: int = Field(ge=0)
    available_adults: int
    available_children: int
    is_adults_fully_booked: bool
    is_children_fully_booked: bool
    max_adults: int
    max_children: int


class HotelResponse(BaseModel):
    hotel_id: int = Field(gt=0)
    owner_id: str
    name: str
    city: str
    country: str
    description: str
    type: str
    adult_count: int = Field(ge=1)
    child_count: int = Field(ge=0)
    facilities: list[str]
    price_per_night: Decimal
    star_rating: int = Field(ge=1, le=5)
    image_urls: list[str]
    last_updated: datetime
    availability: AvailabilityResponse | None = None


class PaginationResponse(BaseModel):
    total: int = Field(ge=0)
    page: int = Field(ge=1)
    pages: int = Field(ge=0)


class HotelSearchResponse(BaseModel):
    data: list[HotelResponse]
    pagination: PaginationResponse


class RecommendationAlgorithm(BaseModel):
    reference_price: float | None = None
    price_diff: float | None = None
    price_similarity: float | None = Field(default=None, ge=0.0, le=100.0)
    rank: int = Field(ge=1)


class RecommendationResponse(BaseModel):
    hotel: HotelResponse
    algorithm: RecommendationAlgorithm


class ClickResponse(BaseModel):
    message: str
    recorded: bool


class MessageResponse(BaseModel):
    message: str


class HotelPayload(BaseModel):
    name: str = Field(min_length=1)
    city: str = Field(min_length=1)
    country: str = Field(min_length=1)
    description: str = Field(min_length=1)
    type: str = Field(min_length=1)
    adult_count: int
    child_count: int
    facilities: list[str] = Field(min_length=1)
    price_per_night: Decimal
    star_rating: int
    image_urls: list[str] = Field(default_factory=list)

    @field_validator("facilities")
    @classmethod
    def strip_facilities(cls, value: list[str]) -> list[str]:
        return [item.strip() for item in value if item.strip()]

    def to_draft(self) -> HotelDraft:
        return HotelDraft(
            name=self.name,
            city=self.city,
            country=self.country,
            description=self.description,
            type=self.type,
            adult_capacity=self.adult_count,
            child_capacity=self.child_count,
            facilities=tuple(self.facilities),
            price_per_night=self.price_per_night,
            star_rating=self.star_rating,
            image_urls=tuple(self.image_urls),
        )


def to_availability_response(breakdown: AvailabilityBreakdown) -> AvailabilityResponse:
    return AvailabilityResponse(
        is_fully_booked=breakdown.is_fully_booked,
        available_capacity=breakdown.available_capacity,
        total_booked_guests=breakdown.total_booked_guests,
        max_capacity=breakdown.max_capacity,
        overlapping_bookings=breakdown.overlapping_bookings,
        total_booked_adults=breakdown.total_booked_adults,
        total_booked_children=breakdown.total_booked_children,
        available_adults=breakdown.available_adults,
        available_children=breakdown.available_children,
        is_adults_fully_booked=breakdown.is_adults_fully_booked,
        is_children_fully_booked=breakdown.is_children_fully_booked,
        max_adults=breakdown.max_adults,
        max_children=breakdown.max_children,
    )


def to_hotel_response(
    hotel: Hotel,
    availability: Optional[AvailabilityBreakdown] = None,
) -> HotelResponse:
    return HotelResponse(
        hotel_id=hotel.hotel_id,
        owner_id=hotel.owner_id,
        name=hotel.name,
        city=hotel.city,
        country=hotel.country,
        description=hotel.description,
        type=hotel.type,
        adult_count=hotel.adult_capacity,
        child_count=hotel.child_capacity,
        facilities=list(hotel.facilities),
        price_per_night=hotel.price_per_night,
        star_rating=hotel.star_rating,
        image_urls=list(hotel.image_urls),
        last_updated=hotel.last_updated,
        availability=(
            to_availability_response(availability) if availability is not None else None
        ),
    )


def _to_recommendation_response(item: Recommendation) -> RecommendationResponse:
    return RecommendationResponse(
        hotel=to_hotel_response(item.hotel),
        algorithm=RecommendationAlgorithm(
            reference_price=item.reference_price,
            price_diff=item.price_diff,
            price_similarity=item.price_similarity,
            rank=item.rank,
        ),
    )


def _unavailable(exc: LedgerUnavailableError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail={"code": "store_unavailable", "message": str(exc)},
    )


@router.get("/hotels/search", response_model=HotelSearchResponse, status_code=status.HTTP_200_OK)
def search_hotels(
    destination: Optional[str] = None,
    adult_count: Optional[int] = Query(default=None, ge=0),
    child_count: Optional[int] = Query(default=None, ge=0),
    facilities: list[str] = Query(default=[]),
    types: list[str] = Query(default=[]),
    stars: list[int] = Query(default=[]),
    max_price: Optional[Decimal] = Query(default=None, ge=0),
    sort_option: Optional[str] = None,
    page: int = Query(default=1, ge=1),
    check_in: Optional[date] = None,
    check_out: Optional[date] = None,
    service: HotelService = Depends(get_hotel_service),
) -> HotelSearchResponse:
    """Paginated catalogue search; dates attach an availability breakdown per hotel."""
    criteria = HotelSearchCriteria(
        destination=destination,
        adult_count=adult_count,
        child_count=child_count,
        facilities=tuple(facilities),
        types=tuple(types),
        stars=tuple(stars),
        max_price=max_price,
        sort_option=sort_option if sort_option in SORT_OPTIONS else None,
        page=page,
    )
    try:
        result = service.search(criteria, check_in=check_in, check_out=check_out)
    except ValidationError as exc:
        raise error_response(status.HTTP_400_BAD_REQUEST, exc) from exc
    except LedgerUnavailableError as exc:
        raise _unavailable(exc) from exc
    except Exception as exc:  # pragma: no cover
        logger.exception("Unexpected hotel search failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Something went wrong",
        ) from exc
    return HotelSearchResponse(
        data=[
            to_hotel_response(hotel, result.availability.get(hotel.hotel_id))
            for hotel in result.hotels
        ],
        pagination=PaginationResponse(total=result.total, page=result.page, pages=result.pages),
    )


@router.get("/hotels", response_model=list[HotelResponse], status_code=status.HTTP_200_OK)
def list_hotels(service: HotelService = Depends(get_hotel_service)) -> list[HotelResponse]:
    try:
        return [to_hotel_response(hotel) for hotel in service.list_hotels()]
    except LedgerUnavailableError as exc:
        raise _unavailable(exc) from exc


@router.get(
    "/hotels/recommendations",
    response_model=list[RecommendationResponse],
    status_code=status.HTTP_200_OK,
)
def recommendations(
    hotel_id: Optional[int] = None,
    service: RecommendationService = Depends(get_recommendation_service),
) -> list[RecommendationResponse]:
    try:
        return [_to_recommendation_response(item) for item in service.recommend_similar(hotel_id)]
    except LedgerUnavailableError as exc:
        raise _unavailable(exc) from exc
    except Exception as exc:  # pragma: no cover
        logger.exception("Unexpected recommendation failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to fetch recommendations",
        ) from exc


@router.get(
    "/hotels/recommendations/personal",
    response_model=list[RecommendationResponse],
    status_code=status.HTTP_200_OK,
)
def personal_recommendations(
    actor: Actor = Depends(get_current_actor),
    service: RecommendationService = Depends(get_recommendation_service),
) -> list[RecommendationResponse]:
    try:
        return [
            _to_recommendation_response(item)
            for item in service.recommend_for_user(actor.user_id)
        ]
    except LedgerUnavailableError as exc:
        raise _unavailable(exc) from exc


@router.get(
    "/hotels/admin/all",
    response_model=list[HotelResponse],
    status_code=status.HTTP_200_OK,
)
def admin_list_hotels(
    _: Actor = Depends(require_roles(UserRole.ADMIN)),
    service: HotelService = Depends(get_hotel_service),
) -> list[HotelResponse]:
    try:
        return [to_hotel_response(hotel) for hotel in service.list_hotels()]
    except LedgerUnavailableError as exc:
        raise _unavailable(exc) from exc


@router.delete(
    "/hotels/admin/{hotel_id}",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
)
def admin_delete_hotel(
    hotel_id: int,
    actor: Actor = Depends(require_roles(UserRole.ADMIN)),
    service: HotelService = Depends(get_hotel_service),
) -> MessageResponse:
    try:
        service.delete_hotel(hotel_id, actor)
    except NotFoundError as exc:
        raise error_response(status.HTTP_404_NOT_FOUND, exc) from exc
    except LedgerUnavailableError as exc:
        raise _unavailable(exc) from exc
    return MessageResponse(message="Hotel deleted")


@router.get("/hotels/{hotel_id}", response_model=HotelResponse, status_code=status.HTTP_200_OK)
def hotel_detail(
    hotel_id: int,
    check_in: Optional[date] = None,
    check_out: Optional[date] = None,
    service: HotelService = Depends(get_hotel_service),
) -> HotelResponse:
    """Hotel listing; includes availability only when both dates are supplied."""
    try:
        hotel, availability = service.get_hotel_detail(hotel_id, check_in, check_out)
        return to_hotel_response(hotel, availability)
    except ValidationError as exc:
        raise error_response(status.HTTP_400_BAD_REQUEST, exc) from exc
    except NotFoundError as exc:
        raise error_response(status.HTTP_404_NOT_FOUND, exc) from exc
    except LedgerUnavailableError as exc:
        raise _unavailable(exc) from exc
    except Exception as exc:  # pragma: no cover
        logger.exception("Unexpected hotel detail failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error fetching hotel",
        ) from exc


@router.get(
    "/hotels/{hotel_id}/availability",
    response_model=AvailabilityResponse,
    status_code=status.HTTP_200_OK,
)
def hotel_availability(
    hotel_id: int,
    check_in: date,
    check_out: date,
    service: AvailabilityService = Depends(get_availability_service),
) -> AvailabilityResponse:
    try:
        breakdown = service.get_availability(hotel_id, check_in, check_out)
    except ValidationError as exc:
        raise error_response(status.HTTP_400_BAD_REQUEST, exc) from exc
    except NotFoundError as exc:
        raise error_response(status.HTTP_404_NOT_FOUND, exc) from exc
    except LedgerUnavailableError as exc:
        raise _unavailable(exc) from exc
    if breakdown is None:
        raise error_response(
            status.HTTP_400_BAD_REQUEST,
            ValidationError("check_in and check_out are both required"),
        )
    return to_availability_response(breakdown)


@router.post(
    "/hotels/{hotel_id}/click",
    response_model=ClickResponse,
    status_code=status.HTTP_200_OK,
)
def record_click(
    hotel_id: int,
    actor: Actor = Depends(get_current_actor),
    service: RecommendationService = Depends(get_recommendation_service),
) -> ClickResponse:
    try:
        recorded = service.record_click(actor.user_id, hotel_id)
    except NotFoundError as exc:
        raise error_response(status.HTTP_404_NOT_FOUND, exc) from exc
    except LedgerUnavailableError as exc:
        raise _unavailable(exc) from exc
    return ClickResponse(message="Hotel click recorded", recorded=recorded)


@router.post("/my-hotels", response_model=HotelResponse, status_code=status.HTTP_201_CREATED)
def create_hotel(
    payload: HotelPayload,
    actor: Actor = Depends(require_roles(UserRole.HOTEL_OWNER)),
    service: HotelService = Depends(get_hotel_service),
) -> HotelResponse:
    try:
        return to_hotel_response(service.create_hotel(payload.to_draft(), actor))
    except ValidationError as exc:
        raise error_response(status.HTTP_400_BAD_REQUEST, exc) from exc
    except LedgerUnavailableError as exc:
        raise _unavailable(exc) from exc


@router.get("/my-hotels", response_model=list[HotelResponse], status_code=status.HTTP_200_OK)
def list_my_hotels(
    actor: Actor = Depends(require_roles(UserRole.HOTEL_OWNER)),
    service: HotelService = Depends(get_hotel_service),
) -> list[HotelResponse]:
    try:
        return [to_hotel_response(hotel) for hotel in service.list_owner_hotels(actor)]
    except LedgerUnavailableError as exc:
        raise _unavailable(exc) from exc


@router.get(
    "/my-hotels/{hotel_id}",
    response_model=HotelResponse,
    status_code=status.HTTP_200_OK,
)
def get_my_hotel(
    hotel_id: int,
    actor: Actor = Depends(require_roles(UserRole.HOTEL_OWNER)),
    service: HotelService = Depends(get_hotel_service),
) -> HotelResponse:
    try:
        return to_hotel_response(service.get_owner_hotel(hotel_id, actor))
    except NotFoundError as exc:
        raise error_response(status.HTTP_404_NOT_FOUND, exc) from exc
    except UnauthorizedError as exc:
        raise error_response(status.HTTP_403_FORBIDDEN, exc) from exc


@router.put(
    "/my-hotels/{hotel_id}",
    response_model=HotelResponse,
    status_code=status.HTTP_200_OK,
)
def update_my_hotel(
    hotel_id: int,
    payload: HotelPayload,
    actor: Actor = Depends(require_roles(UserRole.HOTEL_OWNER)),
    service: HotelService = Depends(get_hotel_service),
) -> HotelResponse:
    try:
        return to_hotel_response(service.update_hotel(hotel_id, payload.to_draft(), actor))
    except ValidationError as exc:
        raise error_response(status.HTTP_400_BAD_REQUEST, exc) from exc
    except NotFoundError as exc:
        raise error_response(status.HTTP_404_NOT_FOUND, exc) from exc
    except UnauthorizedError as exc:
        raise error_response(status.HTTP_403_FORBIDDEN, exc) from exc
    except LedgerUnavailableError as exc:
        raise _unavailable(exc) from exc


@router.delete(
    "/my-hotels/{hotel_id}",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
)
def delete_my_hotel(
    hotel_id: int,
    actor: Actor = Depends(require_roles(UserRole.HOTEL_OWNER, UserRole.ADMIN)),
    service: HotelService = Depends(get_hotel_service),
) -> MessageResponse:
    try:
        service.delete_hotel(hotel_id, actor)
    except NotFoundError as exc:
        raise error_response(status.HTTP_404_NOT_FOUND, exc) from exc
    except UnauthorizedError as exc:
        raise error_response(status.HTTP_403_FORBIDDEN, exc) from exc
    except LedgerUnavailableError as exc:
        raise _unavailable(exc) from exc
    return MessageResponse(message="Hotel deleted")
