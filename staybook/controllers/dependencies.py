"""Shared FastAPI dependency providers for controller layer."""

from __future__ import annotations

from typing import Callable

from fastapi import Depends, Header, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from staybook.domain.errors import BookingServiceError
from staybook.domain.models import UserRole
from staybook.services.auth_service import (
    Actor,
    AuthenticationError,
    AuthService,
    RoleNotPermittedError,
)
from staybook.services.availability_service import AvailabilityService
from staybook.services.booking_service import BookingAdmissionService
from staybook.services.hotel_service import HotelService
from staybook.services.recommendation_service import RecommendationService
from staybook.utils.config import get_settings


bearer_scheme = HTTPBearer(auto_error=False)


def _service_from_state(request: Request, attribute: str, label: str):
    service = getattr(request.app.state, attribute, None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{label} is not initialized",
        )
    return service


def get_auth_service(request: Request) -> AuthService:
    service = getattr(request.app.state, "auth_service", None)
    if service is None:
        service = AuthService(settings=get_settings())
        request.app.state.auth_service = service
    return service


def get_booking_service(request: Request) -> BookingAdmissionService:
    return _service_from_state(request, "booking_service", "Booking service")


def get_hotel_service(request: Request) -> HotelService:
    return _service_from_state(request, "hotel_service", "Hotel service")


def get_availability_service(request: Request) -> AvailabilityService:
    return _service_from_state(request, "availability_service", "Availability service")


def get_recommendation_service(request: Request) -> RecommendationService:
    return _service_from_state(request, "recommendation_service", "Recommendation service")


async def get_current_actor(
    x_user_id: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    auth_service: AuthService = Depends(get_auth_service),
) -> Actor:
    try:
        return auth_service.resolve_actor(
            user_id=x_user_id,
            role=x_user_role,
            bearer_token=credentials.credentials if credentials else None,
        )
    except AuthenticationError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc


def require_roles(*roles: UserRole) -> Callable[..., Actor]:
    """Dependency factory mirroring the role gates of each route."""

    async def _require(actor: Actor = Depends(get_current_actor)) -> Actor:
        try:
            return AuthService.require_role(actor, roles)
        except RoleNotPermittedError as exc:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=str(exc),
            ) from exc

    return _require


def error_response(status_code: int, exc: BookingServiceError) -> HTTPException:
    """HTTPException carrying the structured detail the UI branches on."""
    return HTTPException(status_code=status_code, detail=exc.to_detail())
