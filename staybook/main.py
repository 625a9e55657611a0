"""FastAPI application bootstrap and lifecycle wiring."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from staybook.controllers.booking_controller import router as booking_router
from staybook.controllers.hotel_controller import router as hotel_router
from staybook.repository.data_repository import DataRepository
from staybook.services.auth_service import AuthService
from staybook.services.availability_service import AvailabilityService
from staybook.services.booking_service import BookingAdmissionService
from staybook.services.hotel_service import HotelService
from staybook.services.recommendation_service import RecommendationService
from staybook.utils.config import Settings, get_settings
from staybook.utils.logger import get_logger


logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the app with every service wired explicitly onto ``app.state``."""
    settings = settings or get_settings()
    repository = DataRepository(settings)
    availability_service = AvailabilityService(repository=repository, settings=settings)
    hotel_service = HotelService(
        repository=repository,
        availability_service=availability_service,
        settings=settings,
    )
    booking_service = BookingAdmissionService(repository=repository, settings=settings)
    recommendation_service = RecommendationService(repository=repository, settings=settings)
    auth_service = AuthService(settings=settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        startup(app)
        yield

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.include_router(hotel_router)
    app.include_router(booking_router)

    app.state.settings = settings
    app.state.repository = repository
    app.state.availability_service = availability_service
    app.state.hotel_service = hotel_service
    app.state.booking_service = booking_service
    app.state.recommendation_service = recommendation_service
    app.state.auth_service = auth_service

    return app


def startup(app: FastAPI) -> None:
    """Create the schema and seed demo hotels on an empty database."""
    repository: DataRepository = app.state.repository
    settings: Settings = app.state.settings

    repository.initialize_database()
    if settings.seed_demo_data:
        repository.seed_demo_hotels()
    logger.info("System startup completed")


app = create_app()
