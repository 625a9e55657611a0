"""Hotel catalogue management: owner CRUD, admin moderation and search."""

from __future__ import annotations

import math
from datetime import date
from typing import Optional

from staybook.domain.constraints import HotelDraft, validate_hotel_draft
from staybook.domain.errors import HotelNotFoundError, UnauthorizedError
from staybook.domain.models import (
    AvailabilityBreakdown,
    Hotel,
    HotelCapacity,
    HotelSearchCriteria,
    HotelSearchPage,
    UserRole,
)
from staybook.repository.data_repository import DataRepository
from staybook.services.auth_service import Actor
from staybook.services.availability_service import AvailabilityService
from staybook.utils.config import Settings, get_settings
from staybook.utils.logger import format_fields, get_logger


logger = get_logger(__name__)


class HotelService:
    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        availability_service: Optional[AvailabilityService] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)
        self._availability_service = availability_service or AvailabilityService(
            repository=self._repository,
            settings=self._settings,
        )

    def get_hotel(self, hotel_id: int) -> Hotel:
        hotel = self._repository.get_hotel(hotel_id)
        if hotel is None:
            raise HotelNotFoundError(hotel_id)
        return hotel

    def get_capacity(self, hotel_id: int) -> HotelCapacity:
        """Authoritative capacity lookup; read fresh on every call."""
        capacity = self._repository.get_hotel_capacity(hotel_id)
        if capacity is None:
            raise HotelNotFoundError(hotel_id)
        return capacity

    def get_hotel_detail(
        self,
        hotel_id: int,
        check_in: Optional[date] = None,
        check_out: Optional[date] = None,
    ) -> tuple[Hotel, Optional[AvailabilityBreakdown]]:
        hotel = self.get_hotel(hotel_id)
        availability = self._availability_service.get_availability(hotel_id, check_in, check_out)
        return hotel, availability

    def list_hotels(self) -> list[Hotel]:
        return self._repository.list_hotels()

    def list_owner_hotels(self, actor: Actor) -> list[Hotel]:
        return self._repository.list_hotels(owner_id=actor.user_id)

    def get_owner_hotel(self, hotel_id: int, actor: Actor) -> Hotel:
        hotel = self.get_hotel(hotel_id)
        self._ensure_can_manage(hotel, actor)
        return hotel

    def create_hotel(self, draft: HotelDraft, actor: Actor) -> Hotel:
        validate_hotel_draft(draft)
        hotel = self._repository.create_hotel(actor.user_id, draft)
        logger.info(
            "Hotel created | %s",
            format_fields(hotel_id=hotel.hotel_id, owner_id=actor.user_id),
        )
        return hotel

    def update_hotel(self, hotel_id: int, draft: HotelDraft, actor: Actor) -> Hotel:
        """Replace a hotel's listing; capacity changes apply to existing bookings too."""
        validate_hotel_draft(draft)
        existing = self.get_hotel(hotel_id)
        if existing.owner_id != actor.user_id:
            raise UnauthorizedError("Hotel not found or access denied")
        updated = self._repository.update_hotel(hotel_id, draft)
        if updated is None:
            raise HotelNotFoundError(hotel_id)
        if updated.capacity != existing.capacity:
            logger.warning(
                "Hotel capacity changed | %s",
                format_fields(
                    hotel_id=hotel_id,
                    adults=f"{existing.adult_capacity}->{updated.adult_capacity}",
                    children=f"{existing.child_capacity}->{updated.child_capacity}",
                ),
            )
        return updated

    def delete_hotel(self, hotel_id: int, actor: Actor) -> None:
        hotel = self.get_hotel(hotel_id)
        self._ensure_can_manage(hotel, actor)
        if not self._repository.delete_hotel(hotel_id):
            raise HotelNotFoundError(hotel_id)
        logger.info(
            "Hotel deleted | %s",
            format_fields(hotel_id=hotel_id, deleted_by=actor.user_id, role=actor.role.value),
        )

    def search(
        self,
        criteria: HotelSearchCriteria,
        check_in: Optional[date] = None,
        check_out: Optional[date] = None,
    ) -> HotelSearchPage:
        page_size = self._settings.search_page_size
        hotels, total = self._repository.search_hotels(criteria, page_size)
        availability = self._availability_service.availability_for_hotels(
            hotels,
            check_in,
            check_out,
        )
        return HotelSearchPage(
            hotels=hotels,
            total=total,
            page=max(criteria.page, 1),
            pages=math.ceil(total / page_size) if page_size else 0,
            availability=availability,
        )

    @staticmethod
    def _ensure_can_manage(hotel: Hotel, actor: Actor) -> None:
        if actor.role is UserRole.ADMIN:
            return
        if hotel.owner_id != actor.user_id:
            raise UnauthorizedError("Hotel not found or not authorized")
