"""Read-path availability for hotel detail and search listings."""

from __future__ import annotations

from datetime import date
from typing import Optional

from staybook.domain.availability import compute_availability
from staybook.domain.constraints import validate_stay
from staybook.domain.errors import HotelNotFoundError
from staybook.domain.models import AvailabilityBreakdown, Hotel
from staybook.repository.data_repository import DataRepository
from staybook.utils.config import Settings, get_settings
from staybook.utils.logger import get_logger


logger = get_logger(__name__)


class AvailabilityService:
    """Combines a capacity lookup with the ledger overlap query."""

    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)

    def get_availability(
        self,
        hotel_id: int,
        check_in: Optional[date],
        check_out: Optional[date],
    ) -> Optional[AvailabilityBreakdown]:
        """Breakdown for the range, or None when either date is missing."""
        if check_in is None or check_out is None:
            return None
        stay = validate_stay(check_in, check_out)
        capacity = self._repository.get_hotel_capacity(hotel_id)
        if capacity is None:
            raise HotelNotFoundError(hotel_id)
        overlapping = self._repository.list_overlapping_bookings(hotel_id, stay)
        return compute_availability(capacity, stay.check_in, stay.check_out, overlapping)

    def availability_for_hotels(
        self,
        hotels: list[Hotel],
        check_in: Optional[date],
        check_out: Optional[date],
    ) -> dict[int, AvailabilityBreakdown]:
        """Breakdowns keyed by hotel id using each hotel's already-loaded capacity."""
        if check_in is None or check_out is None:
            return {}
        stay = validate_stay(check_in, check_out)
        breakdowns: dict[int, AvailabilityBreakdown] = {}
        for hotel in hotels:
            overlapping = self._repository.list_overlapping_bookings(hotel.hotel_id, stay)
            breakdowns[hotel.hotel_id] = compute_availability(
                hotel.capacity,
                stay.check_in,
                stay.check_out,
                overlapping,
            )
        logger.debug("Computed availability for %s hotels", len(breakdowns))
        return breakdowns
