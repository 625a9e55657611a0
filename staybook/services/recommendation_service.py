"""Price-similarity hotel recommendations and the per-user click log.

The click log is a bounded append-only list kept apart from the booking
ledger; nothing here takes part in admission decisions.
"""

from __future__ import annotations

from dataclasses import dataclass
from threading import RLock
from typing import Optional

import numpy as np
import pandas as pd

from staybook.domain.errors import HotelNotFoundError
from staybook.domain.models import Hotel
from staybook.repository.data_repository import DataRepository
from staybook.utils.config import Settings, get_settings
from staybook.utils.logger import format_fields, get_logger


logger = get_logger(__name__)


@dataclass(frozen=True)
class Recommendation:
    hotel: Hotel
    reference_price: float | None
    price_diff: float | None
    price_similarity: float | None
    rank: int


def _hotel_frame(hotels: list[Hotel]) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "hotel_id": [hotel.hotel_id for hotel in hotels],
            "price": [float(hotel.price_per_night) for hotel in hotels],
        }
    )


def score_price_similarity(frame: pd.DataFrame, reference_price: float) -> pd.DataFrame:
    """Add ``price_diff`` and ``price_similarity`` (0-100) columns, best match first."""
    scored = frame.copy()
    scored["price_diff"] = (scored["price"] - reference_price).abs()
    if reference_price > 0:
        scored["price_similarity"] = (
            100.0 - scored["price_diff"] / reference_price * 100.0
        ).clip(lower=0.0)
    else:
        scored["price_similarity"] = np.where(scored["price_diff"] == 0.0, 100.0, 0.0)
    return scored.sort_values(
        by=["price_similarity", "hotel_id"],
        ascending=[False, True],
        kind="mergesort",
    ).reset_index(drop=True)


class RecommendationService:
    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)
        self._rng = np.random.default_rng(self._settings.random_seed)
        self._rng_lock = RLock()

    def _random_picks(self, hotels: list[Hotel]) -> list[Recommendation]:
        if not hotels:
            return []
        limit = min(self._settings.recommendation_limit, len(hotels))
        frame = _hotel_frame(hotels)
        with self._rng_lock:
            sampled = frame.sample(n=limit, random_state=self._rng)
        by_id = {hotel.hotel_id: hotel for hotel in hotels}
        return [
            Recommendation(
                hotel=by_id[int(hotel_id)],
                reference_price=None,
                price_diff=None,
                price_similarity=None,
                rank=position,
            )
            for position, hotel_id in enumerate(sampled["hotel_id"], start=1)
        ]

    def _ranked(
        self,
        candidates: list[Hotel],
        reference_price: float,
    ) -> list[Recommendation]:
        if not candidates:
            return []
        by_id = {hotel.hotel_id: hotel for hotel in candidates}
        scored = score_price_similarity(_hotel_frame(candidates), reference_price)
        top = scored.head(self._settings.recommendation_limit)
        return [
            Recommendation(
                hotel=by_id[int(row.hotel_id)],
                reference_price=round(reference_price, 2),
                price_diff=round(float(row.price_diff), 2),
                price_similarity=round(float(row.price_similarity), 1),
                rank=position,
            )
            for position, row in enumerate(top.itertuples(index=False), start=1)
        ]

    def recommend_similar(self, hotel_id: Optional[int]) -> list[Recommendation]:
        """Hotels closest in nightly price to ``hotel_id``; random picks when it is unknown."""
        hotels = self._repository.list_hotels()
        current = next((hotel for hotel in hotels if hotel.hotel_id == hotel_id), None)
        if current is None:
            return self._random_picks(hotels)
        candidates = [hotel for hotel in hotels if hotel.hotel_id != current.hotel_id]
        return self._ranked(candidates, float(current.price_per_night))

    def recommend_for_user(self, user_id: str) -> list[Recommendation]:
        """Rank hotels the user has not opened by closeness to their average clicked price."""
        hotels = self._repository.list_hotels()
        clicked_ids = set(self._repository.list_clicked_hotel_ids(user_id))
        clicked = [hotel for hotel in hotels if hotel.hotel_id in clicked_ids]
        if not clicked:
            return self._random_picks(hotels)
        average_price = float(np.mean([float(hotel.price_per_night) for hotel in clicked]))
        candidates = [hotel for hotel in hotels if hotel.hotel_id not in clicked_ids]
        return self._ranked(candidates, average_price)

    def record_click(self, user_id: str, hotel_id: int) -> bool:
        if self._repository.get_hotel(hotel_id) is None:
            raise HotelNotFoundError(hotel_id)
        recorded = self._repository.record_click(
            user_id,
            hotel_id,
            limit=self._settings.click_history_limit,
        )
        logger.debug(
            "Hotel click | %s",
            format_fields(user_id=user_id, hotel_id=hotel_id, recorded=recorded),
        )
        return recorded

    def clicked_hotels(self, user_id: str) -> list[int]:
        return self._repository.list_clicked_hotel_ids(user_id)
