from __future__ import annotations

from dataclasses import replace
from decimal import Decimal

import pytest

from staybook.domain.constraints import HotelDraft
from staybook.domain.models import PayerIdentity
from staybook.repository.data_repository import DataRepository
from staybook.utils.config import Settings, get_settings


ADMIN_TOKEN = "secret-admin-token"


def build_test_settings(tmp_path, filename: str = "staybook_test.db") -> Settings:
    get_settings.cache_clear()
    base = get_settings()
    return replace(
        base,
        database_path=tmp_path / filename,
        seed_demo_data=False,
        admin_token=ADMIN_TOKEN,
        sqlite_timeout_seconds=10.0,
        random_seed=42,
    )


def hotel_draft(**overrides) -> HotelDraft:
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


def payer(user_id: str = "guest-1") -> PayerIdentity:
    return PayerIdentity(
        user_id=user_id,
        first_name="Ada",
        last_name="Lovelace",
        email=f"{user_id}@example.com",
    )


@pytest.fixture
def settings(tmp_path) -> Settings:
    return build_test_settings(tmp_path)


@pytest.fixture
def repository(settings) -> DataRepository:
    repo = DataRepository(settings)
    repo.initialize_database()
    return repo
