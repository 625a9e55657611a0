from __future__ import annotations

from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from conftest import ADMIN_TOKEN, build_test_settings, hotel_draft, payer
from staybook.controllers.hotel_controller import hotel_availability
from staybook.domain.errors import HotelNotFoundError
from staybook.main import create_app


OWNER = {"X-User-Id": "owner-1", "X-User-Role": "hotel owner"}
OTHER_OWNER = {"X-User-Id": "owner-2", "X-User-Role": "hotel owner"}
USER = {"X-User-Id": "user-a", "X-User-Role": "user"}
ADMIN = {
    "X-User-Id": "admin-1",
    "X-User-Role": "admin",
    "Authorization": f"Bearer {ADMIN_TOKEN}",
}

HOTEL_PAYLOAD = {
    "name": "Canal House",
    "city": "Amsterdam",
    "country": "Netherlands",
    "description": "Narrow canal-side rooms near the station.",
    "type": "Boutique",
    "adult_count": 3,
    "child_count": 1,
    "facilities": ["Free WiFi", "Spa"],
    "price_per_night": "150.00",
    "star_rating": 4,
    "image_urls": [],
}


@pytest.fixture
def api(tmp_path):
    settings = replace(build_test_settings(tmp_path, "hotels_api.db"), search_page_size=5)
    app = create_app(settings)
    repository = app.state.repository
    repository.initialize_database()
    return TestClient(app), repository, app


def test_owner_can_create_update_and_delete_hotel(api):
    client, repository, _ = api

    created = client.post("/my-hotels", json=HOTEL_PAYLOAD, headers=OWNER)
    assert created.status_code == 201
    hotel = created.json()
    assert hotel["owner_id"] == "owner-1"
    assert hotel["facilities"] == ["Free WiFi", "Spa"]
    assert Decimal(hotel["price_per_night"]) == Decimal("150.00")

    listed = client.get("/my-hotels", headers=OWNER)
    assert [item["hotel_id"] for item in listed.json()] == [hotel["hotel_id"]]
    assert client.get("/my-hotels", headers=OTHER_OWNER).json() == []

    update = dict(HOTEL_PAYLOAD, adult_count=5, name="Canal House Annex")
    updated = client.put(f"/my-hotels/{hotel['hotel_id']}", json=update, headers=OWNER)
    assert updated.status_code == 200
    assert updated.json()["adult_count"] == 5
    assert repository.get_hotel_capacity(hotel["hotel_id"]).adult_capacity == 5

    hijack = client.put(f"/my-hotels/{hotel['hotel_id']}", json=update, headers=OTHER_OWNER)
    assert hijack.status_code == 403

    deleted = client.delete(f"/my-hotels/{hotel['hotel_id']}", headers=OWNER)
    assert deleted.status_code == 200
    assert repository.get_hotel(hotel["hotel_id"]) is None


def test_invalid_listing_is_rejected(api):
    client, _, _ = api
    short_description = dict(HOTEL_PAYLOAD, description="Tiny")
    response = client.post("/my-hotels", json=short_description, headers=OWNER)
    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "validation_error"

    bad_stars = dict(HOTEL_PAYLOAD, star_rating=7)
    assert client.post("/my-hotels", json=bad_stars, headers=OWNER).status_code == 400

    assert client.post("/my-hotels", json=HOTEL_PAYLOAD, headers=USER).status_code == 403


def test_deleting_hotel_removes_its_bookings(api):
    client, repository, app = api
    hotel = repository.create_hotel("owner-1", hotel_draft())
    app.state.booking_service.attempt_booking(
        hotel_id=hotel.hotel_id,
        adult_count=1,
        child_count=0,
        check_in=date(2026, 1, 1),
        check_out=date(2026, 1, 2),
        payer=payer(),
    )
    assert repository.count_bookings(hotel.hotel_id) == 1

    response = client.delete(f"/hotels/admin/{hotel.hotel_id}", headers=ADMIN)
    assert response.status_code == 200
    assert repository.count_bookings(hotel.hotel_id) == 0


def test_admin_routes_require_token(api):
    client, repository, _ = api
    repository.create_hotel("owner-1", hotel_draft())

    assert client.get("/hotels/admin/all", headers=ADMIN).status_code == 200
    no_token = {"X-User-Id": "admin-1", "X-User-Role": "admin"}
    assert client.get("/hotels/admin/all", headers=no_token).status_code == 401
    assert client.get("/hotels/admin/all", headers=OWNER).status_code == 403


def test_detail_includes_availability_only_with_both_dates(api):
    client, repository, app = api
    hotel = repository.create_hotel("owner-1", hotel_draft(adult_capacity=4, child_capacity=2))
    app.state.booking_service.attempt_booking(
        hotel_id=hotel.hotel_id,
        adult_count=3,
        child_count=1,
        check_in=date(2026, 1, 1),
        check_out=date(2026, 1, 5),
        payer=payer(),
    )

    plain = client.get(f"/hotels/{hotel.hotel_id}")
    assert plain.status_code == 200
    assert plain.json()["availability"] is None

    with_dates = client.get(
        f"/hotels/{hotel.hotel_id}",
        params={"check_in": "2026-01-03", "check_out": "2026-01-06"},
    )
    availability = with_dates.json()["availability"]
    assert availability["available_adults"] == 1
    assert availability["available_children"] == 1
    assert availability["available_capacity"] == 2
    assert availability["is_fully_booked"] is False

    after_checkout = client.get(
        f"/hotels/{hotel.hotel_id}/availability",
        params={"check_in": "2026-01-05", "check_out": "2026-01-06"},
    )
    assert after_checkout.json()["available_adults"] == 4
    assert after_checkout.json()["overlapping_bookings"] == 0

    reversed_range = client.get(
        f"/hotels/{hotel.hotel_id}/availability",
        params={"check_in": "2026-01-06", "check_out": "2026-01-05"},
    )
    assert reversed_range.status_code == 400
    assert client.get("/hotels/9999").status_code == 404


def test_search_filters_sorts_and_paginates(api):
    client, repository, _ = api
    for index in range(7):
        repository.create_hotel(
            "owner-1",
            hotel_draft(
                name=f"Seaside Hotel {index}",
                city="Brighton" if index % 2 == 0 else "Leeds",
                price_per_night=Decimal(50 + index * 10),
                star_rating=1 + index % 5,
                adult_capacity=2 + index,
                facilities=("Free WiFi", "Spa") if index < 3 else ("Parking",),
            ),
        )

    first_page = client.get("/hotels/search").json()
    assert first_page["pagination"] == {"total": 7, "page": 1, "pages": 2}
    assert len(first_page["data"]) == 5
    second_page = client.get("/hotels/search", params={"page": 2}).json()
    assert len(second_page["data"]) == 2

    brighton = client.get("/hotels/search", params={"destination": "brigh"}).json()
    assert brighton["pagination"]["total"] == 4

    spa = client.get(
        "/hotels/search",
        params=[("facilities", "Free WiFi"), ("facilities", "Spa")],
    ).json()
    assert spa["pagination"]["total"] == 3

    cheap_first = client.get("/hotels/search", params={"sort_option": "pricePerNightAsc"}).json()
    prices = [Decimal(item["price_per_night"]) for item in cheap_first["data"]]
    assert prices == sorted(prices)

    capped = client.get("/hotels/search", params={"max_price": "70"}).json()
    assert capped["pagination"]["total"] == 3

    roomy = client.get("/hotels/search", params={"adult_count": 7}).json()
    assert roomy["pagination"]["total"] == 2


def test_search_attaches_availability_for_dates(api):
    client, repository, _ = api
    repository.create_hotel("owner-1", hotel_draft())
    result = client.get(
        "/hotels/search",
        params={"check_in": "2026-05-01", "check_out": "2026-05-03"},
    ).json()
    assert result["data"][0]["availability"]["available_adults"] == 4


def test_seed_demo_hotels_runs_once(api):
    _, repository, _ = api
    assert repository.seed_demo_hotels() == 8
    assert repository.seed_demo_hotels() == 0
    assert len(repository.list_hotels()) == 8


def test_capacity_lookup_reads_current_values(api):
    _, repository, app = api
    hotel = repository.create_hotel("owner-1", hotel_draft(adult_capacity=4, child_capacity=2))
    service = app.state.hotel_service

    assert service.get_capacity(hotel.hotel_id).total_capacity == 6
    repository.update_hotel(hotel.hotel_id, hotel_draft(adult_capacity=2, child_capacity=1))
    assert service.get_capacity(hotel.hotel_id).total_capacity == 3


def test_availability_for_unknown_hotel_is_not_found(api):
    client, _, _ = api
    response = client.get(
        "/hotels/9999/availability",
        params={"check_in": "2026-01-01", "check_out": "2026-01-02"},
    )
    assert response.status_code == 404
    assert response.json()["detail"]["code"] == "hotel_not_found"


def test_availability_route_without_dates_is_bad_request(api):
    _, repository, app = api
    hotel = repository.create_hotel("owner-1", hotel_draft())

    with pytest.raises(HTTPException) as exc_info:
        hotel_availability(hotel.hotel_id, None, None, service=app.state.availability_service)
    assert exc_info.value.status_code == 400
    assert exc_info.value.detail["code"] == "validation_error"


def test_create_hotel_raises_when_row_cannot_be_read_back(api, monkeypatch):
    _, repository, _ = api
    monkeypatch.setattr(repository, "get_hotel", lambda hotel_id: None)

    with pytest.raises(HotelNotFoundError):
        repository.create_hotel("owner-1", hotel_draft())
