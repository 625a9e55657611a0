from __future__ import annotations

import sqlite3
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from conftest import ADMIN_TOKEN, build_test_settings, hotel_draft
from staybook.main import create_app
from staybook.repository.data_repository import LedgerTransaction


USER_A = {"X-User-Id": "user-a", "X-User-Role": "user"}
USER_B = {"X-User-Id": "user-b", "X-User-Role": "user"}
OWNER = {"X-User-Id": "owner-1", "X-User-Role": "hotel owner"}
OTHER_OWNER = {"X-User-Id": "owner-2", "X-User-Role": "hotel owner"}
ADMIN = {
    "X-User-Id": "admin-1",
    "X-User-Role": "admin",
    "Authorization": f"Bearer {ADMIN_TOKEN}",
}


@pytest.fixture
def api(tmp_path):
    settings = build_test_settings(tmp_path, "booking_api.db")
    app = create_app(settings)
    repository = app.state.repository
    repository.initialize_database()
    hotel = repository.create_hotel("owner-1", hotel_draft(adult_capacity=4, child_capacity=2))
    return TestClient(app), repository, hotel.hotel_id


def _payload(adults: int, children: int, check_in: str, check_out: str) -> dict:
    return {
        "adult_count": adults,
        "child_count": children,
        "check_in": check_in,
        "check_out": check_out,
        "first_name": "Ada",
        "last_name": "Lovelace",
        "email": "ada@example.com",
    }


def test_booking_flow_with_rejection_codes(api):
    client, repository, hotel_id = api

    created = client.post(
        f"/hotels/{hotel_id}/bookings",
        json=_payload(3, 0, "2026-01-01", "2026-01-05"),
        headers=USER_A,
    )
    assert created.status_code == 201
    body = created.json()
    assert body["user_id"] == "user-a"
    assert Decimal(body["total_cost"]) == Decimal("1200")

    conflict = client.post(
        f"/hotels/{hotel_id}/bookings",
        json=_payload(2, 0, "2026-01-03", "2026-01-06"),
        headers=USER_B,
    )
    assert conflict.status_code == 409
    detail = conflict.json()["detail"]
    assert detail["code"] == "insufficient_adult_availability"
    assert detail["pool"] == "adult"
    assert detail["available"]["adult_count"] == 1

    back_to_back = client.post(
        f"/hotels/{hotel_id}/bookings",
        json=_payload(1, 0, "2026-01-05", "2026-01-06"),
        headers=USER_B,
    )
    assert back_to_back.status_code == 201
    assert repository.count_bookings(hotel_id) == 2


def test_static_rejection_is_bad_request(api):
    client, _, hotel_id = api
    response = client.post(
        f"/hotels/{hotel_id}/bookings",
        json=_payload(1, 3, "2026-01-01", "2026-01-02"),
        headers=USER_A,
    )
    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["code"] == "child_capacity_exceeded"
    assert detail["hotel_capacity"] == {"adult_count": 4, "child_count": 2}
    assert detail["requested_capacity"] == {"adult_count": 1, "child_count": 3}


def test_invalid_dates_and_unknown_hotel(api):
    client, _, hotel_id = api
    reversed_stay = client.post(
        f"/hotels/{hotel_id}/bookings",
        json=_payload(1, 0, "2026-01-05", "2026-01-01"),
        headers=USER_A,
    )
    assert reversed_stay.status_code == 400
    assert reversed_stay.json()["detail"]["code"] == "invalid_date_range"

    missing = client.post(
        "/hotels/9999/bookings",
        json=_payload(1, 0, "2026-01-01", "2026-01-02"),
        headers=USER_A,
    )
    assert missing.status_code == 404
    assert missing.json()["detail"]["code"] == "hotel_not_found"


def test_booking_requires_user_identity(api):
    client, _, hotel_id = api
    payload = _payload(1, 0, "2026-01-01", "2026-01-02")

    assert client.post(f"/hotels/{hotel_id}/bookings", json=payload).status_code == 401
    assert (
        client.post(f"/hotels/{hotel_id}/bookings", json=payload, headers=OWNER).status_code
        == 403
    )
    unknown_role = {"X-User-Id": "x", "X-User-Role": "superuser"}
    assert (
        client.post(f"/hotels/{hotel_id}/bookings", json=payload, headers=unknown_role).status_code
        == 401
    )


def test_quote_endpoint(api):
    client, _, hotel_id = api
    response = client.post(
        f"/hotels/{hotel_id}/bookings/quote",
        json={"adult_count": 2, "child_count": 1, "check_in": "2026-01-01", "check_out": "2026-01-04"},
        headers=USER_A,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["nights"] == 3
    assert Decimal(body["total_cost"]) == Decimal("600")

    too_many = client.post(
        f"/hotels/{hotel_id}/bookings/quote",
        json={"adult_count": 5, "child_count": 0, "check_in": "2026-01-01", "check_out": "2026-01-02"},
        headers=USER_A,
    )
    assert too_many.status_code == 400
    assert too_many.json()["detail"]["code"] == "adult_capacity_exceeded"


def test_my_bookings_and_cancellation_rules(api):
    client, repository, hotel_id = api
    booking_id = client.post(
        f"/hotels/{hotel_id}/bookings",
        json=_payload(2, 1, "2026-02-01", "2026-02-03"),
        headers=USER_A,
    ).json()["booking_id"]

    mine = client.get("/my-bookings", headers=USER_A)
    assert mine.status_code == 200
    assert len(mine.json()) == 1
    assert mine.json()[0]["hotel_id"] == hotel_id
    assert mine.json()[0]["bookings"][0]["booking_id"] == booking_id
    assert client.get("/my-bookings", headers=USER_B).json() == []

    stranger = client.delete(f"/my-bookings/{hotel_id}/{booking_id}", headers=USER_B)
    assert stranger.status_code == 403

    wrong_owner = client.delete(
        f"/my-hotels/{hotel_id}/bookings/{booking_id}",
        headers=OTHER_OWNER,
    )
    assert wrong_owner.status_code == 403

    cancelled = client.delete(f"/my-bookings/{hotel_id}/{booking_id}", headers=USER_A)
    assert cancelled.status_code == 200
    assert repository.get_booking(booking_id) is None

    again = client.delete(f"/my-bookings/{hotel_id}/{booking_id}", headers=USER_A)
    assert again.status_code == 404


def test_cancellation_frees_capacity(api):
    client, _, hotel_id = api
    first = client.post(
        f"/hotels/{hotel_id}/bookings",
        json=_payload(4, 0, "2026-03-01", "2026-03-04"),
        headers=USER_A,
    )
    assert first.status_code == 201

    blocked = client.post(
        f"/hotels/{hotel_id}/bookings",
        json=_payload(1, 0, "2026-03-02", "2026-03-03"),
        headers=USER_B,
    )
    assert blocked.status_code == 409

    owner_cancel = client.delete(
        f"/my-hotels/{hotel_id}/bookings/{first.json()['booking_id']}",
        headers=OWNER,
    )
    assert owner_cancel.status_code == 200

    retry = client.post(
        f"/hotels/{hotel_id}/bookings",
        json=_payload(1, 0, "2026-03-02", "2026-03-03"),
        headers=USER_B,
    )
    assert retry.status_code == 201


def test_hotel_ledger_visible_to_owner_and_admin(api):
    client, _, hotel_id = api
    client.post(
        f"/hotels/{hotel_id}/bookings",
        json=_payload(1, 0, "2026-04-01", "2026-04-02"),
        headers=USER_A,
    )

    owner_view = client.get(f"/my-hotels/{hotel_id}/bookings", headers=OWNER)
    assert owner_view.status_code == 200
    assert [b["user_id"] for b in owner_view.json()] == ["user-a"]

    assert client.get(f"/my-hotels/{hotel_id}/bookings", headers=OTHER_OWNER).status_code == 403
    assert client.get(f"/my-hotels/{hotel_id}/bookings", headers=ADMIN).status_code == 200

    bad_token = dict(ADMIN, Authorization="Bearer wrong")
    assert client.get(f"/my-hotels/{hotel_id}/bookings", headers=bad_token).status_code == 401


def test_store_error_during_admission_is_service_unavailable(api, monkeypatch):
    client, repository, hotel_id = api

    def _fail(self, stay):
        raise sqlite3.OperationalError("disk I/O error")

    monkeypatch.setattr(LedgerTransaction, "list_overlapping_bookings", _fail)
    response = client.post(
        f"/hotels/{hotel_id}/bookings",
        json=_payload(1, 0, "2026-01-01", "2026-01-02"),
        headers=USER_A,
    )
    assert response.status_code == 503
    assert response.json()["detail"]["code"] == "store_unavailable"
    assert repository.count_bookings(hotel_id) == 0
