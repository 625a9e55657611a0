"""Streamlit operator dashboard for StayBook availability and bookings."""

from __future__ import annotations

import datetime
from typing import Any, Dict, List, Optional

import pandas as pd
import requests
import streamlit as st

# ==========================================
# Configuration & Constants
# ==========================================
API_BASE_URL = "http://127.0.0.1:8000"

REJECTION_MESSAGES = {
    "adult_capacity_exceeded": "This hotel cannot host that many adults.",
    "child_capacity_exceeded": "This hotel cannot host that many children.",
    "total_capacity_exceeded": "The party is larger than the hotel's total capacity.",
    "insufficient_adult_availability": "Not enough adult places left for these dates.",
    "insufficient_child_availability": "Not enough child places left for these dates.",
    "insufficient_availability": "Not enough places left for these dates.",
    "invalid_date_range": "Check-out must be after check-in.",
}

st.set_page_config(
    page_title="StayBook Dashboard",
    page_icon="🏨",
    layout="wide",
)


# ==========================================
# API Helper Functions
# ==========================================
def _identity_headers(user_id: str, role: str) -> Dict[str, str]:
    return {"X-User-Id": user_id, "X-User-Role": role}


def _error_detail(response: requests.Response) -> Dict[str, Any]:
    try:
        detail = response.json().get("detail")
    except ValueError:
        return {"message": response.text}
    if isinstance(detail, dict):
        return detail
    return {"message": str(detail)}


def fetch_search(
    destination: str,
    check_in: datetime.date,
    check_out: datetime.date,
    adult_count: int,
    child_count: int,
    page: int,
) -> Optional[Dict[str, Any]]:
    """Calls the backend hotel search with availability attached."""
    try:
        response = requests.get(
            f"{API_BASE_URL}/hotels/search",
            params={
                "destination": destination or None,
                "check_in": check_in.isoformat(),
                "check_out": check_out.isoformat(),
                "adult_count": adult_count,
                "child_count": child_count,
                "page": page,
            },
            timeout=5,
        )
        response.raise_for_status()
        return response.json()
    except requests.exceptions.RequestException as e:
        st.error(f"Backend connection failed: {e}")
        return None


def fetch_hotel_bookings(hotel_id: int, owner_id: str) -> Optional[List[Dict[str, Any]]]:
    try:
        response = requests.get(
            f"{API_BASE_URL}/my-hotels/{hotel_id}/bookings",
            headers=_identity_headers(owner_id, "hotel owner"),
            timeout=5,
        )
        if response.status_code >= 400:
            st.error(_error_detail(response).get("message", "Unable to fetch bookings"))
            return None
        return response.json()
    except requests.exceptions.RequestException as e:
        st.error(f"Backend connection failed: {e}")
        return None


def submit_booking(
    hotel_id: int,
    user_id: str,
    payload: Dict[str, Any],
) -> tuple[bool, Dict[str, Any]]:
    """Calls the admission endpoint; returns (admitted, body-or-error-detail)."""
    try:
        response = requests.post(
            f"{API_BASE_URL}/hotels/{hotel_id}/bookings",
            json=payload,
            headers=_identity_headers(user_id, "user"),
            timeout=10,
        )
    except requests.exceptions.RequestException as e:
        return False, {"message": f"Backend connection failed: {e}"}
    if response.status_code == 201:
        return True, response.json()
    return False, _error_detail(response)


# ==========================================
# UI Page Functions
# ==========================================
def render_search_page() -> None:
    st.header("🔎 Availability Search")

    col1, col2, col3 = st.columns(3)
    with col1:
        destination = st.text_input("Destination", "")
    with col2:
        check_in = st.date_input("Check-in", datetime.date.today())
    with col3:
        check_out = st.date_input("Check-out", datetime.date.today() + datetime.timedelta(days=2))

    col4, col5, col6 = st.columns(3)
    with col4:
        adult_count = st.number_input("Adults", min_value=0, max_value=50, value=1)
    with col5:
        child_count = st.number_input("Children", min_value=0, max_value=50, value=0)
    with col6:
        page = st.number_input("Page", min_value=1, value=1)

    if st.button("Search", type="primary"):
        if check_in >= check_out:
            st.error(REJECTION_MESSAGES["invalid_date_range"])
            return
        result = fetch_search(destination, check_in, check_out, adult_count, child_count, page)
        if not result:
            return
        rows = []
        for hotel in result.get("data", []):
            availability = hotel.get("availability") or {}
            rows.append(
                {
                    "hotel_id": hotel["hotel_id"],
                    "name": hotel["name"],
                    "city": hotel["city"],
                    "price_per_night": float(hotel["price_per_night"]),
                    "available_adults": availability.get("available_adults"),
                    "available_children": availability.get("available_children"),
                    "fully_booked": availability.get("is_fully_booked"),
                }
            )
        pagination = result.get("pagination", {})
        st.caption(
            f"{pagination.get('total', 0)} hotels · page {pagination.get('page', 1)} "
            f"of {max(pagination.get('pages', 1), 1)}"
        )
        if rows:
            st.dataframe(pd.DataFrame(rows), use_container_width=True)
        else:
            st.info("No hotels match these filters.")


def render_booking_page() -> None:
    st.header("🛎️ Book a Stay")

    col1, col2 = st.columns(2)
    with col1:
        hotel_id = st.number_input("Hotel ID", min_value=1, value=1)
        user_id = st.text_input("Guest user id", "guest-1")
        first_name = st.text_input("First name", "Ada")
        last_name = st.text_input("Last name", "Lovelace")
        email = st.text_input("Email", "ada@example.com")
    with col2:
        check_in = st.date_input("Arrive", datetime.date.today())
        check_out = st.date_input("Depart", datetime.date.today() + datetime.timedelta(days=1))
        adult_count = st.number_input("Adults ", min_value=0, max_value=50, value=1)
        child_count = st.number_input("Children ", min_value=0, max_value=50, value=0)

    if st.button("Book", type="primary"):
        admitted, body = submit_booking(
            int(hotel_id),
            user_id,
            {
                "adult_count": int(adult_count),
                "child_count": int(child_count),
                "check_in": check_in.isoformat(),
                "check_out": check_out.isoformat(),
                "first_name": first_name,
                "last_name": last_name,
                "email": email,
            },
        )
        if admitted:
            st.success(f"Booking #{body['booking_id']} confirmed · total {body['total_cost']}")
        else:
            code = body.get("code", "")
            st.error(REJECTION_MESSAGES.get(code, body.get("message", "Booking failed")))
            if body.get("message"):
                st.caption(body["message"])


def render_owner_page() -> None:
    st.header("📒 Hotel Ledger")
    col1, col2 = st.columns(2)
    with col1:
        hotel_id = st.number_input("Hotel ID ", min_value=1, value=1)
    with col2:
        owner_id = st.text_input("Owner user id", "demo-owner")

    if st.button("Load bookings", type="primary"):
        bookings = fetch_hotel_bookings(int(hotel_id), owner_id)
        if bookings is None:
            return
        if not bookings:
            st.info("No bookings for this hotel yet.")
            return
        frame = pd.DataFrame(bookings)
        frame["guests"] = frame["adult_count"] + frame["child_count"]
        st.dataframe(
            frame[["booking_id", "user_id", "check_in", "check_out", "adult_count", "child_count", "guests", "total_cost"]],
            use_container_width=True,
        )


# ==========================================
# Main App Router
# ==========================================
def main() -> None:
    st.sidebar.title("StayBook")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigation Module",
        ["Availability Search", "Book a Stay", "Hotel Ledger"],
    )

    st.sidebar.markdown("---")
    st.sidebar.caption(f"API: {API_BASE_URL}")

    if page == "Availability Search":
        render_search_page()
    elif page == "Book a Stay":
        render_booking_page()
    elif page == "Hotel Ledger":
        render_owner_page()


if __name__ == "__main__":
    main()
