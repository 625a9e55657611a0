"""Repository layer responsible for all database access."""

from __future__ import annotations

import json
import random
import sqlite3
from contextlib import closing, contextmanager
from datetime import date, datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Iterator, Optional, Sequence

from staybook.domain.constraints import HotelDraft
from staybook.domain.errors import HotelNotFoundError, LedgerUnavailableError
from staybook.domain.models import (
    BookingRecord,
    DateRange,
    Hotel,
    HotelCapacity,
    HotelSearchCriteria,
    PayerIdentity,
)
from staybook.utils.config import Settings, get_settings
from staybook.utils.logger import format_fields, get_logger


logger = get_logger(__name__)

_SORT_CLAUSES = {
    "starRating": "h.star_rating DESC, h.id ASC",
    "pricePerNightAsc": "CAST(h.price_per_night AS REAL) ASC, h.id ASC",
    "pricePerNightDesc": "CAST(h.price_per_night AS REAL) DESC, h.id ASC",
}
_DEFAULT_SORT = "h.last_updated DESC, h.id DESC"

_HOTEL_COLUMNS = """
    h.id,
    h.owner_id,
    h.name,
    h.city,
    h.country,
    h.description,
    h.type,
    h.adult_capacity,
    h.child_capacity,
    h.price_per_night,
    h.star_rating,
    h.image_urls,
    h.last_updated
"""

_BOOKING_COLUMNS = """
    id,
    hotel_id,
    user_id,
    first_name,
    last_name,
    email,
    adult_count,
    child_count,
    check_in,
    check_out,
    total_cost,
    created_at
"""


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _row_to_booking(row: sqlite3.Row) -> BookingRecord:
    return BookingRecord(
        booking_id=int(row["id"]),
        hotel_id=int(row["hotel_id"]),
        user_id=str(row["user_id"]),
        first_name=str(row["first_name"]),
        last_name=str(row["last_name"]),
        email=str(row["email"]),
        adult_count=int(row["adult_count"]),
        child_count=int(row["child_count"]),
        check_in=date.fromisoformat(str(row["check_in"])),
        check_out=date.fromisoformat(str(row["check_out"])),
        total_cost=Decimal(str(row["total_cost"])),
        created_at=datetime.fromisoformat(str(row["created_at"])),
    )


def _row_to_hotel(row: sqlite3.Row, facilities: Sequence[str]) -> Hotel:
    return Hotel(
        hotel_id=int(row["id"]),
        owner_id=str(row["owner_id"]),
        name=str(row["name"]),
        city=str(row["city"]),
        country=str(row["country"]),
        description=str(row["description"]),
        type=str(row["type"]),
        adult_capacity=int(row["adult_capacity"]),
        child_capacity=int(row["child_capacity"]),
        facilities=tuple(facilities),
        price_per_night=Decimal(str(row["price_per_night"])),
        star_rating=int(row["star_rating"]),
        image_urls=tuple(json.loads(row["image_urls"] or "[]")),
        last_updated=datetime.fromisoformat(str(row["last_updated"])),
    )


def _select_overlapping(
    cursor: sqlite3.Cursor,
    hotel_id: int,
    stay: DateRange,
) -> list[BookingRecord]:
    # ISO dates compare lexicographically, so the half-open overlap test
    # can run directly on the stored text.
    cursor.execute(
        f"""
        SELECT {_BOOKING_COLUMNS}
        FROM Bookings
        WHERE hotel_id = ?
          AND check_in < ?
          AND check_out > ?
        ORDER BY check_in ASC, id ASC;
        """,
        (hotel_id, stay.check_out.isoformat(), stay.check_in.isoformat()),
    )
    return [_row_to_booking(row) for row in cursor.fetchall()]


class LedgerTransaction:
    """Per-hotel view of the ledger inside one write-reserved transaction."""

    def __init__(self, connection: sqlite3.Connection, hotel_id: int) -> None:
        self._connection = connection
        self._hotel_id = hotel_id

    @property
    def hotel_id(self) -> int:
        return self._hotel_id

    def get_hotel_terms(self) -> Optional[tuple[HotelCapacity, Decimal]]:
        """Capacity and nightly rate as of this transaction."""
        cursor = self._connection.cursor()
        cursor.execute(
            """
            SELECT adult_capacity, child_capacity, price_per_night
            FROM Hotels
            WHERE id = ?;
            """,
            (self._hotel_id,),
        )
        row = cursor.fetchone()
        if row is None:
            return None
        capacity = HotelCapacity(
            adult_capacity=int(row["adult_capacity"]),
            child_capacity=int(row["child_capacity"]),
        )
        return capacity, Decimal(str(row["price_per_night"]))

    def list_overlapping_bookings(self, stay: DateRange) -> list[BookingRecord]:
        return _select_overlapping(self._connection.cursor(), self._hotel_id, stay)

    def append_booking(
        self,
        *,
        payer: PayerIdentity,
        adult_count: int,
        child_count: int,
        stay: DateRange,
        total_cost: Decimal,
    ) -> BookingRecord:
        created_at = _utc_now()
        cursor = self._connection.cursor()
        cursor.execute(
            """
            INSERT INTO Bookings (
                hotel_id,
                user_id,
                first_name,
                last_name,
                email,
                adult_count,
                child_count,
                check_in,
                check_out,
                total_cost,
                created_at
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?);
            """,
            (
                self._hotel_id,
                payer.user_id,
                payer.first_name,
                payer.last_name,
                payer.email,
                adult_count,
                child_count,
                stay.check_in.isoformat(),
                stay.check_out.isoformat(),
                str(total_cost),
                created_at.isoformat(),
            ),
        )
        return BookingRecord(
            booking_id=int(cursor.lastrowid),
            hotel_id=self._hotel_id,
            user_id=payer.user_id,
            first_name=payer.first_name,
            last_name=payer.last_name,
            email=payer.email,
            adult_count=adult_count,
            child_count=child_count,
            check_in=stay.check_in,
            check_out=stay.check_out,
            total_cost=total_cost,
            created_at=created_at,
        )


class DataRepository:
    """Encapsulates SQLite access so business logic stays storage-agnostic."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self._db_path = Path(self._settings.database_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def database_path(self) -> Path:
        return self._db_path

    def _connect(self, *, autocommit: bool = False) -> sqlite3.Connection:
        connection = sqlite3.connect(
            self._db_path,
            timeout=self._settings.sqlite_timeout_seconds,
            isolation_level=None if autocommit else "DEFERRED",
            check_same_thread=False,
        )
        connection.row_factory = sqlite3.Row
        connection.execute("PRAGMA foreign_keys = ON;")
        return connection

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        """Open, commit-or-rollback, and always close one connection."""
        try:
            with closing(self._connect()) as conn:
                with conn:
                    yield conn
        except sqlite3.OperationalError as exc:
            logger.error("Booking store unavailable | %s", exc)
            raise LedgerUnavailableError(f"Booking store unavailable: {exc}") from exc

    @contextmanager
    def ledger_transaction(self, hotel_id: int) -> Iterator[LedgerTransaction]:
        """Serialize admissions: overlap read and insert commit together or not at all.

        ``BEGIN IMMEDIATE`` takes SQLite's write reservation up front, so a
        concurrent admission waits (up to ``sqlite_timeout_seconds``) and then
        reads a ledger that already contains this transaction's booking.
        """
        try:
            conn = self._connect(autocommit=True)
        except sqlite3.OperationalError as exc:
            raise LedgerUnavailableError(f"Booking store unavailable: {exc}") from exc
        with closing(conn):
            try:
                conn.execute("BEGIN IMMEDIATE;")
            except sqlite3.OperationalError as exc:
                logger.error(
                    "Ledger reservation failed | %s",
                    format_fields(hotel_id=hotel_id, error=exc),
                )
                raise LedgerUnavailableError(
                    f"Timed out waiting for the booking ledger: {exc}"
                ) from exc
            try:
                yield LedgerTransaction(conn, hotel_id)
            except sqlite3.OperationalError as exc:
                conn.execute("ROLLBACK;")
                logger.error(
                    "Ledger transaction failed | %s",
                    format_fields(hotel_id=hotel_id, error=exc),
                )
                raise LedgerUnavailableError(f"Booking ledger failed: {exc}") from exc
            except BaseException:
                conn.execute("ROLLBACK;")
                raise
            try:
                conn.execute("COMMIT;")
            except sqlite3.OperationalError as exc:
                conn.execute("ROLLBACK;")
                raise LedgerUnavailableError(f"Booking commit failed: {exc}") from exc

    def initialize_database(self) -> None:
        """Create all persistence artifacts before API startup."""
        try:
            with closing(self._connect()) as conn:
                cursor = conn.cursor()
                cursor.execute("PRAGMA journal_mode = WAL;")

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Hotels (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        owner_id TEXT NOT NULL,
                        name TEXT NOT NULL,
                        city TEXT NOT NULL,
                        country TEXT NOT NULL,
                        description TEXT NOT NULL,
                        type TEXT NOT NULL,
                        adult_capacity INTEGER NOT NULL CHECK (adult_capacity >= 1),
                        child_capacity INTEGER NOT NULL CHECK (child_capacity >= 0),
                        price_per_night TEXT NOT NULL,
                        star_rating INTEGER NOT NULL CHECK (star_rating BETWEEN 1 AND 5),
                        image_urls TEXT NOT NULL DEFAULT '[]',
                        last_updated TEXT NOT NULL
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS HotelFacilities (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        hotel_id INTEGER NOT NULL,
                        facility TEXT NOT NULL,
                        FOREIGN KEY (hotel_id) REFERENCES Hotels(id) ON DELETE CASCADE
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Bookings (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        hotel_id INTEGER NOT NULL,
                        user_id TEXT NOT NULL,
                        first_name TEXT NOT NULL,
                        last_name TEXT NOT NULL,
                        email TEXT NOT NULL,
                        adult_count INTEGER NOT NULL CHECK (adult_count >= 0),
                        child_count INTEGER NOT NULL CHECK (child_count >= 0),
                        check_in TEXT NOT NULL,
                        check_out TEXT NOT NULL,
                        total_cost TEXT NOT NULL,
                        created_at TEXT NOT NULL,
                        CHECK (check_in < check_out),
                        FOREIGN KEY (hotel_id) REFERENCES Hotels(id) ON DELETE CASCADE
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS HotelClicks (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        user_id TEXT NOT NULL,
                        hotel_id INTEGER NOT NULL,
                        clicked_at TEXT NOT NULL,
                        UNIQUE (user_id, hotel_id),
                        FOREIGN KEY (hotel_id) REFERENCES Hotels(id) ON DELETE CASCADE
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE INDEX IF NOT EXISTS idx_bookings_hotel_dates
                    ON Bookings(hotel_id, check_in, check_out);
                    """
                )
                cursor.execute(
                    """
                    CREATE INDEX IF NOT EXISTS idx_bookings_user
                    ON Bookings(user_id);
                    """
                )
                cursor.execute(
                    """
                    CREATE INDEX IF NOT EXISTS idx_facilities_hotel
                    ON HotelFacilities(hotel_id, facility);
                    """
                )
                cursor.execute(
                    """
                    CREATE INDEX IF NOT EXISTS idx_hotels_owner
                    ON Hotels(owner_id);
                    """
                )
                conn.commit()
            logger.info("Database initialized at %s", self._db_path)
        except sqlite3.Error as exc:
            raise RuntimeError(f"Database initialization failed: {exc}") from exc

    def seed_demo_hotels(self) -> int:
        """Seed a deterministic demo catalogue only when no hotel exists."""
        rng = random.Random(self._settings.random_seed)
        catalogue = [
            ("Harbour View Inn", "Bristol", "United Kingdom", "Budget", 3),
            ("The Grand Meridian", "London", "United Kingdom", "Luxury", 5),
            ("Alpine Lodge", "Zermatt", "Switzerland", "Ski Resort", 4),
            ("Casa del Sol", "Seville", "Spain", "Boutique", 4),
            ("Lakeside Retreat", "Keswick", "United Kingdom", "Family", 3),
            ("Canal House", "Amsterdam", "Netherlands", "Boutique", 4),
            ("Sunset Cabanas", "Lagos", "Portugal", "Beach Resort", 3),
            ("Old Town Hostel", "Prague", "Czech Republic", "Hostel", 2),
        ]
        facility_pool = [
            "Free WiFi",
            "Parking",
            "Airport Shuttle",
            "Family Rooms",
            "Non-Smoking Rooms",
            "Outdoor Pool",
            "Spa",
            "Fitness Center",
        ]
        try:
            with self._connection() as conn:
                cursor = conn.cursor()
                cursor.execute("SELECT COUNT(*) AS count FROM Hotels;")
                if int(cursor.fetchone()["count"]) > 0:
                    logger.info("Demo hotels already present; skipping seed")
                    return 0

                seeded = 0
                for name, city, country, hotel_type, stars in catalogue:
                    draft = HotelDraft(
                        name=name,
                        city=city,
                        country=country,
                        description=f"{name} offers comfortable {hotel_type.lower()} stays in {city}.",
                        type=hotel_type,
                        adult_capacity=rng.randint(2, 12),
                        child_capacity=rng.randint(0, 6),
                        facilities=tuple(sorted(rng.sample(facility_pool, k=3))),
                        price_per_night=Decimal(rng.randrange(40, 400, 5)),
                        star_rating=stars,
                    )
                    self._insert_hotel(cursor, owner_id="demo-owner", draft=draft)
                    seeded += 1
        except sqlite3.Error as exc:
            raise RuntimeError(f"Demo data seeding failed: {exc}") from exc
        logger.info("Demo seed completed with %s hotels", seeded)
        return seeded

    def _insert_hotel(
        self,
        cursor: sqlite3.Cursor,
        *,
        owner_id: str,
        draft: HotelDraft,
    ) -> int:
        cursor.execute(
            """
            INSERT INTO Hotels (
                owner_id,
                name,
                city,
                country,
                description,
                type,
                adult_capacity,
                child_capacity,
                price_per_night,
                star_rating,
                image_urls,
                last_updated
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?);
            """,
            (
                owner_id,
                draft.name,
                draft.city,
                draft.country,
                draft.description,
                draft.type,
                draft.adult_capacity,
                draft.child_capacity,
                str(draft.price_per_night),
                draft.star_rating,
                json.dumps(list(draft.image_urls)),
                _utc_now().isoformat(),
            ),
        )
        hotel_id = int(cursor.lastrowid)
        self._replace_facilities(cursor, hotel_id, draft.facilities)
        return hotel_id

    def _replace_facilities(
        self,
        cursor: sqlite3.Cursor,
        hotel_id: int,
        facilities: Sequence[str],
    ) -> None:
        cursor.execute("DELETE FROM HotelFacilities WHERE hotel_id = ?;", (hotel_id,))
        cursor.executemany(
            "INSERT INTO HotelFacilities (hotel_id, facility) VALUES (?, ?);",
            [(hotel_id, facility) for facility in dict.fromkeys(facilities) if facility.strip()],
        )

    def _load_facilities(
        self,
        cursor: sqlite3.Cursor,
        hotel_ids: Sequence[int],
    ) -> dict[int, list[str]]:
        if not hotel_ids:
            return {}
        placeholders = ",".join("?" for _ in hotel_ids)
        cursor.execute(
            f"""
            SELECT hotel_id, facility
            FROM HotelFacilities
            WHERE hotel_id IN ({placeholders})
            ORDER BY id ASC;
            """,
            tuple(hotel_ids),
        )
        facilities: dict[int, list[str]] = {hotel_id: [] for hotel_id in hotel_ids}
        for row in cursor.fetchall():
            facilities[int(row["hotel_id"])].append(str(row["facility"]))
        return facilities

    def _hydrate_hotels(self, cursor: sqlite3.Cursor, rows: Sequence[sqlite3.Row]) -> list[Hotel]:
        facilities = self._load_facilities(cursor, [int(row["id"]) for row in rows])
        return [_row_to_hotel(row, facilities.get(int(row["id"]), [])) for row in rows]

    def create_hotel(self, owner_id: str, draft: HotelDraft) -> Hotel:
        with self._connection() as conn:
            cursor = conn.cursor()
            hotel_id = self._insert_hotel(cursor, owner_id=owner_id, draft=draft)
        hotel = self.get_hotel(hotel_id)
        if hotel is None:
            raise HotelNotFoundError(hotel_id)
        return hotel

    def update_hotel(self, hotel_id: int, draft: HotelDraft) -> Optional[Hotel]:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                UPDATE Hotels
                SET name = ?,
                    city = ?,
                    country = ?,
                    description = ?,
                    type = ?,
                    adult_capacity = ?,
                    child_capacity = ?,
                    price_per_night = ?,
                    star_rating = ?,
                    image_urls = ?,
                    last_updated = ?
                WHERE id = ?;
                """,
                (
                    draft.name,
                    draft.city,
                    draft.country,
                    draft.description,
                    draft.type,
                    draft.adult_capacity,
                    draft.child_capacity,
                    str(draft.price_per_night),
                    draft.star_rating,
                    json.dumps(list(draft.image_urls)),
                    _utc_now().isoformat(),
                    hotel_id,
                ),
            )
            if cursor.rowcount == 0:
                return None
            self._replace_facilities(cursor, hotel_id, draft.facilities)
        return self.get_hotel(hotel_id)

    def delete_hotel(self, hotel_id: int) -> bool:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM Hotels WHERE id = ?;", (hotel_id,))
            return cursor.rowcount > 0

    def get_hotel(self, hotel_id: int) -> Optional[Hotel]:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"SELECT {_HOTEL_COLUMNS} FROM Hotels AS h WHERE h.id = ?;",
                (hotel_id,),
            )
            row = cursor.fetchone()
            if row is None:
                return None
            return self._hydrate_hotels(cursor, [row])[0]

    def get_hotel_capacity(self, hotel_id: int) -> Optional[HotelCapacity]:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT adult_capacity, child_capacity FROM Hotels WHERE id = ?;",
                (hotel_id,),
            )
            row = cursor.fetchone()
            if row is None:
                return None
            return HotelCapacity(
                adult_capacity=int(row["adult_capacity"]),
                child_capacity=int(row["child_capacity"]),
            )

    def list_hotels(self, owner_id: Optional[str] = None) -> list[Hotel]:
        """Return hotels newest-first, optionally restricted to one owner."""
        with self._connection() as conn:
            cursor = conn.cursor()
            if owner_id is None:
                cursor.execute(
                    f"SELECT {_HOTEL_COLUMNS} FROM Hotels AS h ORDER BY {_DEFAULT_SORT};"
                )
            else:
                cursor.execute(
                    f"""
                    SELECT {_HOTEL_COLUMNS}
                    FROM Hotels AS h
                    WHERE h.owner_id = ?
                    ORDER BY {_DEFAULT_SORT};
                    """,
                    (owner_id,),
                )
            return self._hydrate_hotels(cursor, cursor.fetchall())

    def list_hotels_by_ids(self, hotel_ids: Sequence[int]) -> list[Hotel]:
        if not hotel_ids:
            return []
        placeholders = ",".join("?" for _ in hotel_ids)
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                SELECT {_HOTEL_COLUMNS}
                FROM Hotels AS h
                WHERE h.id IN ({placeholders})
                ORDER BY h.id ASC;
                """,
                tuple(hotel_ids),
            )
            return self._hydrate_hotels(cursor, cursor.fetchall())

    def search_hotels(
        self,
        criteria: HotelSearchCriteria,
        page_size: int,
    ) -> tuple[list[Hotel], int]:
        """Filter, sort and paginate the catalogue; returns (page rows, total matches)."""
        clauses: list[str] = []
        params: list[object] = []

        if criteria.destination:
            pattern = f"%{criteria.destination.strip().lower()}%"
            clauses.append(
                """
                (
                    LOWER(h.city) LIKE ?
                    OR LOWER(h.country) LIKE ?
                    OR LOWER(h.name) LIKE ?
                    OR LOWER(h.description) LIKE ?
                    OR LOWER(h.type) LIKE ?
                    OR EXISTS (
                        SELECT 1 FROM HotelFacilities AS hf
                        WHERE hf.hotel_id = h.id AND LOWER(hf.facility) LIKE ?
                    )
                )
                """
            )
            params.extend([pattern] * 6)
        if criteria.adult_count is not None:
            clauses.append("h.adult_capacity >= ?")
            params.append(criteria.adult_count)
        if criteria.child_count is not None:
            clauses.append("h.child_capacity >= ?")
            params.append(criteria.child_count)
        if criteria.facilities:
            required = list(dict.fromkeys(criteria.facilities))
            placeholders = ",".join("?" for _ in required)
            clauses.append(
                f"""
                h.id IN (
                    SELECT hotel_id FROM HotelFacilities
                    WHERE facility IN ({placeholders})
                    GROUP BY hotel_id
                    HAVING COUNT(DISTINCT facility) = ?
                )
                """
            )
            params.extend(required)
            params.append(len(required))
        if criteria.types:
            placeholders = ",".join("?" for _ in criteria.types)
            clauses.append(f"h.type IN ({placeholders})")
            params.extend(criteria.types)
        if criteria.stars:
            placeholders = ",".join("?" for _ in criteria.stars)
            clauses.append(f"h.star_rating IN ({placeholders})")
            params.extend(criteria.stars)
        if criteria.max_price is not None:
            clauses.append("CAST(h.price_per_night AS REAL) <= ?")
            params.append(float(criteria.max_price))

        where_sql = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        order_sql = _SORT_CLAUSES.get(criteria.sort_option or "", _DEFAULT_SORT)
        offset = (max(criteria.page, 1) - 1) * page_size

        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"SELECT COUNT(*) AS count FROM Hotels AS h {where_sql};",
                tuple(params),
            )
            total = int(cursor.fetchone()["count"])
            cursor.execute(
                f"""
                SELECT {_HOTEL_COLUMNS}
                FROM Hotels AS h
                {where_sql}
                ORDER BY {order_sql}
                LIMIT ? OFFSET ?;
                """,
                (*params, page_size, offset),
            )
            hotels = self._hydrate_hotels(cursor, cursor.fetchall())
        return hotels, total

    def list_overlapping_bookings(self, hotel_id: int, stay: DateRange) -> list[BookingRecord]:
        """Read-path overlap query; admissions use ``ledger_transaction`` instead."""
        with self._connection() as conn:
            return _select_overlapping(conn.cursor(), hotel_id, stay)

    def get_booking(self, booking_id: int) -> Optional[BookingRecord]:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"SELECT {_BOOKING_COLUMNS} FROM Bookings WHERE id = ?;",
                (booking_id,),
            )
            row = cursor.fetchone()
            if row is None:
                return None
            return _row_to_booking(row)

    def list_bookings_for_user(self, user_id: str) -> list[BookingRecord]:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                SELECT {_BOOKING_COLUMNS}
                FROM Bookings
                WHERE user_id = ?
                ORDER BY check_in ASC, id ASC;
                """,
                (user_id,),
            )
            return [_row_to_booking(row) for row in cursor.fetchall()]

    def list_bookings_for_hotel(self, hotel_id: int) -> list[BookingRecord]:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                SELECT {_BOOKING_COLUMNS}
                FROM Bookings
                WHERE hotel_id = ?
                ORDER BY check_in ASC, id ASC;
                """,
                (hotel_id,),
            )
            return [_row_to_booking(row) for row in cursor.fetchall()]

    def delete_booking(self, booking_id: int) -> bool:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM Bookings WHERE id = ?;", (booking_id,))
            return cursor.rowcount > 0

    def count_bookings(self, hotel_id: Optional[int] = None) -> int:
        with self._connection() as conn:
            cursor = conn.cursor()
            if hotel_id is None:
                cursor.execute("SELECT COUNT(*) AS count FROM Bookings;")
            else:
                cursor.execute(
                    "SELECT COUNT(*) AS count FROM Bookings WHERE hotel_id = ?;",
                    (hotel_id,),
                )
            return int(cursor.fetchone()["count"])

    def record_click(self, user_id: str, hotel_id: int, limit: int) -> bool:
        """Append to the user's click log once per hotel, keeping the newest ``limit``."""
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT OR IGNORE INTO HotelClicks (user_id, hotel_id, clicked_at)
                VALUES (?, ?, ?);
                """,
                (user_id, hotel_id, _utc_now().isoformat()),
            )
            inserted = cursor.rowcount > 0
            if inserted:
                cursor.execute(
                    """
                    DELETE FROM HotelClicks
                    WHERE user_id = ?
                      AND id NOT IN (
                          SELECT id FROM HotelClicks
                          WHERE user_id = ?
                          ORDER BY id DESC
                          LIMIT ?
                      );
                    """,
                    (user_id, user_id, limit),
                )
            return inserted

    def list_clicked_hotel_ids(self, user_id: str) -> list[int]:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT hotel_id
                FROM HotelClicks
                WHERE user_id = ?
                ORDER BY id ASC;
                """,
                (user_id,),
            )
            return [int(row["hotel_id"]) for row in cursor.fetchall()]
