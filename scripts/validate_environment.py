#!/usr/bin/env python3
"""Validate local StayBook environment readiness."""

from __future__ import annotations

import importlib
import shutil
import sys
import tempfile
from dataclasses import replace
from datetime import date
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from staybook.domain.errors import AdmissionError
from staybook.domain.models import PayerIdentity
from staybook.repository.data_repository import DataRepository
from staybook.services.booking_service import BookingAdmissionService
from staybook.utils.config import get_settings

SEPARATOR_LINE = "=" * 44
EXPECTED_DEMO_HOTELS = 8


def _print_result(name: str, success: bool, detail: str = "") -> tuple[bool, str]:
    if success:
        return True, f"[PASS] {name}{detail}"
    return False, f"[FAIL] {name}: {detail}"


def main() -> int:
    results: list[str] = []
    all_passed = True
    temp_dir = tempfile.mkdtemp(prefix="staybook-env-")

    # CHECK 1: Python version >= 3.10
    if sys.version_info >= (3, 10):
        ok, line = _print_result("Python " + sys.version.split()[0], True)
    else:
        ok, line = _print_result(
            "Python version >= 3.10",
            False,
            f"found {sys.version.split()[0]}",
        )
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 2: Required packages importable with versions
    package_specs = [
        ("fastapi", "fastapi"),
        ("uvicorn", "uvicorn"),
        ("pydantic", "pydantic"),
        ("numpy", "numpy"),
        ("pandas", "pandas"),
        ("streamlit", "streamlit"),
        ("requests", "requests"),
        ("httpx", "httpx"),
        ("pytest", "pytest"),
    ]
    from importlib.metadata import version

    import_errors: list[str] = []
    for module_name, dist_name in package_specs:
        try:
            importlib.import_module(module_name)
            _ = version(dist_name)
        except Exception as exc:  # pragma: no cover - runtime guard
            import_errors.append(f"{module_name} ({exc})")
    if import_errors:
        ok, line = _print_result(
            "Required packages",
            False,
            "missing/unimportable -> " + "; ".join(import_errors),
        )
    else:
        ok, line = _print_result("Required packages: all importable", True)
    results.append(line)
    all_passed = all_passed and ok

    try:
        validation_settings = replace(
            get_settings(),
            database_path=Path(temp_dir) / "staybook_validation.db",
            seed_demo_data=True,
        )
        repository = DataRepository(validation_settings)

        # CHECK 3: Database initialization
        try:
            repository.initialize_database()
            ok, line = _print_result("Database initialization", True)
        except Exception as exc:
            ok, line = _print_result("Database initialization", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 4: Demo catalogue seeding
        try:
            seeded = repository.seed_demo_hotels()
            if seeded != EXPECTED_DEMO_HOTELS:
                raise RuntimeError(f"expected {EXPECTED_DEMO_HOTELS} hotels, got {seeded}")
            ok, line = _print_result("Demo catalogue", True, f": {seeded} hotels")
        except Exception as exc:
            ok, line = _print_result("Demo catalogue", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 5: Admission round trip: fill a hotel, then get rejected
        booking_service = BookingAdmissionService(
            repository=repository,
            settings=validation_settings,
        )
        payer = PayerIdentity(
            user_id="env-check",
            first_name="Env",
            last_name="Check",
            email="env@example.com",
        )
        try:
            hotel = repository.list_hotels()[0]
            booking = booking_service.attempt_booking(
                hotel_id=hotel.hotel_id,
                adult_count=hotel.adult_capacity,
                child_count=0,
                check_in=date(2026, 3, 1),
                check_out=date(2026, 3, 3),
                payer=payer,
            )
            try:
                booking_service.attempt_booking(
                    hotel_id=hotel.hotel_id,
                    adult_count=1,
                    child_count=0,
                    check_in=date(2026, 3, 2),
                    check_out=date(2026, 3, 4),
                    payer=payer,
                )
            except AdmissionError as exc:
                rejection_code = exc.code
            else:
                raise RuntimeError("second booking was admitted past adult capacity")
            ok, line = _print_result(
                "Booking admission",
                True,
                f": booking={booking.booking_id} rejected={rejection_code}",
            )
        except Exception as exc:
            ok, line = _print_result("Booking admission", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)

    print(SEPARATOR_LINE)
    print(" StayBook Environment Validation")
    print(SEPARATOR_LINE)
    for line in results:
        print(f" {line}")
    print(SEPARATOR_LINE)
    if all_passed:
        print(" All checks passed. Environment is ready.")
        print(SEPARATOR_LINE)
        return 0
    print(" One or more checks failed.")
    print(SEPARATOR_LINE)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
