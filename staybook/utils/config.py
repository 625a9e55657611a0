"""Environment-driven application settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path


def _env_str(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    app_name: str
    app_version: str
    database_path: Path
    log_level: str
    sqlite_timeout_seconds: float
    admin_token: str | None
    search_page_size: int
    recommendation_limit: int
    click_history_limit: int
    seed_demo_data: bool
    random_seed: int
    currency: str


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build settings once per process; tests clear the cache to re-read env."""
    project_root = Path(__file__).resolve().parents[2]
    default_db_path = project_root / "data" / "staybook.db"
    return Settings(
        app_name=_env_str("STAYBOOK_APP_NAME", "StayBook Availability Service"),
        app_version=_env_str("STAYBOOK_APP_VERSION", "1.0.0"),
        database_path=Path(_env_str("STAYBOOK_DATABASE_PATH", str(default_db_path))),
        log_level=_env_str("STAYBOOK_LOG_LEVEL", "INFO"),
        sqlite_timeout_seconds=_env_float("STAYBOOK_SQLITE_TIMEOUT_SECONDS", 5.0),
        admin_token=os.getenv("ADMIN_TOKEN") or None,
        search_page_size=_env_int("STAYBOOK_SEARCH_PAGE_SIZE", 5),
        recommendation_limit=_env_int("STAYBOOK_RECOMMENDATION_LIMIT", 5),
        click_history_limit=_env_int("STAYBOOK_CLICK_HISTORY_LIMIT", 20),
        seed_demo_data=_env_bool("STAYBOOK_SEED_DEMO_DATA", True),
        random_seed=_env_int("STAYBOOK_RANDOM_SEED", 42),
        currency=_env_str("STAYBOOK_CURRENCY", "gbp"),
    )
