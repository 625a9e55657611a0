"""Price quotation for stays."""

from __future__ import annotations

import math
from datetime import date, datetime
from decimal import Decimal
from typing import Union


Money = Union[Decimal, int, str]


def count_nights(check_in: date, check_out: date) -> int:
    """Whole nights between two instants, rounding partial days up."""
    if isinstance(check_in, datetime) and isinstance(check_out, datetime):
        seconds = (check_out - check_in).total_seconds()
        return math.ceil(seconds / 86400)
    return (check_out - check_in).days


def quote(price_per_night: Money, adult_count: int, night_count: int) -> Decimal:
    """Total stay cost. Children are never charged."""
    return Decimal(str(price_per_night)) * adult_count * night_count
