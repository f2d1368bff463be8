"""Normalization helpers.

Centralizes defensive parsing of source record fields.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

from squadtrack._constants import LATITUDE_COLUMN, LONGITUDE_COLUMN


def safe_float(value: Any) -> float | None:
    """Parse *value* as a finite float, returning ``None`` otherwise."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if value == "" or value == "--":
            return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(result):
        return None
    return result


def parse_lat_lon(record: Mapping[str, Any]) -> tuple[float, float] | None:
    """Extract ``(latitude, longitude)`` from a record, or ``None`` if either is unusable."""
    lat = safe_float(record.get(LATITUDE_COLUMN))
    lon = safe_float(record.get(LONGITUDE_COLUMN))
    if lat is None or lon is None:
        return None
    return lat, lon
