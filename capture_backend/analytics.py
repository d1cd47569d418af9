"""
Summary statistics over a user's captures within a trailing time window.
"""

from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Optional

from capture_backend.db import CaptureRecord
from capture_backend.enums import WaterQuality

SECONDS_PER_DAY = 60 * 60 * 24
TOP_LOCATIONS_LIMIT = 5
WATER_QUALITY_VALUES = {quality.value for quality in WaterQuality}
MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

# data key -> AnalyticsData attribute suffix
NUMERIC_FIELDS = {
    "temperature": "temperature",
    "humidity": "humidity",
    "windSpeed": "wind_speed",
    "waterLevel": "water_level",
}


@dataclass
class AnalyticsData:
    time_range_days: int
    total_captures: int = 0
    captures_by_status: dict[str, int] = field(default_factory=dict)
    average_temperature: float = 0.0
    average_humidity: float = 0.0
    average_wind_speed: float = 0.0
    average_water_level: float = 0.0
    sample_counts: dict[str, int] = field(default_factory=dict)
    water_quality_distribution: dict[str, int] = field(default_factory=dict)
    captures_by_month: dict[str, int] = field(default_factory=dict)
    top_locations: list[dict] = field(default_factory=list)


def parse_measurement(value) -> Optional[float]:
    """
    Parse a free-text measurement; None for empty, non-numeric or non-finite.
    """
    if value is None or value == "":
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def mean_of(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def within_window(capture: CaptureRecord, time_range_days: int, now: float) -> bool:
    days_ago = (now - capture.created_at) / SECONDS_PER_DAY
    return days_ago <= time_range_days


def month_key(created_at: float) -> tuple[int, int]:
    moment = datetime.fromtimestamp(created_at, tz=timezone.utc)
    return moment.year, moment.month


def month_label(year: int, month: int) -> str:
    return f"{MONTH_ABBREVIATIONS[month - 1]} {year}"


def top_locations(captures: Iterable[CaptureRecord], limit: int = TOP_LOCATIONS_LIMIT) -> list[dict]:
    counts: Counter[str] = Counter()
    for capture in captures:
        location = (capture.data or {}).get("location")
        if location:
            counts[location] += 1
    # sorted() is stable, so equal counts keep first-seen order.
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [{"location": loc, "count": count} for loc, count in ranked[:limit]]


def compute_analytics(
    captures: Iterable[CaptureRecord], time_range_days: int, now: float
) -> AnalyticsData:
    in_window = [c for c in captures if within_window(c, time_range_days, now)]
    result = AnalyticsData(time_range_days=time_range_days)
    result.total_captures = len(in_window)

    for capture in in_window:
        status = capture.status.value
        result.captures_by_status[status] = result.captures_by_status.get(status, 0) + 1

    for data_key, attr in NUMERIC_FIELDS.items():
        values = [
            number
            for number in (parse_measurement((c.data or {}).get(data_key)) for c in in_window)
            if number is not None
        ]
        setattr(result, f"average_{attr}", mean_of(values))
        result.sample_counts[attr] = len(values)

    for capture in in_window:
        quality = (capture.data or {}).get("waterQuality")
        if quality in WATER_QUALITY_VALUES:
            result.water_quality_distribution[quality] = (
                result.water_quality_distribution.get(quality, 0) + 1
            )

    by_month: Counter[tuple[int, int]] = Counter(month_key(c.created_at) for c in in_window)
    for year, month in sorted(by_month):
        result.captures_by_month[month_label(year, month)] = by_month[(year, month)]

    result.top_locations = top_locations(in_window)
    return result
