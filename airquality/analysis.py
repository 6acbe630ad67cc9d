"""Sensor readings: extraction, date filtering and summary statistics."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Mapping, Sequence

SLOPE_THRESHOLD = 0.1763
DEFAULT_READING_DATE = "1970-01-01"

_DATE_PREFIX = re.compile(r"\s*(\d{4})-(\d{1,2})-(\d{1,2})")


@dataclass(frozen=True)
class Reading:
    """One measured value and the timestamp text it was reported with."""

    date: str
    value: float


@dataclass(frozen=True)
class SeriesSummary:
    """Statistics of a reading series ordered from earliest to latest."""

    current: Reading
    minimum: Reading
    maximum: Reading
    average: float
    trend: str

    def labels(self) -> list[str]:
        """Return the text lines shown beneath a graph of the series."""
        return [
            f"Current Value: {self.current.value:.2f}",
            f"Min: {self.minimum.value:.2f} ({self.minimum.date})",
            f"Max: {self.maximum.value:.2f} ({self.maximum.date})",
            f"Average Value: {self.average:.2f}",
            f"Trend: {self.trend}",
        ]


def parse_reading_date(text: str) -> date | None:
    """Parse the leading YYYY-MM-DD part of a timestamp; None if it is not a valid date."""
    match = _DATE_PREFIX.match(text)
    if match is None:
        return None
    year, month, day = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return None


def _has_value(entry: Mapping[str, Any]) -> bool:
    return entry.get("value") is not None


def extract_readings(sensors: Iterable[Mapping[str, Any]]) -> list[Reading]:
    """Collect readings with a value from all sensors, earliest first.

    The service lists readings newest first, so the collected series is reversed.
    """
    readings = [
        Reading(date=str(entry["date"]), value=float(entry["value"]))
        for sensor in sensors
        for entry in sensor.get("values") or []
        if _has_value(entry)
    ]
    readings.reverse()
    return readings


def calculate_trend(values: Sequence[float]) -> str:
    """Classify the least-squares slope of the values against their index."""
    n = len(values)
    if n < 2:
        return "Not enough data"

    sum_x = sum_y = sum_xy = sum_x2 = 0.0
    for x, y in enumerate(values):
        sum_x += x
        sum_y += y
        sum_xy += x * y
        sum_x2 += x * x

    denominator = n * sum_x2 - sum_x * sum_x
    if denominator == 0:
        return "Undefined trend"
    slope = (n * sum_xy - sum_x * sum_y) / denominator
    if slope > SLOPE_THRESHOLD:
        return "Rising"
    if slope < -SLOPE_THRESHOLD:
        return "Falling"
    return "Stable"


def summarize(readings: Sequence[Reading]) -> SeriesSummary:
    """Summarise a series ordered from earliest to latest.

    Raises ValueError when the series is empty.
    """
    if not readings:
        raise ValueError("no readings to summarise")
    values = [reading.value for reading in readings]
    return SeriesSummary(
        current=readings[-1],
        minimum=min(readings, key=lambda reading: reading.value),
        maximum=max(readings, key=lambda reading: reading.value),
        average=sum(values) / len(values),
        trend=calculate_trend(values),
    )


def filter_by_date_range(
    sensors: Iterable[Mapping[str, Any]], start: date, end: date
) -> list[dict[str, Any]]:
    """Keep, per sensor, the valued entries dated within [start, end].

    Entries without a date count as dated 1970-01-01; sensors left with no
    entries are dropped.
    """
    filtered: list[dict[str, Any]] = []
    for sensor in sensors:
        kept = []
        for entry in sensor.get("values") or []:
            if not _has_value(entry):
                continue
            day = parse_reading_date(str(entry.get("date", DEFAULT_READING_DATE)))
            if day is not None and start <= day <= end:
                kept.append(entry)
        if kept:
            filtered.append({"id": sensor.get("id"), "values": kept})
    return filtered