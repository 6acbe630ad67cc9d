"""Downloading JSON documents from the air-quality service and merging sensor data."""

from __future__ import annotations

import json
import urllib.error
import urllib.request
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping

DEFAULT_TIMEOUT = 30.0

Fetcher = Callable[[str], Any]


class ApiError(Exception):
    """Raised when a document cannot be downloaded or is not valid JSON."""


def fetch_json(url: str, timeout: float = DEFAULT_TIMEOUT) -> Any:
    """Download url and return the decoded JSON document.

    Raises ApiError on network failures and on responses that are not JSON.
    """
    try:
        with urllib.request.urlopen(url, timeout=timeout) as response:
            body = response.read()
    except (urllib.error.URLError, OSError, ValueError) as exc:
        raise ApiError(f"request to {url} failed: {exc}") from exc
    try:
        return json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ApiError(f"JSON parsing error for {url}: {exc}") from exc


def fetch_and_save(url: str, path: str | Path, fetch: Fetcher | None = None) -> Any:
    """Download the JSON document at url, write it indented to path and return it.

    The file is left untouched when the download or parsing fails.
    """
    getter = fetch if fetch is not None else fetch_json
    data = getter(url)
    with open(path, "w", encoding="utf-8") as handle:
        json.dump(data, handle, indent=4, sort_keys=True, ensure_ascii=False)
    return data


def _copy_sensors(station_data: Iterable[Mapping[str, Any]] | None) -> list[dict[str, Any]]:
    return [dict(sensor) for sensor in station_data or []]


def merge_sensor_values(
    station_data: Iterable[Mapping[str, Any]] | None,
    sensor_id: int,
    new_values: Iterable[Mapping[str, Any]] | None,
) -> list[dict[str, Any]]:
    """Add readings to a sensor's history, skipping dates it already holds.

    Only the first sensor with a matching id is extended. When no sensor
    matches, a new entry holding all the new readings is appended. The input
    is not modified.
    """
    sensors = _copy_sensors(station_data)
    incoming = list(new_values or [])
    for sensor in sensors:
        if sensor.get("id") != sensor_id:
            continue
        values = list(sensor.get("values") or [])
        known_dates = {str(value.get("date")) for value in values}
        for value in incoming:
            day = str(value.get("date"))
            if day not in known_dates:
                values.append(value)
                known_dates.add(day)
        sensor["values"] = values
        return sensors
    sensors.append({"id": sensor_id, "values": incoming})
    return sensors


def replace_sensor_values(
    station_data: Iterable[Mapping[str, Any]] | None,
    sensor_id: int,
    new_values: Iterable[Mapping[str, Any]] | None,
) -> list[dict[str, Any]]:
    """Replace a sensor's readings with new ones.

    Only the first sensor with a matching id is changed. When no sensor
    matches, a new entry is appended. The input is not modified.
    """
    sensors = _copy_sensors(station_data)
    incoming = list(new_values or [])
    for sensor in sensors:
        if sensor.get("id") == sensor_id:
            sensor["values"] = incoming
            return sensors
    sensors.append({"id": sensor_id, "values": incoming})
    return sensors