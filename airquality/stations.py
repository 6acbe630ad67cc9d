"""Monitoring-station catalogue: building, searching and persisting it."""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Mapping, Sequence

EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True)
class Station:
    """A measuring station with its location."""

    id: int
    province_name: str
    city_name: str
    lat: float
    lon: float

    def to_dict(self) -> dict[str, Any]:
        """Return the station as stored in the local database file."""
        return {
            "id": self.id,
            "provinceName": self.province_name,
            "cityName": self.city_name,
            "gegrLat": self.lat,
            "geogrLon": self.lon,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Station:
        """Build a station from a local database entry."""
        return cls(
            id=int(data["id"]),
            province_name=str(data["provinceName"]),
            city_name=str(data["cityName"]),
            lat=float(data["gegrLat"]),
            lon=float(data["geogrLon"]),
        )


def build_database(raw_stations: Iterable[Mapping[str, Any]]) -> list[Station]:
    """Reduce the service's station list to the local database form.

    Entries without a city are skipped. Coordinates arrive as text and are
    converted to numbers; a malformed coordinate raises ValueError.
    """
    stations: list[Station] = []
    for raw in raw_stations:
        if "city" not in raw:
            continue
        city = raw["city"]
        stations.append(
            Station(
                id=int(raw["id"]),
                province_name=str(city["commune"]["provinceName"]),
                city_name=str(city["name"]),
                lat=float(str(raw["gegrLat"]).strip()),
                lon=float(str(raw["gegrLon"]).strip()),
            )
        )
    return stations


def find_by_city(stations: Iterable[Station], name: str) -> list[Station]:
    """Return the stations whose city name equals name, ignoring case."""
    wanted = name.casefold()
    return [station for station in stations if station.city_name.casefold() == wanted]


def haversine(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in kilometres between two points given in degrees."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def nearest_station(
    stations: Iterable[Station], lat: float, lon: float
) -> tuple[Station, float]:
    """Return the station closest to (lat, lon) and its distance in kilometres.

    On equal distances the earlier station wins. Raises ValueError when there
    are no stations.
    """
    best: Station | None = None
    best_distance = math.inf
    for station in stations:
        distance = haversine(lat, lon, station.lat, station.lon)
        if distance < best_distance:
            best, best_distance = station, distance
    if best is None:
        raise ValueError("no stations to search")
    return best, best_distance


def load_database(path: str | Path) -> list[Station]:
    """Read the local station database."""
    with open(path, encoding="utf-8") as handle:
        data = json.load(handle)
    return [Station.from_dict(entry) for entry in data or []]


def save_database(stations: Sequence[Station], path: str | Path) -> None:
    """Write the local station database as indented JSON."""
    with open(path, "w", encoding="utf-8") as handle:
        json.dump(
            [station.to_dict() for station in stations],
            handle,
            indent=4,
            sort_keys=True,
            ensure_ascii=False,
        )


def format_match(station: Station) -> str:
    """List entry for a station found by city name."""
    return f"{station.city_name} ({station.id})"


def format_nearest(station: Station, distance: float) -> str:
    """List entry for the station found nearest to given coordinates."""
    return f"{station.city_name} (ID: {station.id}) - closest {distance:f}"