"""Local JSON files that cache the station catalogue and per-station sensor data."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping

from airquality import stations as _stations
from airquality.fetch import (
    Fetcher,
    fetch_and_save,
    fetch_json,
    merge_sensor_values,
    replace_sensor_values,
)
from airquality.stations import Station

API_BASE = "https://api.gios.gov.pl/pjp-api/rest"
STATIONS_URL = f"{API_BASE}/station/findAll"
SENSORS_URL = f"{API_BASE}/station/sensors/{{station_id}}"
SENSOR_DATA_URL = f"{API_BASE}/data/getData/{{sensor_id}}"

CATALOGUE_FILE = "findAllmine.json"
DATABASE_FILE = "database.json"


def _is_missing_or_empty(path: Path) -> bool:
    return not path.is_file() or path.stat().st_size == 0


def _write_json(data: Any, path: Path) -> None:
    with open(path, "w", encoding="utf-8") as handle:
        json.dump(data, handle, indent=4, sort_keys=True, ensure_ascii=False)


class DataStore:
    """Keeps the downloaded catalogue, the station database and station files in one directory."""

    def __init__(self, directory: str | Path = ".", fetch: Fetcher | None = None) -> None:
        self.directory = Path(directory)
        self.fetch: Fetcher = fetch if fetch is not None else fetch_json
        self.catalogue_path = self.directory / CATALOGUE_FILE
        self.database_path = self.directory / DATABASE_FILE

    def station_file(self, station_id: int) -> Path:
        """Path of the file holding a station's sensors and readings."""
        return self.directory / f"{int(station_id)}.json"

    def refresh_catalogue(self) -> Any:
        """Download the full station list and store it as the catalogue file."""
        return fetch_and_save(STATIONS_URL, self.catalogue_path, self.fetch)

    def ensure_database(self, refresh: bool = False) -> list[Station]:
        """Make sure the catalogue and the station database exist and return the stations.

        The catalogue is downloaded when it is missing or empty, or when refresh
        is set; the database is rebuilt from it whenever the catalogue was
        downloaded or the database is missing or empty.
        """
        downloaded = False
        if refresh or _is_missing_or_empty(self.catalogue_path):
            self.refresh_catalogue()
            downloaded = True

        if downloaded or _is_missing_or_empty(self.database_path):
            with open(self.catalogue_path, encoding="utf-8") as handle:
                raw = json.load(handle)
            database = _stations.build_database(raw or [])
            _stations.save_database(database, self.database_path)
            return database
        return self.load_database()

    def load_database(self) -> list[Station]:
        """Read the station database; raises FileNotFoundError when it does not exist."""
        return _stations.load_database(self.database_path)

    def update_station(self, station_id: int) -> Any:
        """Download the sensor list of a station into its station file."""
        url = SENSORS_URL.format(station_id=int(station_id))
        return fetch_and_save(url, self.station_file(station_id), self.fetch)

    def load_station(self, station_id: int) -> list[dict[str, Any]] | None:
        """Read a station file; None when it is missing or empty."""
        path = self.station_file(station_id)
        if _is_missing_or_empty(path):
            return None
        with open(path, encoding="utf-8") as handle:
            data = json.load(handle)
        return list(data or [])

    def update_sensor(
        self, station_id: int, sensor_id: int, merge: bool = False
    ) -> list[dict[str, Any]]:
        """Download a sensor's readings into the station file and return its new content.

        With merge set, readings are added to those already stored, skipping
        dates already present; otherwise the sensor's readings are replaced.
        """
        document = self.fetch(SENSOR_DATA_URL.format(sensor_id=int(sensor_id)))
        new_values = document.get("values") if isinstance(document, Mapping) else None
        existing = self.load_station(station_id) or []
        combine = merge_sensor_values if merge else replace_sensor_values
        updated = combine(existing, int(sensor_id), new_values)
        _write_json(updated, self.station_file(station_id))
        return updated

    def sensor_readings(self, station_id: int, sensor_id: int) -> list[dict[str, Any]]:
        """Return the stored entries of a sensor that hold readings.

        Raises FileNotFoundError when the station file is missing or empty.
        """
        data = self.load_station(station_id)
        if data is None:
            raise FileNotFoundError(
                f"station data for {station_id} not found; fetch it first"
            )
        return [
            sensor
            for sensor in data
            if isinstance(sensor, Mapping)
            and sensor.get("id") == sensor_id
            and "values" in sensor
        ]