import json

import pytest

from airquality.fetch import ApiError
from airquality.stations import Station
from airquality.store import (
    CATALOGUE_FILE,
    DATABASE_FILE,
    SENSOR_DATA_URL,
    SENSORS_URL,
    STATIONS_URL,
    DataStore,
)

RAW_STATIONS = [
    {
        "id": 114,
        "stationName": "Alpha",
        "gegrLat": "51.115933",
        "gegrLon": "17.141125",
        "city": {"id": 1, "name": "Wroclaw", "commune": {"provinceName": "DOLNOSLASKIE"}},
    },
    {
        "id": 400,
        "stationName": "Beta",
        "gegrLat": "52.2",
        "gegrLon": "21.0",
        "city": {"id": 2, "name": "Warszawa", "commune": {"provinceName": "MAZOWIECKIE"}},
    },
    {"id": 999, "stationName": "No city", "gegrLat": "50.0", "gegrLon": "19.0"},
]

SENSORS = [
    {"id": 92, "stationId": 114, "param": {"paramName": "pył zawieszony PM10"}},
    {"id": 88, "stationId": 114, "param": {"paramName": "dwutlenek azotu"}},
]


class FakeFetch:
    def __init__(self, responses):
        self.responses = responses
        self.calls = []

    def __call__(self, url):
        self.calls.append(url)
        response = self.responses[url]
        if isinstance(response, Exception):
            raise response
        return response


def sensor_url(sensor_id):
    return SENSOR_DATA_URL.format(sensor_id=sensor_id)


def test_station_file_is_named_by_id(tmp_path):
    store = DataStore(tmp_path, FakeFetch({}))
    assert store.station_file(114) == tmp_path / "114.json"


def test_ensure_database_downloads_and_builds(tmp_path):
    fetch = FakeFetch({STATIONS_URL: RAW_STATIONS})
    store = DataStore(tmp_path, fetch)
    stations = store.ensure_database()
    assert fetch.calls == [STATIONS_URL]
    assert [s.id for s in stations] == [114, 400]
    assert stations[0].city_name == "Wroclaw"
    assert stations[0].lat == pytest.approx(51.115933)
    assert (tmp_path / CATALOGUE_FILE).is_file()
    assert store.load_database() == stations


def test_ensure_database_reuses_existing_files(tmp_path):
    fetch = FakeFetch({STATIONS_URL: RAW_STATIONS})
    store = DataStore(tmp_path, fetch)
    first = store.ensure_database()
    second = store.ensure_database()
    assert fetch.calls == [STATIONS_URL]
    assert second == first


def test_ensure_database_rebuilds_missing_database(tmp_path):
    fetch = FakeFetch({STATIONS_URL: RAW_STATIONS})
    store = DataStore(tmp_path, fetch)
    store.ensure_database()
    (tmp_path / DATABASE_FILE).unlink()
    stations = store.ensure_database()
    assert len(fetch.calls) == 1
    assert [s.id for s in stations] == [114, 400]


def test_ensure_database_refresh_downloads_again(tmp_path):
    fetch = FakeFetch({STATIONS_URL: RAW_STATIONS})
    store = DataStore(tmp_path, fetch)
    store.ensure_database()
    fetch.responses[STATIONS_URL] = RAW_STATIONS[1:]
    stations = store.ensure_database(refresh=True)
    assert len(fetch.calls) == 2
    assert [s.id for s in stations] == [400]
    assert [s.id for s in store.load_database()] == [400]


def test_ensure_database_downloads_when_catalogue_empty(tmp_path):
    (tmp_path / CATALOGUE_FILE).write_text("", encoding="utf-8")
    fetch = FakeFetch({STATIONS_URL: RAW_STATIONS})
    store = DataStore(tmp_path, fetch)
    store.ensure_database()
    assert fetch.calls == [STATIONS_URL]


def test_load_database_missing_raises(tmp_path):
    store = DataStore(tmp_path, FakeFetch({}))
    with pytest.raises(FileNotFoundError):
        store.load_database()


def test_refresh_catalogue_failure_leaves_no_file(tmp_path):
    fetch = FakeFetch({STATIONS_URL: ApiError("down")})
    store = DataStore(tmp_path, fetch)
    with pytest.raises(ApiError):
        store.refresh_catalogue()
    assert not (tmp_path / CATALOGUE_FILE).exists()


def test_update_and_load_station(tmp_path):
    url = SENSORS_URL.format(station_id=114)
    fetch = FakeFetch({url: SENSORS})
    store = DataStore(tmp_path, fetch)
    assert store.load_station(114) is None
    store.update_station(114)
    assert fetch.calls == [url]
    assert store.load_station(114) == SENSORS


def test_load_station_empty_file_is_none(tmp_path):
    store = DataStore(tmp_path, FakeFetch({}))
    store.station_file(5).write_text("", encoding="utf-8")
    assert store.load_station(5) is None


def test_update_sensor_replaces_values(tmp_path):
    old = [{"date": "2024-01-01 10:00:00", "value": 1.0}]
    new = [{"date": "2024-01-02 10:00:00", "value": 2.0}]
    store = DataStore(tmp_path, FakeFetch({sensor_url(92): {"key": "PM10", "values": new}}))
    store.station_file(114).write_text(
        json.dumps([{"id": 92, "values": old}, {"id": 88}]), encoding="utf-8"
    )
    updated = store.update_sensor(114, 92)
    assert updated[0] == {"id": 92, "values": new}
    assert updated[1] == {"id": 88}
    assert store.load_station(114) == updated


def test_update_sensor_merges_values(tmp_path):
    old = [{"date": "2024-01-01 10:00:00", "value": 1.0}]
    new = [
        {"date": "2024-01-01 10:00:00", "value": 9.0},
        {"date": "2024-01-02 10:00:00", "value": 2.0},
    ]
    store = DataStore(tmp_path, FakeFetch({sensor_url(92): {"values": new}}))
    store.station_file(114).write_text(
        json.dumps([{"id": 92, "values": old}]), encoding="utf-8"
    )
    updated = store.update_sensor(114, 92, merge=True)
    assert updated == [{"id": 92, "values": old + new[1:]}]


def test_update_sensor_creates_station_file(tmp_path):
    new = [{"date": "2024-03-01 00:00:00", "value": None}]
    store = DataStore(tmp_path, FakeFetch({sensor_url(7): {"values": new}}))
    updated = store.update_sensor(3, 7)
    assert updated == [{"id": 7, "values": new}]
    assert store.load_station(3) == updated


def test_update_sensor_failure_keeps_file(tmp_path):
    store = DataStore(tmp_path, FakeFetch({sensor_url(92): ApiError("bad json")}))
    original = [{"id": 92, "values": []}]
    store.station_file(114).write_text(json.dumps(original), encoding="utf-8")
    with pytest.raises(ApiError):
        store.update_sensor(114, 92)
    assert store.load_station(114) == original


def test_sensor_readings_selects_sensor_with_values(tmp_path):
    values = [{"date": "2024-01-01 10:00:00", "value": 1.0}]
    store = DataStore(tmp_path, FakeFetch({}))
    store.station_file(114).write_text(
        json.dumps([{"id": 92, "param": {}}, {"id": 92, "values": values}, {"id": 88, "values": []}]),
        encoding="utf-8",
    )
    assert store.sensor_readings(114, 92) == [{"id": 92, "values": values}]
    assert store.sensor_readings(114, 1) == []


def test_sensor_readings_missing_station_raises(tmp_path):
    store = DataStore(tmp_path, FakeFetch({}))
    with pytest.raises(FileNotFoundError):
        store.sensor_readings(114, 92)


def test_database_entries_are_stations(tmp_path):
    store = DataStore(tmp_path, FakeFetch({STATIONS_URL: RAW_STATIONS}))
    stations = store.ensure_database()
    assert stations[1] == Station(
        id=400, province_name="MAZOWIECKIE", city_name="Warszawa", lat=52.2, lon=21.0
    )