# airquality

Tools for working with the readings of a public air-quality monitoring
network. The package:

- downloads the catalogue of monitoring stations and reduces it to a small
  local database of station id, city, province and coordinates;
- finds stations by city name (case-insensitive), or the station nearest to
  a latitude and longitude by great-circle (haversine) distance in kilometres;
- downloads the sensor list of a station and the readings of a sensor,
  keeping each station in `<station id>.json` in a data directory; new
  readings either replace the stored ones or are merged in, skipping dates
  already held;
- summarises a series of readings: current value, minimum and maximum with
  their dates, average, and a trend (`Rising`, `Falling`, `Stable`) from a
  least-squares slope;
- filters readings to a date range and draws them as a line graph image
  with grid, highlighted minimum and maximum, and a summary footer.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Command line

The package installs an `airquality` command:

```
airquality --help
```

All data files live in one directory, the current directory unless
`--dir DIR` is given before the command:

- `findAllmine.json` — the downloaded station catalogue;
- `database.json` — the reduced station database;
- `<station id>.json` — a station's sensors and readings.

Commands:

| Command | What it does |
| --- | --- |
| `init [--refresh]` | Downloads the catalogue if it is missing or empty (always with `--refresh`), builds `database.json` when needed, and prints the number of stations. |
| `search NAME [--lat LAT --lon LON]` | Prints `City (id)` for every station in the city. With no match it reports `City not found in database.` and exits with status 1, unless both coordinates are given, in which case it prints the nearest station. |
| `nearest LAT LON` | Prints the nearest station as `City (ID: id) - closest <km>`. |
| `sensors STATION_ID` | Prints `id: parameter name` for each sensor of the station, downloading the sensor list first if the station file is missing or empty. |
| `update STATION_ID` | Downloads the station's sensor list into its station file. |
| `download STATION_ID SENSOR_ID [--merge]` | Downloads a sensor's readings into the station file, replacing them or, with `--merge`, adding only new dates. |
| `graph STATION_ID SENSOR_ID [--start DATE] [--end DATE] [--output FILE] [--width W] [--height H] [--merge]` | Draws the sensor's readings, optionally limited to days from `--start` to `--end` (`YYYY-MM-DD`), prints the summary lines and writes the image (by default `graph_<station>_<sensor>.png` in the data directory, 1000×550 pixels). If the station file holds no readings yet, it downloads them and asks to run the command again. |

Errors such as a missing database, a failed download or invalid JSON are
printed to standard error and give exit status 1.

## Library use

```python
from airquality.analysis import calculate_trend, extract_readings, summarize
from airquality.stations import find_by_city, haversine, nearest_station
from airquality.store import DataStore
from airquality.plot import render_graph

calculate_trend([1.0, 2.0, 3.0])      # "Rising"
calculate_trend([5.0])                # "Not enough data"

store = DataStore("data")
store.ensure_database(False)          # download the catalogue only if missing
stations = store.load_database()
krakow = find_by_city(stations, "kraków")
station, km = nearest_station(stations, 50.06, 19.94)
```

`DataStore` takes an optional `fetch` callable that receives a URL and
returns the decoded JSON document; by default `airquality.fetch.fetch_json`
is used, which raises `airquality.fetch.ApiError` on network failures and
non-JSON responses.

Readings are kept in the form the network publishes them: each sensor is an
object with an `id` and a list of `values`, each holding a `date`
(`YYYY-MM-DD HH:MM:SS`) and a `value` that may be `null`. Entries without a
value are skipped when summarising, filtering and plotting, and the network's
newest-first order is reversed so series run oldest first.

```python
from datetime import date
from airquality.analysis import filter_by_date_range

sensors = [
    {"id": 1, "values": [
        {"date": "2024-01-02 01:00:00", "value": 12.5},
        {"date": "2024-01-02 00:00:00", "value": None},
        {"date": "2024-01-01 23:00:00", "value": 10.0},
    ]},
]
summary = summarize(extract_readings(sensors))
for line in summary.labels():
    print(line)

january_2nd = filter_by_date_range(sensors, date(2024, 1, 2), date(2024, 1, 2))
render_graph(sensors, "graph.png", 1000, 550)
```

`airquality.plot.compute_geometry` returns the pixel layout of a graph
(grid lines, points, labels, minimum and maximum positions) without
drawing it.

## What it does not do

There is no interactive window. Searching, choosing a station and a sensor,
and picking a date range are done through command options, and graphs are
written to image files rather than shown on screen.