"""Command-line front end: search stations, fetch sensor data and draw graphs."""

from __future__ import annotations

import argparse
import sys
from datetime import date
from pathlib import Path
from typing import Any, Callable, Sequence

from airquality.analysis import filter_by_date_range
from airquality.fetch import ApiError
from airquality.plot import DEFAULT_HEIGHT, DEFAULT_WIDTH, render_graph
from airquality.stations import (
    Station,
    find_by_city,
    format_match,
    format_nearest,
    nearest_station,
)
from airquality.store import DataStore


class _CliError(Exception):
    """A failure reported to the user with a plain message."""


def _iso_date(text: str) -> date:
    try:
        return date.fromisoformat(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid date {text!r}, expected YYYY-MM-DD") from exc


def _load_stations(store: DataStore) -> list[Station]:
    try:
        return store.load_database()
    except FileNotFoundError as exc:
        raise _CliError("Database file not found!") from exc


def _cmd_init(store: DataStore, args: argparse.Namespace) -> int:
    stations = store.ensure_database(refresh=args.refresh)
    print(f"{len(stations)} stations in database")
    return 0


def _cmd_search(store: DataStore, args: argparse.Namespace) -> int:
    stations = _load_stations(store)
    matches = find_by_city(stations, args.name)
    for station in matches:
        print(format_match(station))
    if matches:
        return 0

    print("City not found in database.", file=sys.stderr)
    if args.lat is None and args.lon is None:
        return 1
    if args.lat is None or args.lon is None:
        raise _CliError("Invalid coordinates input!")
    station, distance = nearest_station(stations, args.lat, args.lon)
    print(format_nearest(station, distance))
    return 0


def _cmd_nearest(store: DataStore, args: argparse.Namespace) -> int:
    stations = _load_stations(store)
    station, distance = nearest_station(stations, args.lat, args.lon)
    print(format_nearest(station, distance))
    return 0


def _cmd_sensors(store: DataStore, args: argparse.Namespace) -> int:
    data = store.load_station(args.station_id)
    if data is None:
        fetched = store.update_station(args.station_id)
        data = list(fetched or [])
    for sensor in data:
        if not isinstance(sensor, dict):
            continue
        param = sensor.get("param")
        if not isinstance(param, dict) or "paramName" not in param:
            continue
        print(f"{sensor.get('id')}: {param['paramName']}")
    return 0


def _cmd_update(store: DataStore, args: argparse.Namespace) -> int:
    store.update_station(args.station_id)
    print(f"Station {args.station_id} data saved to {store.station_file(args.station_id)}")
    return 0


def _count_values(data: Sequence[Any], sensor_id: int) -> int:
    for sensor in data:
        if isinstance(sensor, dict) and sensor.get("id") == sensor_id:
            return len(sensor.get("values") or [])
    return 0


def _cmd_download(store: DataStore, args: argparse.Namespace) -> int:
    updated = store.update_sensor(args.station_id, args.sensor_id, merge=args.merge)
    count = _count_values(updated, args.sensor_id)
    print(f"Sensor {args.sensor_id}: {count} readings stored")
    return 0


def _cmd_graph(store: DataStore, args: argparse.Namespace) -> int:
    data = store.load_station(args.station_id)
    if data is None:
        raise _CliError("Station data not found! Please fetch data first.")

    if not any(isinstance(entry, dict) and "values" in entry for entry in data):
        store.update_sensor(args.station_id, args.sensor_id, merge=args.merge)
        print("Data downloaded. Run the command again to view the graph.")
        return 0

    sensors = store.sensor_readings(args.station_id, args.sensor_id)
    if args.start is not None or args.end is not None:
        start = args.start if args.start is not None else date.min
        end = args.end if args.end is not None else date.max
        sensors = filter_by_date_range(sensors, start, end)

    output = (
        Path(args.output)
        if args.output is not None
        else store.directory / f"graph_{args.station_id}_{args.sensor_id}.png"
    )
    summary = render_graph(sensors, output, args.width, args.height)
    if summary is None:
        print("No readings to plot.")
    else:
        for line in summary.labels():
            print(line)
    print(f"Graph written to {output}")
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="airquality",
        description="Browse air-quality measuring stations and their sensor readings.",
    )
    parser.add_argument(
        "--dir",
        dest="directory",
        default=".",
        help="directory holding the downloaded data files (default: current directory)",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    init = commands.add_parser("init", help="download the station list and build the database")
    init.add_argument("--refresh", action="store_true", help="download the station list again")
    init.set_defaults(handler=_cmd_init)

    search = commands.add_parser("search", help="find stations by city name")
    search.add_argument("name")
    search.add_argument("--lat", type=float, help="latitude to fall back on when no city matches")
    search.add_argument("--lon", type=float, help="longitude to fall back on when no city matches")
    search.set_defaults(handler=_cmd_search)

    nearest = commands.add_parser("nearest", help="find the station closest to coordinates")
    nearest.add_argument("lat", type=float)
    nearest.add_argument("lon", type=float)
    nearest.set_defaults(handler=_cmd_nearest)

    sensors = commands.add_parser("sensors", help="list the sensors of a station")
    sensors.add_argument("station_id", type=int)
    sensors.set_defaults(handler=_cmd_sensors)

    update = commands.add_parser("update", help="download the sensor list of a station")
    update.add_argument("station_id", type=int)
    update.set_defaults(handler=_cmd_update)

    download = commands.add_parser("download", help="download the readings of a sensor")
    download.add_argument("station_id", type=int)
    download.add_argument("sensor_id", type=int)
    download.add_argument("--merge", action="store_true", help="keep readings already stored")
    download.set_defaults(handler=_cmd_download)

    graph = commands.add_parser("graph", help="draw the readings of a sensor")
    graph.add_argument("station_id", type=int)
    graph.add_argument("sensor_id", type=int)
    graph.add_argument("--start", type=_iso_date, help="first day to include (YYYY-MM-DD)")
    graph.add_argument("--end", type=_iso_date, help="last day to include (YYYY-MM-DD)")
    graph.add_argument("--output", help="image file to write")
    graph.add_argument("--width", type=int, default=DEFAULT_WIDTH)
    graph.add_argument("--height", type=int, default=DEFAULT_HEIGHT)
    graph.add_argument("--merge", action="store_true", help="merge when data must be downloaded")
    graph.set_defaults(handler=_cmd_graph)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line; returns the process exit status."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    store = DataStore(args.directory)
    handler: Callable[[DataStore, argparse.Namespace], int] = args.handler
    try:
        return handler(store, args)
    except _CliError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except (ApiError, ValueError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())