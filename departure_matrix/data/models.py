"""Timetable data structures and provider payload parsing."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


class TimetableFormatError(ValueError):
    """Raised when a timetable payload does not match the provider schema."""


@dataclass(frozen=True)
class Departure:
    """Single upcoming departure of a trip."""

    countdown: int
    real_time: bool = False
    late: bool = False
    traffic_jam: bool = False
    direction: str | None = None


@dataclass(frozen=True)
class Trip:
    """Line and direction with its upcoming departures, soonest first."""

    line: str
    direction: str
    foot_minutes_to_station: int
    departures: tuple[Departure, ...] = ()


@dataclass(frozen=True)
class Timetable:
    """Immutable snapshot of one successful provider fetch."""

    trips: tuple[Trip, ...]
    message: str | None = None


def _field(mapping: dict[str, Any], key: str, kind: type, context: str) -> Any:
    if key not in mapping:
        raise TimetableFormatError(f"Missing required key '{key}' in {context}")
    value = mapping[key]
    # bool is an int subclass; the schema keeps them apart
    if kind is int and isinstance(value, bool):
        raise TimetableFormatError(f"'{key}' in {context} must be an integer")
    if not isinstance(value, kind):
        raise TimetableFormatError(f"'{key}' in {context} must be of type {kind.__name__}")
    return value


def _optional_str(mapping: dict[str, Any], key: str, context: str) -> str | None:
    value = mapping.get(key)
    if value is not None and not isinstance(value, str):
        raise TimetableFormatError(f"'{key}' in {context} must be a string")
    return value


def _require_mapping(value: Any, context: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise TimetableFormatError(f"{context} must be an object")
    return value


def parse_departure(payload: Any) -> Departure:
    data = _require_mapping(payload, "departure")
    return Departure(
        direction=_optional_str(data, "direction", "departure"),
        countdown=_field(data, "countdown", int, "departure"),
        real_time=_field(data, "real_time", bool, "departure"),
        late=_field(data, "late", bool, "departure"),
        traffic_jam=_field(data, "traffic_jam", bool, "departure"),
    )


def parse_trip(payload: Any) -> Trip:
    data = _require_mapping(payload, "trip")
    departures = _field(data, "departures", list, "trip")
    return Trip(
        line=_field(data, "line", str, "trip"),
        direction=_field(data, "direction", str, "trip"),
        foot_minutes_to_station=_field(data, "foot_minutes_to_station", int, "trip"),
        departures=tuple(parse_departure(item) for item in departures),
    )


def parse_timetable(payload: Any) -> Timetable:
    """Build a Timetable from a decoded provider JSON document."""
    data = _require_mapping(payload, "timetable")
    trips = _field(data, "trips", list, "timetable")
    return Timetable(
        trips=tuple(parse_trip(item) for item in trips),
        message=_optional_str(data, "message", "timetable"),
    )


__all__ = [
    "Departure",
    "Timetable",
    "TimetableFormatError",
    "Trip",
    "parse_departure",
    "parse_timetable",
    "parse_trip",
]
