"""Timetable data: model, provider client and poller."""

from departure_matrix.data.models import Departure, Timetable, TimetableFormatError, Trip, parse_timetable
from departure_matrix.data.provider_client import TimetableClient, TimetableClientError

__all__ = [
    "Departure",
    "Timetable",
    "TimetableClient",
    "TimetableClientError",
    "TimetableFormatError",
    "Trip",
    "parse_timetable",
]
