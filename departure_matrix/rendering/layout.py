"""Layout engine: maps controls and the latest timetable to text lines."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from departure_matrix.data.models import Departure, Timetable, Trip
from departure_matrix.display.base import Color, Font
from departure_matrix.state import ControlsView, DisplayMode

FONT_LARGE = "large"
FONT_SMALL = "small"

COLOR_DEFAULT: Color = (100, 0, 255)
COLOR_LATE: Color = (255, 0, 0)  # reserved, nothing selects it yet
COLOR_BACKGROUND: Color = (0, 0, 0)

LINE_GUTTER = 4
LINE_WIDTH = 3
DIRECTION_WIDTH = 13
COUNTDOWN_WIDTH = 3
FOLLOWING_WIDTH = 25
FOLLOWING_COUNT = 3

NO_TIMETABLE_TEXT = "No timetable available"
NO_DEPARTURES_TEXT = "N/A"
FREE_TEXT_HELP = (
    "No text set.",
    "Send text with",
    'POST /text {"text":..}',
    "Show it with",
    'POST /mode {"mode":1}',
)


@dataclass(frozen=True)
class RenderInstruction:
    """One line of text to draw, baseline at ``y``."""

    y: int
    font: str
    color: Color
    text: str


def indicator(departure: Departure) -> str:
    """Single glyph for a departure: traffic jam, then late, then real time."""
    if departure.traffic_jam:
        return "t"
    if departure.late:
        return "."
    if departure.real_time:
        return '"'
    return ""


def format_countdown(departure: Departure) -> str:
    countdown = "*" if departure.countdown == 0 else str(departure.countdown)
    return indicator(departure) + countdown


def format_trip(trip: Trip) -> str:
    """Primary line: line, direction and the soonest departure."""
    if not trip.departures:
        soonest = NO_DEPARTURES_TEXT
    else:
        soonest = format_countdown(trip.departures[0])
    return (
        f"{trip.line:<{LINE_WIDTH}} {trip.direction:<{DIRECTION_WIDTH}} "
        f"{soonest:>{COUNTDOWN_WIDTH}}"
    )


def format_following(trip: Trip) -> str | None:
    """Secondary line listing up to three departures after the soonest one."""
    if len(trip.departures) <= 1:
        return None
    following = trip.departures[1 : 1 + FOLLOWING_COUNT]
    joined = ", ".join(indicator(departure) + str(departure.countdown) for departure in following)
    return f"{joined:>{FOLLOWING_WIDTH}}"


def _lines_for_timetable(timetable: Timetable | None) -> list[tuple[str, str]]:
    if timetable is None:
        return [(FONT_LARGE, NO_TIMETABLE_TEXT)]
    lines: list[tuple[str, str]] = []
    for trip in timetable.trips:
        lines.append((FONT_LARGE, format_trip(trip)))
        following = format_following(trip)
        if following is not None:
            lines.append((FONT_SMALL, following))
    return lines


def _lines_for_free_text(text: str | None) -> list[tuple[str, str]]:
    if text is None:
        return [(FONT_SMALL, line) for line in FREE_TEXT_HELP]
    return [(FONT_LARGE, text)]


def layout(
    controls: ControlsView,
    timetable: Timetable | None,
    fonts: Mapping[str, Font],
) -> tuple[RenderInstruction, ...]:
    """Lay out one frame.

    The first baseline sits at the large font's baseline; every following
    line starts one baseline of the previous line's font plus the gutter lower.
    """
    if controls.mode == DisplayMode.FREE_TEXT:
        lines = _lines_for_free_text(controls.text)
    else:
        lines = _lines_for_timetable(timetable)

    instructions = []
    y = fonts[FONT_LARGE].baseline()
    for font, text in lines:
        instructions.append(RenderInstruction(y=y, font=font, color=COLOR_DEFAULT, text=text))
        y += fonts[font].baseline() + LINE_GUTTER
    return tuple(instructions)


__all__ = [
    "COLOR_BACKGROUND",
    "COLOR_DEFAULT",
    "COLOR_LATE",
    "FONT_LARGE",
    "FONT_SMALL",
    "RenderInstruction",
    "format_following",
    "format_trip",
    "indicator",
    "layout",
]
