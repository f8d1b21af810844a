"""Render a preview frame from a saved timetable JSON document."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from departure_matrix.data.models import parse_timetable
from departure_matrix.display.canvas import CanvasDevice
from departure_matrix.rendering.emulator import FrameFile
from departure_matrix.rendering.layout import FONT_LARGE, FONT_SMALL
from departure_matrix.rendering.render_loop import RenderLoop
from departure_matrix.state import DisplayMode, SharedState


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("path", help="Timetable JSON as served by GET /timetable")
    parser.add_argument("--output", default="emulator_output/preview.png")
    parser.add_argument("--width", type=int, default=128)
    parser.add_argument("--height", type=int, default=64)
    parser.add_argument("--font-small", default=None)
    parser.add_argument("--font-large", default=None)
    parser.add_argument("--brightness", type=int, default=100)
    args = parser.parse_args()

    with open(args.path, "r", encoding="utf-8") as handle:
        timetable = parse_timetable(json.load(handle))

    state = SharedState(brightness=args.brightness)
    state.mode.publish(DisplayMode.DEPARTURES)
    state.timetable.publish(timetable)

    device = CanvasDevice(args.width, args.height, [FrameFile(args.output)])
    fonts = {
        FONT_SMALL: device.load_font(args.font_small, 8),
        FONT_LARGE: device.load_font(args.font_large, 12),
    }
    for instruction in RenderLoop(device, state, fonts).tick():
        print(instruction.y, instruction.font, repr(instruction.text), flush=True)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
