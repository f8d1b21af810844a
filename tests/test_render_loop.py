from __future__ import annotations

import time
from unittest.mock import MagicMock

from departure_matrix.data.models import Departure, Timetable, Trip
from departure_matrix.data.poller import TimetablePoller
from departure_matrix.data.provider_client import TimetableClientError
from departure_matrix.display.canvas import CanvasDevice, PillowFont
from departure_matrix.rendering.layout import COLOR_BACKGROUND, COLOR_DEFAULT, FONT_LARGE, FONT_SMALL
from departure_matrix.rendering.render_loop import RenderLoop
from departure_matrix.state import DisplayMode, SharedState

TIMETABLE = Timetable(
    trips=(
        Trip(
            line="U1",
            direction="Airport",
            foot_minutes_to_station=3,
            departures=(Departure(countdown=2, real_time=True), Departure(countdown=9)),
        ),
    )
)


class FakeFont:
    def __init__(self, baseline: int) -> None:
        self._baseline = baseline

    def baseline(self) -> int:
        return self._baseline


FONTS = {FONT_LARGE: FakeFont(9), FONT_SMALL: FakeFont(7)}


def test_tick_draws_in_order_and_presents() -> None:
    device = MagicMock()
    state = SharedState(brightness=55)
    state.timetable.publish(TIMETABLE)
    loop = RenderLoop(device, state, FONTS, frame_interval_seconds=0)

    instructions = loop.tick()

    names = [call[0] for call in device.method_calls]
    assert names == ["clear", "set_brightness", "draw_text", "draw_text", "present"]
    device.clear.assert_called_once_with(*COLOR_BACKGROUND)
    device.set_brightness.assert_called_once_with(55)
    first_draw = device.draw_text.call_args_list[0]
    assert first_draw.args == (0, 9, FONTS[FONT_LARGE], COLOR_DEFAULT, None, instructions[0].text, 0)
    assert device.draw_text.call_args_list[1].args[2] is FONTS[FONT_SMALL]
    assert loop.frames_presented == 1


def test_tick_picks_up_latest_controls() -> None:
    device = MagicMock()
    state = SharedState()
    loop = RenderLoop(device, state, FONTS, frame_interval_seconds=0)

    loop.tick()
    state.set_brightness(20)
    state.set_mode(int(DisplayMode.FREE_TEXT))
    state.set_text("Hello")
    instructions = loop.tick()

    assert device.set_brightness.call_args.args == (20,)
    assert [i.text for i in instructions] == ["Hello"]


def test_tick_error_does_not_stop_loop() -> None:
    device = MagicMock()
    device.present.side_effect = [RuntimeError("bus error")] + [None] * 1000
    loop = RenderLoop(device, SharedState(), FONTS, frame_interval_seconds=0.01)

    loop.start()
    deadline = time.time() + 2
    while time.time() < deadline and loop.frames_presented < 3:
        time.sleep(0.01)
    loop.stop()
    loop.join(timeout=2)

    assert loop.frames_presented >= 3


def test_poller_failures_never_block_rendering() -> None:
    client = MagicMock()

    def slow_failure():
        time.sleep(0.05)
        raise TimetableClientError("unreachable")

    client.fetch_timetable.side_effect = slow_failure
    state = SharedState()
    state.timetable.publish(TIMETABLE)
    poller = TimetablePoller(client=client, state=state, poll_interval_seconds=0.01)
    device = MagicMock()
    loop = RenderLoop(device, state, FONTS, frame_interval_seconds=0.005)

    poller.start()
    loop.start()
    deadline = time.time() + 2
    while time.time() < deadline and (loop.frames_presented < 20 or client.fetch_timetable.call_count < 3):
        time.sleep(0.01)
    loop.stop()
    poller.stop()
    loop.join(timeout=2)
    poller.join(timeout=2)

    assert loop.frames_presented >= 20
    assert client.fetch_timetable.call_count >= 3
    last_draw = device.draw_text.call_args_list[-1]
    assert last_draw.args[5] == "9".rjust(25)
    assert state.timetable.read() is TIMETABLE


def test_canvas_device_end_to_end() -> None:
    frames = []
    device = CanvasDevice(128, 64, [frames.append])
    fonts = {FONT_LARGE: PillowFont.load(None, 12), FONT_SMALL: PillowFont.load(None, 8)}
    state = SharedState(brightness=100)
    state.timetable.publish(TIMETABLE)
    loop = RenderLoop(device, state, fonts, frame_interval_seconds=0)

    loop.tick()

    assert len(frames) == 1
    assert frames[0].size == (128, 64)
    assert frames[0].getbbox() is not None
    assert device.visible is not None
