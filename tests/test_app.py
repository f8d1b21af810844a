from __future__ import annotations

from dataclasses import replace
import logging
import threading
import time

import pytest

from departure_matrix.app import Application, build_device, check_frame_interval, load_fonts, main
from departure_matrix.config import AppConfig, ControlConfig, DisplayConfig, LoggingConfig, ProviderConfig
from departure_matrix.diagnostics import POLL_ERRORS_FILENAME, configure_logging
from departure_matrix.display.canvas import CanvasDevice
from departure_matrix.rendering.layout import FONT_LARGE, FONT_SMALL


@pytest.fixture()
def config(tmp_path) -> AppConfig:
    return AppConfig(
        # nothing listens on the discard port, so every poll fails fast
        provider=ProviderConfig(base_url="http://127.0.0.1:9", poll_interval_seconds=0.05, timeout_seconds=1),
        control=ControlConfig(host="127.0.0.1", port=0),
        display=DisplayConfig(
            width=64,
            height=32,
            brightness=60,
            frame_interval_seconds=0.01,
            emulator_path=str(tmp_path / "frame.png"),
        ),
        log=LoggingConfig(level="INFO", log_dir=str(tmp_path / "logs")),
    )


def test_build_device_emulator(config: AppConfig) -> None:
    device = build_device(config, "emulator")
    fonts = load_fonts(device, config)

    assert isinstance(device, CanvasDevice)
    assert set(fonts) == {FONT_SMALL, FONT_LARGE}
    assert fonts[FONT_LARGE].baseline() > 0


def test_application_runs_and_shuts_down(config: AppConfig, tmp_path) -> None:
    device = build_device(config, "emulator")
    app = Application(config, device, load_fonts(device, config))
    runner = threading.Thread(target=app.run)

    runner.start()
    deadline = time.time() + 5
    while time.time() < deadline and (
        app.state.poll_status.read() is None or app.render_loop.frames_presented < 3
    ):
        time.sleep(0.02)
    app.request_shutdown()
    runner.join(timeout=10)

    assert not runner.is_alive()
    assert app.render_loop.frames_presented >= 3
    assert app.state.timetable.read() is None
    assert app.state.poll_status.read().error is not None
    assert (tmp_path / "frame.png").exists()
    assert (tmp_path / "logs" / POLL_ERRORS_FILENAME).exists()


def test_main_exits_on_missing_config(tmp_path) -> None:
    assert main(["--config", str(tmp_path / "missing.yaml")]) == 1


def test_configure_logging_creates_log_dir(tmp_path) -> None:
    log_dir = tmp_path / "nested" / "logs"

    configure_logging(LoggingConfig(level="debug", log_dir=str(log_dir)))

    assert log_dir.is_dir()
    assert logging.getLogger().level == logging.DEBUG


def test_configure_logging_rejects_unknown_level(tmp_path) -> None:
    with pytest.raises(ValueError):
        configure_logging(LoggingConfig(level="LOUD", log_dir=str(tmp_path)))


CONFIG_YAML = """
provider:
  base_url: "http://127.0.0.1:9"
control:
  port: 0
display:
  width: 64
  height: 32
  brightness: 80
  frame_interval_seconds: {interval}
logging:
  level: "{level}"
  log_dir: "{log_dir}"
"""


def _write_config(tmp_path, interval: float = 1.0, level: str = "INFO") -> str:
    path = tmp_path / "config.yaml"
    path.write_text(CONFIG_YAML.format(interval=interval, level=level, log_dir=tmp_path / "logs"))
    return str(path)


def test_main_exits_on_unknown_log_level(tmp_path) -> None:
    assert main(["--config", _write_config(tmp_path, level="LOUD")]) == 1


def test_main_rejects_zero_frame_interval_without_vsync(tmp_path) -> None:
    assert main(["--config", _write_config(tmp_path, interval=0), "--output", "emulator"]) == 1


def test_check_frame_interval_allows_zero_for_led_matrix(config: AppConfig) -> None:
    zero = replace(config, display=replace(config.display, frame_interval_seconds=0))

    check_frame_interval(zero, "led-matrix")
    with pytest.raises(ValueError):
        check_frame_interval(zero, "hardware")
