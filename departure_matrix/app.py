"""Process root: builds the device and shared state, runs the three threads."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import signal
import threading

from departure_matrix.config import DEFAULT_CONFIG_PATH, AppConfig, load_config
from departure_matrix.control.server import ControlServer
from departure_matrix.data.poller import TimetablePoller
from departure_matrix.data.provider_client import TimetableClient
from departure_matrix.diagnostics import POLL_ERRORS_FILENAME, DiagnosticLog, configure_logging
from departure_matrix.display.base import Device, DeviceError, Font
from departure_matrix.display.canvas import CanvasDevice
from departure_matrix.display.hardware import MatrixDisplay, MatrixGeometry
from departure_matrix.display.led_matrix import LedMatrixDevice
from departure_matrix.rendering.emulator import FrameFile
from departure_matrix.rendering.layout import FONT_LARGE, FONT_SMALL
from departure_matrix.rendering.render_loop import RenderLoop
from departure_matrix.state import SharedState

OUTPUTS = ("emulator", "hardware", "led-matrix")
VSYNC_OUTPUTS = ("led-matrix",)
JOIN_TIMEOUT_SECONDS = 5.0

logger = logging.getLogger(__name__)


def build_device(config: AppConfig, output: str) -> Device:
    """Acquire the display for ``output``; raises DeviceError if it can't."""
    display = config.display
    if output == "led-matrix":
        return LedMatrixDevice(display.matrix_options, brightness=display.brightness)

    frame_outputs = []
    if output == "hardware":
        matrix = MatrixDisplay(
            MatrixGeometry(
                width=display.width,
                height=display.height,
                panel_width=display.panel_width,
                panel_height=display.panel_height,
            )
        )
        logger.info("hardware_display_ready %s", {"panels": matrix.panel_count})
        frame_outputs.append(matrix.render)
    else:
        frame_outputs.append(FrameFile(display.emulator_path))
    return CanvasDevice(display.width, display.height, frame_outputs)


def check_frame_interval(config: AppConfig, output: str) -> None:
    """Only vsync-presenting outputs may render without a delay between frames."""
    if output not in VSYNC_OUTPUTS and config.display.frame_interval_seconds <= 0:
        raise ValueError(
            f"'display.frame_interval_seconds' must be positive for the {output} output"
        )


def load_fonts(device: Device, config: AppConfig) -> dict[str, Font]:
    display = config.display
    return {
        FONT_SMALL: device.load_font(display.font_small, display.font_small_size),
        FONT_LARGE: device.load_font(display.font_large, display.font_large_size),
    }


class Application:
    """Owns the shared state and the poller, listener and render loop threads."""

    def __init__(self, config: AppConfig, device: Device, fonts: dict[str, Font]) -> None:
        self.config = config
        self.device = device
        self.state = SharedState(brightness=config.display.brightness)
        client = TimetableClient(config.provider.base_url, timeout_seconds=config.provider.timeout_seconds)
        self.poller = TimetablePoller(
            client,
            self.state,
            poll_interval_seconds=config.provider.poll_interval_seconds,
            diagnostics=DiagnosticLog(Path(config.log.log_dir) / POLL_ERRORS_FILENAME),
        )
        self.control = ControlServer(self.state, host=config.control.host, port=config.control.port)
        self.render_loop = RenderLoop(
            device,
            self.state,
            fonts,
            frame_interval_seconds=config.display.frame_interval_seconds,
        )
        self._shutdown = threading.Event()

    def request_shutdown(self, signum: int | None = None, frame: object = None) -> None:
        self._shutdown.set()

    def run(self) -> None:
        self.poller.start()
        self.control.start()
        self.render_loop.start()
        logger.info("started %s", {"provider": self.config.provider.base_url})
        try:
            self._shutdown.wait()
        finally:
            self.shutdown()

    def shutdown(self) -> None:
        logger.info("shutdown")
        self.control.stop()
        self.render_loop.stop()
        self.poller.stop()
        self.render_loop.join(JOIN_TIMEOUT_SECONDS)
        # a fetch in flight may outlive this; the poller thread is a daemon
        self.poller.join(JOIN_TIMEOUT_SECONDS)
        self.device.close()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="departure_matrix")
    parser.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="Path to the YAML config")
    parser.add_argument(
        "--output",
        choices=OUTPUTS,
        default="emulator",
        help="Frame output target",
    )
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
        check_frame_interval(config, args.output)
        configure_logging(config.log)
    except ValueError as exc:
        print(f"config_error: {exc}", flush=True)
        return 1

    try:
        device = build_device(config, args.output)
    except DeviceError as exc:
        logger.error("device_init_failed %s", {"output": args.output, "error": str(exc)})
        return 1

    try:
        fonts = load_fonts(device, config)
        app = Application(config, device, fonts)
    except (DeviceError, OSError) as exc:
        logger.error("startup_failed %s", {"error": str(exc)})
        device.close()
        return 1

    signal.signal(signal.SIGINT, app.request_shutdown)
    signal.signal(signal.SIGTERM, app.request_shutdown)
    app.run()
    return 0


__all__ = ["Application", "build_device", "check_frame_interval", "load_fonts", "main"]
