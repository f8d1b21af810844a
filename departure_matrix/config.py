"""Configuration loader for the departure matrix display."""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from typing import Any

from dotenv import load_dotenv
import yaml

DEFAULT_CONFIG_PATH = "config/config.yaml"
PROVIDER_URL_ENV = "TIMETABLE_PROVIDER_URL"


@dataclass(frozen=True)
class ProviderConfig:
    """Remote timetable provider configuration."""

    base_url: str
    poll_interval_seconds: float
    timeout_seconds: float


@dataclass(frozen=True)
class ControlConfig:
    """Control-plane listener configuration."""

    host: str
    port: int


@dataclass(frozen=True)
class DisplayConfig:
    """Display configuration for rendering and hardware."""

    width: int
    height: int
    brightness: int
    frame_interval_seconds: float
    font_small: str | None = None
    font_large: str | None = None
    font_small_size: int = 8
    font_large_size: int = 12
    emulator_path: str = "emulator_output/frame.png"
    panel_width: int = 64
    panel_height: int = 32
    matrix_options: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""

    level: str
    log_dir: str


@dataclass(frozen=True)
class AppConfig:
    """Top-level application configuration."""

    provider: ProviderConfig
    control: ControlConfig
    display: DisplayConfig
    log: LoggingConfig


def _require_key(mapping: dict[str, Any], key: str, context: str) -> Any:
    if key not in mapping:
        raise ValueError(f"Missing required key '{key}' in {context} config")
    return mapping[key]


def _require_section(data: dict[str, Any], key: str) -> dict[str, Any]:
    section = _require_key(data, key, key)
    if not isinstance(section, dict):
        raise ValueError(f"'{key}' config must be a mapping")
    return section


def load_config(path: str = DEFAULT_CONFIG_PATH) -> AppConfig:
    """Load application configuration from a YAML file."""
    load_dotenv()
    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except FileNotFoundError as exc:
        raise ValueError(f"Config file not found: {path}") from exc
    except yaml.YAMLError as exc:
        raise ValueError(f"Config file is not valid YAML: {path}") from exc

    if not isinstance(data, dict):
        raise ValueError("Config file must contain a mapping at the top level")

    provider_section = _require_section(data, "provider")
    control_section = _require_section(data, "control")
    display_section = _require_section(data, "display")
    logging_section = _require_section(data, "logging")

    base_url = os.environ.get(PROVIDER_URL_ENV, "").strip()
    if not base_url:
        base_url = _require_key(provider_section, "base_url", "provider")

    provider = ProviderConfig(
        base_url=str(base_url).rstrip("/"),
        poll_interval_seconds=provider_section.get("poll_interval_seconds", 30),
        timeout_seconds=provider_section.get("timeout_seconds", 10),
    )

    control = ControlConfig(
        host=control_section.get("host", "0.0.0.0"),
        port=_require_key(control_section, "port", "control"),
    )

    brightness = _require_key(display_section, "brightness", "display")
    if not isinstance(brightness, int) or not 0 <= brightness <= 100:
        raise ValueError("'display.brightness' must be an integer between 0 and 100")

    frame_interval = _require_key(display_section, "frame_interval_seconds", "display")
    if isinstance(frame_interval, bool) or not isinstance(frame_interval, (int, float)) or frame_interval < 0:
        raise ValueError("'display.frame_interval_seconds' must be a non-negative number")

    matrix_options = display_section.get("matrix_options") or {}
    if not isinstance(matrix_options, dict):
        raise ValueError("'display.matrix_options' config must be a mapping")

    display = DisplayConfig(
        width=_require_key(display_section, "width", "display"),
        height=_require_key(display_section, "height", "display"),
        brightness=brightness,
        frame_interval_seconds=frame_interval,
        font_small=display_section.get("font_small"),
        font_large=display_section.get("font_large"),
        font_small_size=display_section.get("font_small_size", 8),
        font_large_size=display_section.get("font_large_size", 12),
        emulator_path=display_section.get("emulator_path", "emulator_output/frame.png"),
        panel_width=display_section.get("panel_width", 64),
        panel_height=display_section.get("panel_height", 32),
        matrix_options=matrix_options,
    )

    logging = LoggingConfig(
        level=_require_key(logging_section, "level", "logging"),
        log_dir=_require_key(logging_section, "log_dir", "logging"),
    )

    return AppConfig(provider=provider, control=control, display=display, log=logging)


__all__ = [
    "AppConfig",
    "ControlConfig",
    "DisplayConfig",
    "LoggingConfig",
    "ProviderConfig",
    "load_config",
]
