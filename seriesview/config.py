# seriesview/config.py
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Mapping

from seriesview.core import ConfigError, HighlightStyle, InvalidTimeWindow, TimeWindow

logger = logging.getLogger(__name__)

APP_NAME = "seriesview"
ENV_SETTINGS = "SERIESVIEW_SETTINGS"
ENV_API_URL = "SERIESVIEW_API_URL"
ENV_API_TOKEN = "SERIESVIEW_API_TOKEN"


@dataclass(frozen=True, slots=True)
class EngineConfig:
    """
    Runtime settings of the chart engine.

    Delays are in seconds and approximate how long the rendering surface
    needs to paint an update it cannot report on.
    """
    api_url: str = "http://localhost:8081/api"
    api_token: str | None = field(default=None, repr=False)
    request_timeout: float = 10.0
    default_window: str = "7d"
    settle_delay: float = 0.4
    pre_print_delay: float = 0.1
    restore_delay: float = 0.15
    highlight: HighlightStyle = field(default_factory=HighlightStyle)

    def __post_init__(self) -> None:
        if not isinstance(self.api_url, str) or not self.api_url.strip():
            raise ConfigError("api_url must be a non-empty string.")
        for name in ("request_timeout", "settle_delay", "pre_print_delay", "restore_delay"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or isinstance(value, bool) or value < 0:
                raise ConfigError(f"{name} must be a non-negative number, got {value!r}")
            object.__setattr__(self, name, float(value))
        if self.request_timeout == 0:
            raise ConfigError("request_timeout must be > 0.")
        try:
            TimeWindow.from_key(self.default_window)
        except InvalidTimeWindow as e:
            raise ConfigError(f"default_window: {e}") from e
        if not isinstance(self.highlight, HighlightStyle):
            raise ConfigError("highlight must be a HighlightStyle instance.")

    @property
    def window(self) -> TimeWindow:
        return TimeWindow.from_key(self.default_window)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EngineConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning("Ignoring unknown settings: %s", ", ".join(unknown))

        kwargs = {k: v for k, v in data.items() if k in known and k != "highlight"}
        style = data.get("highlight")
        if style is not None:
            if not isinstance(style, Mapping):
                raise ConfigError("highlight must be a mapping.")
            style_fields = {f.name for f in fields(HighlightStyle)}
            bad = sorted(set(style) - style_fields)
            if bad:
                raise ConfigError(f"Unknown highlight settings: {', '.join(bad)}")
            kwargs["highlight"] = HighlightStyle(**style)
        try:
            return cls(**kwargs)
        except TypeError as e:
            raise ConfigError(str(e)) from e


def get_settings_path(app_name: str = APP_NAME) -> Path:
    """Default settings file: $SERIESVIEW_SETTINGS, else a per-user app directory."""
    override = os.getenv(ENV_SETTINGS)
    if override:
        return Path(override)
    base = os.getenv("LOCALAPPDATA") or os.getenv("APPDATA")
    if base:
        return Path(base) / app_name / "settings.json"
    return Path.home() / f".{app_name.lower()}" / "settings.json"


def load_json(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("Could not read settings from %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Settings file %s does not hold a JSON object; using defaults", path)
        return {}
    return data


def load_config(path: str | Path | None = None) -> EngineConfig:
    """Settings file values, then environment overrides, over the defaults."""
    settings_path = Path(path) if path is not None else get_settings_path()
    data = load_json(settings_path)

    api_url = os.getenv(ENV_API_URL)
    if api_url:
        data["api_url"] = api_url
    token = os.getenv(ENV_API_TOKEN)
    if token:
        data["api_token"] = token

    return EngineConfig.from_dict(data)
