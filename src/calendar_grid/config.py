"""YAML + environment configuration for the calendar client."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields
from typing import Any

import yaml

from .layout import MONDAY, SUNDAY, ViewMode
from .model import BLUE, GREEN, PALETTE, PURPLE, RED, YELLOW

logger = logging.getLogger("calendar-grid")

CONFIG_PATH = os.environ.get("CALENDAR_GRID_CONFIG", "/config/calendar_grid.yaml")

DEFAULT_PORT = "5000"
DEFAULT_TIMEOUT = 10.0

WEEK_STARTS = {"sunday": SUNDAY, "monday": MONDAY}
VALID_KEYS = {"api_url", "timeout", "default_view", "week_starts_on", "active_colors", "theme", "drawer_open"}


@dataclass
class Theme:
    """Colors handed to the rendering layer."""

    primary: str = "#1a73e8"
    secondary: str = "#e67c73"
    background: str = "#ffffff"
    dimmed_background: str = "#f5f5f5"
    today_highlight: str = "#e8f0fe"
    font_family: str = "Google Sans, Roboto, Arial, sans-serif"


@dataclass
class AppConfig:
    """Client settings: where the event service lives and how views start."""

    api_url: str
    timeout: float = DEFAULT_TIMEOUT
    default_view: ViewMode = ViewMode.MONTH
    week_starts_on: int = SUNDAY
    active_colors: list[str] = field(default_factory=lambda: [BLUE, GREEN, PURPLE, RED, YELLOW])
    theme: Theme = field(default_factory=Theme)
    drawer_open: bool = True


def default_api_url() -> str:
    """Event service URL from the environment, falling back to local dev."""
    url = os.environ.get("CALENDAR_API_URL", "").strip()
    if url:
        return url
    port = os.environ.get("PORT", "").strip() or DEFAULT_PORT
    return f"http://localhost:{port}/api"


def _parse_theme(raw: Any) -> Theme:
    if raw is None:
        return Theme()
    if not isinstance(raw, dict):
        raise ValueError("'theme' must be a mapping")
    known = {f.name for f in fields(Theme)}
    unknown = set(raw) - known
    if unknown:
        raise ValueError(f"Unknown theme keys: {sorted(unknown)}. Must be among: {sorted(known)}")
    return Theme(**{k: str(v) for k, v in raw.items()})


def load_config() -> AppConfig:
    """Load calendar_grid.yaml on top of environment defaults.

    A missing file is not an error; the environment and built-in
    defaults are used instead.
    """
    env_timeout = os.environ.get("CALENDAR_API_TIMEOUT", "").strip()
    try:
        timeout = float(env_timeout) if env_timeout else DEFAULT_TIMEOUT
    except ValueError:
        raise ValueError(f"CALENDAR_API_TIMEOUT must be a number, got '{env_timeout}'")

    config = AppConfig(api_url=default_api_url(), timeout=timeout)

    path = CONFIG_PATH
    if not os.path.isfile(path):
        logger.warning("Config file not found: %s (using defaults)", path)
        return config

    with open(path, "r") as f:
        raw = yaml.safe_load(f)

    if not raw:
        return config
    if not isinstance(raw, dict):
        raise ValueError(f"Config file {path} must contain a mapping")

    unknown = set(raw) - VALID_KEYS
    if unknown:
        raise ValueError(f"Unknown config keys: {sorted(unknown)}. Must be among: {sorted(VALID_KEYS)}")

    if raw.get("api_url"):
        config.api_url = str(raw["api_url"]).strip()

    if "timeout" in raw:
        try:
            config.timeout = float(raw["timeout"])
        except (TypeError, ValueError):
            raise ValueError(f"'timeout' must be a number, got '{raw['timeout']}'")
        if config.timeout <= 0:
            raise ValueError("'timeout' must be positive")

    if "default_view" in raw:
        view = str(raw["default_view"]).strip().lower()
        try:
            config.default_view = ViewMode(view)
        except ValueError:
            raise ValueError(
                f"Invalid default_view '{view}'. Must be one of: {[m.value for m in ViewMode]}"
            )

    if "week_starts_on" in raw:
        start = str(raw["week_starts_on"]).strip().lower()
        if start not in WEEK_STARTS:
            raise ValueError(f"Invalid week_starts_on '{start}'. Must be one of: {sorted(WEEK_STARTS)}")
        config.week_starts_on = WEEK_STARTS[start]

    if "active_colors" in raw:
        colors = raw["active_colors"]
        if not isinstance(colors, list):
            raise ValueError("'active_colors' must be a list")
        for color in colors:
            # Unknown colors are allowed on events, but a filter on one is a typo
            if color not in PALETTE:
                logger.warning("active_colors: '%s' is not a palette color", color)
        config.active_colors = [str(c) for c in colors]

    if "drawer_open" in raw:
        config.drawer_open = bool(raw["drawer_open"])

    config.theme = _parse_theme(raw.get("theme"))

    logger.info("Loaded config from %s (api_url=%s)", path, config.api_url)
    return config
