"""Core infrastructure: configuration and logging."""

from waypoint.core.config import (
    HttpSettings,
    LoggingSettings,
    RedirectSettings,
    WaypointSettings,
    load_settings,
)
from waypoint.core.logging import configure_logging

__all__ = [
    "HttpSettings",
    "LoggingSettings",
    "RedirectSettings",
    "WaypointSettings",
    "configure_logging",
    "load_settings",
]
