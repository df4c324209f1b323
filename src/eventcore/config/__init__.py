"""Configuration module for eventcore."""

from eventcore.config.logging import configure_from_settings, configure_logging, get_logger
from eventcore.config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "configure_from_settings",
    "configure_logging",
    "get_logger",
    "get_settings",
]
