"""
Core module initialization.
Exports configuration, logging utilities and exceptions.
"""

from emojisushi.core.config import get_settings, Settings, EnvironmentMode
from emojisushi.core.exceptions import EmojisushiError, HydrationError, TransportError

__all__ = [
    "get_settings",
    "Settings",
    "EnvironmentMode",
    "EmojisushiError",
    "HydrationError",
    "TransportError",
]
