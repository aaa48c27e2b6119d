"""
Backend Transport Factory

Selects where the client's requests go, based on ENV_MODE:
    - ENV_MODE=development → MockBackend (in-memory, no network)
    - ENV_MODE=staging / production → the real API (default httpx transport)

Usage:
    from emojisushi.services.backend import get_transport

    api = EmojisushiApi(settings.base_url, transport=get_transport())

Author: Khalil Bannouri
Version: 1.0.0
"""

import logging
from typing import Optional

import httpx

from emojisushi.core.config import Settings, get_settings
from emojisushi.services.backend.mock import DEFAULT_DATA, SESSION_HEADER, MockBackend

logger = logging.getLogger(__name__)


def get_transport(settings: Optional[Settings] = None) -> Optional[httpx.AsyncBaseTransport]:
    """
    Get the transport matching the configured environment.

    Args:
        settings: Settings to use (defaults to get_settings())

    Returns:
        httpx.MockTransport backed by a fresh MockBackend in development
        mode, None otherwise (httpx then uses its network transport)
    """
    settings = settings or get_settings()

    if settings.is_development:
        logger.info("Backend: Using MockBackend (development mode)")
        return MockBackend().transport()

    logger.info(f"Backend: Using {settings.base_url} ({settings.env_mode.value} mode)")
    return None


__all__ = [
    "get_transport",
    "MockBackend",
    "DEFAULT_DATA",
    "SESSION_HEADER",
]
