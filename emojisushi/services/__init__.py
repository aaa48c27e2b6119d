"""
                        Services Module

Building blocks behind the API client, each with a factory entry point.

Services:
    - hydrator: JSON payload → typed entity conversion
    - backend: development (mock) or real transport selection
"""

from emojisushi.services.hydrator import get_hydrator
from emojisushi.services.backend import get_transport

__all__ = ["get_hydrator", "get_transport"]
