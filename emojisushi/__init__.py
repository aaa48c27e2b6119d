"""
                Emojisushi API Client

Typed async client for the Emojisushi restaurant-ordering backend:
cities, spots, menu, cart, checkout methods and order placement.

Author: Khalil Bannouri
Version: 1.0.0
License: MIT
"""

from emojisushi.client import EmojisushiApi, MENU_CATEGORY_SLUG, UNBOUNDED_LIMIT
from emojisushi.core.exceptions import EmojisushiError, HydrationError, TransportError
from emojisushi.options import RequestOptions

__version__ = "1.0.0"
__author__ = "Khalil Bannouri"

__all__ = [
    "EmojisushiApi",
    "EmojisushiError",
    "HydrationError",
    "MENU_CATEGORY_SLUG",
    "RequestOptions",
    "TransportError",
    "UNBOUNDED_LIMIT",
]
