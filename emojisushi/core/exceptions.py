"""
Client Exceptions

Two failure kinds reach the caller:
    - TransportError: the HTTP round trip failed (connection, timeout,
      non-2xx status). Never retried by the client.
    - HydrationError: a response payload could not be turned into the
      requested entity type.

Author: Khalil Bannouri
Version: 1.0.0
"""

from typing import Optional


class EmojisushiError(Exception):
    """Base class for every error raised by the client."""


class TransportError(EmojisushiError):
    """
    Network or HTTP-level failure.

    Attributes:
        status_code: HTTP status if a response was received
        url: Requested URL (including the injected locale)
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        url: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class HydrationError(EmojisushiError):
    """
    Raw payload does not fit the declared target type.

    Attributes:
        target: Name of the entity type being hydrated
        path: Dotted location of the offending value (e.g. "data[2].variants")
    """

    def __init__(
        self,
        message: str,
        target: Optional[str] = None,
        path: Optional[str] = None,
    ):
        if path:
            message = f"{message} (at {path})"
        super().__init__(message)
        self.target = target
        self.path = path
