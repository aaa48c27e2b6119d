"""
Request Pipeline

Shapes every outgoing call to the Emojisushi API:
    1. Static headers configured with set_header() are applied,
       overwriting same-named request headers
    2. `lang=<locale>` is appended to the query string
    3. Caller transport options are merged with the operation's
       query/body parameters (see emojisushi.options)

Transport concerns (TLS, pooling, redirects) are left to httpx.
Every httpx failure is re-raised as TransportError; nothing is retried.

Author: Khalil Bannouri
Version: 1.0.0
"""

import logging
import threading
from collections.abc import Mapping
from typing import Any, Dict, List, Optional, Tuple, Union
from urllib.parse import urlencode

import httpx

from emojisushi.core.exceptions import HydrationError, TransportError
from emojisushi.options import CLIENT_DEFAULT, RequestOptions

logger = logging.getLogger(__name__)

DEFAULT_LANG = "uk"


def with_locale(query: str, lang: str) -> str:
    """
    Append the locale parameter to a raw query string.

    Args:
        query: Existing query string, with or without a leading "?"
        lang: Locale code

    Returns:
        str: "a=1" -> "a=1&lang=uk", "" -> "lang=uk"
            (rendered in the URL as "?lang=uk")
    """
    query = query.lstrip("?")
    param = urlencode({"lang": lang})
    return f"{query}&{param}" if query else param


def flatten_query(params: Mapping, prefix: Optional[str] = None) -> List[Tuple[str, str]]:
    """
    Flatten nested query values the way PHP's http_build_query does.

    Nested mappings become `key[sub]=v`, lists become `key[0]=v`,
    booleans are sent as 1/0 and None values are dropped.

    Example:
        >>> flatten_query({"limit": 5, "filter": {"ids": [1, 2]}})
        [('limit', '5'), ('filter[ids][0]', '1'), ('filter[ids][1]', '2')]
    """
    pairs: List[Tuple[str, str]] = []

    for key, value in params.items():
        name = f"{prefix}[{key}]" if prefix else str(key)

        if value is None:
            continue
        if isinstance(value, Mapping):
            pairs.extend(flatten_query(value, name))
        elif isinstance(value, (list, tuple)):
            pairs.extend(flatten_query(dict(enumerate(value)), name))
        elif isinstance(value, bool):
            pairs.append((name, "1" if value else "0"))
        else:
            pairs.append((name, str(value)))

    return pairs


def _failed_url(exc: httpx.HTTPError) -> Optional[str]:
    try:
        return str(exc.request.url)
    except RuntimeError:
        return None


class RequestPipeline:
    """
    HTTP layer shared by all client operations.

    Attributes:
        base_url: API root every operation path is resolved against
        lang: Locale appended to every request
        raise_for_status: Treat non-2xx responses as TransportError

    Thread safety:
        Header writes are serialized by a lock and each request works on
        a snapshot of the header map, so set_header() may be called while
        requests are in flight.

    Example:
        >>> pipeline = RequestPipeline("https://api.example.com/api/")
        >>> pipeline.set_header("X-Session-Id", "abc")
        >>> payload = await pipeline.request("GET", "cities")
    """

    def __init__(
        self,
        base_url: str,
        lang: str = DEFAULT_LANG,
        *,
        timeout: Union[float, httpx.Timeout, None] = None,
        verify: bool = True,
        raise_for_status: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not base_url:
            raise ValueError("base_url is required")

        self.base_url = base_url if base_url.endswith("/") else f"{base_url}/"
        self.lang = lang
        self.raise_for_status = raise_for_status

        self._headers: Dict[str, str] = {}
        self._headers_lock = threading.Lock()

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            verify=verify,
            transport=transport,
            event_hooks={"request": [self._shape_request]},
        )

        logger.info(f"RequestPipeline initialized (base_url={self.base_url}, lang={lang})")

    # =========================================================================
    # STATIC HEADERS
    # =========================================================================

    def set_header(self, name: str, value: str) -> None:
        """Set or overwrite a header sent with every subsequent request."""
        with self._headers_lock:
            headers = dict(self._headers)
            headers[name] = value
            self._headers = headers
        logger.debug(f"Static header set: {name}")

    @property
    def headers(self) -> Dict[str, str]:
        """Snapshot of the static headers."""
        return dict(self._headers)

    async def _shape_request(self, request: httpx.Request) -> None:
        """httpx request hook: apply static headers and the locale."""
        for name, value in self.headers.items():
            request.headers[name] = value

        query = with_locale(request.url.query.decode("ascii"), self.lang)
        request.url = request.url.copy_with(query=query.encode("ascii"))

    # =========================================================================
    # REQUESTS
    # =========================================================================

    async def request(
        self,
        method: str,
        path: str,
        *,
        query: Optional[Mapping] = None,
        json: Optional[Mapping] = None,
        options: Union[RequestOptions, Mapping, None] = None,
    ) -> Any:
        """
        Issue one request and return the decoded JSON body.

        Args:
            method: HTTP method
            path: Endpoint path relative to base_url
            query: Operation query parameters
            json: Operation JSON body (sent as-is, even when empty)
            options: Caller transport overrides

        Returns:
            Decoded JSON ({} for an empty body)

        Raises:
            TransportError: Connection failure, timeout or non-2xx status
            HydrationError: Body is not valid JSON
        """
        opts = RequestOptions.coerce(options).merged(query=query, json=json)

        kwargs: Dict[str, Any] = {
            "params": flatten_query(opts.query),
            "headers": opts.headers or None,
            "extensions": opts.extensions or None,
        }
        if json is not None or opts.json:
            kwargs["json"] = opts.json
        if opts.timeout is not CLIENT_DEFAULT:
            kwargs["timeout"] = opts.timeout

        logger.debug(f"{method} {path} query={opts.query}")

        try:
            response = await self._client.request(method, path, **kwargs)
            if self.raise_for_status:
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning(f"{method} {path} failed with status {e.response.status_code}")
            raise TransportError(
                f"{method} {e.request.url} returned HTTP {e.response.status_code}",
                status_code=e.response.status_code,
                url=str(e.request.url),
            ) from e
        except httpx.HTTPError as e:
            logger.warning(f"{method} {path} failed: {e!r}")
            raise TransportError(
                f"{method} {path} failed: {e}",
                url=_failed_url(e),
            ) from e

        if not response.content:
            return {}

        try:
            return response.json()
        except ValueError as e:
            raise HydrationError(
                f"Response body of {method} {path} is not valid JSON",
                path=str(response.url),
            ) from e

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def aclose(self) -> None:
        """Close the underlying httpx client."""
        await self._client.aclose()

    async def __aenter__(self) -> "RequestPipeline":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
