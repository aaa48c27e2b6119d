"""
Request Options

Per-call transport overrides (extra headers, timeout, additional query
or body values) and the rules for merging them with an operation's own
parameters.

Merge rules:
    - headers: sent as given; static client headers overwrite same-named ones
    - query / json: merged recursively with merge_recursive(); lists are
      concatenated (caller first), the operation's value wins every other
      collision
    - timeout: caller's value if given (None disables it for the call),
      otherwise the client default

Author: Khalil Bannouri
Version: 1.0.0
"""

from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional, Union

import httpx


class _ClientDefault:
    def __repr__(self) -> str:
        return "CLIENT_DEFAULT"


# Timeout marker: keep the client's configured timeout
CLIENT_DEFAULT = _ClientDefault()


def merge_recursive(base: Optional[Mapping], override: Optional[Mapping]) -> Dict[str, Any]:
    """
    Merge two mappings without mutating either.

    Args:
        base: Caller-supplied values
        override: Operation values, winning scalar collisions

    Returns:
        dict: New merged mapping

    Example:
        >>> merge_recursive({"ids": [1], "limit": 5}, {"ids": [2], "limit": 10})
        {'ids': [1, 2], 'limit': 10}
    """
    merged: Dict[str, Any] = dict(base or {})

    for key, value in (override or {}).items():
        if key not in merged:
            merged[key] = value
            continue

        current = merged[key]
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = merge_recursive(current, value)
        elif isinstance(current, list) and isinstance(value, list):
            merged[key] = [*current, *value]
        else:
            merged[key] = value

    return merged


@dataclass
class RequestOptions:
    """
    Transport overrides for a single call.

    Attributes:
        headers: Extra request headers
        query: Extra query string values
        json: Extra JSON body values (POST operations only)
        timeout: Seconds or an httpx.Timeout; None disables the timeout for
            this call, CLIENT_DEFAULT keeps the client's
        extensions: httpx request extensions
    """
    headers: Dict[str, str] = field(default_factory=dict)
    query: Dict[str, Any] = field(default_factory=dict)
    json: Dict[str, Any] = field(default_factory=dict)
    timeout: Union[float, httpx.Timeout, None, _ClientDefault] = CLIENT_DEFAULT
    extensions: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def coerce(cls, options: Union["RequestOptions", Mapping, None]) -> "RequestOptions":
        """
        Accept RequestOptions, a plain mapping with the same keys, or None.

        Raises:
            TypeError: On unknown option keys
        """
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options

        known = {f.name for f in fields(cls)}
        unknown = set(options) - known
        if unknown:
            raise TypeError(f"Unknown request options: {sorted(unknown)}")
        return cls(**dict(options))

    def merged(
        self,
        query: Optional[Mapping] = None,
        json: Optional[Mapping] = None,
    ) -> "RequestOptions":
        """Return new options with the operation's query/json merged in."""
        return RequestOptions(
            headers=dict(self.headers),
            query=merge_recursive(self.query, query),
            json=merge_recursive(self.json, json),
            timeout=self.timeout,
            extensions=dict(self.extensions),
        )
