"""
Canonical query-string construction.

Keys are sorted so that the same parameter map always produces the same URL,
which is what the response cache and the pending-request table key on.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

# encodeURIComponent leaves these unescaped in addition to [A-Za-z0-9_.-]
_COMPONENT_SAFE = "!~*'()"

_RESTORED = (
    ("%40", "@"),
    ("%3A", ":"),
    ("%24", "$"),
    ("%2C", ","),
)


def encode_uri_query(value: str, *, pct_encode_spaces: bool = False) -> str:
    encoded = quote(value, safe=_COMPONENT_SAFE)
    for escaped, literal in _RESTORED:
        encoded = encoded.replace(escaped, literal)
    return encoded.replace("%20", "%20" if pct_encode_spaces else "+")


def _stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    if value is None or isinstance(value, (bool, Mapping, list, tuple)):
        return json.dumps(value, separators=(",", ":"), sort_keys=True)
    return str(value)


def build_url(
    url: str, params: Mapping[str, Any] | None, *, pct_encode_spaces: bool = False
) -> str:
    """Append `params` to `url` as a sorted, encoded query string."""
    if params is None:
        return url

    parts: list[str] = []
    for key in sorted(params):
        value = params[key]
        if value is None:
            continue
        values = value if isinstance(value, (list, tuple)) else [value]
        encoded_key = encode_uri_query(str(key), pct_encode_spaces=pct_encode_spaces)
        for item in values:
            encoded_value = encode_uri_query(_stringify(item), pct_encode_spaces=pct_encode_spaces)
            parts.append(f"{encoded_key}={encoded_value}")

    if not parts:
        return url
    return url + ("&" if "?" in url else "?") + "&".join(parts)
