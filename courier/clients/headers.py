"""
Header policy: default headers, XSRF same-origin checks, and header-blob parsing.
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from typing import Any
from urllib.parse import urljoin, urlsplit

from ..exceptions import InvalidArgumentError

DEFAULT_CONTENT_TYPE = "application/json;charset=utf-8"
DEFAULT_ACCEPT = "application/json, text/plain, */*"


def _default_groups() -> dict[str, dict[str, str]]:
    return {
        "COMMON": {"Accept": DEFAULT_ACCEPT},
        "POST": {"Content-Type": DEFAULT_CONTENT_TYPE},
        "PUT": {"Content-Type": DEFAULT_CONTENT_TYPE},
        "PATCH": {"Content-Type": DEFAULT_CONTENT_TYPE},
    }


class DefaultHeaders:
    """
    Default header groups applied to every request.

    `COMMON` applies to all methods; other groups are keyed by the uppercased
    method name. Groups are mutable, e.g.::

        defaults = DefaultHeaders()
        defaults["common"]["X-Client"] = "courier"
    """

    def __init__(self, groups: Mapping[str, Mapping[str, str]] | None = None) -> None:
        self._headers = _default_groups()
        if groups:
            for method, values in groups.items():
                self._headers.setdefault(method.upper(), {}).update(values)

    def _apply_headers(
        self, method: str, present: set[str], headers: MutableMapping[str, Any]
    ) -> None:
        group = self._headers.get(method)
        if not group:
            return
        for name, value in group.items():
            if name.upper() not in present:
                headers[name] = value

    def set_headers(self, headers: MutableMapping[str, Any] | None, method: str) -> None:
        """Fill in defaults for `method` without overriding caller-supplied headers."""
        if headers is None:
            raise InvalidArgumentError("headers must be a mapping, not None")
        present = {name.upper() for name in headers}
        self._apply_headers("COMMON", present, headers)
        self._apply_headers(method.upper(), present, headers)

    def __getitem__(self, method: str) -> dict[str, str]:
        return self._headers.setdefault(method.upper(), {})

    def __contains__(self, method: object) -> bool:
        return isinstance(method, str) and method.upper() in self._headers


def find_header(headers: Mapping[str, Any], name: str) -> str | None:
    """Return the key under which `name` is stored (case-insensitive), if any."""
    wanted = name.lower()
    for key in headers:
        if key.lower() == wanted:
            return key
    return None


def resolve_header_values(headers: MutableMapping[str, Any]) -> None:
    """Call late-bound header values once; a resolver returning None drops the header."""
    for name in list(headers):
        value = headers[name]
        if callable(value):
            resolved = value()
            if resolved is None:
                del headers[name]
            else:
                headers[name] = str(resolved)


def strip_content_type(headers: MutableMapping[str, Any]) -> None:
    for name in [h for h in headers if h.upper() == "CONTENT-TYPE"]:
        del headers[name]


def is_same_origin(url: str, origin: tuple[str, str]) -> bool:
    """
    Whether `url`, resolved against the current origin, shares its scheme and host.

    Ports are not compared.
    """
    scheme, host = origin
    base = f"{scheme}://{host}/"
    target = urlsplit(urljoin(base, url))
    return target.scheme.lower() == scheme.lower() and (target.hostname or "") == host.lower()


def parse_headers(raw: str | None) -> dict[str, str]:
    """
    Parse a raw `Key: Value` header block.

    Keys are lower-cased and trimmed; duplicate keys are joined with ", ".
    """
    parsed: dict[str, str] = {}
    if not raw:
        return parsed

    for line in raw.split("\n"):
        key, sep, value = line.partition(":")
        if not sep:
            continue
        key = key.strip().lower()
        if not key:
            continue
        value = value.strip()
        parsed[key] = f"{parsed[key]}, {value}" if key in parsed else value
    return parsed
