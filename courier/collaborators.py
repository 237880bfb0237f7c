"""
Collaborator interfaces consumed by the dispatcher, plus small default adapters.

The network transport lives in `courier.clients.http` (`HttpxTransport`); the
cache lives in `courier.cache`.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol, TypeAlias
from urllib.parse import urlsplit

import httpx

from .exceptions import InvalidArgumentError

UrlRewriter: TypeAlias = Callable[[str], str]


@dataclass(frozen=True, slots=True)
class RawResponse:
    """What a transport hands back: status, body and the raw header block."""

    status: int
    body: str | bytes | None
    raw_headers: str | None = None


class Transport(Protocol):
    def request(
        self,
        url: str,
        *,
        method: str,
        headers: Mapping[str, str],
        body: Any | None,
        with_credentials: bool,
    ) -> Awaitable[RawResponse] | RawResponse: ...


class LocationResolver(Protocol):
    def current_origin(self) -> tuple[str, str]: ...


class CookieStore(Protocol):
    def get(self, name: str) -> str | None: ...


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Timer(Protocol):
    def after(self, seconds: float, callback: Callable[[], None]) -> TimerHandle: ...


class StaticLocation:
    """A fixed document location, e.g. the base URL of the service being called."""

    def __init__(self, href: str = "http://localhost/") -> None:
        parts = urlsplit(href)
        if not parts.scheme or not parts.hostname:
            raise InvalidArgumentError(f"location must be an absolute URL, got {href!r}")
        self.href = href
        self._origin = (parts.scheme.lower(), parts.hostname)

    def current_origin(self) -> tuple[str, str]:
        return self._origin


class HttpxCookieStore:
    """Read cookies out of an `httpx.Cookies` jar."""

    def __init__(self, cookies: httpx.Cookies) -> None:
        self._cookies = cookies

    def get(self, name: str) -> str | None:
        return self._cookies.get(name)


class LoopTimer:
    """One-shot timers on the running asyncio loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def after(self, seconds: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(seconds, callback)


def identity_rewriter(url: str) -> str:
    return url
