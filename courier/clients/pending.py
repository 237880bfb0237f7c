"""
In-flight request tracking keyed by the final request URL.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterator

from .pipeline import Response


class PendingRequestTable:
    """
    Outstanding requests, one future per URL.

    The dispatcher registers an entry right before calling the transport and
    discards it when that call settles, so at most one entry per URL exists.
    """

    def __init__(self) -> None:
        self._pending: dict[str, asyncio.Future[Response]] = {}

    def get(self, url: str) -> asyncio.Future[Response] | None:
        return self._pending.get(url)

    def register(self, url: str, future: asyncio.Future[Response]) -> None:
        self._pending[url] = future

    def discard(self, url: str, future: asyncio.Future[Response] | None = None) -> None:
        """Remove `url`; with `future`, only if that is the registered entry."""
        if future is not None and self._pending.get(url) is not future:
            return
        self._pending.pop(url, None)

    def values(self) -> list[asyncio.Future[Response]]:
        return list(self._pending.values())

    def __contains__(self, url: object) -> bool:
        return url in self._pending

    def __len__(self) -> int:
        return len(self._pending)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._pending))
