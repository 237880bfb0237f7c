"""
Response cache collaborators.

The dispatcher only needs `get` and `put`. `MemoryCache` is a small in-process
implementation; pass the same instance to several `Http` clients to share it.
"""

from __future__ import annotations

from collections import OrderedDict
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from .exceptions import InvalidArgumentError

if TYPE_CHECKING:
    from .clients.pipeline import Response


@runtime_checkable
class CacheHandle(Protocol):
    def get(self, key: str) -> Response | None: ...

    def put(self, key: str, response: Response) -> None: ...


class MemoryCache:
    """
    Dict-backed response cache with optional LRU capacity.

    Args:
        capacity: Maximum number of entries; `None` means unbounded.
    """

    def __init__(self, capacity: int | None = None) -> None:
        if capacity is not None and capacity <= 0:
            raise InvalidArgumentError("capacity must be a positive integer")
        self._capacity = capacity
        self._entries: OrderedDict[str, Response] = OrderedDict()

    def get(self, key: str) -> Response | None:
        entry = self._entries.get(key)
        if entry is not None:
            self._entries.move_to_end(key)
        return entry

    def put(self, key: str, response: Response) -> None:
        self._entries[key] = response
        self._entries.move_to_end(key)
        if self._capacity is not None:
            while len(self._entries) > self._capacity:
                self._entries.popitem(last=False)

    def remove(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries
