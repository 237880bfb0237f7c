"""
Exception hierarchy for the courier request pipeline.

Every error raised by the library derives from `CourierError`. Argument
problems are also `ValueError`s so callers that predate this hierarchy keep
working.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .clients.pipeline import Response


class CourierError(Exception):
    """Base class for all courier errors."""


class InvalidArgumentError(CourierError, ValueError):
    """A required argument is missing or has an unsupported value."""


class TimeoutNotSupportedError(InvalidArgumentError, NotImplementedError):
    """Raised when a request timeout is passed; timeouts are not implemented."""

    def __init__(self, timeout: Any) -> None:
        super().__init__(f"Request timeouts are not supported (got {timeout!r})")
        self.timeout = timeout


class TransportError(CourierError):
    """
    Failure surfaced by the transport collaborator.

    When the transport knows the status line and headers (e.g. the connection
    broke after the response head arrived) it passes them along; the dispatcher
    then attaches a best-effort `Response` as `response`.
    """

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        body: Any | None = None,
        raw_headers: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.body = body
        self.raw_headers = raw_headers
        self.response: Response | None = None

    def __str__(self) -> str:
        if self.status is not None:
            return f"{self.message} (HTTP {self.status})"
        return self.message


class CacheFailureError(CourierError):
    """The cache collaborator returned something that is not a Response."""

    def __init__(self, key: str, value: Any) -> None:
        super().__init__(
            f"Cache returned a malformed entry for {key!r}: {type(value).__name__}"
        )
        self.key = key
        self.value = value


__all__ = [
    "CacheFailureError",
    "CourierError",
    "InvalidArgumentError",
    "TimeoutNotSupportedError",
    "TransportError",
]
