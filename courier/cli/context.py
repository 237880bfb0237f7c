from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Literal

import httpx

from courier import Http, HttpConfig, HttpDefaults, HttpxTransport, StaticLocation
from courier.exceptions import CacheFailureError, InvalidArgumentError, TransportError

from .errors import CLIError
from .results import CommandMeta, CommandResult, ErrorInfo

OutputFormat = Literal["table", "json"]


@dataclass
class CLIContext:
    output: OutputFormat
    quiet: bool
    verbosity: int
    base_url: str | None
    coalesce_ms: float | None
    location: str | None = None
    transport: httpx.AsyncBaseTransport | None = None

    def build_http(self) -> Http:
        config = HttpConfig.with_options(coalesce_ms=self.coalesce_ms)
        location = StaticLocation(self.location or self.base_url or "http://localhost/")
        return Http(
            HttpxTransport(base_url=self.base_url or "", transport=self.transport),
            defaults=HttpDefaults(),
            config=config,
            location=location,
        )


def exit_code_for_exception(exc: Exception) -> int:
    if isinstance(exc, CLIError):
        return exc.exit_code
    if isinstance(exc, InvalidArgumentError):
        return 2
    return 1


def error_info_for_exception(exc: Exception) -> ErrorInfo:
    if isinstance(exc, CLIError):
        return ErrorInfo(
            type=exc.error_type, message=exc.message, hint=exc.hint, details=exc.details
        )
    if isinstance(exc, InvalidArgumentError):
        return ErrorInfo(type="usage_error", message=str(exc))
    if isinstance(exc, TransportError):
        details = {"status": exc.status} if exc.status is not None else None
        return ErrorInfo(
            type="network_error",
            message=str(exc),
            details=details,
        )
    if isinstance(exc, CacheFailureError):
        return ErrorInfo(type="cache_error", message=str(exc), details={"key": exc.key})
    return ErrorInfo(type=exc.__class__.__name__, message=str(exc))


def build_result(
    *,
    ok: bool,
    command: str,
    started_at: float,
    data: Any | None,
    warnings: list[str],
    coalesce_ms: float | None = None,
    error: ErrorInfo | None = None,
) -> CommandResult:
    duration_ms = int(max(0.0, (time.time() - started_at) * 1000))
    return CommandResult(
        ok=ok,
        command=command,
        data=data,
        warnings=warnings,
        meta=CommandMeta(duration_ms=duration_ms, coalesce_ms=coalesce_ms),
        error=error,
    )
