"""
Client configuration.

`HttpConfig` holds tuning knobs validated with pydantic; `HttpDefaults` holds the
application-wide request defaults. Both are injected into `Http` at
construction time.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .cache import CacheHandle
from .clients.headers import DefaultHeaders
from .exceptions import InvalidArgumentError

DEFAULT_XSRF_COOKIE_NAME = "XSRF-TOKEN"
DEFAULT_XSRF_HEADER_NAME = "X-XSRF-TOKEN"

COALESCE_ENV_VAR = "COURIER_COALESCE_MS"


class HttpConfig(BaseModel):
    """
    Dispatcher tuning.

    Attributes:
        coalesce_duration: Window in seconds during which completions are
            buffered and delivered together. `None` delivers immediately.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    coalesce_duration: float | None = Field(None, ge=0)

    @classmethod
    def with_options(cls, *, coalesce_ms: float | None = None) -> HttpConfig:
        try:
            return cls(coalesce_duration=None if coalesce_ms is None else coalesce_ms / 1000.0)
        except ValidationError as e:
            raise InvalidArgumentError(f"Invalid coalescing window: {coalesce_ms!r}") from e

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> HttpConfig:
        """Read `COURIER_COALESCE_MS` (milliseconds) from the environment."""
        env = os.environ if environ is None else environ
        raw = (env.get(COALESCE_ENV_VAR) or "").strip()
        if not raw:
            return cls()
        try:
            coalesce_ms = float(raw)
        except ValueError as e:
            raise InvalidArgumentError(f"{COALESCE_ENV_VAR} must be a number, got {raw!r}") from e
        return cls.with_options(coalesce_ms=coalesce_ms)


@dataclass(slots=True)
class HttpDefaults:
    """
    Application-wide request defaults.

    Attributes:
        headers: Default header groups (see `DefaultHeaders`).
        cache: Cache used when a call does not disable or override caching.
            `None` disables caching (and request de-duplication) by default.
        xsrf_cookie_name: Cookie read for the XSRF token.
        xsrf_header_name: Header the XSRF token is sent under.
    """

    headers: DefaultHeaders = field(default_factory=DefaultHeaders)
    cache: CacheHandle | None = None
    xsrf_cookie_name: str = DEFAULT_XSRF_COOKIE_NAME
    xsrf_header_name: str = DEFAULT_XSRF_HEADER_NAME

    def __post_init__(self) -> None:
        if not self.xsrf_cookie_name:
            raise InvalidArgumentError("xsrf_cookie_name may not be empty")
        if not self.xsrf_header_name:
            raise InvalidArgumentError("xsrf_header_name may not be empty")
