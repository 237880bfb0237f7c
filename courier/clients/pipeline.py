"""
Internal request pipeline primitives.

Requests and responses are modeled independently of the underlying transport so
cross-cutting behavior can be implemented as interceptor stages. A stage may
return a plain value or an awaitable; the fold below keeps running stages
synchronously until one of them actually suspends.
"""

from __future__ import annotations

import asyncio
import copy
import inspect
from collections.abc import Callable, Mapping, Sequence
from dataclasses import FrozenInstanceError, dataclass, field
from types import MappingProxyType
from typing import Any, Literal, TypeAlias

HeaderValue: TypeAlias = str | Callable[[], str | None]
StageFn: TypeAlias = Callable[[Any], Any]
ErrorFn: TypeAlias = Callable[[BaseException], Any]

_UNSET: Any = object()


@dataclass(slots=True)
class RequestConfig:
    """
    The request as seen by interceptors.

    Interceptors may mutate any field until the request reaches the transport
    stage, where it is frozen and attached to the resulting `Response`.
    """

    url: str
    method: str = "GET"
    params: Mapping[str, Any] | None = None
    headers: dict[str, HeaderValue] = field(default_factory=dict)
    body: Any | None = None
    with_credentials: bool = False
    cache: Any | None = None
    xsrf_header_name: str | None = None
    xsrf_cookie_name: str | None = None
    _frozen: bool = field(default=False, init=False, repr=False, compare=False)

    def __setattr__(self, name: str, value: Any) -> None:
        if getattr(self, "_frozen", False):
            raise FrozenInstanceError(f"cannot assign to field {name!r} of a sent request")
        object.__setattr__(self, name, value)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> RequestConfig:
        if not self._frozen:
            self.headers = MappingProxyType(dict(self.headers))  # type: ignore[assignment]
            object.__setattr__(self, "_frozen", True)
        return self

    def header(self, name: str) -> HeaderValue | None:
        """Case-insensitive header lookup."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None


@dataclass(frozen=True, slots=True)
class Response:
    """
    A completed HTTP exchange.

    `body` is the raw text/bytes from the transport until a response stage
    replaces it (the default JSON interceptor parses it). Header keys are
    lower-cased. Instances are never mutated; use `copy()`.
    """

    status: int
    body: Any = None
    headers: Mapping[str, str] = field(default_factory=dict)
    config: RequestConfig | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def header(self, name: str) -> str | None:
        return self.headers.get(name.lower())

    def copy(self, *, body: Any = _UNSET) -> Response:
        """Return a new Response, optionally replacing the body."""
        return Response(
            status=self.status,
            body=self.body if body is _UNSET else body,
            headers=dict(self.headers),
            config=self.config,
        )

    def defensive_copy(self) -> Response:
        """Copy with a deep-copied body, so recipients cannot affect each other."""
        return self.copy(body=copy.deepcopy(self.body))

    def __str__(self) -> str:
        return f"HTTP {self.status}: {self.body}"


# =============================================================================
# Stage outcomes
# =============================================================================


@dataclass(frozen=True, slots=True)
class Ready:
    value: Any


@dataclass(frozen=True, slots=True)
class Failed:
    error: BaseException


@dataclass(frozen=True, slots=True)
class Pending:
    future: asyncio.Future[Any]


Outcome: TypeAlias = Ready | Failed | Pending


@dataclass(frozen=True, slots=True)
class Stage:
    """One slot of the execution list: a transform plus its paired error handler."""

    run: StageFn
    on_error: ErrorFn | None = None
    direction: Literal["request", "transport", "response"] = "request"


def identity(value: Any) -> Any:
    return value


def lift(result: Any) -> Outcome:
    """Wrap a stage's return value, scheduling it if it is awaitable."""
    if isinstance(result, (Ready, Failed, Pending)):
        return result
    if inspect.isawaitable(result):
        return Pending(asyncio.ensure_future(result))
    return Ready(result)


def outcome_of(future: asyncio.Future[Any]) -> Ready | Failed:
    """Convert a settled future into an outcome."""
    exc = future.exception()
    if exc is not None:
        return Failed(exc)
    return Ready(future.result())


def apply_stage(stage: Stage, outcome: Ready | Failed) -> Outcome:
    if isinstance(outcome, Ready):
        try:
            return lift(stage.run(outcome.value))
        except Exception as e:
            return Failed(e)

    if stage.on_error is None:
        return outcome
    try:
        recovered = stage.on_error(outcome.error)
    except Exception as e:
        return Failed(e)
    if isinstance(recovered, BaseException):
        return Failed(recovered)
    return lift(recovered)


async def _resume(pending: Pending, stages: Sequence[Stage]) -> Any:
    outcome: Outcome = await _settle(pending)
    for stage in stages:
        outcome = apply_stage(stage, outcome)
        if isinstance(outcome, Pending):
            outcome = await _settle(outcome)
    if isinstance(outcome, Failed):
        raise outcome.error
    return outcome.value


async def _settle(pending: Pending) -> Ready | Failed:
    try:
        return Ready(await pending.future)
    except Exception as e:
        return Failed(e)


def fold(stages: Sequence[Stage], initial: Any) -> Outcome:
    """
    Run `stages` left to right starting from `initial`.

    Stages run synchronously while every result is immediate. As soon as one
    suspends, the rest of the list is chained onto it and a `Pending` outcome
    is returned.
    """
    outcome: Outcome = Ready(initial)
    for index, stage in enumerate(stages):
        if isinstance(outcome, Pending):
            return Pending(asyncio.ensure_future(_resume(outcome, stages[index:])))
        outcome = apply_stage(stage, outcome)
    return outcome
