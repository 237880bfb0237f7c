"""
Interceptors: request/response transforms composed around the transport.

Registration order is inner-to-outer. The first interceptor registered sees the
request last (closest to the transport) and the response first.
"""

from __future__ import annotations

import json
import re
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from typing import Any, TypeAlias

from .pipeline import ErrorFn, RequestConfig, Response, Stage, identity

RequestFn: TypeAlias = Callable[[RequestConfig], Any]
ResponseFn: TypeAlias = Callable[[Response], Any]


@dataclass(frozen=True, slots=True)
class Interceptor:
    """
    Up to four optional transforms.

    `request`/`response` receive the value and return a replacement (or an
    awaitable of one). `request_error`/`response_error` receive a failure and
    either return a recovered value or raise (or return an exception) to keep
    the failure going.
    """

    request: RequestFn | None = None
    response: ResponseFn | None = None
    request_error: ErrorFn | None = None
    response_error: ErrorFn | None = None


_JSON_START = re.compile(r"^\s*(\[|\{[^\{])")
_JSON_END = re.compile(r"[\}\]]\s*$")
_PROTECTION_PREFIX = re.compile(r"^\)\]\}',?\n")


def _is_file_like(value: Any) -> bool:
    return callable(getattr(value, "read", None))


def transform_request_data(config: RequestConfig) -> RequestConfig:
    """JSON-encode any body that is not already text, bytes or a file."""
    body = config.body
    if body is None or isinstance(body, (str, bytes, bytearray)) or _is_file_like(body):
        return config
    config.body = json.dumps(body)
    return config


def transform_response_data(response: Response) -> Response:
    """Strip the JSON protection prefix and parse JSON-looking text bodies."""
    body = response.body
    if isinstance(body, (bytes, bytearray)):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError:
            return response
    if not isinstance(body, str):
        return response

    data: Any = _PROTECTION_PREFIX.sub("", body, count=1)
    if _JSON_START.search(data) and _JSON_END.search(data):
        data = json.loads(data)
    return response.copy(body=data)


DEFAULT_TRANSFORM_DATA = Interceptor(
    request=transform_request_data,
    response=transform_response_data,
)


class Interceptors:
    """
    An ordered list of interceptors.

    A new instance starts with `DEFAULT_TRANSFORM_DATA`; use `Interceptors.of`
    for a list without it.
    """

    def __init__(self, interceptors: Iterable[Interceptor] | None = None) -> None:
        self._interceptors: list[Interceptor] = [DEFAULT_TRANSFORM_DATA]
        if interceptors is not None:
            self._interceptors.extend(interceptors)

    @classmethod
    def of(cls, interceptors: Iterable[Interceptor] = ()) -> Interceptors:
        instance = cls()
        instance._interceptors = list(interceptors)
        return instance

    def add(self, interceptor: Interceptor) -> None:
        self._interceptors.append(interceptor)

    def add_all(self, interceptors: Iterable[Interceptor]) -> None:
        self._interceptors.extend(interceptors)

    def __iter__(self) -> Iterator[Interceptor]:
        return iter(self._interceptors)

    def __len__(self) -> int:
        return len(self._interceptors)

    def construct_chain(self, chain: list[Stage]) -> None:
        """Wrap `chain` with this list's stages, first-registered innermost."""
        for interceptor in self._interceptors:
            chain.insert(
                0,
                Stage(interceptor.request or identity, interceptor.request_error, "request"),
            )
            chain.append(
                Stage(interceptor.response or identity, interceptor.response_error, "response")
            )


def coerce_interceptors(
    value: Interceptor | Interceptors | Iterable[Interceptor] | None,
) -> Interceptors | None:
    """Normalize the per-call `interceptors` option (never adds the defaults)."""
    if value is None or isinstance(value, Interceptors):
        return value
    if isinstance(value, Interceptor):
        return Interceptors.of([value])
    return Interceptors.of(value)
