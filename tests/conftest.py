from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

import pytest

from courier import RawResponse


@dataclass
class TransportCall:
    url: str
    method: str
    headers: dict[str, str]
    body: Any | None
    with_credentials: bool


Responder = Callable[[TransportCall], RawResponse | BaseException]


def ok_responder(_call: TransportCall) -> RawResponse:
    return RawResponse(status=200, body="ok", raw_headers="Content-Type: text/plain")


@dataclass
class FakeTransport:
    """Records calls synchronously; optionally holds responses until `release()`."""

    responder: Responder = ok_responder
    hold: bool = False
    calls: list[TransportCall] = field(default_factory=list)
    _gate: asyncio.Event | None = None

    def request(
        self,
        url: str,
        *,
        method: str,
        headers: Mapping[str, str],
        body: Any | None,
        with_credentials: bool,
    ) -> Any:
        call = TransportCall(url, method, dict(headers), body, with_credentials)
        self.calls.append(call)
        return self._respond(call)

    async def _respond(self, call: TransportCall) -> RawResponse:
        if self.hold:
            if self._gate is None:
                self._gate = asyncio.Event()
            await self._gate.wait()
        result = self.responder(call)
        if isinstance(result, BaseException):
            raise result
        return result

    def release(self) -> None:
        if self._gate is None:
            self._gate = asyncio.Event()
        self._gate.set()


class _Handle:
    def __init__(self) -> None:
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualTimer:
    """A timer that only fires when the test says so."""

    def __init__(self) -> None:
        self.scheduled: list[tuple[float, Callable[[], None]]] = []

    def after(self, seconds: float, callback: Callable[[], None]) -> _Handle:
        self.scheduled.append((seconds, callback))
        return _Handle()

    def fire(self) -> None:
        scheduled, self.scheduled = self.scheduled, []
        for _seconds, callback in scheduled:
            callback()


async def drain(iterations: int = 20) -> None:
    """Let pending loop callbacks run."""
    for _ in range(iterations):
        await asyncio.sleep(0)


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def timer() -> ManualTimer:
    return ManualTimer()
