from __future__ import annotations

import asyncio
from dataclasses import FrozenInstanceError

import pytest

from courier import RequestConfig, Response
from courier.clients.pipeline import Failed, Pending, Ready, Stage, fold


def _append(suffix: str):
    return lambda value: value + suffix


def test_fold_runs_synchronously_when_no_stage_suspends() -> None:
    outcome = fold([Stage(_append("a")), Stage(_append("b"))], "x")
    assert outcome == Ready("xab")


def test_fold_offers_failure_to_the_next_error_slot() -> None:
    seen: list[str] = []

    def boom(_value: str) -> str:
        raise ValueError("boom")

    def recover(error: BaseException) -> str:
        seen.append(str(error))
        return "recovered"

    outcome = fold(
        [Stage(boom), Stage(_append("skipped")), Stage(_append("!"), on_error=recover)],
        "x",
    )
    # The middle stage has no handler, so the failure skips it unchanged.
    assert outcome == Ready("recovered")
    assert seen == ["boom"]


def test_error_handler_returning_an_exception_keeps_the_failure() -> None:
    replacement = KeyError("k")

    def boom(_value: str) -> str:
        raise ValueError("boom")

    outcome = fold([Stage(boom), Stage(_append("!"), on_error=lambda _e: replacement)], "x")
    assert isinstance(outcome, Failed)
    assert outcome.error is replacement


def test_unhandled_failure_reaches_the_end() -> None:
    def boom(_value: str) -> str:
        raise ValueError("boom")

    outcome = fold([Stage(boom), Stage(_append("a"))], "x")
    assert isinstance(outcome, Failed)
    assert isinstance(outcome.error, ValueError)


@pytest.mark.asyncio
async def test_fold_chains_remaining_stages_after_a_suspension() -> None:
    calls: list[str] = []

    async def slow(value: str) -> str:
        await asyncio.sleep(0)
        calls.append("slow")
        return value + "s"

    def fast(value: str) -> str:
        calls.append("fast")
        return value + "f"

    outcome = fold([Stage(fast), Stage(slow), Stage(fast)], "x")
    assert isinstance(outcome, Pending)
    assert calls == ["fast"]
    assert await outcome.future == "xfsf"
    assert calls == ["fast", "slow", "fast"]


@pytest.mark.asyncio
async def test_async_failure_is_offered_to_later_error_slots() -> None:
    async def boom(_value: str) -> str:
        raise ValueError("late")

    outcome = fold([Stage(boom), Stage(_append("!"), on_error=lambda e: f"handled {e}")], "x")
    assert isinstance(outcome, Pending)
    assert await outcome.future == "handled late"


@pytest.mark.asyncio
async def test_async_unhandled_failure_fails_the_future() -> None:
    async def boom(_value: str) -> str:
        raise ValueError("late")

    outcome = fold([Stage(boom), Stage(_append("!"))], "x")
    assert isinstance(outcome, Pending)
    with pytest.raises(ValueError, match="late"):
        await outcome.future


def test_request_config_freezes() -> None:
    config = RequestConfig(url="/a", headers={"Accept": "x"})
    config.url = "/b"
    config.freeze()

    assert config.frozen
    with pytest.raises(FrozenInstanceError):
        config.url = "/c"
    with pytest.raises(TypeError):
        config.headers["Accept"] = "y"  # type: ignore[index]
    assert config.header("accept") == "x"
    assert config.url == "/b"


def test_response_copy_produces_new_instance() -> None:
    original = Response(status=200, body="raw", headers={"x-a": "1"})
    replaced = original.copy(body={"parsed": True})

    assert replaced is not original
    assert replaced.body == {"parsed": True}
    assert original.body == "raw"
    assert replaced.header("X-A") == "1"
    assert original.copy() == original
    with pytest.raises(FrozenInstanceError):
        original.status = 500  # type: ignore[misc]


def test_defensive_copy_deep_copies_the_body() -> None:
    original = Response(status=200, body={"items": [1]})
    clone = original.defensive_copy()
    clone.body["items"].append(2)
    assert original.body == {"items": [1]}


def test_response_ok_and_str() -> None:
    assert Response(status=204).ok
    assert not Response(status=404).ok
    assert str(Response(status=404, body="nope")) == "HTTP 404: nope"
