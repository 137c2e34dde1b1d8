"""Tests for the invocation phase state machine."""

import asyncio
import logging

import pytest

from withdefer import CleanupRunner, DeferConfig, Invocation, Phase, PhaseError, ValueReturn
from withdefer import engine


def test_sync_invocation_passes_through_draining(runner: CleanupRunner) -> None:
    invocation = Invocation(ValueReturn(), runner)
    seen: list[Phase] = []

    def action(defer):
        seen.append(invocation.phase)
        defer(lambda: seen.append(invocation.phase))
        return None

    assert invocation.phase is Phase.IDLE
    invocation.run(action)

    assert seen == [Phase.RUNNING, Phase.DRAINING]
    assert invocation.phase is Phase.SETTLED


@pytest.mark.asyncio
async def test_async_invocation_passes_through_async_draining(runner: CleanupRunner) -> None:
    invocation = Invocation(ValueReturn(), runner)
    seen: list[Phase] = []

    async def action(defer):
        await asyncio.sleep(0)
        defer(lambda: seen.append(invocation.phase))

    pending = invocation.run(action)
    assert invocation.phase is Phase.RUNNING

    await pending

    assert seen == [Phase.DRAINING_ASYNC]
    assert invocation.phase is Phase.SETTLED


def test_settled_invocation_cannot_run_again(runner: CleanupRunner) -> None:
    invocation = Invocation(ValueReturn(), runner)
    invocation.run(lambda defer: 1)

    with pytest.raises(PhaseError, match="settled -> running"):
        invocation.run(lambda defer: 2)


def test_failed_invocation_settles(runner: CleanupRunner) -> None:
    invocation = Invocation(ValueReturn(), runner)

    def action(defer):
        raise ValueError("boom")

    invocation.run(action)

    assert invocation.phase is Phase.SETTLED


def test_transitions_are_logged_in_debug_mode(
    runner: CleanupRunner, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    monkeypatch.setattr(engine, "DEFAULT_CONFIG", DeferConfig(debug=True))
    caplog.set_level(logging.DEBUG, logger="withdefer.engine")

    Invocation(ValueReturn(), runner).run(lambda defer: None)

    transitions = [m.split(": ", 1)[1] for m in caplog.messages if m.startswith("invocation")]
    assert transitions == ["idle -> running", "running -> draining", "draining -> settled"]
