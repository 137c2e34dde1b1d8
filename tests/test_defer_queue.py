"""Tests for DeferQueue registration and draining."""

import pytest

from withdefer import CleanupRunner, DeferQueue, LateDeferError, RecordingSink


def test_drains_in_registration_order(runner: CleanupRunner) -> None:
    calls: list[int] = []
    queue = DeferQueue()
    for i in range(3):
        queue.register(lambda i=i: calls.append(i))

    queue.drain(runner)

    assert calls == [0, 1, 2]
    assert len(queue) == 0


def test_drain_with_no_callbacks_is_a_no_op(runner: CleanupRunner, sink: RecordingSink) -> None:
    queue = DeferQueue()

    queue.drain(runner)

    assert queue.closed
    assert sink.diagnostics == []


def test_each_callback_runs_exactly_once(runner: CleanupRunner) -> None:
    calls: list[str] = []
    queue = DeferQueue()
    queue.register(lambda: calls.append("a"))

    queue.drain(runner)
    queue.drain(runner)

    assert calls == ["a"]


def test_same_callback_registered_twice_runs_twice(runner: CleanupRunner) -> None:
    calls: list[str] = []
    queue = DeferQueue()

    def cleanup() -> None:
        calls.append("cleanup")

    queue.register(cleanup)
    queue.register(cleanup)
    queue.drain(runner)

    assert calls == ["cleanup", "cleanup"]


def test_registering_after_drain_is_rejected(runner: CleanupRunner) -> None:
    queue = DeferQueue()
    queue.drain(runner)

    with pytest.raises(LateDeferError, match="already drained"):
        queue.register(lambda: None)


def test_registering_during_drain_is_reported_not_raised(
    runner: CleanupRunner, sink: RecordingSink
) -> None:
    queue = DeferQueue()
    calls: list[str] = []
    queue.register(lambda: queue.register(lambda: calls.append("late")))
    queue.register(lambda: calls.append("second"))

    queue.drain(runner)

    assert calls == ["second"]
    assert len(sink.diagnostics) == 1
    assert isinstance(sink.causes[0], LateDeferError)


def test_rejects_non_callables() -> None:
    queue = DeferQueue()

    with pytest.raises(TypeError, match="must be callable"):
        queue.register("close")  # type: ignore[arg-type]


def test_callback_is_removed_before_it_runs(runner: CleanupRunner) -> None:
    queue = DeferQueue()
    seen: list[int] = []
    queue.register(lambda: seen.append(len(queue)))
    queue.register(lambda: seen.append(len(queue)))

    queue.drain(runner)

    assert seen == [1, 0]


def test_repr_shows_state() -> None:
    queue = DeferQueue()
    queue.register(lambda: None)

    assert repr(queue) == "DeferQueue(1 pending, open)"
