"""The defer engine: run an action, drain its cleanup queue, shape the outcome.

All three entry points share one pipeline. The action is called with a
``defer`` registration handle. If it returns an awaitable, the engine returns
a coroutine that awaits it and then finishes the same way a synchronous
action does: drain the queue, then hand the outcome to the strategy.

Example::

    def read_config(defer):
        handle = open("config.toml")
        defer(handle.close)
        return handle.read()

    text, error = run_capturing(read_config)

    async def fetch(defer):
        conn = await pool.acquire()
        defer(lambda: pool.release(conn))
        return await conn.fetch("SELECT 1")

    rows = await run_propagating(fetch)
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable
from enum import Enum
from typing import Any, TypeVar

from withdefer.cleanup import CleanupRunner, get_default_runner
from withdefer.config import DEFAULT_CONFIG
from withdefer.errors import PhaseError, ensure_error
from withdefer.queue import DeferQueue
from withdefer.result import Err, Ok, Result
from withdefer.strategy import RERAISE, VALUE_RETURN, Dispatch, Strategy
from withdefer.types import Action, OnError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Phase(Enum):
    IDLE = "idle"
    RUNNING = "running"
    DRAINING = "draining"
    DRAINING_ASYNC = "draining_async"
    SETTLED = "settled"


_TRANSITIONS: dict[Phase, frozenset[Phase]] = {
    Phase.IDLE: frozenset({Phase.RUNNING}),
    Phase.RUNNING: frozenset({Phase.DRAINING, Phase.DRAINING_ASYNC}),
    Phase.DRAINING: frozenset({Phase.SETTLED}),
    Phase.DRAINING_ASYNC: frozenset({Phase.SETTLED}),
    Phase.SETTLED: frozenset(),
}


class Invocation:
    """One run of an action with its own cleanup queue.

    Exceptions raised by the action, or by the awaitable it returns, are
    normalized and passed to ``strategy``. Other ``BaseException`` types
    (``KeyboardInterrupt``, ``asyncio.CancelledError``) still drain the queue
    and then propagate unchanged.
    """

    def __init__(self, strategy: Strategy, runner: CleanupRunner | None = None) -> None:
        self.strategy = strategy
        self.runner = runner if runner is not None else get_default_runner()
        self.queue = DeferQueue()
        self.phase = Phase.IDLE

    def run(self, action: Action[T]) -> Any:
        self._advance(Phase.RUNNING)
        try:
            result = action(self.queue.register)
        except Exception as exc:
            return self._settle(Err(ensure_error(exc)), Phase.DRAINING)
        except BaseException:
            self._drain(Phase.DRAINING)
            raise
        if inspect.isawaitable(result):
            return self._settle_async(result)
        return self._settle(Ok(result), Phase.DRAINING)

    async def _settle_async(self, pending: Awaitable[T]) -> Any:
        try:
            value = await pending
        except Exception as exc:
            outcome: Result[Any] = Err(ensure_error(exc))
        except BaseException:
            self._drain(Phase.DRAINING_ASYNC)
            raise
        else:
            outcome = Ok(value)
        return self._settle(outcome, Phase.DRAINING_ASYNC)

    def _settle(self, outcome: Result[Any], draining: Phase) -> Any:
        self._drain(draining)
        self._advance(Phase.SETTLED)
        return self.strategy.adapt(outcome)

    def _drain(self, draining: Phase) -> None:
        self._advance(draining)
        self.runner.drain(self.queue)

    def _advance(self, target: Phase) -> None:
        if target not in _TRANSITIONS[self.phase]:
            raise PhaseError(f"Illegal transition {self.phase.value} -> {target.value}")
        if DEFAULT_CONFIG.debug:
            logger.debug("invocation %#x: %s -> %s", id(self), self.phase.value, target.value)
        self.phase = target


def execute(action: Action[T], strategy: Strategy, *, runner: CleanupRunner | None = None) -> Any:
    """Run ``action`` through the shared pipeline using ``strategy``."""
    return Invocation(strategy, runner).run(action)


def run_capturing(
    action: Action[T], *, runner: CleanupRunner | None = None
) -> Result[T] | Awaitable[Result[T]]:
    """Run ``action`` and return its outcome as a :class:`Result`. Never raises.

    Returns ``Ok(value)`` or ``Err(error)``, or a coroutine resolving to one
    when the action returned an awaitable. Cleanup callbacks have run by the
    time the result is available.
    """
    return execute(action, VALUE_RETURN, runner=runner)


def run_propagating(
    action: Action[T], *, runner: CleanupRunner | None = None
) -> T | Awaitable[T]:
    """Run ``action`` and return its value, raising its error after cleanup."""
    return execute(action, RERAISE, runner=runner)


def run_handled(
    on_error: OnError, action: Action[Any], *, runner: CleanupRunner | None = None
) -> None | Awaitable[None]:
    """Run ``action``, discarding its value and passing a failure to ``on_error``.

    ``on_error`` is called at most once, after cleanup and before this call
    (or the coroutine it returns) completes.
    """
    return execute(action, Dispatch(on_error), runner=runner)


safe = run_capturing
throwing = run_propagating
handled = run_handled

__all__ = [
    "Invocation",
    "Phase",
    "execute",
    "handled",
    "run_capturing",
    "run_handled",
    "run_propagating",
    "safe",
    "throwing",
]
