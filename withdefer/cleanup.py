"""Draining of deferred cleanup callbacks.

Each callback is invoked once, in registration order. A callback that raises
is reported and skipped; one that returns an awaitable is started and left to
finish on its own, with a failure reported whenever it happens.

Awaitables are scheduled on the running event loop. Coroutines start eagerly,
so the part of an ``async def`` callback before its first suspension runs
before the next callback in the queue. An awaitable that cannot be scheduled
on the running loop, such as a future bound to another loop, is reported like
any other async failure.

Without a running loop, the awaitable is driven to completion on a private
loop instead. A synchronous action run outside an event loop therefore waits
for its async cleanup callbacks, one at a time, before the next one starts.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable
from functools import partial
from typing import TYPE_CHECKING, Any

from frozendict import frozendict

from withdefer.diagnostics import (
    CleanupDiagnostic,
    DiagnosticKind,
    DiagnosticSink,
    get_diagnostic_sink,
)
from withdefer.errors import CleanupError, ensure_error
from withdefer.types import Callback

if TYPE_CHECKING:
    from withdefer.queue import DeferQueue

logger = logging.getLogger(__name__)


def _callback_name(callback: Callback) -> str:
    name = getattr(callback, "__qualname__", None)
    if isinstance(name, str):
        return name
    return repr(callback)


async def _await(awaitable: Awaitable[Any]) -> Any:
    return await awaitable


class CleanupRunner:
    """Invokes cleanup callbacks and reports their failures to a sink.

    Args:
        sink: Where diagnostics go. ``None`` means the process-wide sink at
            the time of each report (see :func:`set_diagnostic_sink`).
    """

    def __init__(self, sink: DiagnosticSink | None = None) -> None:
        self._sink = sink
        self._pending: set[asyncio.Future[Any]] = set()

    @property
    def sink(self) -> DiagnosticSink:
        if self._sink is not None:
            return self._sink
        return get_diagnostic_sink()

    @property
    def pending(self) -> frozenset[asyncio.Future[Any]]:
        """Asynchronous cleanup tails that have not finished yet."""
        return frozenset(self._pending)

    def drain(self, queue: DeferQueue) -> None:
        queue.drain(self)

    def invoke(self, callback: Callback, index: int = 0) -> None:
        """Run one callback. Never raises.

        With no running event loop, an awaitable returned by ``callback`` is
        awaited to completion before this returns.
        """
        try:
            result = callback()
        except Exception as exc:
            self._report(DiagnosticKind.SYNC, exc, callback, index)
            return
        if inspect.isawaitable(result):
            self._follow(result, callback, index)

    async def wait_pending(self) -> None:
        """Wait until every asynchronous cleanup tail has finished."""
        while self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

    def _follow(self, awaitable: Awaitable[Any], callback: Callback, index: int) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._run_detached(awaitable, callback, index)
            return

        try:
            if asyncio.iscoroutine(awaitable):
                task: asyncio.Future[Any] = asyncio.Task(awaitable, loop=loop, eager_start=True)
            else:
                task = asyncio.ensure_future(awaitable, loop=loop)
        except Exception as exc:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            self._report(DiagnosticKind.ASYNC, exc, callback, index)
            return

        if task.done():
            self._settled(task, callback=callback, index=index)
            return
        self._pending.add(task)
        task.add_done_callback(partial(self._settled, callback=callback, index=index))

    def _run_detached(self, awaitable: Awaitable[Any], callback: Callback, index: int) -> None:
        logger.debug("No running event loop; running %s to completion", _callback_name(callback))
        try:
            asyncio.run(_await(awaitable))
        except Exception as exc:
            self._report(DiagnosticKind.ASYNC, exc, callback, index)

    def _settled(self, task: asyncio.Future[Any], *, callback: Callback, index: int) -> None:
        self._pending.discard(task)
        if task.cancelled():
            logger.debug("Deferred callback %s was cancelled", _callback_name(callback))
            return
        exc = task.exception()
        if exc is not None:
            self._report(DiagnosticKind.ASYNC, exc, callback, index)

    def _report(self, kind: DiagnosticKind, raised: Any, callback: Callback, index: int) -> None:
        diagnostic = CleanupDiagnostic(
            kind=kind,
            error=CleanupError(kind.prefix, cause=ensure_error(raised)),
            context=frozendict(index=index, callback=_callback_name(callback)),
        )
        sink = self.sink
        try:
            sink.emit(diagnostic)
        except Exception:
            logger.exception("Diagnostic sink %r failed to record a cleanup failure", sink)


_default_runner = CleanupRunner()


def get_default_runner() -> CleanupRunner:
    """Return the runner used when an entry point is not given one."""
    return _default_runner


__all__ = ["CleanupRunner", "get_default_runner"]
