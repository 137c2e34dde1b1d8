"""Per-invocation queue of cleanup callbacks."""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING

from withdefer.errors import LateDeferError
from withdefer.types import Callback

if TYPE_CHECKING:
    from withdefer.cleanup import CleanupRunner


class DeferQueue:
    """Append-only FIFO of cleanup callbacks owned by a single invocation.

    The queue accepts registrations until it is drained. Draining pops each
    callback before handing it to the runner, so every callback runs at most
    once even if draining is requested again.
    """

    __slots__ = ("_callbacks", "_closed", "_drained_count")

    def __init__(self) -> None:
        self._callbacks: deque[Callback] = deque()
        self._closed = False
        self._drained_count = 0

    def register(self, callback: Callback) -> None:
        """Append ``callback``; it runs after the action settles."""
        if self._closed:
            raise LateDeferError(
                f"Cannot defer {callback!r}: the cleanup queue was already drained"
            )
        if not callable(callback):
            raise TypeError(f"Deferred callback must be callable, got {type(callback).__name__}")
        self._callbacks.append(callback)

    def drain(self, runner: CleanupRunner) -> None:
        """Run every queued callback through ``runner`` in registration order."""
        self._closed = True
        while self._callbacks:
            callback = self._callbacks.popleft()
            runner.invoke(callback, index=self._drained_count)
            self._drained_count += 1

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        return len(self._callbacks)

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"DeferQueue({len(self._callbacks)} pending, {state})"


__all__ = ["DeferQueue"]
