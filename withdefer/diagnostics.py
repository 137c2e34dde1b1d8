"""Diagnostics for failed cleanup callbacks.

Cleanup failures never reach the caller of the engine. They are reported as
:class:`CleanupDiagnostic` records to a :class:`DiagnosticSink`. The default
sink writes warnings to the ``withdefer.cleanup`` logger; tests install a
:class:`RecordingSink` to observe diagnostics deterministically::

    sink = RecordingSink()
    with use_diagnostic_sink(sink):
        run_capturing(action)
    assert sink.messages == ["Error in deferred callback"]
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

from frozendict import frozendict

from withdefer.config import DEFAULT_CONFIG, DeferConfig
from withdefer.errors import CleanupError

logger = logging.getLogger("withdefer.cleanup")

SYNC_CLEANUP_PREFIX = "Error in deferred callback"
ASYNC_CLEANUP_PREFIX = "Error in async deferred callback"


class DiagnosticKind(Enum):
    SYNC = "sync"
    ASYNC = "async"

    @property
    def prefix(self) -> str:
        if self is DiagnosticKind.ASYNC:
            return ASYNC_CLEANUP_PREFIX
        return SYNC_CLEANUP_PREFIX


@dataclass(frozen=True)
class CleanupDiagnostic:
    """A cleanup callback raised, or its awaitable failed."""

    kind: DiagnosticKind
    error: CleanupError
    context: frozendict[str, Any] = field(default_factory=frozendict)

    @property
    def cause(self) -> Any:
        return self.error.cause


class DiagnosticSink(Protocol):
    def emit(self, diagnostic: CleanupDiagnostic) -> None: ...


class LoggingSink:
    """Writes cleanup diagnostics as warnings through stdlib logging."""

    def __init__(
        self,
        config: DeferConfig = DEFAULT_CONFIG,
        log: logging.Logger = logger,
    ) -> None:
        self.config = config
        self.log = log

    def emit(self, diagnostic: CleanupDiagnostic) -> None:
        extra = {f"defer_{key}": value for key, value in diagnostic.context.items()}
        extra["defer_kind"] = diagnostic.kind.value
        exc_info = diagnostic.cause if self.config.cleanup_tracebacks else None
        self.log.warning(
            "%s: %s",
            diagnostic.error.message,
            diagnostic.cause,
            exc_info=exc_info,
            extra=extra,
        )


class RecordingSink:
    """Keeps every diagnostic in memory. Intended for tests."""

    def __init__(self) -> None:
        self.diagnostics: list[CleanupDiagnostic] = []

    def emit(self, diagnostic: CleanupDiagnostic) -> None:
        self.diagnostics.append(diagnostic)

    @property
    def messages(self) -> list[str]:
        return [d.error.message for d in self.diagnostics]

    @property
    def causes(self) -> list[Any]:
        return [d.cause for d in self.diagnostics]

    def clear(self) -> None:
        self.diagnostics.clear()


_default_sink: DiagnosticSink = LoggingSink()


def get_diagnostic_sink() -> DiagnosticSink:
    """Return the process-wide sink used when no runner is injected."""
    return _default_sink


def set_diagnostic_sink(sink: DiagnosticSink | None) -> DiagnosticSink:
    """Install ``sink`` process-wide and return the previous one.

    Passing ``None`` restores a fresh :class:`LoggingSink`.
    """
    global _default_sink
    previous = _default_sink
    _default_sink = sink if sink is not None else LoggingSink()
    return previous


@contextmanager
def use_diagnostic_sink(sink: DiagnosticSink) -> Iterator[DiagnosticSink]:
    """Install ``sink`` for the duration of the ``with`` block."""
    previous = set_diagnostic_sink(sink)
    try:
        yield sink
    finally:
        set_diagnostic_sink(previous)


__all__ = [
    "ASYNC_CLEANUP_PREFIX",
    "SYNC_CLEANUP_PREFIX",
    "CleanupDiagnostic",
    "DiagnosticKind",
    "DiagnosticSink",
    "LoggingSink",
    "RecordingSink",
    "get_diagnostic_sink",
    "set_diagnostic_sink",
    "use_diagnostic_sink",
]
