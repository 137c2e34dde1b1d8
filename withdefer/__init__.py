"""
withdefer - Deferred cleanup with uniform error capture for Python.

An action receives a ``defer`` function for registering cleanup callbacks.
The callbacks run in registration order once the action finishes, whether it
returned, raised, or returned an awaitable that later failed. A failing
callback is reported as a warning and never stops the others.

Example:
    >>> from withdefer import run_capturing
    >>>
    >>> def action(defer):
    ...     defer(lambda: print("cleanup"))
    ...     return 42
    >>>
    >>> value, error = run_capturing(action)
    cleanup
    >>> value
    42
"""

from withdefer.cleanup import CleanupRunner, get_default_runner
from withdefer.config import DeferConfig
from withdefer.decorators import deferred
from withdefer.diagnostics import (
    ASYNC_CLEANUP_PREFIX,
    SYNC_CLEANUP_PREFIX,
    CleanupDiagnostic,
    DiagnosticKind,
    DiagnosticSink,
    LoggingSink,
    RecordingSink,
    get_diagnostic_sink,
    set_diagnostic_sink,
    use_diagnostic_sink,
)
from withdefer.engine import (
    Invocation,
    Phase,
    execute,
    handled,
    run_capturing,
    run_handled,
    run_propagating,
    safe,
    throwing,
)
from withdefer.errors import (
    CleanupError,
    ContextError,
    LateDeferError,
    NonExceptionError,
    PhaseError,
    WithDeferError,
    WrappedError,
    ensure_error,
)
from withdefer.helpers import propagate_error, try_catch
from withdefer.queue import DeferQueue
from withdefer.result import Err, Ok, Result
from withdefer.strategy import Dispatch, Reraise, Strategy, ValueReturn
from withdefer.types import Action, Callback, Defer, OnError

__version__ = "0.1.0"

__all__ = [
    "ASYNC_CLEANUP_PREFIX",
    "SYNC_CLEANUP_PREFIX",
    "Action",
    "Callback",
    "CleanupDiagnostic",
    "CleanupError",
    "CleanupRunner",
    "ContextError",
    "Defer",
    "DeferConfig",
    "DeferQueue",
    "DiagnosticKind",
    "DiagnosticSink",
    "Dispatch",
    "Err",
    "Invocation",
    "LateDeferError",
    "LoggingSink",
    "NonExceptionError",
    "Ok",
    "OnError",
    "Phase",
    "PhaseError",
    "RecordingSink",
    "Reraise",
    "Result",
    "Strategy",
    "ValueReturn",
    "WithDeferError",
    "WrappedError",
    "deferred",
    "ensure_error",
    "execute",
    "get_default_runner",
    "get_diagnostic_sink",
    "handled",
    "propagate_error",
    "run_capturing",
    "run_handled",
    "run_propagating",
    "safe",
    "set_diagnostic_sink",
    "throwing",
    "try_catch",
    "use_diagnostic_sink",
]
