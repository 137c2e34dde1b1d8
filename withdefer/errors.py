"""Error types and the error normalizer used by the defer engine."""

from __future__ import annotations

import json
from typing import Any


class WithDeferError(Exception):
    """Base class for errors raised by withdefer itself."""


class WrappedError(WithDeferError):
    """An error carrying a message and a reference to the error it wraps.

    The wrapped value is kept on ``cause`` explicitly. ``__cause__`` is set as
    well when the cause is an exception so tracebacks show the chain.

    Attributes:
        message: Description of the failure.
        cause: The underlying error (or raw value) this error wraps.
    """

    def __init__(self, message: str, cause: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        if isinstance(cause, BaseException):
            self.__cause__ = cause

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, cause={self.cause!r})"


class NonExceptionError(WrappedError):
    """Synthesized by :func:`ensure_error` for values that are not exceptions."""


class ContextError(WrappedError):
    """Raised by :func:`withdefer.propagate_error` with the caller's context."""


class CleanupError(WrappedError):
    """Describes a failed cleanup callback. Reported, never raised."""


class LateDeferError(WithDeferError, RuntimeError):
    """Raised when a callback is registered on a queue that was already drained."""


class PhaseError(WithDeferError, RuntimeError):
    """Raised when an invocation attempts an illegal phase transition."""


def _describe(value: Any) -> str:
    if value is None:
        return "None"
    if isinstance(value, (dict, list, tuple)):
        try:
            return json.dumps(value)
        except (TypeError, ValueError, RecursionError):
            pass
    try:
        return str(value)
    except Exception:
        return object.__repr__(value)


def ensure_error(value: Any) -> Exception:
    """Return ``value`` if it is an exception, otherwise wrap it in one.

    Never raises. Containers are rendered as JSON when possible; circular or
    unserializable values fall back to ``str``. The original value is kept
    as the ``cause`` of the synthesized error.

    Example::

        try:
            risky()
        except Exception as e:
            err = ensure_error(e)  # always an Exception
    """
    if isinstance(value, Exception):
        return value
    return NonExceptionError(
        f"Non-exception value was raised: {_describe(value)}", cause=value
    )


__all__ = [
    "CleanupError",
    "ContextError",
    "LateDeferError",
    "NonExceptionError",
    "PhaseError",
    "WithDeferError",
    "WrappedError",
    "ensure_error",
]
