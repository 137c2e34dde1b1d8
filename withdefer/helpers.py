"""Plain error-capturing helpers built on the defer engine."""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from withdefer.engine import execute
from withdefer.errors import ContextError
from withdefer.result import Err, Result
from withdefer.strategy import VALUE_RETURN

T = TypeVar("T")


def try_catch(action: Callable[[], T | Awaitable[T]]) -> Result[T] | Awaitable[Result[T]]:
    """Run a zero-argument ``action`` and capture its outcome as a :class:`Result`.

    Works like :func:`withdefer.run_capturing` for actions that have nothing
    to clean up::

        value, error = try_catch(lambda: int(raw))
    """
    return execute(lambda _defer: action(), VALUE_RETURN)


def _unwrap_in_context(context: str, outcome: Result[T]) -> T:
    if isinstance(outcome, Err):
        raise ContextError(context, cause=outcome.error)
    return outcome.unwrap()


async def _propagate_async(context: str, pending: Awaitable[Result[T]]) -> T:
    return _unwrap_in_context(context, await pending)


def propagate_error(context: str, action: Callable[[], Any]) -> Any:
    """Return ``action()``, re-raising any failure wrapped with ``context``.

    The raised :class:`ContextError` keeps the normalized original error as
    its ``cause``. Instead of::

        try:
            data = get_data()
        except Exception as e:
            raise RuntimeError("Failed to get data") from e

    write::

        data = propagate_error("Failed to get data", get_data)
    """
    outcome = try_catch(action)
    if inspect.isawaitable(outcome):
        return _propagate_async(context, outcome)
    return _unwrap_in_context(context, outcome)


__all__ = ["propagate_error", "try_catch"]
