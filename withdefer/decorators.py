"""Decorator form of the defer engine."""

from __future__ import annotations

import inspect
from collections.abc import Callable
from functools import wraps
from typing import Any, Concatenate, ParamSpec, TypeVar, overload

from withdefer.engine import execute
from withdefer.strategy import RERAISE, Strategy
from withdefer.types import Defer

P = ParamSpec("P")
T = TypeVar("T")

_RECEIVERS = ("self", "cls")


@overload
def deferred(func: Callable[Concatenate[Defer, P], T]) -> Callable[P, Any]: ...


@overload
def deferred(
    *, strategy: Strategy = ...
) -> Callable[[Callable[Concatenate[Defer, P], T]], Callable[P, Any]]: ...


def deferred(func: Any = None, *, strategy: Strategy = RERAISE) -> Any:
    """Run the decorated function through the defer engine on every call.

    The function receives ``defer`` as its first argument, or right after
    ``self`` or ``cls`` on methods; callers do not pass it. By default errors
    propagate after cleanup; pass ``strategy`` to capture or dispatch them
    instead::

        @deferred
        def copy(defer, src, dst):
            reader = open(src, "rb")
            defer(reader.close)
            writer = open(dst, "wb")
            defer(writer.close)
            shutil.copyfileobj(reader, writer)

        @deferred(strategy=ValueReturn())
        async def ping(defer, host):
            ...

        class Store:
            @deferred
            def save(self, defer, record):
                ...

    ``async def`` functions stay awaitable and are marked as coroutine
    functions.
    """

    def decorate(fn: Callable[..., Any]) -> Callable[..., Any]:
        try:
            signature = inspect.signature(fn)
        except (TypeError, ValueError):
            signature = None
        parameters = list(signature.parameters.values()) if signature is not None else []
        # defer follows the receiver on methods
        position = 1 if parameters and parameters[0].name in _RECEIVERS else 0

        @wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            head, rest = args[:position], args[position:]
            return execute(lambda defer: fn(*head, defer, *rest, **kwargs), strategy)

        if signature is not None:
            del parameters[position : position + 1]
            setattr(wrapper, "__signature__", signature.replace(parameters=parameters))

        if inspect.iscoroutinefunction(fn):
            inspect.markcoroutinefunction(wrapper)
        return wrapper

    if func is None:
        return decorate
    return decorate(func)


__all__ = ["deferred"]
