"""Callable shapes accepted by the defer engine."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any, TypeAlias, TypeVar

T = TypeVar("T")

Callback: TypeAlias = Callable[[], Awaitable[Any] | None]
"""Zero-argument cleanup callback. Its return value is never consumed."""

Defer: TypeAlias = Callable[[Callback], None]
"""Registration handle passed to an action."""

Action: TypeAlias = Callable[[Defer], T | Awaitable[T]]
"""Unit of work run by the engine; receives the registration handle."""

OnError: TypeAlias = Callable[[Exception], None]

__all__ = ["Action", "Callback", "Defer", "OnError"]
