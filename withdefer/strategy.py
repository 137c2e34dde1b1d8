"""How a settled outcome is surfaced to the caller of the engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TypeAlias

from withdefer.result import Err, Result
from withdefer.types import OnError


@dataclass(frozen=True)
class ValueReturn:
    """Return the outcome itself; never raises."""

    def adapt(self, outcome: Result[Any]) -> Result[Any]:
        return outcome


@dataclass(frozen=True)
class Reraise:
    """Return the bare value, or raise the normalized error."""

    def adapt(self, outcome: Result[Any]) -> Any:
        if isinstance(outcome, Err):
            raise outcome.error
        return outcome.unwrap()


@dataclass(frozen=True)
class Dispatch:
    """Discard the value; pass a failure to ``handler`` exactly once."""

    handler: OnError

    def adapt(self, outcome: Result[Any]) -> None:
        if isinstance(outcome, Err):
            self.handler(outcome.error)
        return None


Strategy: TypeAlias = ValueReturn | Reraise | Dispatch

VALUE_RETURN = ValueReturn()
RERAISE = Reraise()

__all__ = [
    "RERAISE",
    "VALUE_RETURN",
    "Dispatch",
    "Reraise",
    "Strategy",
    "ValueReturn",
]
