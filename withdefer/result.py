"""Two-slot outcome returned by the value-return strategy."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any, Generic, NoReturn, TypeVar

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


class Result(Generic[T_co]):
    """Outcome of an action: ``Ok(value)`` or ``Err(error)``.

    A result unpacks into ``(value, None)`` or ``(None, error)``::

        value, error = run_capturing(action)
        if error is not None:
            ...

    Use :meth:`is_ok` when the value itself may be ``None``.
    """

    __slots__ = ()

    def is_ok(self) -> bool:
        return isinstance(self, Ok)

    def is_err(self) -> bool:
        return isinstance(self, Err)

    def ok(self) -> T_co | None:
        """The value slot; ``None`` on failure."""
        return self.value if isinstance(self, Ok) else None

    def err(self) -> Exception | None:
        """The error slot; ``None`` on success."""
        return self.error if isinstance(self, Err) else None

    def unwrap(self) -> T_co:
        """Return the value, or raise the captured error."""
        if isinstance(self, Err):
            raise self.error
        return self.ok()  # type: ignore[return-value]

    def __iter__(self) -> Iterator[Any]:
        return iter((self.ok(), self.err()))

    def __bool__(self) -> bool:
        return self.is_ok()


@dataclass(frozen=True)
class Ok(Result[T], Generic[T]):
    value: T


@dataclass(frozen=True)
class Err(Result[NoReturn]):
    error: Exception


__all__ = ["Err", "Ok", "Result"]
