"""Result type for explicit error handling.

Every call that can fail for an expected reason (backend lookups, parsing
user input, loading config) returns ``Ok(value)`` or ``Err(error)`` instead
of raising. Callers branch on the variant:

    result = parse_version("1.2.3")
    if isinstance(result, Err):
        return result
    version = result.value

or with pattern matching:

    match backend.find_application(bundle_id):
        case Ok(app):
            ...
        case Err(error):
            ...
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeGuard


@dataclass(frozen=True, slots=True)
class Ok[T]:
    """Successful result carrying ``value``."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def map[U](self, f: Callable[[T], U]) -> Ok[U]:
        """Transform the contained value."""
        return Ok(f(self.value))

    def map_err(self, f: Callable[[object], object]) -> Ok[T]:
        return self

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err[E]:
    """Failed result carrying ``error``."""

    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> None:
        """Raise, since there is no value.

        Raises:
            ValueError: Always, with the error in the message.
        """
        raise ValueError(f"called unwrap on Err: {self.error}")

    def unwrap_or[T](self, default: T) -> T:
        return default

    def map(self, f: Callable[[object], object]) -> Err[E]:
        return self

    def map_err[F](self, f: Callable[[E], F]) -> Err[F]:
        """Transform the contained error."""
        return Err(f(self.error))

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


type Result[T, E] = Ok[T] | Err[E]


def is_ok[T, E](result: Result[T, E]) -> TypeGuard[Ok[T]]:
    """Narrow ``result`` to ``Ok`` for type checkers."""
    return isinstance(result, Ok)


def is_err[T, E](result: Result[T, E]) -> TypeGuard[Err[E]]:
    """Narrow ``result`` to ``Err`` for type checkers."""
    return isinstance(result, Err)
