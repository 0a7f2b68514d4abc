"""Result type for explicit error handling.

Every operation that talks to git, the changelog tool or the notification
webhook returns a Result instead of raising. Callers branch on the variant:

    match repo.checkout("release/1.2.3"):
        case Ok(_):
            ...
        case Err(error):
            console.error(error.message)

Expected absences (no tag yet, no upstream) are modelled as ``None`` values
inside ``Ok`` and never as errors.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeGuard


@dataclass(frozen=True, slots=True)
class Ok[T]:
    """Successful result.

    Attributes:
        value: The success value.
    """

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        """Return the contained value."""
        return self.value

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err[E]:
    """Failed result.

    Attributes:
        error: The error value.
    """

    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> None:
        """Raise ValueError carrying the error.

        Raises:
            ValueError: Always, since Err has no value.
        """
        raise ValueError(f"called unwrap on Err: {self.error}")

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


type Result[T, E] = Ok[T] | Err[E]


def is_ok[T, E](result: Result[T, E]) -> TypeGuard[Ok[T]]:
    """Narrow ``result`` to Ok for static type checkers."""
    return isinstance(result, Ok)


def is_err[T, E](result: Result[T, E]) -> TypeGuard[Err[E]]:
    """Narrow ``result`` to Err for static type checkers."""
    return isinstance(result, Err)
