from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

PromotionErrorKind = Literal[
    "invalid_input",
    "parse_error",
    "external_tool",
    "push_failed",
]


@dataclass(frozen=True, slots=True)
class PromotionError:
    """Fatal error of a promotion step.

    A gate refusal is not an error; it is a PromotionDecision with
    ``proceed=False``.
    """

    kind: PromotionErrorKind
    message: str
    hint: str | None = None

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message
