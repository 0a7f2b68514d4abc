from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Literal


class ReviewStatus(StrEnum):
    """Review state of the pull request carrying the release branch."""

    APPROVED = "approved"
    CHANGES_REQUESTED = "changes_requested"
    PENDING = "pending"
    COMMENTED = "commented"
    DISMISSED = "dismissed"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, raw: str | None) -> ReviewStatus:
        """Map a raw host value to a status; anything unrecognised is UNKNOWN.

        Hosts disagree on case and separators ("APPROVED", "changes-requested"),
        so values are normalised before lookup.
        """
        if raw is None:
            return cls.UNKNOWN
        key = raw.strip().lower().replace("-", "_").replace(" ", "_")
        try:
            return cls(key)
        except ValueError:
            return cls.UNKNOWN


PromotionStep = Literal[
    "parse-tag",
    "changelog",
    "checkout-source",
    "merge-production",
    "create-tag",
    "merge-develop",
    "delete-branch",
    "push-production",
    "push-develop",
    "push-tags",
    "push-delete-branch",
]

PromotionEvent = Literal["started", "skipped", "succeeded", "failed"]


@dataclass(frozen=True, slots=True)
class PromotionRequest:
    """Immutable input of one run, built from pull request metadata."""

    source_branch: str
    base_branch: str
    review_status: ReviewStatus


@dataclass(frozen=True, slots=True)
class PromotionDecision:
    proceed: bool
    reason: str


@dataclass(frozen=True, slots=True)
class Tag:
    name: str


@dataclass(frozen=True, slots=True)
class Changelog:
    since_tag: str
    content: str


@dataclass(frozen=True, slots=True)
class RunInfo:
    """Human-readable identity of a run, carried by every notification."""

    name: str
    url: str | None = None

    def label(self) -> str:
        if self.url:
            return f"{self.name} ({self.url})"
        return self.name


@dataclass(frozen=True, slots=True)
class PromotionOutcome:
    """Terminal record of a run.

    Exactly one of ``skipped``, ``succeeded`` or ``failed_step`` is set.
    """

    skipped: bool
    succeeded: bool
    failed_step: PromotionStep | None = None
    reason: str = ""
    completed_steps: tuple[PromotionStep, ...] = ()
    error_kind: str | None = None

    @classmethod
    def skip(cls, reason: str) -> PromotionOutcome:
        return cls(skipped=True, succeeded=False, reason=reason)

    @classmethod
    def success(cls, completed_steps: tuple[PromotionStep, ...]) -> PromotionOutcome:
        return cls(skipped=False, succeeded=True, completed_steps=completed_steps)

    @classmethod
    def failure(
        cls,
        step: PromotionStep,
        reason: str,
        *,
        completed_steps: tuple[PromotionStep, ...] = (),
        error_kind: str | None = None,
    ) -> PromotionOutcome:
        return cls(
            skipped=False,
            succeeded=False,
            failed_step=step,
            reason=reason,
            completed_steps=completed_steps,
            error_kind=error_kind,
        )

    @property
    def failed(self) -> bool:
        return self.failed_step is not None
