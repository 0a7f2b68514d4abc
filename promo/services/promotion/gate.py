"""Approval gate: decide whether a branch may be promoted at all."""

from __future__ import annotations

from promo.services.promotion.model import PromotionDecision, ReviewStatus


def evaluate(
    review_status: ReviewStatus | str,
    base_branch: str,
    production_branch: str,
) -> PromotionDecision:
    """Proceed only for an approved review targeting the production branch.

    Never fails: raw strings go through ReviewStatus.parse, so an unrecognised
    status is a refusal with a reason, not an error.
    """
    status = (
        review_status if isinstance(review_status, ReviewStatus) else ReviewStatus.parse(review_status)
    )
    base = base_branch.strip()
    production = production_branch.strip()

    problems: list[str] = []
    if status is not ReviewStatus.APPROVED:
        problems.append(f"review status is {status.value}, expected approved")
    if not base or base != production:
        problems.append(f"base branch is {base or '<empty>'!r}, expected {production!r}")

    if problems:
        return PromotionDecision(proceed=False, reason="; ".join(problems))
    return PromotionDecision(
        proceed=True,
        reason=f"approved pull request targeting {production}",
    )
