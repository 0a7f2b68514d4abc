"""Ordered repository mutations of a promotion.

checkout source -> merge into production -> tag -> merge into develop ->
delete source -> push. Steps run once each, in order; the first failure ends
the run and nothing already done is undone. Re-running after fixing the cause
is the recovery path: merges of an already merged branch and a tag already at
HEAD are no-ops.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from promo.core.result import Err, Ok, Result
from promo.git.repository import GitError, VersionControlClient
from promo.output.console import ConsoleProtocol
from promo.services.promotion.gate import evaluate
from promo.services.promotion.model import PromotionOutcome, PromotionRequest, PromotionStep, Tag

StepAction = Callable[[], Result[object, GitError]]


@dataclass(frozen=True, slots=True)
class PlannedStep:
    step: PromotionStep
    description: str
    action: StepAction

    @property
    def is_push(self) -> bool:
        return self.step.startswith("push-")


def _checkout_and_merge(
    client: VersionControlClient, *, target: str, source: str
) -> Result[object, GitError]:
    checked_out = client.checkout(target)
    if isinstance(checked_out, Err):
        return checked_out
    merged = client.merge_no_ff(source)
    if isinstance(merged, Err):
        return merged
    return Ok(merged.value)


def plan_steps(
    client: VersionControlClient,
    request: PromotionRequest,
    tag: Tag,
    *,
    production_branch: str,
    develop_branch: str,
    remote: str,
) -> tuple[PlannedStep, ...]:
    source = request.source_branch
    return (
        PlannedStep(
            "checkout-source",
            f"checkout {source}",
            lambda: client.checkout(source),
        ),
        PlannedStep(
            "merge-production",
            f"merge {source} into {production_branch} (--no-ff)",
            lambda: _checkout_and_merge(client, target=production_branch, source=source),
        ),
        PlannedStep(
            "create-tag",
            f"tag {tag.name} (annotated)",
            lambda: client.create_annotated_tag(tag.name, tag.name),
        ),
        PlannedStep(
            "merge-develop",
            f"merge {source} into {develop_branch} (--no-ff)",
            lambda: _checkout_and_merge(client, target=develop_branch, source=source),
        ),
        PlannedStep(
            "delete-branch",
            f"delete local branch {source}",
            lambda: client.delete_branch(source),
        ),
        PlannedStep(
            "push-production",
            f"push {production_branch}",
            lambda: client.push_branch(remote, production_branch),
        ),
        PlannedStep(
            "push-develop",
            f"push {develop_branch}",
            lambda: client.push_branch(remote, develop_branch),
        ),
        PlannedStep(
            "push-tags",
            "push tags",
            lambda: client.push_tags(remote),
        ),
        PlannedStep(
            "push-delete-branch",
            f"delete remote branch {source}",
            lambda: client.push_delete(remote, source),
        ),
    )


def promote(
    client: VersionControlClient,
    request: PromotionRequest,
    tag: Tag,
    *,
    production_branch: str,
    develop_branch: str,
    remote: str,
    console: ConsoleProtocol | None = None,
) -> PromotionOutcome:
    """Run the promotion steps against ``client``.

    The approval gate is checked again here so the sequencer can never mutate
    a repository for a request the gate refuses.
    """
    decision = evaluate(request.review_status, request.base_branch, production_branch)
    if not decision.proceed:
        return PromotionOutcome.skip(decision.reason)

    steps = plan_steps(
        client,
        request,
        tag,
        production_branch=production_branch,
        develop_branch=develop_branch,
        remote=remote,
    )

    completed: list[PromotionStep] = []
    for index, planned in enumerate(steps, start=1):
        if console is not None:
            console.step(index, len(steps), planned.description)

        result = planned.action()
        if isinstance(result, Err):
            error = result.error
            if console is not None:
                console.error(f"{planned.step}: {error.message}")
            return PromotionOutcome.failure(
                planned.step,
                f"git {error.command}: {error.message}",
                completed_steps=tuple(completed),
                error_kind="push_failed" if planned.is_push else "external_tool",
            )
        completed.append(planned.step)

    return PromotionOutcome.success(tuple(completed))
