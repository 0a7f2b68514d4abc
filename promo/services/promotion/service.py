from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from promo.core.config import ChangelogConfig
from promo.core.result import Err
from promo.git.repository import VersionControlClient
from promo.output.console import ConsoleProtocol, Style
from promo.services.promotion import changelog
from promo.services.promotion.errors import PromotionError
from promo.services.promotion.gate import evaluate
from promo.services.promotion.model import PromotionOutcome, PromotionRequest, PromotionStep
from promo.services.promotion.notify import NotificationDispatcher
from promo.services.promotion.sequencer import plan_steps, promote
from promo.services.promotion.tags import parse_tag


@dataclass(frozen=True, slots=True)
class PromotionSettings:
    repo_root: Path
    production_branch: str
    develop_branch: str
    remote: str
    changelog: ChangelogConfig


@dataclass(frozen=True, slots=True)
class PromotionDeps:
    repo: VersionControlClient
    dispatcher: NotificationDispatcher
    console: ConsoleProtocol


def _failed(
    deps: PromotionDeps,
    step: PromotionStep,
    error: PromotionError,
    *,
    tag: str | None,
    completed_steps: tuple[PromotionStep, ...] = (),
) -> PromotionOutcome:
    deps.console.error(f"{step}: {error.pretty()}")
    deps.dispatcher.notify("failed", tag=tag, step=step, reason=error.message)
    return PromotionOutcome.failure(
        step, error.pretty(), completed_steps=completed_steps, error_kind=error.kind
    )


def run_promotion(
    *,
    deps: PromotionDeps,
    request: PromotionRequest,
    settings: PromotionSettings,
) -> PromotionOutcome:
    """Gate, changelog and sequencer for one request, with notifications around them."""
    console = deps.console
    console.header(f"Promote {request.source_branch} -> {settings.production_branch}")
    deps.dispatcher.notify("started")

    decision = evaluate(request.review_status, request.base_branch, settings.production_branch)
    if not decision.proceed:
        console.info(f"skipped: {decision.reason}")
        deps.dispatcher.notify("skipped", reason=decision.reason)
        return PromotionOutcome.skip(decision.reason)

    parsed = parse_tag(request.source_branch)
    if isinstance(parsed, Err):
        return _failed(deps, "parse-tag", parsed.error, tag=None)
    tag = parsed.value
    console.info(f"tag: {tag.name}")

    # The changelog commit must land on the source branch, not on whatever
    # the host left checked out (often a detached HEAD).
    checked_out = deps.repo.checkout(request.source_branch)
    if isinstance(checked_out, Err):
        error = PromotionError(
            kind="external_tool",
            message=f"checkout {request.source_branch} failed",
            hint=checked_out.error.message,
        )
        return _failed(deps, "checkout-source", error, tag=tag.name)

    if deps.repo.has_tag(tag.name):
        # A previous run got past create-tag: the changelog is already merged
        # and a new commit here would turn the re-run merges into real merges.
        console.info(f"tag {tag.name} exists, resuming without a new changelog")
    else:
        generated = changelog.generate(
            deps.repo,
            repo_root=settings.repo_root,
            settings=settings.changelog,
            tag=tag,
        )
        if isinstance(generated, Err):
            return _failed(
                deps,
                "changelog",
                generated.error,
                tag=tag.name,
                completed_steps=("checkout-source",),
            )
        console.success(
            f"changelog since {generated.value.since_tag} -> {settings.changelog.path}"
        )

    outcome = promote(
        deps.repo,
        request,
        tag,
        production_branch=settings.production_branch,
        develop_branch=settings.develop_branch,
        remote=settings.remote,
        console=console,
    )

    if outcome.succeeded:
        console.success(f"promoted {request.source_branch} as {tag.name}")
        deps.dispatcher.notify("succeeded", tag=tag.name)
    elif outcome.failed:
        deps.dispatcher.notify("failed", tag=tag.name, step=outcome.failed_step, reason=outcome.reason)
    return outcome


def dry_run_promotion(
    *,
    repo: VersionControlClient,
    console: ConsoleProtocol,
    request: PromotionRequest,
    settings: PromotionSettings,
) -> PromotionOutcome:
    """Print what a run would do. Nothing is executed and nothing is notified."""
    console.header(f"Dry run: promote {request.source_branch} -> {settings.production_branch}")

    decision = evaluate(request.review_status, request.base_branch, settings.production_branch)
    if not decision.proceed:
        console.info(f"would skip: {decision.reason}")
        return PromotionOutcome.skip(decision.reason)

    parsed = parse_tag(request.source_branch)
    if isinstance(parsed, Err):
        console.error(parsed.error.pretty())
        return PromotionOutcome.failure("parse-tag", parsed.error.pretty(), error_kind="parse_error")
    tag = parsed.value

    console.print(f"tag: {tag.name}", Style.DIM)
    console.print(
        f"changelog: {' '.join(settings.changelog.command)} -> {settings.changelog.path}",
        Style.DIM,
    )
    steps = plan_steps(
        repo,
        request,
        tag,
        production_branch=settings.production_branch,
        develop_branch=settings.develop_branch,
        remote=settings.remote,
    )
    for index, planned in enumerate(steps, start=1):
        console.step(index, len(steps), planned.description)
    return PromotionOutcome.skip("dry run")
