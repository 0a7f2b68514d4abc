from __future__ import annotations

import shutil
from pathlib import Path

import typer

from promo.cli.commands._helpers import exit_with_error, outcome_exit_code
from promo.cli.context import CLIContext, build_context
from promo.core.errors import ErrorCode
from promo.git.repository import Repository
from promo.output.console import Style
from promo.platform.http import RealHttpClient
from promo.services.promotion.model import PromotionOutcome, PromotionRequest, ReviewStatus, RunInfo
from promo.services.promotion.notify import (
    ConsoleNotifier,
    NotificationDispatcher,
    Notifier,
    WebhookNotifier,
)
from promo.services.promotion.service import (
    PromotionDeps,
    PromotionSettings,
    dry_run_promotion,
    run_promotion,
)


def _notifier(ctx: CLIContext, webhook_url: str | None, channel: str | None) -> Notifier:
    notify = ctx.config.notify
    url = webhook_url or notify.webhook_url
    if not url:
        return ConsoleNotifier(ctx.console)
    return WebhookNotifier(
        RealHttpClient(),
        url,
        channel=channel or notify.channel,
        username=notify.username,
    )


def run(
    source: str | None = typer.Option(
        None,
        "--source",
        envvar=["PROMO_SOURCE_BRANCH", "CHANGE_BRANCH", "GITHUB_HEAD_REF"],
        help="Branch to promote (e.g. release/1.2.3).",
    ),
    base: str = typer.Option(
        "",
        "--base",
        envvar=["PROMO_BASE_BRANCH", "CHANGE_TARGET", "GITHUB_BASE_REF"],
        help="Target branch of the pull request.",
    ),
    review_status: str = typer.Option(
        "",
        "--review-status",
        envvar="PROMO_REVIEW_STATUS",
        help="Review state of the pull request (approved, pending, ...).",
    ),
    production: str | None = typer.Option(
        None, "--production", envvar="PROMO_PRODUCTION_BRANCH", help="Production branch."
    ),
    develop: str | None = typer.Option(
        None, "--develop", envvar="PROMO_DEVELOP_BRANCH", help="Development branch."
    ),
    remote: str | None = typer.Option(
        None, "--remote", envvar="PROMO_REMOTE", help="Remote name or URL to push to."
    ),
    webhook_url: str | None = typer.Option(
        None, "--webhook-url", envvar="PROMO_WEBHOOK_URL", help="Notification webhook."
    ),
    channel: str | None = typer.Option(
        None, "--channel", envvar="PROMO_NOTIFY_CHANNEL", help="Notification channel."
    ),
    run_name: str | None = typer.Option(
        None, "--run-name", envvar=["PROMO_RUN_NAME", "BUILD_TAG"], help="Run identifier."
    ),
    run_url: str | None = typer.Option(
        None, "--run-url", envvar=["PROMO_RUN_URL", "BUILD_URL"], help="Link to the run."
    ),
    repo: Path | None = typer.Option(
        None, "--repo", envvar="PROMO_REPO", help="Repository clone (default: cwd)."
    ),
    config: Path | None = typer.Option(
        None, "--config", help="Config file (default: <repo>/promo.toml when present)."
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the plan, change nothing."),
) -> None:
    """Promote an approved release/hotfix branch into production and develop."""
    if not source or not source.strip():
        exit_with_error(
            "no source branch (use --source or PROMO_SOURCE_BRANCH)",
            code=ErrorCode.USER_ERROR,
        )

    if shutil.which("git") is None:
        exit_with_error("git executable not found on PATH", code=ErrorCode.ENV_ERROR)

    ctx = build_context(repo=repo, config_path=config)
    repository = Repository(ctx.repo_root, git_options=ctx.config.git.as_git_options())
    if not repository.exists():
        exit_with_error(f"not a git repository: {ctx.repo_root}", code=ErrorCode.ENV_ERROR)

    request = PromotionRequest(
        source_branch=source.strip(),
        base_branch=base.strip(),
        review_status=ReviewStatus.parse(review_status),
    )
    settings = PromotionSettings(
        repo_root=ctx.repo_root,
        production_branch=production or ctx.config.branches.production,
        develop_branch=develop or ctx.config.branches.develop,
        remote=remote or ctx.config.remote.name,
        changelog=ctx.config.changelog,
    )

    if dry_run:
        outcome = dry_run_promotion(
            repo=repository,
            console=ctx.console,
            request=request,
            settings=settings,
        )
        _finish(ctx, outcome)
        return

    dispatcher = NotificationDispatcher(
        _notifier(ctx, webhook_url, channel),
        ctx.console,
        run=RunInfo(name=run_name or f"promo {request.source_branch}", url=run_url),
        source_branch=request.source_branch,
    )
    outcome = run_promotion(
        deps=PromotionDeps(repo=repository, dispatcher=dispatcher, console=ctx.console),
        request=request,
        settings=settings,
    )
    _finish(ctx, outcome)


def _finish(ctx: CLIContext, outcome: PromotionOutcome) -> None:
    code = outcome_exit_code(outcome)
    if outcome.failed:
        ctx.console.print(f"failed step: {outcome.failed_step}", Style.DIM)
        if outcome.completed_steps:
            ctx.console.print(f"completed: {', '.join(outcome.completed_steps)}", Style.DIM)
    if code.is_error:
        raise typer.Exit(code=int(code))
