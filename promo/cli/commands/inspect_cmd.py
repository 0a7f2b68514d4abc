"""Side-effect free commands: evaluate the gate, derive a tag."""

from __future__ import annotations

from pathlib import Path

import typer

from promo.cli.commands._helpers import exit_with_error
from promo.cli.context import build_context
from promo.core.errors import ErrorCode
from promo.core.result import Err
from promo.services.promotion.gate import evaluate
from promo.services.promotion.tags import parse_tag


def gate(
    review_status: str = typer.Option(
        "", "--review-status", envvar="PROMO_REVIEW_STATUS", help="Review state."
    ),
    base: str = typer.Option(
        "", "--base", envvar=["PROMO_BASE_BRANCH", "CHANGE_TARGET", "GITHUB_BASE_REF"]
    ),
    production: str | None = typer.Option(
        None,
        "--production",
        envvar="PROMO_PRODUCTION_BRANCH",
        help="Production branch (default: from config).",
    ),
    repo: Path | None = typer.Option(
        None, "--repo", envvar="PROMO_REPO", help="Repository clone (default: cwd)."
    ),
    config: Path | None = typer.Option(
        None, "--config", help="Config file (default: <repo>/promo.toml when present)."
    ),
) -> None:
    """Print the gate decision; exit 1 when the promotion would be skipped."""
    ctx = build_context(repo=repo, config_path=config)
    decision = evaluate(review_status, base, production or ctx.config.branches.production)
    typer.echo(f"{'proceed' if decision.proceed else 'skip'}: {decision.reason}")
    if not decision.proceed:
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))


def tag(branch: str = typer.Argument(..., help="Branch name, e.g. release/1.2.3.")) -> None:
    """Print the tag a branch would be promoted as."""
    parsed = parse_tag(branch)
    if isinstance(parsed, Err):
        exit_with_error(parsed.error.pretty(), code=ErrorCode.USER_ERROR)
    typer.echo(parsed.value.name)
