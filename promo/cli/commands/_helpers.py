"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import NoReturn

import typer

from promo.core.errors import ErrorCode
from promo.services.promotion.model import PromotionOutcome


def exit_with_error(message: str, *, code: ErrorCode) -> NoReturn:
    typer.echo(f"error: {message}", err=True)
    raise typer.Exit(code=int(code))


def error_code_for_kind(kind: str | None) -> ErrorCode:
    if kind in {"parse_error", "invalid_input"}:
        return ErrorCode.USER_ERROR
    if kind == "push_failed":
        return ErrorCode.NETWORK_ERROR
    return ErrorCode.PROMOTION_FAILED


def outcome_exit_code(outcome: PromotionOutcome) -> ErrorCode:
    """Exit status reported to the CI host; a gate skip is not a failure."""
    if outcome.succeeded or outcome.skipped:
        return ErrorCode.OK
    return error_code_for_kind(outcome.error_kind)
