from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

import promo.cli.commands.run_cmd as run_cmd
from promo import __version__
from promo.cli.app import app
from promo.cli.commands._helpers import outcome_exit_code
from promo.cli.context import CLIContext
from promo.core.config import Config, NotifyConfig
from promo.core.errors import ErrorCode
from promo.output.console import MockConsole
from promo.services.promotion.model import PromotionOutcome
from promo.services.promotion.notify import ConsoleNotifier, WebhookNotifier
from promo.services.promotion.service import PromotionDeps, PromotionSettings

runner = CliRunner()

_HOST_VARS = (
    "PROMO_SOURCE_BRANCH",
    "PROMO_BASE_BRANCH",
    "PROMO_REVIEW_STATUS",
    "PROMO_PRODUCTION_BRANCH",
    "PROMO_DEVELOP_BRANCH",
    "PROMO_REMOTE",
    "PROMO_WEBHOOK_URL",
    "PROMO_NOTIFY_CHANNEL",
    "PROMO_RUN_NAME",
    "PROMO_RUN_URL",
    "PROMO_REPO",
    "CHANGE_BRANCH",
    "CHANGE_TARGET",
    "GITHUB_HEAD_REF",
    "GITHUB_BASE_REF",
    "BUILD_TAG",
    "BUILD_URL",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in _HOST_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(run_cmd.shutil, "which", lambda name: f"/usr/bin/{name}")


@pytest.fixture
def clone(tmp_path: Path) -> Path:
    (tmp_path / ".git").mkdir()
    return tmp_path


def test_version() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_tag_command() -> None:
    result = runner.invoke(app, ["tag", "hotfix/1.2.4"])
    assert result.exit_code == 0
    assert result.output.strip() == "1.2.4"


def test_tag_command_rejects_branch_without_separator() -> None:
    result = runner.invoke(app, ["tag", "main"])
    assert result.exit_code == int(ErrorCode.USER_ERROR)


def test_gate_command_proceed() -> None:
    result = runner.invoke(app, ["gate", "--review-status", "APPROVED", "--base", "master"])
    assert result.exit_code == 0
    assert result.output.startswith("proceed:")


def test_gate_command_skip_reads_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PROMO_REVIEW_STATUS", "changes_requested")
    monkeypatch.setenv("CHANGE_TARGET", "master")

    result = runner.invoke(app, ["gate"])

    assert result.exit_code == int(ErrorCode.USER_ERROR)
    assert result.output.startswith("skip:")


def test_gate_command_reads_production_from_config(clone: Path) -> None:
    (clone / "promo.toml").write_text('[branches]\nproduction = "main"\n')

    result = runner.invoke(
        app, ["gate", "--review-status", "approved", "--base", "main", "--repo", str(clone)]
    )

    assert result.exit_code == 0
    assert result.output.startswith("proceed:")


def test_gate_command_production_option_overrides_config(clone: Path) -> None:
    (clone / "promo.toml").write_text('[branches]\nproduction = "main"\n')

    result = runner.invoke(
        app,
        [
            "gate",
            "--review-status",
            "approved",
            "--base",
            "main",
            "--production",
            "master",
            "--repo",
            str(clone),
        ],
    )

    assert result.exit_code == int(ErrorCode.USER_ERROR)


def test_run_without_source_is_user_error(clone: Path) -> None:
    result = runner.invoke(app, ["run", "--repo", str(clone)])
    assert result.exit_code == int(ErrorCode.USER_ERROR)


def test_run_without_git_executable_is_env_error(
    clone: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(run_cmd.shutil, "which", lambda name: None)
    recorder = _Recorder(PromotionOutcome.success(()))
    monkeypatch.setattr(run_cmd, "run_promotion", recorder)

    result = runner.invoke(app, ["run", "--source", "release/1.2.3", "--repo", str(clone)])

    assert result.exit_code == int(ErrorCode.ENV_ERROR)
    assert recorder.deps is None


def test_run_outside_git_repository_is_env_error(tmp_path: Path) -> None:
    result = runner.invoke(app, ["run", "--source", "release/1.2.3", "--repo", str(tmp_path)])
    assert result.exit_code == int(ErrorCode.ENV_ERROR)


def test_run_with_broken_config_is_env_error(clone: Path) -> None:
    (clone / "promo.toml").write_text("[branches\n")

    result = runner.invoke(app, ["run", "--source", "release/1.2.3", "--repo", str(clone)])

    assert result.exit_code == int(ErrorCode.ENV_ERROR)


def test_run_with_missing_explicit_config_is_env_error(clone: Path) -> None:
    result = runner.invoke(
        app,
        ["run", "--source", "release/1.2.3", "--repo", str(clone), "--config", "nope.toml"],
    )
    assert result.exit_code == int(ErrorCode.ENV_ERROR)


class _Recorder:
    def __init__(self, outcome: PromotionOutcome) -> None:
        self.outcome = outcome
        self.deps: PromotionDeps | None = None
        self.settings: PromotionSettings | None = None

    def __call__(self, *, deps: PromotionDeps, request: object, settings: PromotionSettings):
        self.deps = deps
        self.settings = settings
        return self.outcome


def test_run_merges_config_and_options(clone: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (clone / "promo.toml").write_text(
        '[branches]\nproduction = "main"\n\n[notify]\nwebhook_url = "https://hooks.example.com/x"\n'
    )
    recorder = _Recorder(PromotionOutcome.success(()))
    monkeypatch.setattr(run_cmd, "run_promotion", recorder)
    monkeypatch.setenv("CHANGE_BRANCH", "release/1.2.3")

    result = runner.invoke(app, ["run", "--repo", str(clone), "--remote", "upstream"])

    assert result.exit_code == 0
    assert recorder.settings is not None
    assert recorder.settings.production_branch == "main"
    assert recorder.settings.develop_branch == "develop"
    assert recorder.settings.remote == "upstream"
    assert recorder.deps is not None


def _context(tmp_path: Path, notify: NotifyConfig) -> CLIContext:
    return CLIContext(repo_root=tmp_path, config=Config(notify=notify), console=MockConsole())


def test_notifier_falls_back_to_console(tmp_path: Path) -> None:
    notifier = run_cmd._notifier(_context(tmp_path, NotifyConfig()), None, None)
    assert isinstance(notifier, ConsoleNotifier)


def test_notifier_uses_configured_webhook(tmp_path: Path) -> None:
    ctx = _context(tmp_path, NotifyConfig(webhook_url="https://hooks.example.com/x"))
    assert isinstance(run_cmd._notifier(ctx, None, None), WebhookNotifier)


def test_notifier_webhook_option_wins(tmp_path: Path) -> None:
    notifier = run_cmd._notifier(
        _context(tmp_path, NotifyConfig()), "https://hooks.example.com/y", "#rel"
    )
    assert isinstance(notifier, WebhookNotifier)


@pytest.mark.parametrize(
    ("outcome", "code"),
    [
        (PromotionOutcome.failure("parse-tag", "bad", error_kind="parse_error"), ErrorCode.USER_ERROR),
        (PromotionOutcome.failure("merge-production", "conflict", error_kind="external_tool"), ErrorCode.PROMOTION_FAILED),
        (PromotionOutcome.failure("push-tags", "rejected", error_kind="push_failed"), ErrorCode.NETWORK_ERROR),
    ],
)
def test_run_exit_code_follows_outcome(
    clone: Path, monkeypatch: pytest.MonkeyPatch, outcome: PromotionOutcome, code: ErrorCode
) -> None:
    monkeypatch.setattr(run_cmd, "run_promotion", _Recorder(outcome))

    result = runner.invoke(app, ["run", "--source", "release/1.2.3", "--repo", str(clone)])

    assert result.exit_code == int(code)


class TestOutcomeExitCode:
    def test_success_and_skip_are_ok(self) -> None:
        assert outcome_exit_code(PromotionOutcome.success(())) is ErrorCode.OK
        assert outcome_exit_code(PromotionOutcome.skip("not approved")) is ErrorCode.OK

    def test_unknown_kind_is_promotion_failed(self) -> None:
        outcome = PromotionOutcome.failure("changelog", "tool missing")
        assert outcome_exit_code(outcome) is ErrorCode.PROMOTION_FAILED
