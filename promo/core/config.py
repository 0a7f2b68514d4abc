"""Typed configuration loading and access.

This module provides dataclasses for the optional ``promo.toml`` file kept at
the repository root. Every value has a default so a repository without the
file promotes ``release/*`` and ``hotfix/*`` branches into ``master`` and
``develop`` on ``origin``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_str, get_str_list, get_table

__all__ = [
    "BranchesConfig",
    "ChangelogConfig",
    "Config",
    "ConfigError",
    "GitIdentityConfig",
    "NotifyConfig",
    "RemoteConfig",
    "load_config",
    "load_config_or_default",
    "CONFIG_FILENAME",
    "DEFAULT_CHANGELOG_COMMAND",
    "DEFAULT_CHANGELOG_MESSAGE",
    "DEFAULT_CHANGELOG_PATH",
]

CONFIG_FILENAME = "promo.toml"

# -----------------------------------------------------------------------------
# Defaults
# -----------------------------------------------------------------------------

DEFAULT_PRODUCTION_BRANCH = "master"
DEFAULT_DEVELOP_BRANCH = "develop"
DEFAULT_REMOTE = "origin"

DEFAULT_CHANGELOG_PATH = "CHANGELOG.md"
# {since} is the previous tag (or 0.0.0), {tag} the tag being promoted.
DEFAULT_CHANGELOG_COMMAND: tuple[str, ...] = ("git-chglog", "{since}..")
DEFAULT_CHANGELOG_MESSAGE = "docs: update CHANGELOG.md for {tag}"

DEFAULT_NOTIFY_USERNAME = "promo"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class BranchesConfig:
    """Long-lived branches a promotion merges into."""

    production: str = DEFAULT_PRODUCTION_BRANCH
    develop: str = DEFAULT_DEVELOP_BRANCH


@dataclass(frozen=True, slots=True)
class RemoteConfig:
    """Push target.

    ``name`` is either a configured remote ("origin") or a URL. Credentials are
    the host's business: a URL with an embedded token or a credential helper.
    """

    name: str = DEFAULT_REMOTE


@dataclass(frozen=True, slots=True)
class ChangelogConfig:
    path: str = DEFAULT_CHANGELOG_PATH
    command: tuple[str, ...] = DEFAULT_CHANGELOG_COMMAND
    commit_message: str = DEFAULT_CHANGELOG_MESSAGE


@dataclass(frozen=True, slots=True)
class NotifyConfig:
    """Notification channel settings.

    No webhook URL means notifications are printed to the console only.
    """

    webhook_url: str | None = None
    channel: str | None = None
    username: str = DEFAULT_NOTIFY_USERNAME


@dataclass(frozen=True, slots=True)
class GitIdentityConfig:
    """Committer identity for the changelog commit and merge commits.

    CI agents frequently have no global git identity; when set, these are
    passed as ``-c user.name=... -c user.email=...`` on every git call.
    """

    user_name: str | None = None
    user_email: str | None = None

    def as_git_options(self) -> tuple[str, ...]:
        out: list[str] = []
        if self.user_name:
            out += ["-c", f"user.name={self.user_name}"]
        if self.user_email:
            out += ["-c", f"user.email={self.user_email}"]
        return tuple(out)


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    branches: BranchesConfig = field(default_factory=BranchesConfig)
    remote: RemoteConfig = field(default_factory=RemoteConfig)
    changelog: ChangelogConfig = field(default_factory=ChangelogConfig)
    notify: NotifyConfig = field(default_factory=NotifyConfig)
    git: GitIdentityConfig = field(default_factory=GitIdentityConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML)."""
        branches: StrDict = get_table(data, "branches") or {}
        remote: StrDict = get_table(data, "remote") or {}
        changelog: StrDict = get_table(data, "changelog") or {}
        notify: StrDict = get_table(data, "notify") or {}
        git: StrDict = get_table(data, "git") or {}

        if "command" in changelog and get_str_list(changelog, "command") is None:
            raise ValueError("changelog.command must be a non-empty list of strings")

        return cls(
            branches=BranchesConfig(
                production=get_str(branches, "production") or DEFAULT_PRODUCTION_BRANCH,
                develop=get_str(branches, "develop") or DEFAULT_DEVELOP_BRANCH,
            ),
            remote=RemoteConfig(
                name=get_str(remote, "name") or DEFAULT_REMOTE,
            ),
            changelog=ChangelogConfig(
                path=get_str(changelog, "path") or DEFAULT_CHANGELOG_PATH,
                command=get_str_list(changelog, "command") or DEFAULT_CHANGELOG_COMMAND,
                commit_message=get_str(changelog, "commit_message") or DEFAULT_CHANGELOG_MESSAGE,
            ),
            notify=NotifyConfig(
                webhook_url=get_str(notify, "webhook_url"),
                channel=get_str(notify, "channel"),
                username=get_str(notify, "username") or DEFAULT_NOTIFY_USERNAME,
            ),
            git=GitIdentityConfig(
                user_name=get_str(git, "user_name"),
                user_email=get_str(git, "user_email"),
            ),
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to promo.toml

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> Result[Config, ConfigError]:
    """Load config when the file exists, defaults otherwise.

    A missing file is normal; an existing but broken file is still an error.
    """
    if not path.exists():
        return Ok(Config())
    return load_config(path)
