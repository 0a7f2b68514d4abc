from __future__ import annotations

from pathlib import Path

from promo.core.config import ChangelogConfig
from promo.core.result import Err, Ok, Result
from promo.git.repository import VersionControlClient
from promo.platform.process import run as run_process
from promo.services.promotion.errors import PromotionError
from promo.services.promotion.model import Changelog, Tag

# First promotion of a repository: cover the whole history.
DEFAULT_SINCE_TAG = "0.0.0"


def resolve_since_tag(repo: VersionControlClient) -> Result[str, PromotionError]:
    latest = repo.latest_tag()
    if isinstance(latest, Err):
        return Err(
            PromotionError(
                kind="external_tool",
                message="failed to read the latest tag",
                hint=latest.error.message,
            )
        )
    if latest.value is None:
        return Ok(DEFAULT_SINCE_TAG)
    return Ok(latest.value)


def render_command(command: tuple[str, ...], *, since_tag: str, tag: Tag) -> list[str]:
    return [arg.replace("{since}", since_tag).replace("{tag}", tag.name) for arg in command]


def render_commit_message(template: str, *, tag: Tag) -> str:
    return template.replace("{tag}", tag.name)


def _write_changelog(path: Path, content: str) -> Result[None, PromotionError]:
    text = content if content.endswith("\n") else content + "\n"
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as e:
        return Err(
            PromotionError(
                kind="external_tool",
                message=f"failed to write changelog: {e}",
                hint=str(path),
            )
        )
    return Ok(None)


def _commit_changelog(
    repo: VersionControlClient,
    *,
    rel_path: str,
    message: str,
) -> Result[None, PromotionError]:
    added = repo.add(rel_path)
    if isinstance(added, Err):
        return Err(
            PromotionError(kind="external_tool", message="git add failed", hint=added.error.message)
        )

    staged = repo.has_staged_changes()
    if isinstance(staged, Err):
        return Err(
            PromotionError(
                kind="external_tool",
                message="failed to inspect staged changes",
                hint=staged.error.message,
            )
        )
    if not staged.value:
        # Unchanged changelog (re-run after a failed push): nothing to commit.
        return Ok(None)

    committed = repo.commit(message)
    if isinstance(committed, Err):
        return Err(
            PromotionError(
                kind="external_tool",
                message="changelog commit failed",
                hint=committed.error.message,
            )
        )
    return Ok(None)


def generate(
    repo: VersionControlClient,
    *,
    repo_root: Path,
    settings: ChangelogConfig,
    tag: Tag,
    since_tag: str | None = None,
) -> Result[Changelog, PromotionError]:
    """Run the changelog tool, write its output and commit it.

    ``since_tag`` defaults to the latest tag of the repository, or 0.0.0 when
    there is none. The commit lands on the currently checked out branch.
    """
    if since_tag is None:
        resolved = resolve_since_tag(repo)
        if isinstance(resolved, Err):
            return resolved
        since_tag = resolved.value

    cmd = render_command(settings.command, since_tag=since_tag, tag=tag)
    produced = run_process(cmd, cwd=repo_root)
    if isinstance(produced, Err):
        return Err(
            PromotionError(
                kind="external_tool",
                message=f"changelog tool failed: {produced.error}",
                hint=produced.error.detail,
            )
        )

    changelog = Changelog(since_tag=since_tag, content=produced.value)

    written = _write_changelog(repo_root / settings.path, changelog.content)
    if isinstance(written, Err):
        return written

    committed = _commit_changelog(
        repo,
        rel_path=settings.path,
        message=render_commit_message(settings.commit_message, tag=tag),
    )
    if isinstance(committed, Err):
        return committed

    return Ok(changelog)
