"""Git repository abstraction.

This module provides the VersionControlClient protocol used by the promotion
services and Repository, its implementation on top of the git CLI. All
operations that can fail return Result types.

Usage:
    repo = Repository(Path("/path/to/clone"))

    match repo.merge_no_ff("release/1.2.3"):
        case Ok(output):
            print(output)
        case Err(e):
            print(f"{e.command} failed: {e.message}")
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

from promo.core.result import Err, Ok, Result
from promo.platform.process import ProcessError
from promo.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0

# git describe exits 128 with one of these when the history simply has no tag.
_NO_TAG_MARKERS = (
    "no names found",
    "no tags can describe",
    "cannot describe",
)

__all__ = [
    "GitError",
    "Repository",
    "VersionControlClient",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git command that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


@runtime_checkable
class VersionControlClient(Protocol):
    """Repository operations a promotion needs.

    Repository is the real implementation; tests substitute an in-memory fake.
    """

    def latest_tag(self) -> Result[str | None, GitError]:
        """Most recent tag reachable from HEAD, or None when there is none."""
        ...

    def has_tag(self, name: str) -> bool: ...

    def checkout(self, branch: str) -> Result[None, GitError]: ...

    def merge_no_ff(self, branch: str) -> Result[str, GitError]:
        """Merge ``branch`` into the current branch, always creating a merge commit.

        Merging a branch that is already contained is a no-op.
        """
        ...

    def create_annotated_tag(self, name: str, message: str) -> Result[None, GitError]:
        """Create an annotated tag at HEAD.

        A tag that already points at HEAD is accepted as-is.
        """
        ...

    def delete_branch(self, branch: str) -> Result[None, GitError]: ...

    def push_branch(self, remote: str, branch: str) -> Result[None, GitError]: ...

    def push_tags(self, remote: str) -> Result[None, GitError]: ...

    def push_delete(self, remote: str, branch: str) -> Result[None, GitError]: ...

    def add(self, path: str) -> Result[None, GitError]: ...

    def has_staged_changes(self) -> Result[bool, GitError]: ...

    def commit(self, message: str) -> Result[None, GitError]: ...


class Repository:
    """Git repository backed by the git CLI.

    Attributes:
        path: Path to the repository root
        git_options: Options placed before the subcommand (``-c user.name=...``)
    """

    def __init__(self, path: Path, *, git_options: tuple[str, ...] = ()) -> None:
        self.path = path
        self.git_options = git_options

    def exists(self) -> bool:
        """Check if this is a valid git repository."""
        return (self.path / ".git").exists()

    def head_sha(self) -> Result[str, GitError]:
        result = self._run(["rev-parse", "HEAD"])
        match result:
            case Err(e):
                return Err(self._error("rev-parse HEAD", e))
            case Ok(stdout):
                return Ok(stdout.strip())

    def tag_sha(self, name: str) -> str | None:
        """Commit a tag points at, None if the tag does not exist."""
        result = self._run(["rev-parse", "-q", "--verify", f"refs/tags/{name}^{{commit}}"])
        match result:
            case Ok(stdout):
                return stdout.strip() or None
            case Err(_):
                return None

    def has_tag(self, name: str) -> bool:
        return self.tag_sha(name) is not None

    def latest_tag(self) -> Result[str | None, GitError]:
        result = self._run(["describe", "--tags", "--abbrev=0"])
        match result:
            case Ok(stdout):
                return Ok(stdout.strip() or None)
            case Err(e):
                text = e.stderr.lower()
                if any(marker in text for marker in _NO_TAG_MARKERS):
                    return Ok(None)
                return Err(self._error("describe --tags", e))

    def checkout(self, branch: str) -> Result[None, GitError]:
        result = self._run(["checkout", branch])
        if isinstance(result, Err):
            return Err(self._error(f"checkout {branch}", result.error))
        return Ok(None)

    def merge_no_ff(self, branch: str) -> Result[str, GitError]:
        result = self._run(["merge", "--no-ff", "--no-edit", branch])
        match result:
            case Err(e):
                return Err(self._error(f"merge --no-ff {branch}", e))
            case Ok(stdout):
                return Ok(stdout.strip())

    def create_annotated_tag(self, name: str, message: str) -> Result[None, GitError]:
        command = f"tag -a {name}"
        existing = self.tag_sha(name)
        if existing is not None:
            head = self.head_sha()
            if isinstance(head, Err):
                return head
            if existing == head.value:
                return Ok(None)
            return Err(
                GitError(
                    command=command,
                    message=f"tag {name} already exists at {existing[:12]}",
                )
            )

        result = self._run(["tag", "-a", name, "-m", message])
        if isinstance(result, Err):
            return Err(self._error(command, result.error))
        return Ok(None)

    def delete_branch(self, branch: str) -> Result[None, GitError]:
        # -D: the changelog commit only exists locally, so -d would refuse
        # when the branch tracks an upstream.
        result = self._run(["branch", "-D", branch])
        if isinstance(result, Err):
            return Err(self._error(f"branch -D {branch}", result.error))
        return Ok(None)

    def push_branch(self, remote: str, branch: str) -> Result[None, GitError]:
        return self._push([remote, f"refs/heads/{branch}:refs/heads/{branch}"], f"push {branch}")

    def push_tags(self, remote: str) -> Result[None, GitError]:
        return self._push([remote, "--tags"], "push --tags")

    def push_delete(self, remote: str, branch: str) -> Result[None, GitError]:
        return self._push([remote, "--delete", branch], f"push --delete {branch}")

    def add(self, path: str) -> Result[None, GitError]:
        result = self._run(["add", "--", path])
        if isinstance(result, Err):
            return Err(self._error(f"add {path}", result.error))
        return Ok(None)

    def has_staged_changes(self) -> Result[bool, GitError]:
        # --quiet: exit 1 means "there are differences", anything else is a failure.
        result = self._run(["diff", "--cached", "--quiet"])
        match result:
            case Ok(_):
                return Ok(False)
            case Err(e) if e.returncode == 1:
                return Ok(True)
            case Err(e):
                return Err(self._error("diff --cached", e))

    def commit(self, message: str) -> Result[None, GitError]:
        result = self._run(["commit", "-m", message])
        if isinstance(result, Err):
            return Err(self._error("commit", result.error))
        return Ok(None)

    def _push(self, args: list[str], command: str) -> Result[None, GitError]:
        result = self._run(["push", *args])
        if isinstance(result, Err):
            return Err(self._error(command, result.error))
        return Ok(None)

    def _error(self, command: str, error: ProcessError) -> GitError:
        return GitError(
            command=command,
            message=error.stderr.strip() or error.stdout.strip() or f"git {command} failed",
            returncode=error.returncode,
        )

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        """Run a git command in this repository."""
        command = args[0] if args else ""
        timeout = (
            _GIT_NETWORK_TIMEOUT_SECONDS
            if command in {"fetch", "pull", "push"}
            else _GIT_TIMEOUT_SECONDS
        )
        return run_process(
            ["git", *self.git_options, "-C", str(self.path), *args],
            cwd=self.path,
            timeout=timeout,
        )
