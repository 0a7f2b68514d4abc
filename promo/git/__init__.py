"""Git operations."""

from .repository import GitError, Repository, VersionControlClient

__all__ = ["GitError", "Repository", "VersionControlClient"]
