"""Read-only access to git history."""

from .snapshots import CommitInfo, GitError, GitSnapshots

__all__ = ["CommitInfo", "GitError", "GitSnapshots"]
