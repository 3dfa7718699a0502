"""Git utilities for fluide."""

from fluide.git.utils import (
    ensure_repo,
    get_user_name,
    has_repo_marker,
    run_git,
    RepoOutcome,
    GitError,
    GitNotInstalledError,
    GitTimeoutError,
    GitCommandError,
)

__all__ = [
    "ensure_repo",
    "get_user_name",
    "has_repo_marker",
    "run_git",
    "RepoOutcome",
    "GitError",
    "GitNotInstalledError",
    "GitTimeoutError",
    "GitCommandError",
]
