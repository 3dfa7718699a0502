"""Git helpers used while bootstrapping a project."""

import subprocess
from enum import Enum
from pathlib import Path
from typing import Optional

# Default timeout for git operations (seconds)
DEFAULT_GIT_TIMEOUT = 60


# =============================================================================
# Exceptions
# =============================================================================

class GitError(Exception):
    """Base exception for Git operations."""
    pass


class GitNotInstalledError(GitError):
    """Git is not installed or not in PATH."""
    pass


class GitTimeoutError(GitError):
    """Git command timed out."""

    def __init__(self, message: str, timeout: int):
        super().__init__(message)
        self.timeout = timeout


class GitCommandError(GitError):
    """Git command failed with non-zero exit code."""

    def __init__(self, message: str, returncode: int, stderr: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class RepoOutcome(Enum):
    INITIALIZED = "initialized"
    ALREADY_EXISTS = "already_exists"


# =============================================================================
# Core Functions
# =============================================================================

def run_git(
    *args,
    cwd: Optional[Path] = None,
    check: bool = False,
    timeout: int = DEFAULT_GIT_TIMEOUT
) -> subprocess.CompletedProcess:
    """Run a git command with standard options.

    Args:
        *args: Git command arguments
        cwd: Working directory
        check: Raise exception on failure
        timeout: Command timeout in seconds

    Returns:
        CompletedProcess result

    Raises:
        GitNotInstalledError: If git is not installed
        GitTimeoutError: If command times out
        GitCommandError: If check=True and command fails
    """
    cmd = ["git"] + list(args)
    cmd_str = " ".join(cmd)

    try:
        result = subprocess.run(
            cmd,
            cwd=cwd or Path.cwd(),
            capture_output=True,
            text=True,
            timeout=timeout
        )
    except FileNotFoundError:
        raise GitNotInstalledError(
            "Git is not installed or not in PATH. "
            "Please install git: https://git-scm.com/downloads"
        )
    except subprocess.TimeoutExpired:
        raise GitTimeoutError(
            f"Git command timed out after {timeout}s: {cmd_str}",
            timeout=timeout
        )
    if check and result.returncode != 0:
        raise GitCommandError(
            f"Git command failed: {cmd_str}\n{result.stderr}",
            returncode=result.returncode,
            stderr=result.stderr
        )
    return result


def has_repo_marker(path: Path) -> bool:
    """Check whether `path` itself holds a .git directory or file."""
    return (Path(path) / ".git").exists()


def ensure_repo(cwd: Path) -> RepoOutcome:
    """Initialize a git repository in cwd unless one is already there.

    Returns:
        RepoOutcome.ALREADY_EXISTS without touching anything when cwd
        already has a .git marker, RepoOutcome.INITIALIZED otherwise

    Raises:
        GitError: If `git init` cannot be executed or fails
    """
    if has_repo_marker(cwd):
        return RepoOutcome.ALREADY_EXISTS
    run_git("init", cwd=cwd, check=True)
    return RepoOutcome.INITIALIZED


def get_user_name(cwd: Optional[Path] = None) -> Optional[str]:
    """Get the configured git user.name, if any.

    Note:
        Returns None if git is missing or not configured (does not raise).
    """
    try:
        result = run_git("config", "user.name", cwd=cwd, timeout=10)
    except GitError:
        return None
    name = result.stdout.strip()
    return name if result.returncode == 0 and name else None
