"""Core exception types for reposync."""
from typing import Sequence


class RepoSyncError(Exception):
    """Base exception for all reposync errors."""
    pass


class GitOperationError(RepoSyncError):
    """Raised when a git operation fails."""
    pass


class ToolNotFoundError(GitOperationError):
    """Raised when the git binary cannot be found on the search path."""
    pass


class CommandFailedError(GitOperationError):
    """Raised when a git command exits with a non-zero status.

    Carries the captured output so the operator can diagnose the
    underlying git-level cause.
    """

    def __init__(
        self,
        args: Sequence[str],
        returncode: int,
        stdout: str = "",
        stderr: str = "",
    ):
        self.command = list(args)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr

        message = f"git {' '.join(self.command)} failed with exit code {returncode}"
        if stderr.strip():
            message += f"\nstderr: {stderr.strip()}"
        if stdout.strip():
            message += f"\nstdout: {stdout.strip()}"
        super().__init__(message)


class UnresolvableRefError(RepoSyncError):
    """Raised when a reference is not a branch, tag, or commit of the repo."""
    pass


class UnknownKindError(RepoSyncError):
    """Raised when a reference is qualified with an invalid commit kind."""
    pass


class ConfigurationError(RepoSyncError):
    """Raised when a repository entry in the project configuration is invalid."""
    pass
