"""Exception hierarchy for git-risk."""

from __future__ import annotations

from git_risk.domain.models import Commit


class GitRiskError(Exception):
    """Base exception for all git-risk errors."""

    def __init__(self, message: str, details: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class RepositoryError(GitRiskError):
    """Path is missing, not a directory, or not inside a git work tree."""

    def __init__(self, repo_path: str, reason: str) -> None:
        super().__init__(
            f"Invalid Git repository at path: {repo_path}",
            details={"reason": reason},
        )
        self.repo_path = repo_path
        self.reason = reason


class HistoryQueryError(GitRiskError):
    """The ``git log`` query itself failed."""


class GitCommandError(GitRiskError):
    """A git subprocess exited non-zero or could not be started."""

    def __init__(self, command: list[str], stderr: str, returncode: int | None = None) -> None:
        details = {"command": " ".join(command)}
        if returncode is not None:
            details["returncode"] = str(returncode)
        super().__init__(stderr or "git command failed", details=details)
        self.command = command
        self.stderr = stderr
        self.returncode = returncode


class AnalysisCancelledError(GitRiskError):
    """History extraction was cancelled; holds the commits finished so far."""

    def __init__(self, partial_commits: list[Commit], total: int) -> None:
        super().__init__(
            "Commit history extraction cancelled",
            details={"completed": str(len(partial_commits)), "total": str(total)},
        )
        self.partial_commits = partial_commits
        self.total = total
