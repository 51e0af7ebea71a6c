from __future__ import annotations

from typing import Callable, Protocol

from git_risk.domain.models import DiffEntry, HistoryQuery, LogEntry


class GitRepository(Protocol):
    """Version-control client the history use cases talk to.

    One handle must not be driven from several threads at once; callers that
    parallelise diff resolution build one handle per worker.
    """

    @property
    def repo_path(self) -> str: ...

    def is_repository(self) -> bool: ...

    def log(self, query: HistoryQuery | None = None) -> list[LogEntry]: ...

    def diff_summary(self, commit_hash: str) -> list[DiffEntry]: ...


RepositoryFactory = Callable[[], GitRepository]
