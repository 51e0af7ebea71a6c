import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from git_risk.domain.errors import (
    AnalysisCancelledError,
    GitCommandError,
    HistoryQueryError,
    RepositoryError,
)
from git_risk.domain.models import (
    AnalysisResult,
    BinaryDiff,
    Commit,
    DiffEntry,
    DiffOutcome,
    DiffRecovered,
    DiffResolved,
    FileChange,
    HistoryQuery,
    LogEntry,
)
from git_risk.domain.ports import GitRepository, RepositoryFactory
from git_risk.domain.rules import classify_change_kind
from git_risk.infrastructure.cancellation import CancellationToken
from git_risk.infrastructure.metrics_engine import (
    calculate_file_metrics,
    calculate_team_insights,
)
from git_risk.infrastructure.pattern_engine import detect_patterns

logger = logging.getLogger(__name__)

DEFAULT_MAX_COMMITS = 1000


def detect_repository(repo: GitRepository) -> None:
    """Raise RepositoryError unless ``repo.repo_path`` is a usable git work tree."""
    path = Path(repo.repo_path)
    if not path.exists():
        raise RepositoryError(repo.repo_path, "path does not exist")
    if not path.is_dir():
        raise RepositoryError(repo.repo_path, "path is not a directory")
    if not repo.is_repository():
        raise RepositoryError(repo.repo_path, "not a git work tree")


def _to_file_change(entry: DiffEntry) -> FileChange:
    if isinstance(entry, BinaryDiff):
        return FileChange(
            file_path=entry.file_path, change_kind="modified",
            insertions=0, deletions=0,
        )
    return FileChange(
        file_path=entry.file_path,
        change_kind=classify_change_kind(entry.insertions, entry.deletions),
        insertions=entry.insertions,
        deletions=entry.deletions,
    )


def resolve_commit_file_changes(repo: GitRepository, commit_hash: str) -> DiffOutcome:
    """Diff *commit_hash* against its parent, recovering locally on failure."""
    try:
        entries = repo.diff_summary(commit_hash)
    except (GitCommandError, ValueError) as e:
        return DiffRecovered(reason=str(e))
    return DiffResolved(changes=tuple(_to_file_change(e) for e in entries))


def get_commit_file_changes(repo: GitRepository, commit_hash: str) -> list[FileChange]:
    """Never raises; a failed diff yields an empty list."""
    return list(resolve_commit_file_changes(repo, commit_hash).changes)


def _query_log(repo: GitRepository, query: HistoryQuery | None) -> list[LogEntry]:
    try:
        return repo.log(query)
    except GitCommandError as e:
        raise HistoryQueryError(
            f"Failed to get commit history: {e.message}", details=e.details,
        ) from e


def _build_commit(entry: LogEntry, outcome: DiffOutcome) -> Commit:
    if isinstance(outcome, DiffRecovered):
        logger.debug("Diff unavailable for %s: %s", entry.commit_hash, outcome.reason)
    return Commit(
        commit_hash=entry.commit_hash,
        author_name=entry.author_name,
        author_email=entry.author_email,
        message=entry.message,
        date=entry.date,
        files=outcome.changes,
    )


def _cancelled(commits: list[Commit], total: int) -> AnalysisCancelledError:
    logger.warning("History extraction cancelled after %d of %d commits", len(commits), total)
    return AnalysisCancelledError(commits, total)


def _resolve_sequential(
    repo: GitRepository,
    entries: list[LogEntry],
    cancel_token: CancellationToken | None,
) -> list[Commit]:
    commits: list[Commit] = []
    for entry in entries:
        if cancel_token is not None and cancel_token.cancelled:
            raise _cancelled(commits, len(entries))
        commits.append(_build_commit(entry, resolve_commit_file_changes(repo, entry.commit_hash)))
    return commits


def _resolve_parallel(
    repo_factory: RepositoryFactory,
    entries: list[LogEntry],
    cancel_token: CancellationToken | None,
    max_workers: int,
) -> list[Commit]:
    # One client handle per worker thread; handles are never shared.
    local = threading.local()

    def _handle() -> GitRepository:
        handle = getattr(local, "repo", None)
        if handle is None:
            handle = repo_factory()
            local.repo = handle
        return handle

    def _task(commit_hash: str) -> DiffOutcome | None:
        if cancel_token is not None and cancel_token.cancelled:
            return None
        return resolve_commit_file_changes(_handle(), commit_hash)

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        outcomes = list(pool.map(_task, [e.commit_hash for e in entries]))

    commits: list[Commit] = []
    for entry, outcome in zip(entries, outcomes):
        if outcome is None:
            raise _cancelled(commits, len(entries))
        commits.append(_build_commit(entry, outcome))
    return commits


def get_commit_history(
    repo: GitRepository,
    query: HistoryQuery | None = None,
    *,
    cancel_token: CancellationToken | None = None,
    repo_factory: RepositoryFactory | None = None,
    max_workers: int = 1,
) -> list[Commit]:
    """Commits in ``git log`` order, each with its resolved file changes.

    With ``max_workers > 1`` and a ``repo_factory``, diffs are resolved on a
    thread pool, one client per thread; order is preserved either way.
    """
    detect_repository(repo)
    entries = _query_log(repo, query)
    if max_workers > 1 and repo_factory is not None and len(entries) > 1:
        commits = _resolve_parallel(repo_factory, entries, cancel_token, max_workers)
    else:
        commits = _resolve_sequential(repo, entries, cancel_token)

    recovered = sum(1 for c in commits if not c.files)
    logger.debug("Resolved %d commits (%d without file changes)", len(commits), recovered)
    return commits


def get_file_history(repo: GitRepository, file_path: str) -> list[FileChange]:
    """Changes to *file_path*, newest first, one per commit that touched it."""
    detect_repository(repo)
    entries = _query_log(repo, HistoryQuery(file_path=file_path))
    history: list[FileChange] = []
    for entry in entries:
        for change in get_commit_file_changes(repo, entry.commit_hash):
            if change.file_path == file_path:
                history.append(change)
                break
    return history


def analyze_repository(
    repo: GitRepository,
    *,
    max_commits: int = DEFAULT_MAX_COMMITS,
    cancel_token: CancellationToken | None = None,
    repo_factory: RepositoryFactory | None = None,
    max_workers: int = 1,
) -> AnalysisResult:
    """Extract recent history and fold it into metrics, patterns and team insights.

    The repository check happens once, inside ``get_commit_history``.
    """
    start = time.perf_counter()
    logger.info("Analyzing %s (max %d commits)", repo.repo_path, max_commits)

    commits = get_commit_history(
        repo,
        HistoryQuery(max_count=max_commits),
        cancel_token=cancel_token,
        repo_factory=repo_factory,
        max_workers=max_workers,
    )
    file_metrics = calculate_file_metrics(commits)
    patterns = detect_patterns(commits)
    team_insights = calculate_team_insights(commits)

    processing_time_ms = int((time.perf_counter() - start) * 1000)
    logger.info(
        "Analyzed %d commits across %d files in %d ms",
        len(commits), len(file_metrics), processing_time_ms,
    )
    return AnalysisResult(
        repo_path=repo.repo_path,
        commits=tuple(commits),
        file_metrics=tuple(file_metrics),
        patterns=tuple(patterns),
        team_insights=team_insights,
        processing_time_ms=processing_time_ms,
    )
