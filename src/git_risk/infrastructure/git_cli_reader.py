import logging
import subprocess
from datetime import datetime
from pathlib import Path

from git_risk.domain.errors import GitCommandError
from git_risk.domain.models import BinaryDiff, DiffEntry, HistoryQuery, LogEntry, TextDiff

logger = logging.getLogger(__name__)

# Record and field separators keep multi-word names and odd subjects intact.
_RECORD_SEP = "\x1e"
_FIELD_SEP = "\x1f"
_LOG_FORMAT = "--format=%x1e%H%x1f%aN%x1f%aE%x1f%aI%x1f%s"


class GitCliReader:
    """GitRepository backed by the ``git`` binary.

    Construction never touches the filesystem; ``detect_repository`` is the
    precondition check.
    """

    def __init__(self, repo_path: str) -> None:
        self._path = str(Path(repo_path).resolve())

    @property
    def repo_path(self) -> str:
        return self._path

    def _run(self, *args: str) -> str:
        command = ["git", "-C", self._path, "-c", "core.quotePath=false", *args]
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
            )
        except (FileNotFoundError, NotADirectoryError) as e:
            raise GitCommandError(command, str(e)) from e
        if result.returncode != 0:
            raise GitCommandError(command, result.stderr.strip(), result.returncode)
        return result.stdout

    def is_repository(self) -> bool:
        try:
            output = self._run("rev-parse", "--is-inside-work-tree")
        except GitCommandError:
            return False
        return output.strip() == "true"

    def has_commits(self) -> bool:
        try:
            self._run("rev-parse", "--verify", "--quiet", "HEAD")
        except GitCommandError:
            return False
        return True

    def log(self, query: HistoryQuery | None = None) -> list[LogEntry]:
        query = query or HistoryQuery()
        if not (query.from_ref and query.to_ref) and not self.has_commits():
            # Unborn HEAD: git log fails, but the history is simply empty.
            return []
        output = self._run(*_build_log_args(query))
        return _parse_log(output)

    def diff_summary(self, commit_hash: str) -> list[DiffEntry]:
        """Per-path line counts of *commit_hash* against its first parent.

        Raises GitCommandError for the root commit, which has no parent.
        """
        output = self._run(
            "diff", "--numstat", "--no-renames", f"{commit_hash}^", commit_hash,
        )
        return _parse_numstat(output)


def _build_log_args(query: HistoryQuery) -> list[str]:
    args = ["log", _LOG_FORMAT]
    if query.max_count:
        args.append(f"--max-count={query.max_count}")
    if query.author:
        args.append(f"--author={query.author}")
    if query.since:
        args.append(f"--since={query.since}")
    if query.until:
        args.append(f"--until={query.until}")
    # A range is only applied when both ends are given.
    if query.from_ref and query.to_ref:
        args.append(f"{query.from_ref}...{query.to_ref}")
    if query.file_path:
        args.extend(["--", query.file_path])
    return args


def _parse_log(output: str) -> list[LogEntry]:
    entries: list[LogEntry] = []
    for record in output.split(_RECORD_SEP):
        record = record.strip("\n")
        if not record:
            continue
        fields = record.split(_FIELD_SEP, 4)
        if len(fields) != 5:
            logger.debug("Skipping malformed log record: %r", record[:80])
            continue
        commit_hash, author_name, author_email, date_str, message = fields
        entries.append(
            LogEntry(
                commit_hash=commit_hash.strip(),
                author_name=author_name,
                author_email=author_email,
                message=message.strip(),
                date=datetime.fromisoformat(date_str.strip()),
            )
        )
    return entries


def _parse_numstat(output: str) -> list[DiffEntry]:
    entries: list[DiffEntry] = []
    for line in output.splitlines():
        if not line.strip():
            continue
        # numstat line: <added>\t<deleted>\t<file>
        parts = line.split("\t", 2)
        if len(parts) != 3:
            continue
        added_str, deleted_str, file_path = parts
        # Binary files show "-" for added/deleted
        if not (added_str.isdigit() and deleted_str.isdigit()):
            entries.append(BinaryDiff(file_path=file_path))
            continue
        entries.append(
            TextDiff(
                file_path=file_path,
                insertions=int(added_str),
                deletions=int(deleted_str),
            )
        )
    return entries
