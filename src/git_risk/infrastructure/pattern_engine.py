from __future__ import annotations

from collections.abc import Sequence

from git_risk.domain.models import Commit, Pattern
from git_risk.domain.rules import is_bug_fix_commit

FREQUENT_CHANGE_SHARE = 0.1  # fraction of all commits a file must exceed
FREQUENT_CHANGES_CONFIDENCE = 0.8
BUG_PRONE_CONFIDENCE = 0.7


def _frequently_changed_files(commits: Sequence[Commit]) -> list[str]:
    change_count: dict[str, int] = {}
    for commit in commits:
        for change in commit.files:
            change_count[change.file_path] = change_count.get(change.file_path, 0) + 1
    limit = len(commits) * FREQUENT_CHANGE_SHARE
    return [path for path, count in change_count.items() if count > limit]


def _bug_fix_files(commits: Sequence[Commit]) -> list[str]:
    files: dict[str, None] = {}
    for commit in commits:
        if not is_bug_fix_commit(commit.message):
            continue
        for change in commit.files:
            files.setdefault(change.file_path, None)
    return list(files)


def detect_patterns(commits: Sequence[Commit]) -> list[Pattern]:
    """Repository-wide signals; a pattern with no files is never emitted."""
    patterns: list[Pattern] = []

    frequent = _frequently_changed_files(commits)
    if frequent:
        patterns.append(
            Pattern(
                pattern_type="frequent_changes",
                description="Files that change frequently across commits",
                confidence=FREQUENT_CHANGES_CONFIDENCE,
                files=tuple(frequent),
            )
        )

    bug_prone = _bug_fix_files(commits)
    if bug_prone:
        patterns.append(
            Pattern(
                pattern_type="bug_prone_files",
                description="Files frequently involved in bug fixes",
                confidence=BUG_PRONE_CONFIDENCE,
                files=tuple(bug_prone),
            )
        )

    return patterns
