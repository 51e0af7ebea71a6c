"""Per-file aggregation and team insights over a materialised commit set.

Functions:
- compute_basic_risk_score: four-factor weighted score, rounded to 2 decimals
- calculate_file_metrics: fold commits into FileMetrics, highest risk first
- calculate_team_insights: contributor count and commit-share ownership
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from datetime import datetime

from git_risk.domain.models import Commit, FileMetrics, TeamInsights
from git_risk.domain.rules import clamp_unit, is_bug_fix_commit, round_half_up

# Saturation points: a factor reaches 1.0 at these raw values.
FREQUENCY_CAP = 50
AUTHOR_CAP = 10
VOLUME_CAP = 1000

BASIC_WEIGHTS = {
    "change_frequency": 0.3,
    "author_diversity": 0.2,
    "change_volume": 0.3,
    "bug_ratio": 0.2,
}


def compute_basic_risk_score(
    commit_count: int, author_count: int, total_changes: int, bug_commits: int,
) -> float:
    change_frequency = clamp_unit(commit_count / FREQUENCY_CAP)
    author_diversity = clamp_unit(author_count / AUTHOR_CAP)
    change_volume = clamp_unit(total_changes / VOLUME_CAP)
    bug_ratio = clamp_unit(bug_commits / commit_count) if commit_count > 0 else 0.0

    score = (
        change_frequency * BASIC_WEIGHTS["change_frequency"]
        + author_diversity * BASIC_WEIGHTS["author_diversity"]
        + change_volume * BASIC_WEIGHTS["change_volume"]
        + bug_ratio * BASIC_WEIGHTS["bug_ratio"]
    )
    return round_half_up(clamp_unit(score))


def calculate_file_metrics(commits: Iterable[Commit]) -> list[FileMetrics]:
    """Fold *commits* into one FileMetrics per distinct path.

    Output depends only on the multiset of commits: authors are sorted by
    name and files by (-risk_score, file_path).
    """
    commit_count: defaultdict[str, int] = defaultdict(int)
    authors: defaultdict[str, set[str]] = defaultdict(set)
    total_changes: defaultdict[str, int] = defaultdict(int)
    bug_commits: defaultdict[str, int] = defaultdict(int)
    last_modified: dict[str, datetime] = {}

    for commit in commits:
        is_bug_fix = is_bug_fix_commit(commit.message)
        for change in commit.files:
            path = change.file_path
            commit_count[path] += 1
            authors[path].add(commit.author_name)
            total_changes[path] += change.insertions + change.deletions
            if is_bug_fix:
                bug_commits[path] += 1
            if path not in last_modified or commit.date > last_modified[path]:
                last_modified[path] = commit.date

    files: list[FileMetrics] = []
    for path, count in commit_count.items():
        author_count = len(authors[path])
        files.append(
            FileMetrics(
                file_path=path,
                commit_count=count,
                author_count=author_count,
                total_changes=total_changes[path],
                bug_commits=bug_commits[path],
                last_modified=last_modified[path],
                authors=tuple(sorted(authors[path])),
                risk_score=compute_basic_risk_score(
                    count, author_count, total_changes[path], bug_commits[path],
                ),
            )
        )

    files.sort(key=lambda m: (-m.risk_score, m.file_path))
    return files


def calculate_team_insights(commits: Iterable[Commit]) -> TeamInsights:
    author_commits: defaultdict[str, int] = defaultdict(int)
    total_commits = 0
    for commit in commits:
        author_commits[commit.author_name] += 1
        total_commits += 1

    code_ownership = {
        author: round_half_up(count / total_commits)
        for author, count in sorted(author_commits.items())
    }
    return TeamInsights(
        total_commits=total_commits,
        active_contributors=len(author_commits),
        code_ownership=code_ownership,
    )
