from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal, Union

ChangeKind = Literal["added", "modified", "deleted"]
RiskLevel = Literal["low", "medium", "high", "critical"]
TrendDirection = Literal["increasing", "decreasing", "stable"]
PatternType = Literal["frequent_changes", "bug_prone_files"]


@dataclass(frozen=True)
class HistoryQuery:
    """Filters passed through to ``git log``. All fields are optional."""

    max_count: int | None = None  # None or 0 means no limit
    from_ref: str | None = None
    to_ref: str | None = None
    author: str | None = None
    since: str | None = None
    until: str | None = None
    file_path: str | None = None  # restrict the log to a single path


@dataclass(frozen=True)
class LogEntry:
    """One raw row of ``git log`` output, before diff resolution."""

    commit_hash: str
    author_name: str
    author_email: str
    message: str
    date: datetime


@dataclass(frozen=True)
class TextDiff:
    file_path: str
    insertions: int
    deletions: int


@dataclass(frozen=True)
class BinaryDiff:
    file_path: str


DiffEntry = Union[TextDiff, BinaryDiff]


@dataclass(frozen=True)
class FileChange:
    """A single file's change within one commit."""

    file_path: str
    change_kind: ChangeKind
    insertions: int
    deletions: int

    @property
    def total_changes(self) -> int:
        return self.insertions + self.deletions


@dataclass(frozen=True)
class DiffResolved:
    """Diff computed successfully; ``changes`` may legitimately be empty."""

    changes: tuple[FileChange, ...]


@dataclass(frozen=True)
class DiffRecovered:
    """Diff could not be computed and was replaced by an empty change list."""

    reason: str

    @property
    def changes(self) -> tuple[FileChange, ...]:
        return ()


DiffOutcome = Union[DiffResolved, DiffRecovered]


@dataclass(frozen=True)
class Commit:
    """A commit and the file changes it introduced."""

    commit_hash: str
    author_name: str
    author_email: str
    message: str
    date: datetime
    files: tuple[FileChange, ...] = ()

    @property
    def files_changed(self) -> int:
        return len(self.files)

    @property
    def insertions(self) -> int:
        return sum(f.insertions for f in self.files)

    @property
    def deletions(self) -> int:
        return sum(f.deletions for f in self.files)


@dataclass(frozen=True)
class FileMetrics:
    """Per-file statistics folded from a commit set."""

    file_path: str
    commit_count: int  # commits touching this file, always >= 1
    author_count: int  # distinct author names
    total_changes: int  # insertions + deletions across all commits
    bug_commits: int  # commits whose message matches the bug-fix predicate
    last_modified: datetime
    authors: tuple[str, ...]  # sorted alphabetically
    risk_score: float  # basic score in [0, 1], 2 decimals


@dataclass(frozen=True)
class RiskFactors:
    change_frequency: float
    author_diversity: float
    change_volume: float
    bug_ratio: float
    recency: float = 0.0

    def as_dict(self, include_recency: bool = True) -> dict[str, float]:
        factors = {
            "change_frequency": self.change_frequency,
            "author_diversity": self.author_diversity,
            "change_volume": self.change_volume,
            "bug_ratio": self.bug_ratio,
        }
        if include_recency:
            factors["recency"] = self.recency
        return factors


@dataclass(frozen=True)
class RiskScore:
    """Detailed, factor-decomposed risk for one file."""

    file_path: str
    score: float
    factors: RiskFactors
    recommendations: tuple[str, ...] = ()


@dataclass(frozen=True)
class HotspotMetrics:
    commit_count: int
    author_count: int
    total_changes: int
    bug_commits: int


@dataclass(frozen=True)
class Hotspot:
    file_path: str
    risk_score: float
    risk_level: RiskLevel
    reasons: tuple[str, ...]
    metrics: HotspotMetrics


@dataclass(frozen=True)
class Pattern:
    """A repository-wide signal shared by a group of files."""

    pattern_type: PatternType
    description: str
    confidence: float
    files: tuple[str, ...]


@dataclass(frozen=True)
class ScorePoint:
    date: datetime
    score: float


@dataclass(frozen=True)
class RiskTrend:
    file_path: str
    trend: TrendDirection
    confidence: float
    historical_scores: tuple[ScorePoint, ...]  # sorted by date ascending


@dataclass(frozen=True)
class TeamInsights:
    total_commits: int
    active_contributors: int
    code_ownership: dict[str, float] = field(default_factory=dict)  # author -> share of commits


@dataclass(frozen=True)
class TopRiskFactor:
    file_path: str
    risk_score: float
    top_factor: str
    top_factor_value: float


@dataclass(frozen=True)
class RiskSummary:
    """Repository-level roll-up of per-file risk."""

    total_files: int
    average_risk_score: float
    distribution: dict[str, int]  # risk level -> file count
    high_risk_files: int  # critical + high
    medium_risk_files: int
    low_risk_files: int
    top_risk_factors: tuple[TopRiskFactor, ...]


@dataclass(frozen=True)
class AnalysisResult:
    repo_path: str
    commits: tuple[Commit, ...]
    file_metrics: tuple[FileMetrics, ...]  # sorted by risk_score descending
    patterns: tuple[Pattern, ...]
    team_insights: TeamInsights
    processing_time_ms: int
