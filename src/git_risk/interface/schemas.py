from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from git_risk.domain.models import AnalysisResult, Hotspot, RiskScore, RiskSummary


class _FromDomain(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class FileChangeOut(_FromDomain):
    file_path: str
    change_kind: str
    insertions: int
    deletions: int


class CommitOut(_FromDomain):
    commit_hash: str
    author_name: str
    author_email: str
    message: str
    date: datetime
    files_changed: int
    insertions: int
    deletions: int
    files: list[FileChangeOut]


class FileMetricsOut(_FromDomain):
    file_path: str
    commit_count: int
    author_count: int
    total_changes: int
    bug_commits: int
    last_modified: datetime
    authors: list[str]
    risk_score: float


class PatternOut(_FromDomain):
    pattern_type: str
    description: str
    confidence: float
    files: list[str]


class TeamInsightsOut(_FromDomain):
    total_commits: int
    active_contributors: int
    code_ownership: dict[str, float]


class RiskFactorsOut(_FromDomain):
    change_frequency: float
    author_diversity: float
    change_volume: float
    bug_ratio: float
    recency: float


class RiskScoreOut(_FromDomain):
    file_path: str
    score: float
    factors: RiskFactorsOut
    recommendations: list[str]


class HotspotMetricsOut(_FromDomain):
    commit_count: int
    author_count: int
    total_changes: int
    bug_commits: int


class HotspotOut(_FromDomain):
    file_path: str
    risk_score: float
    risk_level: str
    reasons: list[str]
    metrics: HotspotMetricsOut


class TopRiskFactorOut(_FromDomain):
    file_path: str
    risk_score: float
    top_factor: str
    top_factor_value: float


class RiskSummaryOut(_FromDomain):
    total_files: int
    average_risk_score: float
    distribution: dict[str, int]
    high_risk_files: int
    medium_risk_files: int
    low_risk_files: int
    top_risk_factors: list[TopRiskFactorOut]


class AnalysisReport(BaseModel):
    repo_path: str
    processing_time_ms: int
    total_commits: int
    hotspot_threshold: float
    file_metrics: list[FileMetricsOut]
    patterns: list[PatternOut]
    team_insights: TeamInsightsOut
    risk_scores: list[RiskScoreOut]
    hotspots: list[HotspotOut]
    summary: RiskSummaryOut
    commits: list[CommitOut] = []


def build_report(
    result: AnalysisResult,
    risk_scores: list[RiskScore],
    hotspots: list[Hotspot],
    summary: RiskSummary,
    hotspot_threshold: float,
    include_commits: bool = False,
) -> AnalysisReport:
    return AnalysisReport(
        repo_path=result.repo_path,
        processing_time_ms=result.processing_time_ms,
        total_commits=len(result.commits),
        hotspot_threshold=hotspot_threshold,
        file_metrics=[FileMetricsOut.model_validate(m) for m in result.file_metrics],
        patterns=[PatternOut.model_validate(p) for p in result.patterns],
        team_insights=TeamInsightsOut.model_validate(result.team_insights),
        risk_scores=[RiskScoreOut.model_validate(s) for s in risk_scores],
        hotspots=[HotspotOut.model_validate(h) for h in hotspots],
        summary=RiskSummaryOut.model_validate(summary),
        commits=(
            [CommitOut.model_validate(c) for c in result.commits]
            if include_commits else []
        ),
    )
