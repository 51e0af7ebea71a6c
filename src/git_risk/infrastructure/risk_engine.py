"""Risk scoring, hotspot classification and trend inference.

Everything here is a pure function of FileMetrics; the only clock read is
``calculate_risk_scores`` defaulting ``current_time`` to now.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from datetime import datetime, timezone

from git_risk.domain.models import (
    FileMetrics,
    Hotspot,
    HotspotMetrics,
    RiskFactors,
    RiskScore,
    RiskSummary,
    RiskTrend,
    ScorePoint,
    RiskLevel,
    TopRiskFactor,
    TrendDirection,
)
from git_risk.domain.rules import clamp_unit, classify_risk_level, round_half_up
from git_risk.infrastructure.metrics_engine import AUTHOR_CAP, FREQUENCY_CAP, VOLUME_CAP

DETAILED_WEIGHTS = {
    "change_frequency": 0.25,
    "author_diversity": 0.15,
    "change_volume": 0.25,
    "bug_ratio": 0.25,
    "recency": 0.1,
}

RECENCY_WINDOW_DAYS = 30
STABLE_TREND_DELTA = 0.1
STABLE_TREND_CONFIDENCE = 0.8

# Summary buckets are coarser than the hotspot levels in domain.rules.
SUMMARY_CUT_POINTS: tuple[tuple[RiskLevel, float], ...] = (
    ("critical", 0.8),
    ("high", 0.6),
    ("medium", 0.4),
)

RISK_LEVEL_REASONS = {
    "critical": "Extremely high risk score",
    "high": "High risk score",
    "medium": "Medium risk score",
}


def _days_since(last_modified: datetime, now: datetime) -> int:
    if last_modified.tzinfo is None:
        last_modified = last_modified.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return math.floor((now - last_modified).total_seconds() / 86400)


def compute_risk_factors(metrics: FileMetrics, days_since_last_change: int = 0) -> RiskFactors:
    """Normalise raw metrics into [0, 1] factors.

    Recency is 0 for files not changed strictly in the past; otherwise it
    decays as 30 / days, capped at 1.
    """
    if days_since_last_change > 0:
        recency = clamp_unit(1 / (days_since_last_change / RECENCY_WINDOW_DAYS))
    else:
        recency = 0.0
    bug_ratio = (
        clamp_unit(metrics.bug_commits / metrics.commit_count)
        if metrics.commit_count > 0 else 0.0
    )
    return RiskFactors(
        change_frequency=clamp_unit(metrics.commit_count / FREQUENCY_CAP),
        author_diversity=clamp_unit(metrics.author_count / AUTHOR_CAP),
        change_volume=clamp_unit(metrics.total_changes / VOLUME_CAP),
        bug_ratio=bug_ratio,
        recency=recency,
    )


def _recommendations(factors: RiskFactors, score: float) -> list[str]:
    recommendations: list[str] = []
    if factors.change_frequency > 0.7:
        recommendations.append("Consider refactoring this frequently changed file")
    if factors.author_diversity > 0.8:
        recommendations.append("High author diversity - ensure consistent coding standards")
    if factors.change_volume > 0.8:
        recommendations.append("Large change volume - consider breaking into smaller modules")
    if factors.bug_ratio > 0.3:
        recommendations.append("High bug ratio - prioritize for code review and testing")
    if score > 0.8:
        recommendations.append("Critical risk file - immediate attention recommended")
    return recommendations


def score_file(metrics: FileMetrics, days_since_last_change: int = 0) -> RiskScore:
    factors = compute_risk_factors(metrics, days_since_last_change)
    weighted = sum(
        value * DETAILED_WEIGHTS[name] for name, value in factors.as_dict().items()
    )
    score = clamp_unit(weighted)
    return RiskScore(
        file_path=metrics.file_path,
        score=round_half_up(score),
        factors=factors,
        recommendations=tuple(_recommendations(factors, score)),
    )


def calculate_risk_scores(
    file_metrics: Iterable[FileMetrics],
    current_time: datetime | None = None,
) -> list[RiskScore]:
    """Detailed five-factor score for every file, in input order."""
    now = current_time or datetime.now(timezone.utc)
    return [
        score_file(m, _days_since(m.last_modified, now))
        for m in file_metrics
    ]


def _hotspot_reasons(metrics: FileMetrics, level: str) -> list[str]:
    reasons: list[str] = []
    if level in RISK_LEVEL_REASONS:
        reasons.append(RISK_LEVEL_REASONS[level])
    if metrics.commit_count > 30:
        reasons.append(f"High commit frequency ({metrics.commit_count} commits)")
    if metrics.author_count > 5:
        reasons.append(f"Many contributors ({metrics.author_count} authors)")
    if metrics.total_changes > 500:
        reasons.append(f"Large change volume ({metrics.total_changes} changes)")
    if metrics.bug_commits > 0:
        bug_pct = metrics.bug_commits / metrics.commit_count * 100
        reasons.append(f"Bug fixes present ({bug_pct:.1f}% of commits)")
    return reasons


def identify_hotspots(file_metrics: Iterable[FileMetrics], threshold: float) -> list[Hotspot]:
    """Files whose risk_score >= *threshold*, highest first.

    Ties keep their input order.
    """
    hotspots: list[Hotspot] = []
    for m in file_metrics:
        if m.risk_score < threshold:
            continue
        level = classify_risk_level(m.risk_score)
        hotspots.append(
            Hotspot(
                file_path=m.file_path,
                risk_score=m.risk_score,
                risk_level=level,
                reasons=tuple(_hotspot_reasons(m, level)),
                metrics=HotspotMetrics(
                    commit_count=m.commit_count,
                    author_count=m.author_count,
                    total_changes=m.total_changes,
                    bug_commits=m.bug_commits,
                ),
            )
        )
    hotspots.sort(key=lambda h: h.risk_score, reverse=True)
    return hotspots


def _trend_for(delta: float) -> tuple[TrendDirection, float]:
    if abs(delta) < STABLE_TREND_DELTA:
        return "stable", STABLE_TREND_CONFIDENCE
    if delta > 0:
        return "increasing", clamp_unit(delta * 2)
    return "decreasing", clamp_unit(abs(delta) * 2)


def predict_risk_trends(snapshots: Iterable[Iterable[FileMetrics]]) -> list[RiskTrend]:
    """Compare the earliest and latest snapshot of each file.

    Files seen in fewer than two snapshots are skipped.
    """
    by_file: dict[str, list[FileMetrics]] = {}
    for snapshot in snapshots:
        for m in snapshot:
            by_file.setdefault(m.file_path, []).append(m)

    trends: list[RiskTrend] = []
    for path, history in by_file.items():
        if len(history) < 2:
            continue
        ordered = sorted(history, key=lambda m: m.last_modified)
        trend, confidence = _trend_for(ordered[-1].risk_score - ordered[0].risk_score)
        trends.append(
            RiskTrend(
                file_path=path,
                trend=trend,
                confidence=confidence,
                historical_scores=tuple(
                    ScorePoint(date=m.last_modified, score=m.risk_score) for m in ordered
                ),
            )
        )
    return trends


def _summary_level(score: float) -> RiskLevel:
    for level, cut in SUMMARY_CUT_POINTS:
        if score >= cut:
            return level
    return "low"


def summarize_risk(
    file_metrics: Sequence[FileMetrics],
    top_n: int = 10,
    current_time: datetime | None = None,
) -> RiskSummary:
    """Roll per-file risk up into a distribution and the top risk drivers.

    The dominant factor is picked from the four base factors; recency is
    never reported.
    """
    distribution = {"critical": 0, "high": 0, "medium": 0, "low": 0}
    for m in file_metrics:
        distribution[_summary_level(m.risk_score)] += 1

    average = (
        sum(m.risk_score for m in file_metrics) / len(file_metrics)
        if file_metrics else 0.0
    )

    ranked = sorted(file_metrics, key=lambda m: m.risk_score, reverse=True)[:top_n]
    top: list[TopRiskFactor] = []
    for score in calculate_risk_scores(ranked, current_time=current_time):
        base_factors = score.factors.as_dict(include_recency=False)
        name, value = max(base_factors.items(), key=lambda kv: kv[1])
        top.append(
            TopRiskFactor(
                file_path=score.file_path,
                risk_score=score.score,
                top_factor=name,
                top_factor_value=value,
            )
        )

    return RiskSummary(
        total_files=len(file_metrics),
        average_risk_score=round_half_up(average),
        distribution=distribution,
        high_risk_files=distribution["critical"] + distribution["high"],
        medium_risk_files=distribution["medium"],
        low_risk_files=distribution["low"],
        top_risk_factors=tuple(top),
    )
