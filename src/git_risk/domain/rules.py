"""Classification rules shared by every analysis stage."""

from __future__ import annotations

import math

from git_risk.domain.models import ChangeKind, RiskLevel

BUG_FIX_KEYWORDS: tuple[str, ...] = (
    "fix",
    "bug",
    "issue",
    "error",
    "patch",
    "hotfix",
    "bugfix",
)


def is_bug_fix_commit(message: str) -> bool:
    """Case-insensitive substring match against ``BUG_FIX_KEYWORDS``."""
    lower = message.lower()
    return any(keyword in lower for keyword in BUG_FIX_KEYWORDS)


def classify_change_kind(insertions: int, deletions: int) -> ChangeKind:
    if insertions > 0 and deletions == 0:
        return "added"
    if insertions == 0 and deletions > 0:
        return "deleted"
    return "modified"


def classify_risk_level(score: float) -> RiskLevel:
    if score >= 0.9:
        return "critical"
    if score >= 0.7:
        return "high"
    if score >= 0.5:
        return "medium"
    return "low"


def clamp_unit(value: float) -> float:
    """Clamp *value* into [0, 1]."""
    return max(0.0, min(value, 1.0))


def round_half_up(value: float, digits: int = 2) -> float:
    """Round to *digits* decimals, halves up (0.125 -> 0.13), unlike built-in ``round``."""
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale
