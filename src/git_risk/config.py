"""Settings for the git-risk entry points.

Values come from (lowest to highest priority) defaults, a ``.env`` file,
``GIT_RISK_*`` environment variables and explicit keyword overrides. The
analysis functions never read settings; callers pass values through.
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]


class AnalysisSettings(BaseSettings):
    """Analysis settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="GIT_RISK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    repo_path: str = Field(default=".", description="Repository to analyze")
    max_commits: int = Field(
        default=1000, ge=1, description="Most recent commits to include"
    )
    hotspot_threshold: float = Field(
        default=0.6, ge=0.0, le=1.0, description="Minimum risk score for a hotspot"
    )
    diff_workers: int = Field(
        default=1, ge=1, description="Threads resolving per-commit diffs"
    )
    log_level: LogLevel = Field(default="WARNING", description="Root log level")
    log_file: str | None = Field(default=None, description="Optional log file path")


def load_settings(**overrides: object) -> AnalysisSettings:
    """Build settings, letting non-None keyword overrides win."""
    return AnalysisSettings(**{k: v for k, v in overrides.items() if v is not None})
