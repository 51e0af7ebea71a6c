import argparse
import logging
import sys
from datetime import datetime, timezone

from pydantic import ValidationError

from git_risk.application.use_cases import analyze_repository
from git_risk.config import load_settings
from git_risk.domain.errors import AnalysisCancelledError, HistoryQueryError, RepositoryError
from git_risk.infrastructure.git_cli_reader import GitCliReader
from git_risk.infrastructure.risk_engine import (
    calculate_risk_scores,
    identify_hotspots,
    summarize_risk,
)
from git_risk.interface.schemas import build_report
from git_risk.logging_config import setup_logging

logger = logging.getLogger(__name__)


def _parse_threshold(value: str) -> float:
    """Parse a hotspot threshold in [0, 1]."""
    try:
        threshold = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid threshold '{value}'. Use a number, e.g. 0.6")
    if not 0.0 <= threshold <= 1.0:
        raise argparse.ArgumentTypeError(f"Threshold must be between 0 and 1, got {value}")
    return threshold


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid number '{value}'")
    if number < 1:
        raise argparse.ArgumentTypeError(f"Expected a positive number, got {value}")
    return number


def _error_exit(msg: str) -> None:
    """Print error message to stderr and exit with code 1."""
    print(f"Error: {msg}", file=sys.stderr)
    sys.exit(1)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="git-risk",
        description="Per-file risk signals mined from git history (JSON on stdout)",
    )
    parser.add_argument(
        "repo_path", nargs="?", default=None,
        help="Path to a local git repository (default: $GIT_RISK_REPO_PATH or .)",
    )
    parser.add_argument(
        "--max-commits",
        type=_positive_int,
        default=None,
        metavar="N",
        help="Most recent commits to analyze (default: 1000)",
    )
    parser.add_argument(
        "--threshold",
        type=_parse_threshold,
        default=None,
        metavar="T",
        help="Minimum risk score for a hotspot (default: 0.6)",
    )
    parser.add_argument(
        "--workers",
        type=_positive_int,
        default=None,
        metavar="N",
        help="Threads resolving per-commit diffs (default: 1)",
    )
    parser.add_argument(
        "--include-commits",
        action="store_true",
        help="Include every analyzed commit in the output",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        metavar="PATH",
        help="Append logs to this file",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Errors only")
    return parser


def main() -> None:
    args = _build_parser().parse_args()

    try:
        settings = load_settings(
            repo_path=args.repo_path,
            max_commits=args.max_commits,
            hotspot_threshold=args.threshold,
            diff_workers=args.workers,
            log_file=args.log_file,
        )
    except ValidationError as e:
        _error_exit(f"invalid settings: {e}")

    setup_logging(
        verbose=args.verbose,
        quiet=args.quiet,
        log_file=settings.log_file,
        default_level=settings.log_level,
    )

    repo_path = settings.repo_path
    git_reader = GitCliReader(repo_path)
    try:
        result = analyze_repository(
            git_reader,
            max_commits=settings.max_commits,
            repo_factory=lambda: GitCliReader(repo_path),
            max_workers=settings.diff_workers,
        )
    except (RepositoryError, HistoryQueryError, AnalysisCancelledError) as e:
        _error_exit(str(e))

    file_metrics = list(result.file_metrics)
    now = datetime.now(timezone.utc)
    report = build_report(
        result,
        risk_scores=calculate_risk_scores(file_metrics, current_time=now),
        hotspots=identify_hotspots(file_metrics, settings.hotspot_threshold),
        summary=summarize_risk(file_metrics, current_time=now),
        hotspot_threshold=settings.hotspot_threshold,
        include_commits=args.include_commits,
    )
    logger.debug("Writing report with %d hotspots", len(report.hotspots))
    print(report.model_dump_json(indent=2))
