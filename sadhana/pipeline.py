"""
Pipeline orchestration: load → select month → score → insights → status → report.

This is the only module with I/O (file loading). All analytical logic is
delegated to scoring, insights, status and leaderboard.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from sadhana.config import SadhanaConfig
from sadhana.insights import compute_monthly_insights
from sadhana.models import ActivityLog, coerce_logs
from sadhana.scoring import compute_daily_scores
from sadhana.status import classify_all, classify_overall

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data loading (CLI mode only)
# ---------------------------------------------------------------------------

def load_logs(filepath: Union[str, Path]) -> List[ActivityLog]:
    """Load activity logs from a JSON file: a list, or {"logs": [...]}."""
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in data file {path}: {e}")

    if isinstance(data, dict):
        data = data.get("logs")
    if not data:
        raise ValueError("Data file is empty")
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of activity logs, got {type(data).__name__}")

    logs = coerce_logs(data)
    logger.info("Loaded %d activity logs from %s", len(logs), path)
    return logs


def select_month(logs: List[ActivityLog], year: int, month: int) -> List[ActivityLog]:
    """Logs whose today_date falls in the given month, oldest first."""
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be in 1..12, got {month}")
    chosen = [
        log for log in logs
        if log.today_date.year == year and log.today_date.month == month
    ]
    return sorted(chosen, key=lambda log: log.today_date)


# ---------------------------------------------------------------------------
# Core analysis (PURE FUNCTION — NO FILE I/O)
# ---------------------------------------------------------------------------

def _analyze_logs(
    logs: List[ActivityLog],
    year: int,
    month: int,
    target_rounds: int,
    cfg: SadhanaConfig,
) -> Dict:
    month_logs = select_month(logs, year, month)
    logger.info("Analyzing %d logs for %d-%02d", len(month_logs), year, month)

    # Stage 1: Score
    daily = compute_daily_scores(month_logs, target_rounds, cfg.rules)

    # Stage 2: Insights
    insights = compute_monthly_insights(month_logs, target_rounds, cfg, daily)

    # Stage 3: Status
    statuses = classify_all(insights, year, month, cfg)
    overall = classify_overall(list(statuses.values()))

    records = daily.assign(date=daily["date"].dt.strftime("%Y-%m-%d")).to_dict(orient="records")

    return {
        "period": {"year": year, "month": month},
        "days_logged": len(month_logs),
        "target_rounds": target_rounds,
        "daily": records,
        "insights": insights,
        "statuses": {name: result.as_dict() for name, result in statuses.items()},
        "overall": overall.as_dict(),
    }


# ---------------------------------------------------------------------------
# Public Entry Points
# ---------------------------------------------------------------------------

def analyze(
    filepath: Union[str, Path],
    year: int,
    month: int,
    target_rounds: Optional[int] = None,
    cfg: Optional[SadhanaConfig] = None,
) -> Dict:
    """
    CLI-compatible entry point.
    Reads a JSON file and runs the monthly analysis.
    """
    if cfg is None:
        cfg = SadhanaConfig()
    if target_rounds is None:
        target_rounds = cfg.rules.chanting.default_target_rounds

    logs = load_logs(filepath)
    return _analyze_logs(logs, year, month, target_rounds, cfg)


def analyze_data(
    data: List[Union[ActivityLog, Dict[str, Any]]],
    year: int,
    month: int,
    target_rounds: Optional[int] = None,
    cfg: Optional[SadhanaConfig] = None,
) -> Dict:
    """
    Backend / UI integration entry point.

    Accepts ActivityLog objects or API-shaped dicts directly.
    An empty list yields an all-empty month rather than an error.
    """
    if cfg is None:
        cfg = SadhanaConfig()
    if target_rounds is None:
        target_rounds = cfg.rules.chanting.default_target_rounds

    return _analyze_logs(coerce_logs(data), year, month, target_rounds, cfg)
