"""
SADHANA v1.0 — Deterministic Sadhana Scoring & Insight Engine

Scores a devotee's daily practice log (chanting, reading, association,
exercise, regulative principles, arati, sleep and wake discipline) and
summarizes a month of logs into habit insights, health statuses and a
participant leaderboard.

Architecture:
    config      — All point values, bucket bounds and status thresholds
    models      — ActivityLog and ScoreBreakdown
    scoring     — Per-category daily scores and the aggregator
    insights    — Monthly per-habit statistics
    status      — GREEN / YELLOW / RED habit classification
    leaderboard — Participant ranking by average daily score
    report      — Daily share text and monthly text report
    pipeline    — Orchestration: load → score → insights → status

Public API:
    compute_sadhana_score(log, target_rounds) → ScoreBreakdown
    analyze(filepath, year, month)            → CLI mode
    analyze_data(logs, year, month)           → UI / backend mode
    rank_participants(entries)                → leaderboard
    generate_report(result)                   → formatted report
"""

from sadhana.leaderboard import rank_participants
from sadhana.models import ActivityLog, ScoreBreakdown
from sadhana.pipeline import analyze, analyze_data, load_logs
from sadhana.report import format_sadhana_report, generate_report
from sadhana.scoring import compute_sadhana_score

__version__ = "1.0.0"

__all__ = [
    "ActivityLog",
    "ScoreBreakdown",
    "analyze",
    "analyze_data",
    "compute_sadhana_score",
    "format_sadhana_report",
    "generate_report",
    "load_logs",
    "rank_participants",
]
