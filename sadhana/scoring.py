"""
Daily scoring: turns one ActivityLog into a per-category point breakdown.

Each category function is pure and independent: a malformed field only
zeroes its own category. Negative counts and minutes are clamped to zero
before scoring.
"""

import logging
from typing import Iterable, List, Optional

import numpy as np
import pandas as pd

from sadhana.config import ScoreRules
from sadhana.models import (
    ActivityLog,
    AssociationLog,
    BookLog,
    ChantingLog,
    SCORE_CATEGORIES,
    ScoreBreakdown,
    Timestamp,
)

logger = logging.getLogger(__name__)


SCORE_COLUMNS = tuple(SCORE_CATEGORIES) + ("total_score",)

DEFAULT_RULES = ScoreRules()


# ---------------------------------------------------------------------------
# Timestamp helpers
# ---------------------------------------------------------------------------

def to_local_timestamp(value: Timestamp, rules: ScoreRules = DEFAULT_RULES) -> Optional[pd.Timestamp]:
    """Parse a log timestamp; None when missing or unparseable."""
    if value is None or value == "":
        return None
    try:
        ts = pd.to_datetime(value, errors="coerce")
    except (TypeError, ValueError):
        ts = pd.NaT
    if pd.isna(ts):
        logger.debug("Ignoring unparseable timestamp %r", value)
        return None
    if rules.local_timezone and ts.tzinfo is not None:
        ts = ts.tz_convert(rules.local_timezone)
    return ts


def minutes_since_midnight(value: Timestamp, rules: ScoreRules = DEFAULT_RULES) -> Optional[int]:
    ts = to_local_timestamp(value, rules)
    if ts is None:
        return None
    return ts.hour * 60 + ts.minute


def sleep_minutes(value: Timestamp, rules: ScoreRules = DEFAULT_RULES) -> Optional[int]:
    """
    Bedtime on a continuous evening scale.

    Hours before the rollover hour belong to the previous evening, so 00:30
    becomes 24:30 (1470). An afternoon nap logged as sleep_at lands on the
    early side of the scale; that heuristic is kept for scoring parity.
    """
    ts = to_local_timestamp(value, rules)
    if ts is None:
        return None
    hour = ts.hour
    if hour < rules.sleep.rollover_hour:
        hour += 24
    return hour * 60 + ts.minute


def non_negative(value) -> float:
    """Numeric count or minutes; missing, NaN and non-numeric read as 0."""
    if value is None:
        return 0.0
    number = pd.to_numeric(value, errors="coerce")
    if pd.isna(number):
        return 0.0
    return max(float(number), 0.0)


# ---------------------------------------------------------------------------
# Category scores
# ---------------------------------------------------------------------------

def calculate_chanting_score(
    logs: Iterable[ChantingLog],
    target_rounds: int = 16,
    rules: ScoreRules = DEFAULT_RULES,
) -> float:
    """
    Greedy slot-priority allocation.

    Every round becomes one entry worth its slot's value. Entries are sorted
    best-first; the first `target_rounds` earn full value and every entry
    beyond the target earns the flat excess credit.
    """
    cr = rules.chanting
    logs = list(logs)

    counts = np.array([int(non_negative(cl.rounds)) for cl in logs], dtype=np.int64)
    points = np.array([cr.points_for(cl.slot) for cl in logs], dtype=np.float64)

    round_values = np.sort(np.repeat(points, counts))[::-1]
    if round_values.size == 0:
        return 0.0

    quota = max(int(target_rounds), 0)
    within = round_values[:quota]
    excess = round_values.size - within.size

    return float(within.sum() + excess * cr.excess_round_points)


def _capped_minutes_score(minutes: float, per_minute: float, max_marks: float) -> float:
    return float(min(minutes * per_minute, max_marks))


def calculate_reading_score(
    book_logs: Iterable[BookLog],
    rules: ScoreRules = DEFAULT_RULES,
) -> float:
    r = rules.reading
    minutes = sum(non_negative(bl.reading_time) for bl in book_logs)
    return _capped_minutes_score(minutes, r.per_minute, r.max_marks)


def calculate_association_score(
    assoc_logs: Iterable[AssociationLog],
    rules: ScoreRules = DEFAULT_RULES,
) -> float:
    a = rules.association
    minutes = sum(non_negative(al.duration) for al in assoc_logs)
    return _capped_minutes_score(minutes, a.per_minute, a.max_marks)


def calculate_exercise_score(exercise_time: int, rules: ScoreRules = DEFAULT_RULES) -> float:
    return rules.exercise.done if non_negative(exercise_time) > 0 else 0.0


def calculate_regulation_score(log: ActivityLog, rules: ScoreRules = DEFAULT_RULES) -> float:
    rr = rules.regulations
    score = 0.0
    if log.no_meat:
        score += rr.no_meat
    if log.no_intoxication:
        score += rr.no_intoxication
    if log.no_illicit_sex:
        score += rr.no_illicit_sex
    if log.no_gambling:
        score += rr.no_gambling
    if log.only_prasadam:
        score += rr.only_prasadam
    return score


def calculate_arati_score(log: ActivityLog, rules: ScoreRules = DEFAULT_RULES) -> float:
    ar = rules.arati
    score = 0.0
    if log.mangla_attended:
        score += ar.mangla
    if log.narshima_attended:
        score += ar.narshima
    if log.tulsi_arti_attended:
        score += ar.tulsi
    if log.darshan_arti_attended:
        score += ar.darshan
    if log.guru_puja_attended:
        score += ar.guru_puja
    if log.sandhya_arti_attended:
        score += ar.sandhya
    if log.japa_sanga:
        score += ar.japa_sanga
    return score


def calculate_sleep_score(sleep_at: Timestamp, rules: ScoreRules = DEFAULT_RULES) -> float:
    mins = sleep_minutes(sleep_at, rules)
    if mins is None:
        return 0.0

    sb = rules.sleep
    for upper, score in sb.bands:
        if mins < upper:
            return score
    return sb.late_score


def calculate_wake_score(wakeup_at: Timestamp, rules: ScoreRules = DEFAULT_RULES) -> float:
    mins = minutes_since_midnight(wakeup_at, rules)
    if mins is None:
        return 0.0

    wb = rules.wake
    for start, end, score in wb.windows:
        if start <= mins < end:
            return score
    return wb.outside_score


# ---------------------------------------------------------------------------
# Aggregate
# ---------------------------------------------------------------------------

def compute_sadhana_score(
    log: ActivityLog,
    target_rounds: int = 16,
    rules: ScoreRules = DEFAULT_RULES,
) -> ScoreBreakdown:
    """Score every category of one day and sum them."""
    return ScoreBreakdown(
        chanting=calculate_chanting_score(log.chanting_logs, target_rounds, rules),
        reading=calculate_reading_score(log.book_reading_logs, rules),
        association=calculate_association_score(log.association_logs, rules),
        exercise=calculate_exercise_score(log.exercise_time, rules),
        regulations=calculate_regulation_score(log, rules),
        arati=calculate_arati_score(log, rules),
        sleep=calculate_sleep_score(log.sleep_at, rules),
        wake=calculate_wake_score(log.wakeup_at, rules),
    )


def compute_daily_scores(
    logs: List[ActivityLog],
    target_rounds: int = 16,
    rules: ScoreRules = DEFAULT_RULES,
) -> pd.DataFrame:
    """One row per log, sorted by date, with every category and the total."""
    rows = []
    for log in logs:
        breakdown = compute_sadhana_score(log, target_rounds, rules)
        rows.append({"date": pd.Timestamp(log.today_date), **breakdown.categories(),
                     "total_score": breakdown.total_score})

    df = pd.DataFrame(rows, columns=["date", *SCORE_COLUMNS])
    df["date"] = pd.to_datetime(df["date"])
    df.sort_values("date", inplace=True)
    df.reset_index(drop=True, inplace=True)
    return df
