"""
Monthly insights: per-habit summaries over one participant's logs.

Logs are first flattened into per-day DataFrames; every insight is a pure
reduction over those frames. Medians and IQRs are None when a habit has no
data, and an empty month yields days_count = 0 instead of raising.

IQR is the 75th minus the 25th percentile with linear interpolation.
"""

import logging
from datetime import timedelta
from typing import Dict, List, Optional

import numpy as np
import pandas as pd

from sadhana.config import ASSOCIATION_TYPES, CHANTING_SLOTS, SadhanaConfig
from sadhana.models import ARATI_FIELDS, ActivityLog
from sadhana.scoring import (
    compute_daily_scores,
    minutes_since_midnight,
    non_negative,
    sleep_minutes,
    to_local_timestamp,
)

logger = logging.getLogger(__name__)


SLOT_PERCENT_KEYS = {
    "before_7_30_am": "percent_rounds_before_7_30_am",
    "7_30_to_12_00_pm": "percent_rounds_7_30_to_12_00",
    "12_00_to_6_00_pm": "percent_rounds_12_00_to_6_00",
    "6_00_to_12_00_am": "percent_rounds_6_00_to_12_00",
    "after_12_00_am": "percent_rounds_after_12_00_am",
}

ARATI_DAY_KEYS = {
    "mangla_attended": "mangla_attended_days",
    "narshima_attended": "narasimha_attended_days",
    "tulsi_arti_attended": "tulsi_arati_attended_days",
    "darshan_arti_attended": "darshan_arati_attended_days",
    "guru_puja_attended": "guru_puja_attended_days",
    "sandhya_arti_attended": "sandhya_arati_attended_days",
}

# The rest of the morning program after mangala arati.
MORNING_PROGRAM_FIELDS = (
    "narshima_attended",
    "tulsi_arti_attended",
    "darshan_arti_attended",
    "guru_puja_attended",
)


# ---------------------------------------------------------------------------
# Small statistics helpers
# ---------------------------------------------------------------------------

def _median(values: pd.Series) -> Optional[float]:
    s = values.dropna()
    if s.empty:
        return None
    return round(float(s.median()), 2)


def _iqr(values: pd.Series) -> Optional[float]:
    s = values.dropna()
    if s.empty:
        return None
    q1, q3 = np.percentile(s.values.astype(np.float64), [25, 75])
    return round(float(q3 - q1), 2)


def _percent(part: float, whole: float) -> float:
    if not whole:
        return 0.0
    return float(round(100.0 * part / whole, 2))


def format_clock(minutes: Optional[float]) -> Optional[str]:
    """Minutes (possibly past 24h) → 'HH:MM' wall-clock."""
    if minutes is None:
        return None
    m = int(round(minutes)) % (24 * 60)
    return f"{m // 60:02d}:{m % 60:02d}"


def parse_clock(value: Optional[str]) -> Optional[int]:
    """'HH:MM' → minutes since midnight; None when missing or malformed."""
    if not value:
        return None
    try:
        hours, minutes = str(value).split(":")[:2]
        return int(hours) * 60 + int(minutes)
    except ValueError:
        return None


def _wall_clock(ts: Optional[pd.Timestamp]) -> Optional[pd.Timestamp]:
    if ts is None:
        return None
    return ts.tz_localize(None) if ts.tzinfo is not None else ts


def _longest_streak(days: List) -> int:
    """Longest run of consecutive calendar dates."""
    ordered = sorted(set(days))
    best = run = 0
    previous = None
    for day in ordered:
        run = run + 1 if previous is not None and day - previous == timedelta(days=1) else 1
        best = max(best, run)
        previous = day
    return best


# ---------------------------------------------------------------------------
# Frames
# ---------------------------------------------------------------------------

def build_daily_frame(logs: List[ActivityLog], cfg: SadhanaConfig) -> pd.DataFrame:
    """One row per log with the raw daily measures every insight draws on."""
    rules = cfg.rules
    rows = []
    for log in logs:
        row = {
            "date": log.today_date,
            "wake_minutes": minutes_since_midnight(log.wakeup_at, rules),
            "sleep_minutes": sleep_minutes(log.sleep_at, rules),
            "wake_at": _wall_clock(to_local_timestamp(log.wakeup_at, rules)),
            "sleep_at": _wall_clock(to_local_timestamp(log.sleep_at, rules)),
            "total_rounds": int(sum(non_negative(cl.rounds) for cl in log.chanting_logs)),
            "reading_minutes": sum(non_negative(bl.reading_time) for bl in log.book_reading_logs),
            "association_minutes": sum(non_negative(al.duration) for al in log.association_logs),
            "exercise_minutes": non_negative(log.exercise_time),
            "japa_sanga": bool(log.japa_sanga),
        }
        for name in ARATI_FIELDS:
            row[name] = bool(getattr(log, name))
        rows.append(row)

    columns = [
        "date", "wake_minutes", "sleep_minutes", "wake_at", "sleep_at",
        "total_rounds", "reading_minutes", "association_minutes",
        "exercise_minutes", "japa_sanga", *ARATI_FIELDS,
    ]
    df = pd.DataFrame(rows, columns=columns)
    df["wake_minutes"] = pd.to_numeric(df["wake_minutes"], errors="coerce")
    df["sleep_minutes"] = pd.to_numeric(df["sleep_minutes"], errors="coerce")
    df.sort_values("date", inplace=True)
    df.reset_index(drop=True, inplace=True)
    return df


def _entries_frame(logs: List[ActivityLog], attr: str, fields: tuple) -> pd.DataFrame:
    rows = [
        {"date": log.today_date, **{f: getattr(entry, f) for f in fields}}
        for log in logs
        for entry in getattr(log, attr)
    ]
    return pd.DataFrame(rows, columns=["date", *fields])


# ---------------------------------------------------------------------------
# Sleep / wake
# ---------------------------------------------------------------------------

def _sleep_durations(df: pd.DataFrame, cfg: SadhanaConfig) -> pd.Series:
    """Previous day's bedtime to this day's wake-up, in minutes."""
    bedtimes = {row.date: row.sleep_at for row in df.itertuples() if pd.notna(row.sleep_at)}
    limit = cfg.insights.max_sleep_duration_minutes

    durations = []
    for row in df.itertuples():
        bedtime = bedtimes.get(row.date - timedelta(days=1))
        if bedtime is None or pd.isna(row.wake_at):
            continue
        minutes = (row.wake_at - bedtime).total_seconds() / 60.0
        if 0 < minutes < limit:
            durations.append(minutes)
    return pd.Series(durations, dtype=np.float64)


def compute_sleep_insight(logs: List[ActivityLog], cfg: SadhanaConfig) -> Dict:
    df = build_daily_frame(logs, cfg)
    wake = df["wake_minutes"].dropna()
    sleep = df["sleep_minutes"].dropna()

    return {
        "days_count": len(df),
        "median_wakeup_time": format_clock(_median(wake)),
        "iqr_wakeup_minutes": _iqr(wake),
        "percent_wakeup_before_5am": _percent(
            (wake < cfg.insights.early_wake_cutoff_minutes).sum(), len(wake)
        ),
        "median_sleep_time": format_clock(_median(sleep)),
        "iqr_sleep_minutes": _iqr(sleep),
        "median_sleep_duration_minutes": _median(_sleep_durations(df, cfg)),
    }


# ---------------------------------------------------------------------------
# Chanting
# ---------------------------------------------------------------------------

def compute_chanting_insight(
    logs: List[ActivityLog],
    target_rounds: int,
    cfg: SadhanaConfig,
) -> Dict:
    df = build_daily_frame(logs, cfg)
    entries = _entries_frame(logs, "chanting_logs", ("slot", "rounds", "rating"))
    entries["rounds"] = pd.to_numeric(entries["rounds"], errors="coerce").fillna(0).clip(lower=0)

    daily = df["total_rounds"].astype(np.float64)
    total_rounds = float(entries["rounds"].sum())
    by_slot = entries.groupby("slot")["rounds"].sum()
    ratings = pd.to_numeric(entries["rating"], errors="coerce")

    insight = {
        "days_count": len(df),
        "daily_target_rounds": target_rounds,
        "median_daily_rounds": _median(daily),
        "iqr_daily_rounds": _iqr(daily),
        "percent_days_meeting_target": _percent((daily >= target_rounds).sum(), len(df)),
        "zero_round_days": int((daily == 0).sum()),
    }
    for slot in CHANTING_SLOTS:
        insight[SLOT_PERCENT_KEYS[slot]] = _percent(float(by_slot.get(slot, 0.0)), total_rounds)
    insight["median_rating"] = _median(ratings)
    insight["iqr_rating"] = _iqr(ratings)
    return insight


# ---------------------------------------------------------------------------
# Reading
# ---------------------------------------------------------------------------

def _primary_book(books: pd.DataFrame) -> Optional[tuple]:
    """(name, days read): the book returned to on the most days."""
    if books.empty:
        return None
    summary = (
        books.groupby("name")
        .agg(days=("date", "nunique"), minutes=("reading_time", "sum"))
        .reset_index()
        .sort_values(["days", "minutes", "name"], ascending=[False, False, True])
    )
    top = summary.iloc[0]
    return str(top["name"]), int(top["days"])


def compute_book_insight(logs: List[ActivityLog], cfg: SadhanaConfig) -> Dict:
    df = build_daily_frame(logs, cfg)
    books = _entries_frame(logs, "book_reading_logs", ("name", "reading_time"))
    books["reading_time"] = pd.to_numeric(books["reading_time"], errors="coerce").fillna(0).clip(lower=0)
    books["name"] = books["name"].fillna("").astype(str)
    books = books[books["reading_time"] > 0]

    reading = df.loc[df["reading_minutes"] > 0]
    reading_days = len(reading)
    primary = _primary_book(books)

    return {
        "days_count": len(df),
        "reading_days": reading_days,
        "median_daily_reading_minutes": _median(reading["reading_minutes"].astype(np.float64)),
        "iqr_daily_reading_minutes": _iqr(reading["reading_minutes"].astype(np.float64)),
        "longest_reading_streak": _longest_streak(list(reading["date"])),
        "primary_book_name": primary[0] if primary else None,
        "primary_book_return_ratio": (
            round(primary[1] / reading_days, 2) if primary and reading_days else None
        ),
        "books_read": list(dict.fromkeys(books.sort_values("date", kind="stable")["name"])),
    }


# ---------------------------------------------------------------------------
# Association
# ---------------------------------------------------------------------------

def compute_association_insight(logs: List[ActivityLog], cfg: SadhanaConfig) -> Dict:
    df = build_daily_frame(logs, cfg)
    entries = _entries_frame(logs, "association_logs", ("type", "duration", "devotee_name"))
    entries["duration"] = pd.to_numeric(entries["duration"], errors="coerce").fillna(0).clip(lower=0)
    entries["type"] = entries["type"].fillna("").astype(str).str.strip()

    assoc = df.loc[df["association_minutes"] > 0, "association_minutes"].astype(np.float64)

    positive = entries[entries["duration"] > 0]
    # Untyped minutes count toward the daily total only.
    typed = positive[positive["type"] != ""]
    types = list(ASSOCIATION_TYPES) + sorted(
        set(typed["type"]) - set(ASSOCIATION_TYPES)
    )
    median_by_type = {}
    days_by_type = {}
    for kind in types:
        daily = typed.loc[typed["type"] == kind].groupby("date")["duration"].sum()
        median_by_type[kind] = _median(daily.astype(np.float64)) or 0.0
        days_by_type[kind] = int(len(daily))

    names = entries["devotee_name"].dropna().astype(str).str.strip()

    return {
        "days_count": len(df),
        "association_days": int(len(assoc)),
        "median_daily_association_minutes": _median(assoc),
        "iqr_daily_association_minutes": _iqr(assoc),
        "median_minutes_by_type": median_by_type,
        "association_days_by_type": days_by_type,
        "unique_devotee_names": sorted(set(names[names != ""])),
    }


# ---------------------------------------------------------------------------
# Arati
# ---------------------------------------------------------------------------

def compute_arati_insight(logs: List[ActivityLog], cfg: SadhanaConfig) -> Dict:
    df = build_daily_frame(logs, cfg)
    arati = df[list(ARATI_FIELDS)].astype(bool)

    insight = {
        "days_count": len(df),
        "total_arati_attendance_days": int(arati.any(axis=1).sum()),
    }
    for field, key in ARATI_DAY_KEYS.items():
        insight[key] = int(arati[field].sum())
    insight["morning_arati_days"] = int(arati[list(MORNING_PROGRAM_FIELDS)].any(axis=1).sum())
    insight["japa_sanga_attended_days"] = int(df["japa_sanga"].astype(bool).sum())
    return insight


# ---------------------------------------------------------------------------
# Exercise
# ---------------------------------------------------------------------------

def compute_exercise_insight(logs: List[ActivityLog], cfg: SadhanaConfig) -> Dict:
    df = build_daily_frame(logs, cfg)
    active = df.loc[df["exercise_minutes"] > 0, "exercise_minutes"].astype(np.float64)

    return {
        "days_count": len(df),
        "exercise_days": int(len(active)),
        "percent_days_exercised": _percent(len(active), len(df)),
        "median_exercise_minutes": _median(active),
        "iqr_exercise_minutes": _iqr(active),
    }


# ---------------------------------------------------------------------------
# Scores
# ---------------------------------------------------------------------------

SCORE_AVERAGE_KEYS = {
    "chanting": "avg_chanting_score",
    "reading": "avg_book_score",
    "association": "avg_association_score",
    "regulations": "avg_regulation_score",
    "arati": "avg_arati_score",
    "sleep": "avg_sleep_score",
    "wake": "avg_wakeup_score",
    "exercise": "avg_exercise_score",
    "total_score": "avg_total_score",
}


def compute_scores_insight(
    logs: List[ActivityLog],
    target_rounds: int,
    cfg: SadhanaConfig,
    daily: Optional[pd.DataFrame] = None,
) -> Dict:
    if daily is None:
        daily = compute_daily_scores(logs, target_rounds, cfg.rules)

    insight = {"days_count": len(daily)}
    for column, key in SCORE_AVERAGE_KEYS.items():
        insight[key] = round(float(daily[column].mean()), 2) if len(daily) else 0.0
    return insight


# ---------------------------------------------------------------------------
# All insights
# ---------------------------------------------------------------------------

def compute_monthly_insights(
    logs: List[ActivityLog],
    target_rounds: int,
    cfg: SadhanaConfig,
    daily: Optional[pd.DataFrame] = None,
) -> Dict[str, Dict]:
    logger.debug("Computing insights over %d logs", len(logs))
    return {
        "sleep": compute_sleep_insight(logs, cfg),
        "chanting": compute_chanting_insight(logs, target_rounds, cfg),
        "reading": compute_book_insight(logs, cfg),
        "association": compute_association_insight(logs, cfg),
        "arati": compute_arati_insight(logs, cfg),
        "exercise": compute_exercise_insight(logs, cfg),
        "scores": compute_scores_insight(logs, target_rounds, cfg, daily),
    }
