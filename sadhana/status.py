"""
Health status classification for monthly insights.

Maps each habit's monthly insight → GREEN / YELLOW / RED with a short
title and a reflection. Written as decision trees for interpretability:
RED is checked first, then GREEN, and everything else is YELLOW.

The reflection shown rotates month to month: index (year + month) % 3.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from sadhana.config import HabitStatusThresholds, SadhanaConfig
from sadhana.insights import parse_clock


GREEN = "GREEN"
YELLOW = "YELLOW"
RED = "RED"


@dataclass(frozen=True)
class HealthResult:
    status: str
    title: str
    reflection: str

    def as_dict(self) -> Dict[str, str]:
        return {"status": self.status, "title": self.title, "reflection": self.reflection}


# ---------------------------------------------------------------------------
# Reflection presets (three per status, rotated by month)
# ---------------------------------------------------------------------------

REFLECTIONS = {
    "SLEEP": {
        GREEN: (
            "Sleep timing is well-aligned, allowing mornings to flow naturally. An excellent foundation.",
            "Your rest is anchored and consistent, providing deep stability for your sadhana.",
            "Harmony with the sun is evident. This rhythm naturally supports both energy and clarity.",
        ),
        YELLOW: (
            "Sleep is present but slightly drifting. Tightening the window will return power to your mornings.",
            "Your rhythm is holding, but late nights are creating subtle drag. A shift earlier would help.",
            "Consistency is visible, but precision is missing. Anchoring the sleep time will stabilize the rest.",
        ),
        RED: (
            "Rhythm conflict detected. Late hours or high variance are undermining the restorative power of sleep.",
            "The current pattern battles biology. Prioritizing a stable, earlier sleep time is the path to ease.",
            "Rest is fragmented. A gentle but firm reset of the sleep anchor is needed to support your energy.",
        ),
    },
    "CHANTING": {
        GREEN: (
            "Your practice honors your chosen target. Consistency, timing, and volume are all aligned.",
            "A beautiful integration of the Holy Name. The rhythm is steady, supported by strong morning focus.",
            "Commitment is fully manifest. Your chanting indicates a practice that is both disciplined and nourished.",
        ),
        YELLOW: (
            "You are holding the vow, but the rhythm is uneven. Greater consistency will deepen the experience.",
            "Chanting is present, but often late or fluctuating. Bringing it earlier will increase its potency.",
            "The commitment is there, but the timing slips. Stabilizing the morning block will transform the quality.",
        ),
        RED: (
            "Target not yet integrated. Frequent gaps or late hours are preventing the habit from taking root.",
            "The rhythm is fractured. Re-committing to a smaller, steady number might help build the foundation.",
            "Absence or instability is high. A gentle, non-negotiable restarting of the habit is invited.",
        ),
    },
    "READING": {
        GREEN: (
            "Reading has become a steady, immersive part of your days. Frequency and depth are aligned.",
            "Your engagement with sacred texts is providing consistent nourishment and clarity.",
            "The habit is beautifully integrated. Both the rhythm and the depth of reading are stable.",
        ),
        YELLOW: (
            "You're returning to reading, but rhythm is still settling. Consistency will unlock deeper absorption.",
            "Reading is present and real, though the depth is not yet fully anchored.",
            "The habit is alive but still forming. Reducing fluctuation will help it take root.",
        ),
        RED: (
            "Reading appears occasionally; a gentler, more regular rhythm may help build the habit.",
            "Current duration is too brief for deep absorption. Aim for small but daily contact.",
            "Occasional long sessions without continuity are preventing habit stability. Frequency matters more than volume.",
        ),
    },
    "ASSOCIATION": {
        GREEN: (
            "Association is deep, regular, and directionally clear. It serves as a stable anchor.",
            "Your connection with spiritual community is strong, providing essential protection.",
            "The consistency of your exchanges indicates that association is a valued, integral part of your life.",
        ),
        YELLOW: (
            "You connect meaningfully, but rhythm or depth still varies. Steadier contact will increase the benefit.",
            "Association is present, but often light. Deepening the exchanges would provide more substantial nourishment.",
            "Contact exists, but influence feels scattered. Focusing on steady, quality association will help.",
        ),
        RED: (
            "Association appears occasionally; steadier contact may help build a supportive net.",
            "Brief interactions are good, but deeper exchange is needed for true spiritual nourishment.",
            "Sporadic high-volume days are not a substitute for steady connection. Regularity is key.",
        ),
    },
    "ARATI": {
        GREEN: (
            "Arati has become a steady part of your daily rhythm, creating a powerful spiritual anchor.",
            "Your ritual presence is strong and consistent. The morning attendance particularly grounds the day.",
            "A beautiful balance of attendance. The rhythm of greeting the Deities is well-established.",
        ),
        YELLOW: (
            "Ritual presence exists, but the consistency is still forming. Anchoring one daily slot will help.",
            "You are showing up, but the morning anchor is light. Starting the day with the Deities changes everything.",
            "Ritual exists but depends heavily on a single time slot. Expanding the range can bring more stability.",
        ),
        RED: (
            "Arati appears occasionally; gentle re-anchoring with a single steady slot may help.",
            "Ritual is currently detached from the morning anchor, reducing its grounding effect on the day.",
            "Attendance is fragmented. Reconnecting with the temple rhythm, even briefly, can restore the flow.",
        ),
    },
    "EXERCISE": {
        GREEN: (
            "Your body is being supported consistently. Rhythm and duration are healthy.",
            "A healthy foundation for your energy. The consistency of movement is serving you well.",
            "Movement has become a steady, reliable support for your physical well-being.",
        ),
        YELLOW: (
            "Movement is present, but rhythm isn't settled yet. Steadying the pattern will increase the benefit.",
            "Daily movement is real but light. Slightly longer duration would provide stronger support.",
            "Consistency varies. Establishing a baseline of daily movement will stabilize your energy.",
        ),
        RED: (
            "Movement is rare; gentle re-entry could help build the physical support you need.",
            "Brief movement helps, but minimum viability for health is slightly higher.",
            "Sporadic intense sessions may strain the body. Consistent, moderate movement is a safer path.",
        ),
    },
}

WAITING_PROMPTS = {
    "SLEEP": "Log sleep to track rhythm.",
    "CHANTING": "Log chanting to track commitment.",
    "READING": "Log reading.",
    "ASSOCIATION": "Log association.",
    "ARATI": "Log arati.",
    "EXERCISE": "Log exercise.",
}


def _seed(year: int, month: int) -> int:
    return (year + month) % 3


def _result(domain: str, status: str, title: str, year: int, month: int) -> HealthResult:
    return HealthResult(status, title, REFLECTIONS[domain][status][_seed(year, month)])


def _waiting(domain: str) -> HealthResult:
    return HealthResult(YELLOW, "Waiting for Data", WAITING_PROMPTS[domain])


def _has_data(insight: Optional[Dict]) -> bool:
    return bool(insight) and bool(insight.get("days_count"))


def _iqr_or_missing(value: Optional[float], cfg: SadhanaConfig) -> float:
    return cfg.status.missing_iqr if value is None else value


def _day_ratio(days: Optional[int], insight: Dict, cfg: SadhanaConfig) -> float:
    total = insight.get("days_count") or cfg.insights.fallback_days_count
    return (days or 0) / total


# ---------------------------------------------------------------------------
# Sleep
# ---------------------------------------------------------------------------

def classify_sleep_status(insight: Optional[Dict], year: int, month: int, cfg: SadhanaConfig) -> HealthResult:
    """
    RED when bedtime is late, either rhythm is unstable, rest is short, or
    very early waking meets late sleeping. GREEN needs a 21:15-22:30 median
    bedtime, tight spreads and enough rest.
    """
    if not _has_data(insight):
        return _waiting("SLEEP")
    t = cfg.status.sleep

    bedtime = parse_clock(insight.get("median_sleep_time"))
    effective = 0
    if bedtime is not None:
        effective = bedtime + 24 * 60 if bedtime < cfg.rules.sleep.rollover_hour * 60 else bedtime

    iqr_sleep = _iqr_or_missing(insight.get("iqr_sleep_minutes"), cfg)
    iqr_wake = _iqr_or_missing(insight.get("iqr_wakeup_minutes"), cfg)
    duration = insight.get("median_sleep_duration_minutes") or 0
    early_wake = insight.get("percent_wakeup_before_5am") or 0

    late = effective >= t.late_sleep_minutes
    unstable = iqr_sleep > t.unstable_iqr_minutes or iqr_wake > t.unstable_iqr_minutes
    short = duration < t.insufficient_duration_minutes
    conflict = early_wake >= t.early_wake_percent_conflict and effective >= t.conflict_sleep_minutes

    if late or unstable or short or conflict:
        title = "Rhythm Conflict"
        if late:
            title = "Late Sleep Pattern"
        elif short:
            title = "Insufficient Rest"
        elif unstable:
            title = "Unstable Rhythm"
        return _result("SLEEP", RED, title, year, month)

    aligned = (
        t.green_sleep_from <= effective <= t.green_sleep_until
        and iqr_sleep <= t.green_iqr_minutes
        and iqr_wake <= t.green_iqr_minutes
        and duration >= t.green_duration_minutes
    )
    if aligned:
        return _result("SLEEP", GREEN, "Aligned Rhythm", year, month)

    return _result("SLEEP", YELLOW, "Present but Misaligned", year, month)


# ---------------------------------------------------------------------------
# Chanting
# ---------------------------------------------------------------------------

def classify_chanting_status(insight: Optional[Dict], year: int, month: int, cfg: SadhanaConfig) -> HealthResult:
    if not _has_data(insight):
        return _waiting("CHANTING")
    t = cfg.status.chanting

    target = insight.get("daily_target_rounds") or 16
    median_ratio = (insight.get("median_daily_rounds") or 0) / target
    iqr_ratio = _iqr_or_missing(insight.get("iqr_daily_rounds"), cfg) / target
    zero_days = insight.get("zero_round_days") or 0
    late = insight.get("percent_rounds_after_12_00_am") or 0
    early = insight.get("percent_rounds_before_7_30_am") or 0

    if (zero_days >= t.red_zero_days or median_ratio < t.red_median_ratio
            or iqr_ratio > t.red_iqr_ratio or late >= t.red_late_percent):
        title = "Target Not Integrated"
        if zero_days >= t.red_zero_days:
            title = "Frequent Absence"
        elif late >= t.red_late_percent:
            title = "Time Inversion"
        return _result("CHANTING", RED, title, year, month)

    if (zero_days <= t.green_zero_days and median_ratio >= t.green_median_ratio
            and iqr_ratio <= t.green_iqr_ratio and early >= t.green_early_percent
            and late <= t.green_late_percent):
        return _result("CHANTING", GREEN, "Aligned", year, month)

    return _result("CHANTING", YELLOW, "Committed but Uneven", year, month)


# ---------------------------------------------------------------------------
# Minute-based habits (reading, association, exercise)
# ---------------------------------------------------------------------------

def _classify_habit(
    days: Optional[int],
    median: Optional[float],
    iqr: Optional[float],
    insight: Dict,
    t: HabitStatusThresholds,
    cfg: SadhanaConfig,
):
    """Returns (status, is_rare, is_burst) for a frequency/depth habit."""
    ratio = _day_ratio(days, insight, cfg)
    median = median or 0
    iqr = _iqr_or_missing(iqr, cfg)

    rare = ratio < t.red_day_ratio
    burst = median > 0 and iqr > t.burst_iqr_multiple * median
    if rare or median < t.red_median_minutes or burst:
        return RED, rare, burst
    if ratio >= t.green_day_ratio and iqr <= median and median >= t.green_median_minutes:
        return GREEN, rare, burst
    return YELLOW, rare, burst


def classify_reading_status(insight: Optional[Dict], year: int, month: int, cfg: SadhanaConfig) -> HealthResult:
    if not _has_data(insight):
        return _waiting("READING")

    status, rare, burst = _classify_habit(
        insight.get("reading_days"),
        insight.get("median_daily_reading_minutes"),
        insight.get("iqr_daily_reading_minutes"),
        insight, cfg.status.reading, cfg,
    )
    if status == RED:
        title = "Not Yet a Habit"
        if rare:
            title = "Rare Presence"
        elif burst:
            title = "Burst Pattern"
        return _result("READING", RED, title, year, month)
    if status == GREEN:
        return _result("READING", GREEN, "Habit Integrated", year, month)
    return _result("READING", YELLOW, "Present but Light", year, month)


def classify_association_status(insight: Optional[Dict], year: int, month: int, cfg: SadhanaConfig) -> HealthResult:
    if not _has_data(insight):
        return _waiting("ASSOCIATION")

    status, _, _ = _classify_habit(
        insight.get("association_days"),
        insight.get("median_daily_association_minutes"),
        insight.get("iqr_daily_association_minutes"),
        insight, cfg.status.association, cfg,
    )
    titles = {RED: "Not Yet Nourishing", GREEN: "Nourishing", YELLOW: "Present but Light"}
    return _result("ASSOCIATION", status, titles[status], year, month)


def classify_exercise_status(insight: Optional[Dict], year: int, month: int, cfg: SadhanaConfig) -> HealthResult:
    if not _has_data(insight):
        return _waiting("EXERCISE")

    status, _, _ = _classify_habit(
        insight.get("exercise_days"),
        insight.get("median_exercise_minutes"),
        insight.get("iqr_exercise_minutes"),
        insight, cfg.status.exercise, cfg,
    )
    titles = {RED: "Body Undersupported", GREEN: "Body Supported", YELLOW: "Some Movement"}
    return _result("EXERCISE", status, titles[status], year, month)


# ---------------------------------------------------------------------------
# Arati
# ---------------------------------------------------------------------------

def classify_arati_status(insight: Optional[Dict], year: int, month: int, cfg: SadhanaConfig) -> HealthResult:
    """Attendance frequency plus the share of attendance anchored in the morning."""
    if not _has_data(insight):
        return _waiting("ARATI")
    t = cfg.status.arati

    ratio = _day_ratio(insight.get("total_arati_attendance_days"), insight, cfg)
    morning = (insight.get("mangla_attended_days") or 0) + (insight.get("morning_arati_days") or 0)
    instances = morning + sum(
        insight.get(key) or 0
        for key in (
            "narasimha_attended_days",
            "tulsi_arati_attended_days",
            "darshan_arati_attended_days",
            "guru_puja_attended_days",
            "sandhya_arati_attended_days",
        )
    )
    morning_share = morning / instances if instances else 0.0

    if ratio < t.red_day_ratio or morning_share < t.red_morning_share:
        title = "Rare Presence" if ratio < t.red_day_ratio else "No Morning Anchor"
        return _result("ARATI", RED, title, year, month)

    if ratio >= t.green_day_ratio and morning_share >= t.green_morning_share:
        return _result("ARATI", GREEN, "Stable Ritual Rhythm", year, month)

    return _result("ARATI", YELLOW, "Present but Narrow", year, month)


# ---------------------------------------------------------------------------
# All statuses + overall monthly reflection
# ---------------------------------------------------------------------------

def classify_all(insights: Dict[str, Dict], year: int, month: int, cfg: SadhanaConfig) -> Dict[str, HealthResult]:
    return {
        "sleep": classify_sleep_status(insights.get("sleep"), year, month, cfg),
        "chanting": classify_chanting_status(insights.get("chanting"), year, month, cfg),
        "reading": classify_reading_status(insights.get("reading"), year, month, cfg),
        "association": classify_association_status(insights.get("association"), year, month, cfg),
        "arati": classify_arati_status(insights.get("arati"), year, month, cfg),
        "exercise": classify_exercise_status(insights.get("exercise"), year, month, cfg),
    }


def classify_overall(statuses: List[HealthResult]) -> HealthResult:
    """
    Monthly reflection across all habits.

    Excellent Harmony  — at least four GREEN and no RED
    Needs Anchoring    — two or more RED
    Good Progress      — everything else
    """
    greens = sum(1 for s in statuses if s.status == GREEN)
    reds = sum(1 for s in statuses if s.status == RED)

    if greens >= 4 and reds == 0:
        return HealthResult(
            GREEN, "Excellent Harmony",
            "Your month shows strong rhythm and discipline. Core habits are stable, "
            "with no internal conflicts. You are consistently nourished.",
        )
    if reds >= 2:
        return HealthResult(
            RED, "Needs Anchoring",
            "Multiple areas are showing fragmentation. Focusing on just one key anchor "
            "(like Sleep or Chanting) can help stabilize the whole ecosystem.",
        )
    return HealthResult(
        YELLOW, "Good Progress",
        "Your sadhana is active, with some areas settling into rhythm while others are still forming.",
    )
