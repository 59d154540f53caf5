"""
Centralized configuration for every point value, bucket boundary and
status threshold.

Every tunable constant lives here. Rule tables are frozen dataclasses so a
season's scoring rules can be versioned and passed around without anyone
mutating them mid-computation.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple


# ---------------------------------------------------------------------------
# Chanting slots
# ---------------------------------------------------------------------------

CHANTING_SLOTS: Tuple[str, ...] = (
    "before_7_30_am",
    "7_30_to_12_00_pm",
    "12_00_to_6_00_pm",
    "6_00_to_12_00_am",
    "after_12_00_am",
)

ASSOCIATION_TYPES: Tuple[str, ...] = (
    "PRABHUPADA",
    "GURU",
    "OTHER_ISKCON_DEVOTEE",
)


# ---------------------------------------------------------------------------
# Score rules
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ChantingRules:
    """Per-round value of each time-of-day slot, and the flat excess credit."""

    slot_points: Tuple[Tuple[str, float], ...] = (
        ("before_7_30_am", 10.0),
        ("7_30_to_12_00_pm", 7.5),
        ("12_00_to_6_00_pm", 5.0),
        ("6_00_to_12_00_am", 2.5),
        ("after_12_00_am", 1.0),
    )
    unknown_slot_points: float = 0.0
    excess_round_points: float = 1.0
    default_target_rounds: int = 16

    def __post_init__(self):
        if any(points < 0 for _, points in self.slot_points):
            raise ValueError("Chanting slot points must be non-negative")
        if self.default_target_rounds < 0:
            raise ValueError(
                f"Default target rounds must be >= 0, got {self.default_target_rounds}"
            )

    def points_for(self, slot: str) -> float:
        for name, points in self.slot_points:
            if name == slot:
                return points
        return self.unknown_slot_points


@dataclass(frozen=True)
class MinutesRules:
    """Linear points-per-minute with a hard cap (reading, association)."""

    per_minute: float = 0.5
    max_marks: float = 60.0   # 120 minutes

    def __post_init__(self):
        if self.per_minute < 0 or self.max_marks < 0:
            raise ValueError("Minute-based rules must be non-negative")


@dataclass(frozen=True)
class ExerciseRules:
    done: float = 20.0


@dataclass(frozen=True)
class RegulationRules:
    """The five regulative principles, each scored independently."""

    no_meat: float = 5.0
    no_intoxication: float = 5.0
    no_illicit_sex: float = 5.0
    no_gambling: float = 5.0
    only_prasadam: float = 20.0


@dataclass(frozen=True)
class AratiRules:
    mangla: float = 10.0
    narshima: float = 5.0
    tulsi: float = 5.0
    darshan: float = 5.0
    guru_puja: float = 5.0
    sandhya: float = 5.0
    japa_sanga: float = 10.0


@dataclass(frozen=True)
class SleepBands:
    """
    Bedtime buckets on a rolled-over minute scale.

    Hours below `rollover_hour` are shifted by +24h so 00:30 reads as 24:30.
    A bedtime scores the value of the first band whose upper bound it is
    strictly below; anything later scores `late_score`.
    """

    rollover_hour: int = 12
    bands: Tuple[Tuple[int, float], ...] = (
        (1320, 25.0),   # before 22:00
        (1350, 20.0),   # 22:00 - 22:30
        (1380, 15.0),   # 22:30 - 23:00
    )
    late_score: float = 5.0

    def __post_init__(self):
        bounds = [upper for upper, _ in self.bands]
        if bounds != sorted(bounds):
            raise ValueError(f"Sleep band bounds must be ascending, got {bounds}")


@dataclass(frozen=True)
class WakeBands:
    """Half-open [start, end) wake windows in minutes since midnight."""

    windows: Tuple[Tuple[int, int, float], ...] = (
        (210, 240, 25.0),   # 03:30 - 04:00
        (240, 270, 20.0),   # 04:00 - 04:30
        (270, 330, 15.0),   # 04:30 - 05:30
    )
    outside_score: float = 0.0

    def __post_init__(self):
        for start, end, _ in self.windows:
            if start >= end:
                raise ValueError(f"Wake window must have start < end, got ({start}, {end})")


@dataclass(frozen=True)
class ScoreRules:
    """Complete rule table for one scoring season."""

    chanting: ChantingRules = field(default_factory=ChantingRules)
    reading: MinutesRules = field(default_factory=MinutesRules)
    association: MinutesRules = field(default_factory=MinutesRules)
    exercise: ExerciseRules = field(default_factory=ExerciseRules)
    regulations: RegulationRules = field(default_factory=RegulationRules)
    arati: AratiRules = field(default_factory=AratiRules)
    sleep: SleepBands = field(default_factory=SleepBands)
    wake: WakeBands = field(default_factory=WakeBands)

    # IANA zone that tz-aware timestamps are converted to before bucketing.
    # Naive timestamps are always read as local wall-clock time.
    local_timezone: Optional[str] = None


# ---------------------------------------------------------------------------
# Monthly insight parameters
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class InsightParams:
    """Knobs for the monthly aggregation."""

    early_wake_cutoff_minutes: int = 300       # 05:00
    max_sleep_duration_minutes: int = 24 * 60
    # Days in the period when a caller has no day count to divide by.
    fallback_days_count: int = 30


# ---------------------------------------------------------------------------
# Health status thresholds
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SleepStatusThresholds:
    late_sleep_minutes: int = 1410          # 23:30 on the rolled-over scale
    unstable_iqr_minutes: float = 120.0
    insufficient_duration_minutes: float = 360.0
    early_wake_percent_conflict: float = 70.0
    conflict_sleep_minutes: int = 1380      # 23:00
    green_sleep_from: int = 1275            # 21:15
    green_sleep_until: int = 1350           # 22:30
    green_iqr_minutes: float = 60.0
    green_duration_minutes: float = 390.0


@dataclass(frozen=True)
class ChantingStatusThresholds:
    red_zero_days: int = 5
    red_median_ratio: float = 0.50
    red_iqr_ratio: float = 0.50
    red_late_percent: float = 40.0
    green_zero_days: int = 1
    green_median_ratio: float = 0.75
    green_iqr_ratio: float = 0.25
    green_early_percent: float = 50.0
    green_late_percent: float = 20.0


@dataclass(frozen=True)
class HabitStatusThresholds:
    """Frequency / depth / burstiness thresholds shared by minute-based habits."""

    red_day_ratio: float
    red_median_minutes: float
    green_day_ratio: float
    green_median_minutes: float
    burst_iqr_multiple: float = 2.0


@dataclass(frozen=True)
class AratiStatusThresholds:
    red_day_ratio: float = 0.30
    red_morning_share: float = 0.20
    green_day_ratio: float = 0.60
    green_morning_share: float = 0.40


@dataclass(frozen=True)
class StatusThresholds:
    sleep: SleepStatusThresholds = field(default_factory=SleepStatusThresholds)
    chanting: ChantingStatusThresholds = field(default_factory=ChantingStatusThresholds)
    reading: HabitStatusThresholds = field(
        default_factory=lambda: HabitStatusThresholds(
            red_day_ratio=0.30, red_median_minutes=15,
            green_day_ratio=0.60, green_median_minutes=30,
        )
    )
    association: HabitStatusThresholds = field(
        default_factory=lambda: HabitStatusThresholds(
            red_day_ratio=0.20, red_median_minutes=30,
            green_day_ratio=0.40, green_median_minutes=45,
        )
    )
    arati: AratiStatusThresholds = field(default_factory=AratiStatusThresholds)
    exercise: HabitStatusThresholds = field(
        default_factory=lambda: HabitStatusThresholds(
            red_day_ratio=0.25, red_median_minutes=10,
            green_day_ratio=0.50, green_median_minutes=20,
        )
    )
    # Stand-in IQR when a month has too little data to measure spread.
    missing_iqr: float = 999.0


# ---------------------------------------------------------------------------
# Top-level config aggregate
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SadhanaConfig:
    """Complete engine configuration. Pass to the pipeline to override defaults."""

    rules: ScoreRules = field(default_factory=ScoreRules)
    insights: InsightParams = field(default_factory=InsightParams)
    status: StatusThresholds = field(default_factory=StatusThresholds)
