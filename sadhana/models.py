"""
Data models for daily sadhana logs and their scores.

- ChantingLog / BookLog / AssociationLog: the per-activity entries of a day
- ActivityLog: one participant's log for one calendar day
- ScoreBreakdown: the per-category score of one ActivityLog
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Union

Timestamp = Union[str, datetime, None]


REQUIRED_FIELDS = {"today_date"}

REGULATION_FIELDS = (
    "no_meat",
    "no_intoxication",
    "no_illicit_sex",
    "no_gambling",
    "only_prasadam",
)

ARATI_FIELDS = (
    "mangla_attended",
    "narshima_attended",
    "tulsi_arti_attended",
    "darshan_arti_attended",
    "guru_puja_attended",
    "sandhya_arti_attended",
)

SCORE_CATEGORIES = (
    "chanting",
    "reading",
    "association",
    "exercise",
    "regulations",
    "arati",
    "sleep",
    "wake",
)


@dataclass(frozen=True)
class ChantingLog:
    slot: str
    rounds: int = 0
    rating: Optional[int] = None


@dataclass(frozen=True)
class BookLog:
    name: str
    reading_time: int = 0
    chapter_name: Optional[str] = None


@dataclass(frozen=True)
class AssociationLog:
    type: str
    duration: int = 0
    devotee_name: Optional[str] = None


@dataclass(frozen=True)
class ActivityLog:
    """One day of sadhana. Timestamps are kept as given and parsed on use."""

    today_date: date
    sleep_at: Timestamp = None
    wakeup_at: Timestamp = None

    no_meat: bool = False
    no_intoxication: bool = False
    no_illicit_sex: bool = False
    no_gambling: bool = False
    only_prasadam: bool = False

    mangla_attended: bool = False
    narshima_attended: bool = False
    tulsi_arti_attended: bool = False
    darshan_arti_attended: bool = False
    guru_puja_attended: bool = False
    sandhya_arti_attended: bool = False
    # Not part of every API response; absent means not attended.
    japa_sanga: Optional[bool] = None

    exercise_time: int = 0

    chanting_logs: tuple = ()
    book_reading_logs: tuple = ()
    association_logs: tuple = ()

    participant_id: Optional[str] = None
    notes_of_day: Optional[str] = None
    finished_by: Timestamp = None

    @classmethod
    def from_dict(cls, entry: Dict[str, Any], index: int = 0) -> "ActivityLog":
        """Build a log from an API-shaped mapping, validating required fields."""
        missing = REQUIRED_FIELDS - set(entry.keys())
        if missing:
            raise ValueError(
                f"Activity log {index}: Missing required fields: {', '.join(sorted(missing))}"
            )

        try:
            today = _parse_date(entry["today_date"])
        except ValueError as e:
            raise ValueError(f"Activity log {index}: Invalid today_date: {e}")

        flags = {
            name: bool(entry.get(name, False))
            for name in REGULATION_FIELDS + ARATI_FIELDS
        }
        japa_sanga = entry.get("japa_sanga")

        return cls(
            today_date=today,
            sleep_at=entry.get("sleep_at"),
            wakeup_at=entry.get("wakeup_at"),
            japa_sanga=None if japa_sanga is None else bool(japa_sanga),
            exercise_time=entry.get("exercise_time") or 0,
            chanting_logs=tuple(
                ChantingLog(
                    slot=cl.get("slot") or "",
                    rounds=cl.get("rounds") or 0,
                    rating=cl.get("rating"),
                )
                for cl in entry.get("chanting_logs") or []
            ),
            book_reading_logs=tuple(
                BookLog(
                    name=bl.get("name") or "",
                    reading_time=bl.get("reading_time") or 0,
                    chapter_name=bl.get("chapter_name"),
                )
                for bl in entry.get("book_reading_logs") or []
            ),
            association_logs=tuple(
                AssociationLog(
                    type=al.get("type") or "",
                    duration=al.get("duration") or 0,
                    devotee_name=al.get("devotee_name"),
                )
                for al in entry.get("association_logs") or []
            ),
            participant_id=entry.get("participant_id"),
            notes_of_day=entry.get("notes_of_day"),
            finished_by=entry.get("finished_by"),
            **flags,
        )


def _parse_date(value: Union[str, date, datetime]) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


@dataclass(frozen=True)
class ScoreBreakdown:
    """Per-category score of one day. `total_score` is always the category sum."""

    chanting: float = 0.0
    reading: float = 0.0
    association: float = 0.0
    exercise: float = 0.0
    regulations: float = 0.0
    arati: float = 0.0
    sleep: float = 0.0
    wake: float = 0.0
    total_score: float = field(init=False)

    def __post_init__(self):
        total = sum(getattr(self, name) for name in SCORE_CATEGORIES)
        object.__setattr__(self, "total_score", total)

    def categories(self) -> Dict[str, float]:
        return {name: getattr(self, name) for name in SCORE_CATEGORIES}

    def as_dict(self) -> Dict[str, Any]:
        """API-shaped payload: {"totalScore": ..., "breakdown": {...}}."""
        return {"totalScore": self.total_score, "breakdown": self.categories()}


def coerce_logs(data: List[Union[ActivityLog, Dict[str, Any]]]) -> List[ActivityLog]:
    """Accept a mix of ActivityLog objects and raw dicts."""
    return [
        entry if isinstance(entry, ActivityLog) else ActivityLog.from_dict(entry, idx)
        for idx, entry in enumerate(data)
    ]
