"""
Participant leaderboard: ranks participants by average daily total score.

Each participant is scored against their own chanting target. Ties share
the better rank (1, 2, 2, 4). Participants with no logs have no average,
share the rank after the last scored participant and are listed by name.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

import pandas as pd

from sadhana.config import ScoreRules
from sadhana.models import ActivityLog, coerce_logs
from sadhana.scoring import compute_daily_scores

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LeaderboardEntry:
    participant_id: str
    full_name: str
    logs: Sequence[ActivityLog] = ()
    target_rounds: Optional[int] = None
    profile_photo_url: Optional[str] = None

    @classmethod
    def from_dict(cls, entry: Dict[str, Any]) -> "LeaderboardEntry":
        missing = {"participant_id", "full_name"} - set(entry.keys())
        if missing:
            raise ValueError(f"Leaderboard entry missing fields: {', '.join(sorted(missing))}")
        return cls(
            participant_id=str(entry["participant_id"]),
            full_name=entry["full_name"],
            logs=tuple(coerce_logs(entry.get("logs") or [])),
            target_rounds=entry.get("target_rounds"),
            profile_photo_url=entry.get("profile_photo_url"),
        )


@dataclass(frozen=True)
class ParticipantRanking:
    rank: int
    participant_id: str
    full_name: str
    avg_total_score: Optional[float]
    profile_photo_url: Optional[str] = None
    days_logged: int = field(default=0)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "rank": self.rank,
            "participant_id": self.participant_id,
            "full_name": self.full_name,
            "avg_total_score": self.avg_total_score,
            "profile_photo_url": self.profile_photo_url,
        }


def average_total_score(
    logs: Sequence[ActivityLog],
    target_rounds: int,
    rules: ScoreRules,
) -> Optional[float]:
    if not logs:
        return None
    daily = compute_daily_scores(list(logs), target_rounds, rules)
    return round(float(daily["total_score"].mean()), 2)


def rank_participants(
    entries: List[Union[LeaderboardEntry, Dict[str, Any]]],
    rules: Optional[ScoreRules] = None,
) -> List[ParticipantRanking]:
    """Score every participant's logs and return them best-first."""
    if rules is None:
        rules = ScoreRules()

    rows = []
    for entry in entries:
        if not isinstance(entry, LeaderboardEntry):
            entry = LeaderboardEntry.from_dict(entry)
        target = entry.target_rounds
        if target is None:
            target = rules.chanting.default_target_rounds
        rows.append({
            "participant_id": entry.participant_id,
            "full_name": entry.full_name,
            "profile_photo_url": entry.profile_photo_url,
            "days_logged": len(entry.logs),
            "avg_total_score": average_total_score(entry.logs, target, rules),
        })

    if not rows:
        return []

    df = pd.DataFrame(rows)
    df["avg_total_score"] = pd.to_numeric(df["avg_total_score"], errors="coerce")
    df["rank"] = df["avg_total_score"].rank(method="min", ascending=False, na_option="bottom")
    df.sort_values(["rank", "full_name"], inplace=True)
    logger.debug("Ranked %d participants", len(df))

    return [
        ParticipantRanking(
            rank=int(row.rank),
            participant_id=row.participant_id,
            full_name=row.full_name,
            avg_total_score=None if pd.isna(row.avg_total_score) else float(row.avg_total_score),
            profile_photo_url=row.profile_photo_url,
            days_logged=int(row.days_logged),
        )
        for row in df.itertuples()
    ]
