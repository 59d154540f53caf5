"""Text reports: the shareable one-day sadhana report and the monthly summary."""

from typing import Dict, Optional

from sadhana.config import ScoreRules
from sadhana.models import ActivityLog, Timestamp
from sadhana.scoring import non_negative, to_local_timestamp


def _clock_12h(value: Timestamp, rules: ScoreRules) -> Optional[str]:
    ts = to_local_timestamp(value, rules)
    if ts is None:
        return None
    return ts.strftime("%I:%M %p").lstrip("0")


# ---------------------------------------------------------------------------
# Daily report
# ---------------------------------------------------------------------------

def format_sadhana_report(
    log: ActivityLog,
    target_finished_time: Optional[str] = None,
    last_day_sleep_at: Timestamp = None,
    target_rounds: int = 16,
    rules: Optional[ScoreRules] = None,
) -> str:
    """
    One-day report meant for pasting into a chat group.

    The sleep line prefers the previous day's bedtime when the caller has it,
    since that is the sleep that preceded this morning's wake-up.
    """
    if rules is None:
        rules = ScoreRules()

    wakeup = _clock_12h(log.wakeup_at, rules) or "N/A"
    sleep = _clock_12h(last_day_sleep_at, rules) or _clock_12h(log.sleep_at, rules) or "N/A"

    total_rounds = int(sum(non_negative(cl.rounds) for cl in log.chanting_logs))
    early_rounds = int(sum(non_negative(cl.rounds) for cl in log.chanting_logs if cl.slot == "before_7_30_am"))

    chanting = f"📿 *Chanting:* {total_rounds}/{target_rounds}"
    if early_rounds > 0:
        chanting += f" (Before 7:30 AM: {early_rounds})"
    if target_finished_time:
        chanting += f" - Finished by {target_finished_time}"

    total_reading = int(sum(non_negative(bl.reading_time) for bl in log.book_reading_logs))
    details = ", ".join(f"{bl.name} ({bl.reading_time}m)" for bl in log.book_reading_logs)
    reading = f"📚 *Reading:* {total_reading} mins"
    if details:
        reading += f" - {details}"

    total_association = int(sum(non_negative(al.duration) for al in log.association_logs))

    attended = []
    if log.mangla_attended:
        attended.append("Mangala Arati")
    if log.guru_puja_attended:
        attended.append("Guru Puja")

    lines = [
        f"*Sadhana Report - {log.today_date.strftime('%d %b %Y')}*",
        "",
        f"🌅 *Wake Up:* {wakeup}",
        chanting,
        reading,
        f"🤝 *Shravan:* {total_association} mins",
        f"🧘 *Exercise:* {log.exercise_time} mins",
        f"🛌 *Sleep:* {sleep}",
        "",
        f"*Morning Program:* {', '.join(attended) if attended else 'None'}",
    ]
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Monthly report
# ---------------------------------------------------------------------------

def _fmt(value, suffix: str = "") -> str:
    if value is None:
        return "—"
    return f"{value}{suffix}"


def generate_report(result: Dict) -> str:
    """Format a monthly analysis result as a human-readable text report."""
    period = result["period"]
    scores = result["insights"]["scores"]
    sleep = result["insights"]["sleep"]
    chanting = result["insights"]["chanting"]
    reading = result["insights"]["reading"]
    overall = result["overall"]

    lines = [
        f"SADHANA MONTHLY REPORT — {period['year']}-{period['month']:02d}",
        "=" * 58,
        "",
        f"  Days Logged         : {result['days_logged']}",
        f"  Target Rounds       : {result['target_rounds']}",
        f"  Avg Total Score     : {scores['avg_total_score']}",
        f"  Overall             : {overall['title']} ({overall['status']})",
        "",
        "  Average Scores:",
    ]

    for key in (
        "avg_chanting_score", "avg_book_score", "avg_association_score",
        "avg_regulation_score", "avg_arati_score", "avg_sleep_score",
        "avg_wakeup_score", "avg_exercise_score",
    ):
        label = key[len("avg_"):-len("_score")].replace("_", " ").title()
        lines.append(f"    {label:15s} : {scores[key]}")

    lines += [
        "",
        "  Highlights:",
        f"    Median Wake-up  : {_fmt(sleep['median_wakeup_time'])}",
        f"    Median Bedtime  : {_fmt(sleep['median_sleep_time'])}",
        f"    Median Rounds   : {_fmt(chanting['median_daily_rounds'])}",
        f"    Reading Streak  : {reading['longest_reading_streak']}d",
        "",
        "  Habit Status:",
    ]

    for name, status in result["statuses"].items():
        lines.append(f"    {name.title():15s} : {status['status']:6s} {status['title']}")

    lines.append("")
    lines.append(f"  {overall['reflection']}")
    lines.append("")
    lines.append("=" * 58)
    return "\n".join(lines)
