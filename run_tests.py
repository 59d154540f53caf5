"""Sadhana v1.0 — Standalone test suite (no pytest dependency)."""
import sys
import traceback
from datetime import date, datetime
from pathlib import Path

import pandas as pd

sys.path.insert(0, str(Path(__file__).parent))

from sadhana.config import (
    ChantingRules, MinutesRules, SadhanaConfig, ScoreRules, SleepBands, WakeBands,
)
from sadhana.models import ActivityLog, AssociationLog, BookLog, ChantingLog, ScoreBreakdown
from sadhana.scoring import (
    SCORE_COLUMNS,
    calculate_arati_score, calculate_association_score, calculate_chanting_score,
    calculate_exercise_score, calculate_reading_score, calculate_regulation_score,
    calculate_sleep_score, calculate_wake_score, compute_daily_scores, compute_sadhana_score,
    sleep_minutes,
)
from sadhana.insights import (
    build_daily_frame, compute_arati_insight, compute_association_insight,
    compute_book_insight, compute_chanting_insight, compute_exercise_insight,
    compute_monthly_insights, compute_scores_insight, compute_sleep_insight,
    format_clock, parse_clock,
)
from sadhana.status import (
    GREEN, RED, YELLOW, HealthResult,
    classify_arati_status, classify_association_status, classify_chanting_status,
    classify_exercise_status, classify_overall, classify_reading_status, classify_sleep_status,
)
from sadhana.leaderboard import rank_participants
from sadhana.pipeline import analyze, analyze_data, load_logs, select_month
from sadhana.report import format_sadhana_report, generate_report

CFG = SadhanaConfig()
RULES = CFG.rules
TEST_DATA = Path(__file__).parent / "test_data.json"

passed = 0
failed = 0


def test(name, fn):
    global passed, failed
    try:
        fn()
        print(f"  ✓ {name}")
        passed += 1
    except Exception as e:
        print(f"  ✗ {name}: {e}")
        traceback.print_exc()
        failed += 1


def approx(a, b, tol=0.01):
    assert abs(a - b) < tol, f"{a} != {b} (tol={tol})"


def january_logs():
    return select_month(load_logs(TEST_DATA), 2025, 1)


def day(**kwargs):
    return ActivityLog(today_date=date(2025, 1, 1), **kwargs)


def chant(*pairs):
    return tuple(ChantingLog(slot=slot, rounds=rounds) for slot, rounds in pairs)


# ═══════════════════════════════════════════════════════════════════════
# CONFIG
# ═══════════════════════════════════════════════════════════════════════
print("\n[Config]")

def t_default_slot_points():
    cr = RULES.chanting
    assert cr.points_for("before_7_30_am") == 10
    assert cr.points_for("7_30_to_12_00_pm") == 7.5
    assert cr.points_for("12_00_to_6_00_pm") == 5
    assert cr.points_for("6_00_to_12_00_am") == 2.5
    assert cr.points_for("after_12_00_am") == 1
    assert cr.points_for("sometime_later") == 0
test("default slot points table", t_default_slot_points)

def t_rules_frozen():
    try:
        RULES.reading.max_marks = 100
        raise RuntimeError("Should have raised FrozenInstanceError")
    except AttributeError:
        pass
test("rule tables are immutable", t_rules_frozen)

def t_bad_sleep_bands():
    try:
        SleepBands(bands=((1350, 20.0), (1320, 25.0)))
        raise RuntimeError("Should have raised ValueError")
    except ValueError:
        pass
test("descending sleep bands raise ValueError", t_bad_sleep_bands)

def t_bad_wake_window():
    try:
        WakeBands(windows=((240, 210, 25.0),))
        raise RuntimeError("Should have raised ValueError")
    except ValueError:
        pass
test("inverted wake window raises ValueError", t_bad_wake_window)

def t_negative_rules():
    for build in (lambda: MinutesRules(per_minute=-1),
                  lambda: ChantingRules(slot_points=(("before_7_30_am", -1.0),))):
        try:
            build()
            raise RuntimeError("Should have raised ValueError")
        except ValueError:
            pass
test("negative rule values raise ValueError", t_negative_rules)


# ═══════════════════════════════════════════════════════════════════════
# CHANTING
# ═══════════════════════════════════════════════════════════════════════
print("\n[Chanting]")

def t_chant_example():
    logs = chant(("before_7_30_am", 10), ("12_00_to_6_00_pm", 10))
    assert calculate_chanting_score(logs, 16) == 134
test("10 early + 10 afternoon rounds, target 16 → 134", t_chant_example)

def t_chant_order_independent():
    logs = chant(("12_00_to_6_00_pm", 10), ("before_7_30_am", 10))
    assert calculate_chanting_score(logs, 16) == 134
test("best rounds fill the quota whatever the log order", t_chant_order_independent)

def t_chant_zero():
    assert calculate_chanting_score((), 16) == 0
    assert calculate_chanting_score(chant(("before_7_30_am", 0)), 16) == 0
test("no rounds → 0", t_chant_zero)

def t_chant_target_zero():
    logs = chant(("before_7_30_am", 3), ("after_12_00_am", 2))
    assert calculate_chanting_score(logs, 0) == 5
test("target 0 → every round at flat 1 point", t_chant_target_zero)

def t_chant_excess_flat():
    # 16 early rounds fill the quota; 4 late-evening extras earn 1 each, not 2.5
    logs = chant(("6_00_to_12_00_am", 4), ("before_7_30_am", 16))
    assert calculate_chanting_score(logs, 16) == 164
test("excess rounds earn 1 point regardless of slot", t_chant_excess_flat)

def t_chant_under_target():
    logs = chant(("7_30_to_12_00_pm", 4), ("6_00_to_12_00_am", 2))
    assert calculate_chanting_score(logs, 16) == 35
test("under target → full slot value for every round", t_chant_under_target)

def t_chant_unknown_slot():
    logs = chant(("brahma_muhurta", 5), ("before_7_30_am", 1))
    assert calculate_chanting_score(logs, 16) == 10
test("unknown slot → 0 points per round", t_chant_unknown_slot)

def t_chant_negative_rounds():
    logs = chant(("before_7_30_am", -4), ("after_12_00_am", 2))
    assert calculate_chanting_score(logs, 16) == 2
test("negative rounds clamp to zero", t_chant_negative_rounds)

def t_chant_custom_rules():
    rules = ScoreRules(chanting=ChantingRules(excess_round_points=0.5))
    logs = chant(("before_7_30_am", 18))
    assert calculate_chanting_score(logs, 16, rules) == 161
test("custom excess credit is honored", t_chant_custom_rules)


# ═══════════════════════════════════════════════════════════════════════
# READING / ASSOCIATION / EXERCISE
# ═══════════════════════════════════════════════════════════════════════
print("\n[Reading / Association / Exercise]")

def t_reading_linear():
    assert calculate_reading_score((BookLog("Gita", 30), BookLog("Bhagavatam", 20))) == 25
test("reading is 0.5 points per minute", t_reading_linear)

def t_reading_cap():
    assert calculate_reading_score((BookLog("Gita", 10_000),)) == 60
    assert calculate_reading_score((BookLog("Gita", 120),)) == 60
test("reading caps at 60", t_reading_cap)

def t_reading_empty():
    assert calculate_reading_score(()) == 0
test("no books → 0", t_reading_empty)

def t_assoc_cap_independent():
    log = day(
        book_reading_logs=(BookLog("Gita", 500),),
        association_logs=(AssociationLog("GURU", 40),),
    )
    s = compute_sadhana_score(log)
    assert s.reading == 60
    assert s.association == 20
test("association cap is independent of reading", t_assoc_cap_independent)

def t_assoc_cap():
    assert calculate_association_score((AssociationLog("GURU", 10_000),)) == 60
test("association caps at 60", t_assoc_cap)

def t_assoc_negative():
    logs = (AssociationLog("GURU", -50), AssociationLog("PRABHUPADA", 20))
    assert calculate_association_score(logs) == 10
test("negative minutes clamp to zero", t_assoc_negative)

def t_exercise_binary():
    for minutes in (1, 30, 1440):
        assert calculate_exercise_score(minutes) == 20, minutes
    assert calculate_exercise_score(0) == 0
    assert calculate_exercise_score(-10) == 0
test("exercise is binary 20 / 0", t_exercise_binary)


# ═══════════════════════════════════════════════════════════════════════
# REGULATIONS / ARATI
# ═══════════════════════════════════════════════════════════════════════
print("\n[Regulations / Arati]")

def t_regs_all():
    log = day(no_meat=True, no_intoxication=True, no_illicit_sex=True,
              no_gambling=True, only_prasadam=True)
    assert calculate_regulation_score(log) == 40
test("all five regulations → 40", t_regs_all)

def t_regs_none():
    assert calculate_regulation_score(day()) == 0
test("no regulations → 0", t_regs_none)

def t_regs_prasadam():
    assert calculate_regulation_score(day(only_prasadam=True)) == 20
test("only prasadam → 20", t_regs_prasadam)

def t_arati_all():
    log = day(mangla_attended=True, narshima_attended=True, tulsi_arti_attended=True,
              darshan_arti_attended=True, guru_puja_attended=True, sandhya_arti_attended=True)
    assert calculate_arati_score(log) == 35
test("all six aratis → 35", t_arati_all)

def t_arati_japa_sanga():
    assert calculate_arati_score(day(japa_sanga=True)) == 10
    assert calculate_arati_score(day(japa_sanga=None)) == 0
test("japa sanga optional, worth 10", t_arati_japa_sanga)


# ═══════════════════════════════════════════════════════════════════════
# SLEEP / WAKE
# ═══════════════════════════════════════════════════════════════════════
print("\n[Sleep / Wake]")

def t_sleep_boundaries():
    assert calculate_sleep_score("2025-01-01T21:59:59") == 25
    assert calculate_sleep_score("2025-01-01T22:00:00") == 20
    assert calculate_sleep_score("2025-01-01T22:29:00") == 20
    assert calculate_sleep_score("2025-01-01T22:30:00") == 15
    assert calculate_sleep_score("2025-01-01T23:00:00") == 5
test("sleep bucket boundaries", t_sleep_boundaries)

def t_sleep_rollover():
    assert sleep_minutes("2025-01-02T00:15:00") == 24 * 60 + 15
    assert calculate_sleep_score("2025-01-02T00:15:00") == 5
test("past-midnight bedtime rolls over to 24:15 → 5", t_sleep_rollover)

def t_sleep_datetime_input():
    assert calculate_sleep_score(datetime(2025, 1, 1, 21, 30)) == 25
test("datetime objects are accepted", t_sleep_datetime_input)

def t_sleep_missing():
    assert calculate_sleep_score(None) == 0
    assert calculate_sleep_score("") == 0
    assert calculate_sleep_score("garbage") == 0
test("missing / unparseable bedtime → 0", t_sleep_missing)

def t_sleep_timezone():
    utc = "2025-01-01T16:30:00Z"
    local = ScoreRules(local_timezone="Asia/Kolkata")
    assert calculate_sleep_score(utc, local) == 20        # 22:00 IST
    assert calculate_sleep_score(utc) == 25               # 16:30 as written
test("tz-aware bedtimes convert to the configured zone", t_sleep_timezone)

def t_wake_boundaries():
    assert calculate_wake_score("2025-01-01T03:29:00") == 0
    assert calculate_wake_score("2025-01-01T03:30:00") == 25
    assert calculate_wake_score("2025-01-01T03:59:59") == 25
    assert calculate_wake_score("2025-01-01T04:00:00") == 20
    assert calculate_wake_score("2025-01-01T04:29:00") == 20
    assert calculate_wake_score("2025-01-01T04:30:00") == 15
    assert calculate_wake_score("2025-01-01T05:29:00") == 15
    assert calculate_wake_score("2025-01-01T05:30:00") == 0
    assert calculate_wake_score("2025-01-01T07:00:00") == 0
test("wake bucket boundaries", t_wake_boundaries)

def t_wake_missing():
    assert calculate_wake_score(None) == 0
    assert calculate_wake_score("25:99") == 0
test("missing / unparseable wake-up → 0", t_wake_missing)


# ═══════════════════════════════════════════════════════════════════════
# AGGREGATE
# ═══════════════════════════════════════════════════════════════════════
print("\n[Aggregate]")

def t_zero_input():
    log = day(sleep_at="nope", wakeup_at="nope")
    s = compute_sadhana_score(log)
    assert s.total_score == 0
    assert all(v == 0 for v in s.categories().values())
test("empty day with bad timestamps → total 0", t_zero_input)

def t_sum_invariant():
    for log in load_logs(TEST_DATA):
        s = compute_sadhana_score(log, 16)
        assert s.total_score == sum(s.categories().values())
        assert all(v >= 0 for v in s.categories().values())
test("total always equals the category sum", t_sum_invariant)

def t_breakdown_total_not_settable():
    s = ScoreBreakdown(chanting=10, wake=25)
    assert s.total_score == 35
    assert s.as_dict() == {"totalScore": 35, "breakdown": s.categories()}
test("breakdown derives its total", t_breakdown_total_not_settable)

def t_full_day():
    s = compute_sadhana_score(january_logs()[0], 16)
    assert s.categories() == {
        "chanting": 160, "reading": 30, "association": 15, "exercise": 20,
        "regulations": 40, "arati": 20, "sleep": 25, "wake": 25,
    }
    assert s.total_score == 335
test("full day breakdown", t_full_day)

def t_malformed_numbers():
    log = day(
        exercise_time="abc",
        chanting_logs=chant(("before_7_30_am", float("nan")), ("after_12_00_am", 2)),
        book_reading_logs=(BookLog("Gita", "twenty"), BookLog("Bhagavatam", 20)),
        wakeup_at="2025-01-01T03:45:00",
    )
    s = compute_sadhana_score(log)
    assert s.exercise == 0
    assert s.chanting == 2
    assert s.reading == 10
    assert s.wake == 25
    assert build_daily_frame([log], CFG)["total_rounds"].iloc[0] == 2
test("malformed numbers zero only their own entries", t_malformed_numbers)

def t_partial_failure():
    s = compute_sadhana_score(january_logs()[3], 16)
    assert s.sleep == 0 and s.wake == 0
    assert s.chanting == 60 and s.reading == 60
    assert s.total_score == 145
test("bad timestamps zero only their own categories", t_partial_failure)

def t_daily_frame():
    df = compute_daily_scores(january_logs(), 16, RULES)
    assert list(df.columns) == ["date", *SCORE_COLUMNS]
    assert list(df["total_score"]) == [335, 299, 39, 145]
test("daily score table", t_daily_frame)

def t_daily_empty():
    df = compute_daily_scores([], 16, RULES)
    assert df.empty
    assert "total_score" in df.columns
test("empty daily score table", t_daily_empty)


# ═══════════════════════════════════════════════════════════════════════
# MODELS
# ═══════════════════════════════════════════════════════════════════════
print("\n[Models]")

def t_from_dict_missing_date():
    try:
        ActivityLog.from_dict({"sleep_at": "2025-01-01T22:00:00"})
        raise RuntimeError("Should have raised ValueError")
    except ValueError as e:
        assert "today_date" in str(e)
test("missing today_date raises ValueError", t_from_dict_missing_date)

def t_from_dict_bad_date():
    try:
        ActivityLog.from_dict({"today_date": "yesterday"})
        raise RuntimeError("Should have raised ValueError")
    except ValueError:
        pass
test("invalid today_date raises ValueError", t_from_dict_bad_date)

def t_from_dict_defaults():
    log = ActivityLog.from_dict({"today_date": "2025-01-05"})
    assert log.chanting_logs == () and log.japa_sanga is None
    assert log.exercise_time == 0
test("optional fields default to empty", t_from_dict_defaults)


# ═══════════════════════════════════════════════════════════════════════
# INSIGHTS
# ═══════════════════════════════════════════════════════════════════════
print("\n[Insights]")

def t_clock_helpers():
    assert format_clock(250) == "04:10"
    assert format_clock(1455) == "00:15"
    assert format_clock(None) is None
    assert parse_clock("22:15") == 1335
    assert parse_clock("nonsense") is None
test("clock helpers", t_clock_helpers)

def t_daily_frame_rows():
    df = build_daily_frame(january_logs(), CFG)
    assert len(df) == 4
    assert list(df["total_rounds"]) == [16, 20, 4, 13]
    assert pd.isna(df["wake_minutes"].iloc[3])
test("daily frame flattens logs", t_daily_frame_rows)

def t_sleep_insight():
    i = compute_sleep_insight(january_logs(), CFG)
    assert i["days_count"] == 4
    assert i["median_wakeup_time"] == "04:10"
    approx(i["iqr_wakeup_minutes"], 60.0)
    approx(i["percent_wakeup_before_5am"], 66.67)
    assert i["median_sleep_time"] == "22:15"
    approx(i["iqr_sleep_minutes"], 75.0)
    approx(i["median_sleep_duration_minutes"], 417.5)
test("sleep insight", t_sleep_insight)

def t_chanting_insight():
    i = compute_chanting_insight(january_logs(), 16, CFG)
    approx(i["median_daily_rounds"], 14.5)
    approx(i["iqr_daily_rounds"], 6.25)
    approx(i["percent_days_meeting_target"], 50.0)
    assert i["zero_round_days"] == 0
    approx(i["percent_rounds_before_7_30_am"], 49.06)
    approx(i["percent_rounds_after_12_00_am"], 7.55)
    approx(i["percent_rounds_6_00_to_12_00"], 0.0)
    approx(i["median_rating"], 6.5)
test("chanting insight", t_chanting_insight)

def t_book_insight():
    i = compute_book_insight(january_logs(), CFG)
    assert i["reading_days"] == 3
    approx(i["median_daily_reading_minutes"], 60.0)
    approx(i["iqr_daily_reading_minutes"], 120.0)
    assert i["longest_reading_streak"] == 2
    assert i["primary_book_name"] == "Bhagavad Gita"
    approx(i["primary_book_return_ratio"], 1.0)
    assert i["books_read"] == ["Bhagavad Gita", "Srimad Bhagavatam"]
test("reading insight", t_book_insight)

def t_association_insight():
    i = compute_association_insight(january_logs(), CFG)
    assert i["association_days"] == 2
    approx(i["median_daily_association_minutes"], 90.0)
    assert i["median_minutes_by_type"] == {
        "PRABHUPADA": 30.0, "GURU": 90.0, "OTHER_ISKCON_DEVOTEE": 60.0,
    }
    assert i["association_days_by_type"]["GURU"] == 1
    assert i["unique_devotee_names"] == ["Madhava Das"]
test("association insight", t_association_insight)

def t_arati_insight():
    i = compute_arati_insight(january_logs(), CFG)
    assert i["total_arati_attendance_days"] == 3
    assert i["mangla_attended_days"] == 2
    assert i["morning_arati_days"] == 2
    assert i["sandhya_arati_attended_days"] == 1
    assert i["japa_sanga_attended_days"] == 1
test("arati insight", t_arati_insight)

def t_exercise_insight():
    i = compute_exercise_insight(january_logs(), CFG)
    assert i["exercise_days"] == 2
    approx(i["percent_days_exercised"], 50.0)
    approx(i["median_exercise_minutes"], 22.5)
    approx(i["iqr_exercise_minutes"], 7.5)
test("exercise insight", t_exercise_insight)

def t_scores_insight():
    i = compute_scores_insight(january_logs(), 16, CFG)
    approx(i["avg_total_score"], 204.5)
    approx(i["avg_chanting_score"], 89.5)
    approx(i["avg_association_score"], 18.75)
    approx(i["avg_wakeup_score"], 11.25)
test("scores insight", t_scores_insight)

def t_empty_month():
    insights = compute_monthly_insights([], 16, CFG)
    assert all(i["days_count"] == 0 for i in insights.values())
    assert insights["sleep"]["median_wakeup_time"] is None
    assert insights["reading"]["primary_book_name"] is None
    assert insights["scores"]["avg_total_score"] == 0.0
test("empty month yields empty insights", t_empty_month)

def t_percent_plain_floats():
    insights = compute_monthly_insights(january_logs(), 16, CFG)
    for name in ("sleep", "chanting", "exercise"):
        for key, value in insights[name].items():
            if key.startswith("percent_"):
                assert type(value) is float, (name, key, type(value))
test("percentages are plain floats", t_percent_plain_floats)


# ═══════════════════════════════════════════════════════════════════════
# STATUS
# ═══════════════════════════════════════════════════════════════════════
print("\n[Status]")

def t_status_waiting():
    for fn in (classify_sleep_status, classify_chanting_status, classify_reading_status,
               classify_association_status, classify_arati_status, classify_exercise_status):
        r = fn(None, 2025, 1, CFG)
        assert r.status == YELLOW and r.title == "Waiting for Data"
test("no insight → Waiting for Data", t_status_waiting)

def t_status_month():
    insights = compute_monthly_insights(january_logs(), 16, CFG)
    assert classify_sleep_status(insights["sleep"], 2025, 1, CFG).status == YELLOW
    assert classify_chanting_status(insights["chanting"], 2025, 1, CFG).status == YELLOW
    assert classify_reading_status(insights["reading"], 2025, 1, CFG).status == YELLOW
    assert classify_association_status(insights["association"], 2025, 1, CFG).status == GREEN
    assert classify_arati_status(insights["arati"], 2025, 1, CFG).status == GREEN
    assert classify_exercise_status(insights["exercise"], 2025, 1, CFG).status == GREEN
test("january statuses", t_status_month)

def t_sleep_late_red():
    insight = {"days_count": 20, "median_sleep_time": "00:10", "iqr_sleep_minutes": 30,
               "iqr_wakeup_minutes": 30, "median_sleep_duration_minutes": 420,
               "percent_wakeup_before_5am": 10}
    r = classify_sleep_status(insight, 2025, 1, CFG)
    assert r.status == RED and r.title == "Late Sleep Pattern"
test("after-midnight median bedtime → Late Sleep Pattern", t_sleep_late_red)

def t_sleep_green():
    insight = {"days_count": 20, "median_sleep_time": "21:45", "iqr_sleep_minutes": 20,
               "iqr_wakeup_minutes": 15, "median_sleep_duration_minutes": 400,
               "percent_wakeup_before_5am": 90}
    assert classify_sleep_status(insight, 2025, 1, CFG).status == GREEN
test("steady early bedtime → GREEN", t_sleep_green)

def t_chanting_absence():
    insight = {"days_count": 30, "daily_target_rounds": 16, "median_daily_rounds": 16,
               "iqr_daily_rounds": 2, "zero_round_days": 6}
    r = classify_chanting_status(insight, 2025, 1, CFG)
    assert r.status == RED and r.title == "Frequent Absence"
test("many zero days → Frequent Absence", t_chanting_absence)

def t_reading_rare():
    insight = {"days_count": 30, "reading_days": 3,
               "median_daily_reading_minutes": 40, "iqr_daily_reading_minutes": 10}
    r = classify_reading_status(insight, 2025, 1, CFG)
    assert r.status == RED and r.title == "Rare Presence"
test("rare reading → Rare Presence", t_reading_rare)

def t_reflection_rotates():
    insight = {"days_count": 30, "reading_days": 3,
               "median_daily_reading_minutes": 40, "iqr_daily_reading_minutes": 10}
    a = classify_reading_status(insight, 2025, 1, CFG).reflection
    b = classify_reading_status(insight, 2025, 2, CFG).reflection
    assert a != b
test("reflection rotates by month", t_reflection_rotates)

def t_overall():
    g = HealthResult(GREEN, "", "")
    r = HealthResult(RED, "", "")
    y = HealthResult(YELLOW, "", "")
    assert classify_overall([g, g, g, g, y, y]).title == "Excellent Harmony"
    assert classify_overall([g, g, g, g, r, y]).title == "Good Progress"
    assert classify_overall([r, r, g, g, g, g]).title == "Needs Anchoring"
test("overall monthly reflection", t_overall)


# ═══════════════════════════════════════════════════════════════════════
# LEADERBOARD
# ═══════════════════════════════════════════════════════════════════════
print("\n[Leaderboard]")

def t_leaderboard():
    logs = january_logs()
    entries = [
        {"participant_id": "c", "full_name": "Chaitanya", "logs": []},
        {"participant_id": "b", "full_name": "Bhima", "logs": [logs[2]]},
        {"participant_id": "a", "full_name": "Arjuna", "logs": logs},
        {"participant_id": "d", "full_name": "Draupadi", "logs": [logs[2]]},
    ]
    ranking = rank_participants(entries)
    assert [(r.participant_id, r.rank) for r in ranking] == [("a", 1), ("b", 2), ("d", 2), ("c", 4)]
    approx(ranking[0].avg_total_score, 204.5)
    assert ranking[-1].avg_total_score is None
test("ranking with ties and empty participants", t_leaderboard)

def t_leaderboard_personal_target():
    log = day(chanting_logs=chant(("before_7_30_am", 16)))
    ranking = rank_participants([
        {"participant_id": "x", "full_name": "X", "logs": [log], "target_rounds": 4},
        {"participant_id": "y", "full_name": "Y", "logs": [log]},
    ])
    assert ranking[0].participant_id == "y"
    approx(ranking[0].avg_total_score, 160)
    approx(ranking[1].avg_total_score, 52)
test("each participant scored against their own target", t_leaderboard_personal_target)

def t_leaderboard_empty():
    assert rank_participants([]) == []
test("empty leaderboard", t_leaderboard_empty)


# ═══════════════════════════════════════════════════════════════════════
# REPORTS
# ═══════════════════════════════════════════════════════════════════════
print("\n[Reports]")

def t_daily_report():
    text = format_sadhana_report(january_logs()[1], target_finished_time="11:30 AM")
    assert "*Sadhana Report - 02 Jan 2025*" in text
    assert "*Wake Up:* 4:10 AM" in text
    assert "*Chanting:* 20/16 (Before 7:30 AM: 10) - Finished by 11:30 AM" in text
    assert "*Reading:* 60 mins - Bhagavad Gita (20m), Srimad Bhagavatam (40m)" in text
    assert "*Shravan:* 150 mins" in text
    assert "*Sleep:* 10:15 PM" in text
    assert "*Morning Program:* Mangala Arati, Guru Puja" in text
test("daily share report", t_daily_report)

def t_daily_report_fallbacks():
    text = format_sadhana_report(january_logs()[3], last_day_sleep_at="2025-01-04T00:15:00")
    assert "*Wake Up:* N/A" in text
    assert "*Sleep:* 12:15 AM" in text
    assert "*Morning Program:* None" in text
test("daily report prefers previous bedtime and handles gaps", t_daily_report_fallbacks)

def t_daily_report_no_books():
    text = format_sadhana_report(january_logs()[2])
    assert "📚 *Reading:* 0 mins\n" in text
    assert "*Chanting:* 4/16\n" in text
test("daily report without books or early rounds", t_daily_report_no_books)


# ═══════════════════════════════════════════════════════════════════════
# INTEGRATION
# ═══════════════════════════════════════════════════════════════════════
print("\n[Integration]")

def t_full_keys():
    result = analyze(TEST_DATA, 2025, 1)
    expected = {"period", "days_logged", "target_rounds", "daily",
                "insights", "statuses", "overall"}
    assert set(result.keys()) == expected
    assert result["days_logged"] == 4
    assert result["daily"][0]["date"] == "2025-01-01"
test("full analysis returns all keys", t_full_keys)

def t_month_filter():
    result = analyze(TEST_DATA, 2025, 2)
    assert result["days_logged"] == 1
    assert result["daily"][0]["total_score"] == 190
test("analysis only covers the requested month", t_month_filter)

def t_overall_month():
    assert analyze(TEST_DATA, 2025, 1)["overall"]["title"] == "Good Progress"
test("january overall reflection", t_overall_month)

def t_analyze_data_empty():
    result = analyze_data([], 2025, 1)
    assert result["days_logged"] == 0
    assert result["statuses"]["sleep"]["title"] == "Waiting for Data"
test("empty data yields an empty month", t_analyze_data_empty)

def t_untyped_association():
    data = [{
        "today_date": "2025-01-05",
        "association_logs": [{"type": None, "duration": 30}, {"type": "FRIEND", "duration": 20}],
    }]
    result = analyze_data(data, 2025, 1)
    assoc = result["insights"]["association"]
    approx(assoc["median_daily_association_minutes"], 50.0)
    assert assoc["median_minutes_by_type"]["FRIEND"] == 20.0
    assert "" not in assoc["median_minutes_by_type"]
    assert result["daily"][0]["association"] == 25
test("null association type alongside a custom type", t_untyped_association)

def t_bad_month():
    try:
        analyze_data([], 2025, 13)
        raise RuntimeError("Should have raised ValueError")
    except ValueError:
        pass
test("invalid month raises ValueError", t_bad_month)

def t_report():
    report = generate_report(analyze(TEST_DATA, 2025, 1))
    assert "SADHANA MONTHLY REPORT" in report
    assert "2025-01" in report
    assert "204.5" in report
    assert "Good Progress" in report
    assert "Association" in report
test("monthly report contains all sections", t_report)

def t_missing_file():
    try:
        analyze("nonexistent.json", 2025, 1)
        raise RuntimeError("Should have raised FileNotFoundError")
    except FileNotFoundError:
        pass
test("missing file raises FileNotFoundError", t_missing_file)


# ═══════════════════════════════════════════════════════════════════════
# SUMMARY
# ═══════════════════════════════════════════════════════════════════════
print(f"\n{'=' * 58}")
print(f"  {passed} passed, {failed} failed")
print(f"{'=' * 58}")
sys.exit(1 if failed else 0)
