import datetime as dt

from domain.models import SessionRecord
from services.stats import (
    experience_points, login_streak, profile_stats, rank_label, total_duration, weekly_minutes,
)

UTC = dt.timezone.utc
NOW = dt.datetime(2026, 10, 19, 12, 0, tzinfo=UTC)  # a Monday
TODAY = NOW.date()


def make_record(i, created_at, duration=60, user_id='u1'):
    return SessionRecord(id=f'log{i}', user_id=user_id, project_id='p1',
                         duration_seconds=duration, created_at=created_at)


def records_on(*days_ago):
    return [make_record(i, NOW - dt.timedelta(days=d)) for i, d in enumerate(days_ago)]


def test_streak_three_consecutive_days():
    assert login_streak(records_on(0, 1, 2), UTC, today=TODAY) == 3


def test_streak_zero_without_today_or_yesterday():
    assert login_streak(records_on(2, 3), UTC, today=TODAY) == 0


def test_streak_single_gap_breaks_chain():
    assert login_streak(records_on(0, 2), UTC, today=TODAY) == 1


def test_streak_starts_from_yesterday_when_today_empty():
    assert login_streak(records_on(1, 2, 3, 5), UTC, today=TODAY) == 3


def test_streak_counts_multiple_sessions_per_day_once():
    assert login_streak(records_on(0, 0, 0, 1), UTC, today=TODAY) == 2


def test_streak_uses_configured_timezone():
    # 23:30 UTC on Oct 18 is already Oct 19 in Tokyo
    tokyo = dt.timezone(dt.timedelta(hours=9))
    recs = [make_record(1, dt.datetime(2026, 10, 18, 23, 30, tzinfo=UTC))]
    assert login_streak(recs, tokyo, today=dt.date(2026, 10, 19)) == 1
    assert login_streak(recs, UTC, today=dt.date(2026, 10, 20)) == 0


def test_histogram_ignores_sessions_older_than_a_week():
    recs = [make_record(1, NOW - dt.timedelta(days=8), duration=3600)]
    assert weekly_minutes(recs, UTC, now=NOW) == [0] * 7


def test_histogram_cutoff_is_strict():
    recs = [make_record(1, NOW - dt.timedelta(days=7), duration=3600)]
    assert weekly_minutes(recs, UTC, now=NOW) == [0] * 7


def test_histogram_truncates_to_whole_minutes_in_weekday_bucket():
    recs = [make_record(1, NOW - dt.timedelta(hours=1), duration=125)]
    buckets = weekly_minutes(recs, UTC, now=NOW)
    assert buckets[0] == 2  # Monday
    assert sum(buckets) == 2


def test_histogram_sunday_is_last_bucket():
    sunday = NOW - dt.timedelta(days=1)
    buckets = weekly_minutes([make_record(1, sunday, duration=600)], UTC, now=NOW)
    assert buckets[6] == 10


def test_histogram_truncates_each_record_separately():
    recs = [make_record(i, NOW - dt.timedelta(hours=i + 1), duration=90) for i in range(3)]
    assert weekly_minutes(recs, UTC, now=NOW)[0] == 3


def test_pure_functions_are_idempotent():
    recs = records_on(0, 1, 3, 6, 9)
    assert login_streak(recs, UTC, today=TODAY) == login_streak(recs, UTC, today=TODAY)
    assert weekly_minutes(recs, UTC, now=NOW) == weekly_minutes(recs, UTC, now=NOW)


def test_rank_thresholds():
    assert rank_label(0) == "Rookie"
    assert rank_label(29) == "Rookie"
    assert rank_label(30) == "Intermediate"
    assert rank_label(100) == "Master"


def test_profile_stats_totals():
    recs = [make_record(i, NOW - dt.timedelta(days=i), duration=3600) for i in range(3)]
    stats = profile_stats(recs, UTC, now=NOW)
    assert total_duration(recs) == 3 * 3600
    assert stats.total_hours == 3
    assert stats.total_posts == 3
    assert stats.streak == 3
    assert stats.rank == "Rookie"
    assert stats.experience_points == experience_points(recs) == 180 + 30
    assert sum(stats.weekly_minutes) == 180
