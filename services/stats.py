"""Derived profile statistics: streak, weekly histogram, totals, rank and XP.

All functions are pure over an already-fetched list of session records. Calendar
dates and weekdays are taken in the timezone passed in (the app passes the
configured one), never in the host's local timezone.
"""
from __future__ import annotations

import datetime as dt
from typing import Iterable, List, Optional, Sequence, Set

from domain.constants import RANK_THRESHOLDS, XP_PER_POST
from domain.models import ProfileStats, SessionRecord


def _local_date(ts: dt.datetime, tz: dt.tzinfo) -> dt.date:
    return ts.astimezone(tz).date()


def session_dates(records: Iterable[SessionRecord], tz: dt.tzinfo) -> Set[dt.date]:
    return {_local_date(r.created_at, tz) for r in records}


def login_streak(records: Iterable[SessionRecord], tz: dt.tzinfo, today: Optional[dt.date] = None) -> int:
    """Consecutive days with at least one session, ending today or yesterday.

    If neither today nor yesterday has a session the streak is 0. Otherwise count
    backwards from today (or yesterday when today is empty) until the first gap.
    """
    dates = session_dates(records, tz)
    if today is None:
        today = dt.datetime.now(tz).date()
    yesterday = today - dt.timedelta(days=1)
    if today in dates:
        day = today
    elif yesterday in dates:
        day = yesterday
    else:
        return 0
    streak = 0
    while day in dates:
        streak += 1
        day -= dt.timedelta(days=1)
    return streak


def weekly_minutes(records: Iterable[SessionRecord], tz: dt.tzinfo, now: Optional[dt.datetime] = None) -> List[int]:
    """Minutes per weekday (Monday=0 .. Sunday=6) over the last seven days.

    A record counts only if it was created strictly after `now - 7 days`; it adds
    its duration in whole minutes to the bucket of its weekday.
    """
    if now is None:
        now = dt.datetime.now(tz)
    cutoff = now - dt.timedelta(days=7)
    buckets = [0] * 7
    for r in records:
        if r.created_at <= cutoff:
            continue
        buckets[r.created_at.astimezone(tz).weekday()] += r.duration_seconds // 60
    return buckets


def total_duration(records: Iterable[SessionRecord]) -> int:
    return sum(r.duration_seconds for r in records)


def rank_label(total_hours: int) -> str:
    for threshold, label in RANK_THRESHOLDS:
        if total_hours >= threshold:
            return label
    return RANK_THRESHOLDS[-1][1]


def experience_points(records: Sequence[SessionRecord]) -> int:
    """One point per whole minute worked plus a flat bonus per post."""
    return total_duration(records) // 60 + XP_PER_POST * len(records)


def profile_stats(records: Sequence[SessionRecord], tz: dt.tzinfo, now: Optional[dt.datetime] = None) -> ProfileStats:
    if now is None:
        now = dt.datetime.now(tz)
    hours = total_duration(records) // 3600
    return ProfileStats(
        total_hours=hours,
        total_posts=len(records),
        streak=login_streak(records, tz, today=now.astimezone(tz).date()),
        rank=rank_label(hours),
        experience_points=experience_points(records),
        weekly_minutes=weekly_minutes(records, tz, now=now),
    )
