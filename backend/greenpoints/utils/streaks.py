"""
Streak tracking: pure functions, no DB access and no clock reads.

Calendar days are taken in the timezone of `now`; the caller converts
`now` to the user's local zone before calling.
"""
from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional


def _local_day(ts: datetime, now: datetime) -> date:
    if ts.tzinfo is not None and now.tzinfo is not None:
        ts = ts.astimezone(now.tzinfo)
    return ts.date()


def compute_streak(previous_streak: int, last_activity_at: Optional[datetime], now: datetime) -> int:
    """Streak after recording one more activity at `now`.

    Same day keeps the streak, the next day extends it, anything else
    (a gap of two or more days, or no prior activity) restarts at 1.
    """
    if last_activity_at is None:
        return 1

    today = now.date()
    last_day = _local_day(last_activity_at, now)

    if last_day == today:
        # a same-day event can never leave the streak at 0
        return max(int(previous_streak or 0), 1)
    if last_day == today - timedelta(days=1):
        return int(previous_streak or 0) + 1
    return 1


def current_streak(streak_days: int, last_activity_at: Optional[datetime], now: datetime) -> int:
    """Streak as displayed at `now` without recording anything.

    Still alive today or yesterday; broken (0) once a full day was missed.
    """
    if last_activity_at is None:
        return 0
    last_day = _local_day(last_activity_at, now)
    if (now.date() - last_day).days <= 1:
        return int(streak_days or 0)
    return 0
