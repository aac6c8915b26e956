"""
Leaderboard ranking over read-only ledger snapshots.

Only lifetime totals are stored, so the shorter time frames are an
estimate: lifetime totals scaled down by a fixed factor, not a query over
the actual period. Every ranking built for those frames carries
`is_estimate=True` and callers must surface that.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional

from greenpoints.utils.progression import level_for


class TimeFrame(str, Enum):
    daily = "daily"
    weekly = "weekly"
    monthly = "monthly"
    all_time = "allTime"


class Metric(str, Enum):
    points = "points"
    items = "items"
    co2 = "co2"


TIME_FRAME_SCALE: Dict[TimeFrame, float] = {
    TimeFrame.daily: 0.1,
    TimeFrame.weekly: 0.4,
    TimeFrame.monthly: 0.75,
    TimeFrame.all_time: 1.0,
}


@dataclass(frozen=True)
class LeaderboardSnapshot:
    user_id: int
    display_name: str
    items_recycled: int
    points: int
    co2_saved: float


@dataclass(frozen=True)
class LeaderboardEntry:
    rank: int
    user_id: int
    display_name: str
    items_recycled: int
    points: int
    co2_saved: float

    @property
    def level(self) -> int:
        return level_for(self.points)

    def to_dict(self) -> dict:
        return {
            "rank": self.rank,
            "user_id": self.user_id,
            "name": self.display_name,
            "items_recycled": self.items_recycled,
            "points": self.points,
            "co2_saved": self.co2_saved,
            "level": self.level,
        }


@dataclass(frozen=True)
class Ranking:
    time_frame: TimeFrame
    metric: Metric
    entries: List[LeaderboardEntry]

    @property
    def is_estimate(self) -> bool:
        return self.time_frame != TimeFrame.all_time

    def rank_of(self, user_id) -> Optional[int]:
        return find_rank(self.entries, user_id)


def parse_time_frame(raw) -> TimeFrame:
    if isinstance(raw, TimeFrame):
        return raw
    if not raw:
        return TimeFrame.all_time
    try:
        return TimeFrame(raw)
    except ValueError:
        raise ValueError(f"unknown time frame: {raw!r}") from None


def parse_metric(raw) -> Metric:
    if isinstance(raw, Metric):
        return raw
    if not raw:
        return Metric.points
    try:
        return Metric(raw)
    except ValueError:
        raise ValueError(f"unknown metric: {raw!r}") from None


def _scaled(s: LeaderboardSnapshot, factor: float) -> LeaderboardSnapshot:
    if factor == 1.0:
        return s
    return LeaderboardSnapshot(
        user_id=s.user_id,
        display_name=s.display_name,
        items_recycled=int(math.floor(s.items_recycled * factor)),
        points=int(math.floor(s.points * factor)),
        co2_saved=round(s.co2_saved * factor, 2),
    )


def _metric_value(s: LeaderboardSnapshot, metric: Metric):
    if metric == Metric.items:
        return s.items_recycled
    if metric == Metric.co2:
        return s.co2_saved
    return s.points


def rank(
    snapshots: Iterable[LeaderboardSnapshot],
    time_frame=TimeFrame.all_time,
    metric=Metric.points,
    limit: Optional[int] = None,
) -> Ranking:
    """Order snapshots by `metric` descending, ties by user_id ascending.

    With `limit`, only the top-N are kept; everyone else has no rank.
    """
    tf = parse_time_frame(time_frame)
    m = parse_metric(metric)
    factor = TIME_FRAME_SCALE[tf]

    scaled = [_scaled(s, factor) for s in snapshots]
    # two stable sorts: secondary key first
    scaled.sort(key=lambda s: s.user_id)
    scaled.sort(key=lambda s: _metric_value(s, m), reverse=True)

    if limit is not None:
        scaled = scaled[: max(int(limit), 0)]

    entries = [
        LeaderboardEntry(
            rank=i,
            user_id=s.user_id,
            display_name=s.display_name,
            items_recycled=s.items_recycled,
            points=s.points,
            co2_saved=s.co2_saved,
        )
        for i, s in enumerate(scaled, start=1)
    ]
    return Ranking(time_frame=tf, metric=m, entries=entries)


def find_rank(entries: Iterable[LeaderboardEntry], user_id) -> Optional[int]:
    for e in entries:
        if e.user_id == user_id:
            return e.rank
    return None
