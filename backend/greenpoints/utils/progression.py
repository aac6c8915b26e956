from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

POINTS_PER_LEVEL = 100


@dataclass(frozen=True)
class Badge:
    key: str
    name: str
    icon: str


# (metric, threshold, badge); each rule is checked on its own every time.
BADGE_RULES: List[Tuple[str, int, Badge]] = [
    ("items", 10, Badge("eco_warrior", "Eco Warrior", "leaf")),
    ("items", 50, Badge("champion", "Champion", "medal")),
    ("items", 100, Badge("legend", "Legend", "trophy")),
    ("points", 200, Badge("redeemer", "Redeemer", "star")),
]


@dataclass(frozen=True)
class Progression:
    level: int
    progress: float
    points_to_next_level: int
    badges: Tuple[Badge, ...]

    def to_dict(self) -> dict:
        return {
            "level": self.level,
            "progress_to_next_level": self.progress,
            "points_to_next_level": self.points_to_next_level,
            "badges": [{"key": b.key, "name": b.name, "icon": b.icon} for b in self.badges],
        }


def level_for(total_points: int) -> int:
    return max(int(total_points or 0), 0) // POINTS_PER_LEVEL + 1


def progress_to_next_level(total_points: int) -> float:
    pts = int(total_points or 0)
    floor_pts = (level_for(pts) - 1) * POINTS_PER_LEVEL
    ratio = (pts - floor_pts) / POINTS_PER_LEVEL
    return min(max(ratio, 0.0), 1.0)


def points_to_next_level(total_points: int) -> int:
    pts = max(int(total_points or 0), 0)
    return level_for(pts) * POINTS_PER_LEVEL - pts


def badges_for(total_items: int, total_points: int) -> Tuple[Badge, ...]:
    """Badges held right now.

    Nothing is persisted: dropping below a threshold loses the badge.
    """
    values = {"items": int(total_items or 0), "points": int(total_points or 0)}
    return tuple(badge for metric, threshold, badge in BADGE_RULES if values[metric] >= threshold)


def progression(ledger) -> Progression:
    pts = ledger.total_points
    return Progression(
        level=level_for(pts),
        progress=progress_to_next_level(pts),
        points_to_next_level=points_to_next_level(pts),
        badges=badges_for(ledger.total_items_recycled, pts),
    )
