from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Iterable, Optional, Tuple

from greenpoints.utils.item_rewards import ItemType, parse_item_type, ITEM_REWARDS
from greenpoints.utils.streaks import compute_streak

RECENT_ACTIVITY_CAP = 20


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _iso(ts: Optional[datetime]) -> Optional[str]:
    return ts.isoformat() if ts else None


@dataclass(frozen=True)
class RecyclingEvent:
    id: str
    item_type: ItemType
    points_awarded: int
    co2_saved_kg: float
    timestamp: datetime

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "item_type": self.item_type.value,
            "points": int(self.points_awarded),
            "co2_saved_kg": float(self.co2_saved_kg),
            "timestamp": _iso(self.timestamp),
        }


@dataclass(frozen=True)
class UserLedger:
    """Per-user points ledger.

    Values are immutable: every operation returns a new ledger, so an update
    is either fully visible or not at all. `version` belongs to the durable
    store and is only compared there.
    """

    user_id: int
    total_items_recycled: int = 0
    total_points: int = 0
    co2_saved_kg: float = 0.0
    streak_days: int = 0
    last_activity_at: Optional[datetime] = None
    recent_activity: Tuple[RecyclingEvent, ...] = field(default_factory=tuple)
    version: int = 0

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "total_items_recycled": int(self.total_items_recycled),
            "total_points": int(self.total_points),
            "co2_saved_kg": round(float(self.co2_saved_kg), 2),
            "streak_days": int(self.streak_days),
            "last_activity_at": _iso(self.last_activity_at),
            "recent_activity": [e.to_dict() for e in self.recent_activity],
        }


def record_activity(ledger: UserLedger, item_type, now: Optional[datetime] = None) -> UserLedger:
    """Append one recycled item to `ledger` and return the updated ledger.

    Raises InvalidItemType before anything is computed, so a rejected item
    leaves no trace.
    """
    kind = parse_item_type(item_type)
    reward = ITEM_REWARDS[kind]
    now = now or _now()

    event = RecyclingEvent(
        id=uuid.uuid4().hex,
        item_type=kind,
        points_awarded=reward.points,
        co2_saved_kg=reward.co2_kg,
        timestamp=now,
    )

    return replace(
        ledger,
        total_items_recycled=ledger.total_items_recycled + 1,
        total_points=ledger.total_points + reward.points,
        # rounded so repeated float additions don't drift
        co2_saved_kg=round(ledger.co2_saved_kg + reward.co2_kg, 6),
        streak_days=compute_streak(ledger.streak_days, ledger.last_activity_at, now),
        last_activity_at=now,
        recent_activity=((event,) + tuple(ledger.recent_activity))[:RECENT_ACTIVITY_CAP],
    )


def replay_balance(events: Iterable, redemptions: Iterable = ()) -> int:
    """Point balance rebuilt from full history.

    Every redemption ever created counts against the balance, whatever its
    status; cancellation does not refund.
    """
    earned = sum(int(e.points_awarded) for e in events)
    spent = sum(int(r.points_used) for r in redemptions)
    return earned - spent
