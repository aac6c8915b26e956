from __future__ import annotations

import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Tuple

from greenpoints.utils.errors import InsufficientPoints, InvalidStatusTransition, OfferInactive
from greenpoints.utils.ledger import UserLedger


class OfferCategory(str, Enum):
    discount = "discount"
    product = "product"
    voucher = "voucher"
    store = "store"  # partner store accepting points at the till


class RedemptionStatus(str, Enum):
    pending = "pending"
    fulfilled = "fulfilled"
    cancelled = "cancelled"


# status changes belong to the fulfillment side and never leave a final state
ALLOWED_TRANSITIONS = {
    RedemptionStatus.pending: {RedemptionStatus.fulfilled, RedemptionStatus.cancelled},
    RedemptionStatus.fulfilled: set(),
    RedemptionStatus.cancelled: set(),
}


@dataclass(frozen=True)
class PartnerOffer:
    id: int
    title: str
    points_cost: int
    category: OfferCategory
    is_active: bool = True
    description: str = ""
    partner_name: Optional[str] = None
    address: Optional[str] = None
    discount_percent: Optional[int] = None
    original_price: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "points_cost": int(self.points_cost),
            "category": self.category.value,
            "is_active": bool(self.is_active),
            "partner_name": self.partner_name,
            "address": self.address,
            "discount_percent": self.discount_percent,
            "original_price": self.original_price,
        }


@dataclass(frozen=True)
class Redemption:
    id: str
    user_id: int
    offer_id: int
    points_used: int
    status: RedemptionStatus
    created_at: datetime

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "offer_id": self.offer_id,
            "points_used": int(self.points_used),
            "status": self.status.value,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


def can_afford(ledger: UserLedger, offer: PartnerOffer) -> bool:
    return ledger.total_points >= offer.points_cost


def points_needed(ledger: UserLedger, offer: PartnerOffer) -> int:
    return max(int(offer.points_cost) - int(ledger.total_points), 0)


def redeem(ledger: UserLedger, offer: PartnerOffer, now: Optional[datetime] = None) -> Tuple[UserLedger, Redemption]:
    """Exchange points for `offer`.

    Returns the debited ledger and a pending Redemption; on any error the
    caller's ledger is untouched. Persisting both together, and serializing
    concurrent calls for one user, is the caller's job (see PointsService).
    """
    if not offer.is_active:
        raise OfferInactive(offer.id)
    if ledger.total_points < offer.points_cost:
        raise InsufficientPoints(offer.points_cost - ledger.total_points)

    redemption = Redemption(
        id=uuid.uuid4().hex,
        user_id=ledger.user_id,
        offer_id=offer.id,
        points_used=int(offer.points_cost),
        status=RedemptionStatus.pending,
        created_at=now or datetime.now(timezone.utc),
    )
    return replace(ledger, total_points=ledger.total_points - offer.points_cost), redemption


def transition(current, requested) -> RedemptionStatus:
    cur = RedemptionStatus(current)
    try:
        req = RedemptionStatus(requested)
    except ValueError:
        raise InvalidStatusTransition(cur.value, str(requested)) from None
    if req not in ALLOWED_TRANSITIONS[cur]:
        raise InvalidStatusTransition(cur.value, req.value)
    return req
