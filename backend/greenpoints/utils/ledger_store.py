from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from greenpoints.extensions import db
from greenpoints.models import Offer, PointsAccount, RecycleTxn, RedemptionRecord, User
from greenpoints.utils.errors import LedgerWriteFailed
from greenpoints.utils.item_rewards import ItemType
from greenpoints.utils.leaderboard import LeaderboardSnapshot
from greenpoints.utils.ledger import RECENT_ACTIVITY_CAP, RecyclingEvent, UserLedger
from greenpoints.utils.redemptions import OfferCategory, PartnerOffer, Redemption, RedemptionStatus


def _to_db(ts: Optional[datetime]) -> Optional[datetime]:
    # columns hold naive UTC
    if ts is None:
        return None
    if ts.tzinfo is not None:
        ts = ts.astimezone(timezone.utc).replace(tzinfo=None)
    return ts


def _from_db(ts: Optional[datetime]) -> Optional[datetime]:
    if ts is None:
        return None
    return ts.replace(tzinfo=timezone.utc)


def _event(row: RecycleTxn) -> RecyclingEvent:
    return RecyclingEvent(
        id=row.event_id,
        item_type=ItemType(row.item_type),
        points_awarded=int(row.points or 0),
        co2_saved_kg=float(row.co2_saved or 0.0),
        timestamp=_from_db(row.created_at),
    )


def offer_from_row(row: Offer) -> PartnerOffer:
    return PartnerOffer(
        id=int(row.id),
        title=row.title,
        points_cost=int(row.points_cost),
        category=OfferCategory(row.category or "store"),
        is_active=bool(row.is_active),
        description=row.description or "",
        partner_name=row.partner_name,
        address=row.address,
        discount_percent=row.discount_percent,
        original_price=float(row.original_price) if row.original_price is not None else None,
    )


def redemption_from_row(row: RedemptionRecord) -> Redemption:
    return Redemption(
        id=row.id,
        user_id=int(row.user_id),
        offer_id=int(row.offer_id),
        points_used=int(row.points_used),
        status=RedemptionStatus(row.status),
        created_at=_from_db(row.created_at),
    )


class SqlLedgerStore:
    """Durable store for ledgers, backed by the app's SQLAlchemy session.

    `save` is a compare-and-swap on PointsAccount.version: it only applies
    when the stored version still equals `ledger.version`. New events and
    an optional redemption are written in the same transaction.

    A lost race returns False; any other database failure rolls back and
    raises LedgerWriteFailed.
    """

    def load(self, user_id: int) -> Optional[UserLedger]:
        acct = PointsAccount.query.filter_by(user_id=int(user_id)).first()
        if not acct:
            return None
        rows = (
            RecycleTxn.query.filter_by(account_id=acct.id)
            .order_by(RecycleTxn.created_at.desc(), RecycleTxn.id.desc())
            .limit(RECENT_ACTIVITY_CAP)
            .all()
        )
        return UserLedger(
            user_id=int(acct.user_id),
            total_items_recycled=int(acct.total_items or 0),
            total_points=int(acct.total_points or 0),
            co2_saved_kg=float(acct.co2_saved or 0.0),
            streak_days=int(acct.streak_days or 0),
            last_activity_at=_from_db(acct.last_activity_at),
            recent_activity=tuple(_event(r) for r in rows),
            version=int(acct.version or 0),
        )

    def save(self, user_id: int, ledger: UserLedger, redemption: Optional[Redemption] = None) -> bool:
        uid = int(user_id)
        try:
            acct = PointsAccount.query.filter_by(user_id=uid).first()
            if acct is None:
                if ledger.version != 0:
                    return False
                acct = PointsAccount(user_id=uid, version=0)
                db.session.add(acct)
                db.session.flush()

            updated = (
                PointsAccount.query.filter_by(id=acct.id, version=int(ledger.version))
                .update(
                    {
                        PointsAccount.total_items: int(ledger.total_items_recycled),
                        PointsAccount.total_points: int(ledger.total_points),
                        PointsAccount.co2_saved: float(ledger.co2_saved_kg),
                        PointsAccount.streak_days: int(ledger.streak_days),
                        PointsAccount.last_activity_at: _to_db(ledger.last_activity_at),
                        PointsAccount.version: PointsAccount.version + 1,
                        PointsAccount.updated_at: datetime.utcnow(),
                    },
                    synchronize_session=False,
                )
            )
            if updated != 1:
                db.session.rollback()
                return False

            ids = [e.id for e in ledger.recent_activity]
            known = set()
            if ids:
                known = {
                    r.event_id
                    for r in RecycleTxn.query.with_entities(RecycleTxn.event_id).filter(RecycleTxn.event_id.in_(ids))
                }
            # oldest first so insertion order matches event order
            for e in reversed(ledger.recent_activity):
                if e.id in known:
                    continue
                db.session.add(RecycleTxn(
                    event_id=e.id,
                    account_id=acct.id,
                    user_id=uid,
                    item_type=e.item_type.value,
                    points=int(e.points_awarded),
                    co2_saved=float(e.co2_saved_kg),
                    created_at=_to_db(e.timestamp),
                ))

            if redemption is not None:
                db.session.add(RedemptionRecord(
                    id=redemption.id,
                    user_id=uid,
                    offer_id=int(redemption.offer_id),
                    points_used=int(redemption.points_used),
                    status=redemption.status.value,
                    created_at=_to_db(redemption.created_at),
                    updated_at=_to_db(redemption.created_at),
                ))

            db.session.commit()
            return True
        except IntegrityError as e:
            # a concurrent writer inserted the same account or record first
            db.session.rollback()
            current_app.logger.warning("ledger save for user %s lost to a concurrent write: %s", uid, e)
            return False
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.warning("ledger save failed for user %s: %s", uid, e)
            raise LedgerWriteFailed(uid) from e

    def get_or_create(self, user_id: int) -> UserLedger:
        ledger = self.load(user_id)
        if ledger is not None:
            return ledger
        fresh = UserLedger(user_id=int(user_id))
        if self.save(user_id, fresh):
            return replace(fresh, version=1)
        # someone else created it first
        ledger = self.load(user_id)
        if ledger is None:
            return fresh
        return ledger

    def history(self, user_id: int) -> Tuple[List[RecyclingEvent], List[Redemption]]:
        events = RecycleTxn.query.filter_by(user_id=int(user_id)).order_by(RecycleTxn.id.asc()).all()
        reds = RedemptionRecord.query.filter_by(user_id=int(user_id)).order_by(RedemptionRecord.created_at.asc()).all()
        return [_event(r) for r in events], [redemption_from_row(r) for r in reds]

    def snapshots(self) -> List[LeaderboardSnapshot]:
        rows = (
            db.session.query(PointsAccount, User)
            .join(User, User.id == PointsAccount.user_id)
            .all()
        )
        return [
            LeaderboardSnapshot(
                user_id=int(acct.user_id),
                display_name=u.name or f"user-{int(acct.user_id)}",
                items_recycled=int(acct.total_items or 0),
                points=int(acct.total_points or 0),
                co2_saved=round(float(acct.co2_saved or 0.0), 2),
            )
            for acct, u in rows
        ]


def list_active_offers(category: Optional[str] = None) -> List[PartnerOffer]:
    q = Offer.query.filter_by(is_active=True)
    if category:
        q = q.filter_by(category=category)
    rows = q.order_by(Offer.points_cost.asc(), Offer.id.asc()).all()
    return [offer_from_row(r) for r in rows]


def get_offer(offer_id: int) -> Optional[PartnerOffer]:
    row = db.session.get(Offer, int(offer_id))
    return offer_from_row(row) if row else None


def redemptions_for(user_id: int, limit: int = 100) -> List[Redemption]:
    rows = (
        RedemptionRecord.query.filter_by(user_id=int(user_id))
        .order_by(RedemptionRecord.created_at.desc())
        .limit(int(limit))
        .all()
    )
    return [redemption_from_row(r) for r in rows]
