from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, Dict, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from flask import current_app

from greenpoints.utils.errors import ConcurrentRedemptionConflict, LedgerWriteFailed, OfferNotFound
from greenpoints.utils.ledger import UserLedger, record_activity
from greenpoints.utils.redemptions import Redemption, redeem


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class LedgerLocks:
    """One mutex per user id. Users never wait on each other."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[int, threading.Lock] = {}

    def for_user(self, user_id: int) -> threading.Lock:
        with self._guard:
            return self._locks.setdefault(int(user_id), threading.Lock())


class PointsService:
    """Serialized, persisted entry point for the two ledger mutators.

    Both `record` and `redeem` run load -> compute -> save under the user's
    lock; the store's version check covers writers in other processes.
    """

    def __init__(self, store, offers=None, clock: Optional[Callable[[], datetime]] = None, locks: Optional[LedgerLocks] = None):
        self.store = store
        self.offers = offers
        self.clock = clock or utc_now
        self.locks = locks or LedgerLocks()

    def now_for(self, tz_name: Optional[str]) -> datetime:
        now = self.clock()
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        if not tz_name:
            return now
        try:
            return now.astimezone(ZoneInfo(tz_name))
        except (ZoneInfoNotFoundError, ValueError):
            return now

    def _load(self, user_id: int) -> UserLedger:
        ledger = self.store.load(user_id)
        if ledger is None:
            ledger = UserLedger(user_id=int(user_id))
        return ledger

    def ledger(self, user_id: int) -> UserLedger:
        return self._load(user_id)

    def record(self, user_id: int, item_type, tz_name: Optional[str] = None) -> UserLedger:
        with self.locks.for_user(user_id):
            current = self._load(user_id)
            updated = record_activity(current, item_type, now=self.now_for(tz_name))
            if not self.store.save(user_id, updated):
                current_app.logger.warning("activity for user %s not saved (version %s)", user_id, current.version)
                raise LedgerWriteFailed(user_id)
        event = updated.recent_activity[0]
        current_app.logger.info(
            "user %s recycled %s: +%s points, total %s",
            user_id, event.item_type.value, event.points_awarded, updated.total_points,
        )
        return replace(updated, version=current.version + 1)

    def redeem(self, user_id: int, offer_id) -> Tuple[UserLedger, Redemption]:
        offer = self.offers(offer_id) if self.offers else None
        if offer is None:
            raise OfferNotFound(offer_id)

        with self.locks.for_user(user_id):
            current = self._load(user_id)
            updated, redemption = redeem(current, offer, now=self.now_for(None))
            if not self.store.save(user_id, updated, redemption=redemption):
                current_app.logger.warning(
                    "redemption of offer %s by user %s lost the ledger race (version %s)",
                    offer.id, user_id, current.version,
                )
                raise ConcurrentRedemptionConflict(user_id)
        current_app.logger.info(
            "user %s redeemed offer %s for %s points, %s left",
            user_id, offer.id, redemption.points_used, updated.total_points,
        )
        return replace(updated, version=current.version + 1), redemption


def get_points_service() -> PointsService:
    return current_app.extensions["points_service"]
