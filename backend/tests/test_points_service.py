import threading
from dataclasses import replace
from datetime import timedelta

import pytest

from conftest import MemoryLedgerStore
from greenpoints.services.points import PointsService
from greenpoints.utils.errors import (
    ConcurrentRedemptionConflict,
    InsufficientPoints,
    InvalidItemType,
    LedgerWriteFailed,
    OfferNotFound,
)
from greenpoints.utils.ledger import UserLedger
from greenpoints.utils.redemptions import OfferCategory, PartnerOffer

VOUCHER = PartnerOffer(id=3, title="Coffee Shop Voucher", points_cost=100, category=OfferCategory.voucher)


@pytest.fixture
def store():
    return MemoryLedgerStore()


@pytest.fixture
def service(app, store, clock):
    return PointsService(store, offers={VOUCHER.id: VOUCHER}.get, clock=clock)


def test_record_persists_and_bumps_version(service, store):
    ledger = service.record(1, "bottle")
    assert ledger.total_points == 5
    assert ledger.version == 1
    assert store.load(1).total_points == 5

    ledger = service.record(1, "can")
    assert ledger.total_points == 6
    assert store.load(1).version == 2


def test_invalid_item_leaves_store_untouched(service, store):
    service.record(1, "bottle")
    with pytest.raises(InvalidItemType):
        service.record(1, "tyre")
    assert store.load(1).total_points == 5
    assert store.saves == 1


def test_record_uses_user_timezone(service, clock):
    # 23:30 local in New York on the 9th, then 00:30 local on the 10th
    clock.now = clock.now.replace(hour=3, minute=30)
    service.record(1, "can", tz_name="America/New_York")
    clock.advance(hours=1)
    assert service.record(1, "can", tz_name="America/New_York").streak_days == 2
    clock.advance(hours=1)
    assert service.record(2, "can", tz_name="UTC").streak_days == 1


def test_streak_over_days(service, clock):
    service.record(1, "bottle")
    clock.advance(days=1)
    assert service.record(1, "bottle").streak_days == 2
    clock.advance(days=3)
    assert service.record(1, "bottle").streak_days == 1


def test_save_failure_on_record(service, store):
    store.ledgers[1] = UserLedger(user_id=1, version=4)
    store.load = lambda uid: UserLedger(user_id=uid, version=3)
    with pytest.raises(LedgerWriteFailed):
        service.record(1, "bottle")


def test_redeem_unknown_offer(service):
    with pytest.raises(OfferNotFound):
        service.redeem(1, 999)


def test_redeem_insufficient_is_noop(service, store):
    for _ in range(4):
        service.record(1, "bottle")
    with pytest.raises(InsufficientPoints) as exc:
        service.redeem(1, VOUCHER.id)
    assert exc.value.shortfall == 80
    assert store.load(1).total_points == 20
    assert store.redemptions == []


def test_redeem_success_writes_one_record(service, store):
    store.ledgers[1] = UserLedger(user_id=1, total_points=100, version=1)
    ledger, redemption = service.redeem(1, VOUCHER.id)
    assert ledger.total_points == 0
    assert store.load(1).total_points == 0
    assert store.redemptions == [redemption]
    assert redemption.status.value == "pending"


def test_lost_cas_race_is_conflict_without_record(service, store):
    store.ledgers[1] = UserLedger(user_id=1, total_points=500, version=7)
    stale = replace(store.ledgers[1], version=6)
    store.load = lambda uid: stale
    with pytest.raises(ConcurrentRedemptionConflict):
        service.redeem(1, VOUCHER.id)
    assert store.ledgers[1].total_points == 500
    assert store.redemptions == []


def test_concurrent_redemptions_cannot_overdraw(app, service, store):
    store.ledgers[1] = UserLedger(user_id=1, total_points=250, version=1)
    results = []
    errors = []
    barrier = threading.Barrier(8)

    def worker():
        with app.app_context():
            barrier.wait()
            try:
                results.append(service.redeem(1, VOUCHER.id))
            except InsufficientPoints as e:
                errors.append(e)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(results) == 2
    assert len(errors) == 6
    assert store.load(1).total_points == 50
    assert len(store.redemptions) == 2


def test_users_do_not_share_locks(service):
    assert service.locks.for_user(1) is service.locks.for_user(1)
    assert service.locks.for_user(1) is not service.locks.for_user(2)


def test_now_for_unknown_zone_falls_back(service, clock):
    assert service.now_for("Not/AZone") == clock.now
    assert service.now_for("Europe/Berlin").utcoffset() == timedelta(hours=1)


def test_database_failure_on_redeem_is_write_failure(service, store):
    store.ledgers[1] = UserLedger(user_id=1, total_points=500, version=2)

    def failing_save(user_id, ledger, redemption=None):
        raise LedgerWriteFailed(user_id)

    store.save = failing_save
    with pytest.raises(LedgerWriteFailed):
        service.redeem(1, VOUCHER.id)
    assert store.ledgers[1].total_points == 500
    assert store.redemptions == []
