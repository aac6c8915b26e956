from dataclasses import FrozenInstanceError
from datetime import datetime, timedelta, timezone
import random

import pytest

from greenpoints.utils.errors import InvalidItemType
from greenpoints.utils.item_rewards import ITEM_REWARDS, ItemType
from greenpoints.utils.ledger import RECENT_ACTIVITY_CAP, UserLedger, record_activity, replay_balance
from greenpoints.utils.redemptions import OfferCategory, PartnerOffer, redeem

T0 = datetime(2026, 3, 10, 9, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("item_type", list(ItemType))
def test_record_increments_by_table_values(item_type):
    before = UserLedger(user_id=1, total_items_recycled=3, total_points=12, co2_saved_kg=0.4)
    after = record_activity(before, item_type.value, now=T0)

    reward = ITEM_REWARDS[item_type]
    assert after.total_items_recycled == 4
    assert after.total_points == 12 + reward.points
    assert after.co2_saved_kg == pytest.approx(0.4 + reward.co2_kg)
    assert after.last_activity_at == T0

    event = after.recent_activity[0]
    assert event.item_type == item_type
    assert event.points_awarded == reward.points
    assert event.timestamp == T0


def test_reference_values():
    assert ITEM_REWARDS[ItemType.bottle].points == 5
    assert ITEM_REWARDS[ItemType.bottle].co2_kg == 0.15
    assert ITEM_REWARDS[ItemType.can].points == 1
    assert ITEM_REWARDS[ItemType.can].co2_kg == 0.12


def test_record_does_not_touch_input():
    before = UserLedger(user_id=1)
    after = record_activity(before, "bottle", now=T0)
    assert before.total_points == 0
    assert before.recent_activity == ()
    assert after is not before
    with pytest.raises(FrozenInstanceError):
        after.total_points = 0


@pytest.mark.parametrize("bad", ["glass", "", None, 5, "BOTTLES"])
def test_unknown_item_type_rejected(bad):
    before = UserLedger(user_id=1, total_points=7)
    with pytest.raises(InvalidItemType):
        record_activity(before, bad, now=T0)
    assert before.total_points == 7


def test_item_type_is_case_insensitive():
    assert record_activity(UserLedger(user_id=1), " Can ", now=T0).total_points == 1


def test_recent_activity_is_newest_first_and_capped():
    ledger = UserLedger(user_id=1)
    for i in range(RECENT_ACTIVITY_CAP + 5):
        ledger = record_activity(ledger, "can", now=T0 + timedelta(minutes=i))

    assert len(ledger.recent_activity) == RECENT_ACTIVITY_CAP
    stamps = [e.timestamp for e in ledger.recent_activity]
    assert stamps == sorted(stamps, reverse=True)
    assert stamps[0] == T0 + timedelta(minutes=RECENT_ACTIVITY_CAP + 4)
    # totals keep counting past the display window
    assert ledger.total_items_recycled == RECENT_ACTIVITY_CAP + 5
    assert ledger.total_points == RECENT_ACTIVITY_CAP + 5


def test_event_ids_are_unique():
    ledger = UserLedger(user_id=1)
    for _ in range(10):
        ledger = record_activity(ledger, "bottle", now=T0)
    assert len({e.id for e in ledger.recent_activity}) == 10


def test_streak_across_days():
    ledger = UserLedger(user_id=1)
    ledger = record_activity(ledger, "bottle", now=T0)
    ledger = record_activity(ledger, "bottle", now=T0 + timedelta(hours=3))
    assert ledger.streak_days == 1
    ledger = record_activity(ledger, "can", now=T0 + timedelta(days=1))
    assert ledger.streak_days == 2
    ledger = record_activity(ledger, "can", now=T0 + timedelta(days=4))
    assert ledger.streak_days == 1


def test_replay_matches_running_total():
    rng = random.Random(7)
    ledger = UserLedger(user_id=1)
    history = []
    redemptions = []
    for i in range(200):
        ledger = record_activity(ledger, rng.choice(["bottle", "can"]), now=T0 + timedelta(hours=i))
        history.append(ledger.recent_activity[0])
        if i % 40 == 39:
            offer = PartnerOffer(id=i, title="Seed Starter Kit", points_cost=90, category=OfferCategory.product)
            ledger, r = redeem(ledger, offer, now=T0)
            redemptions.append(r)

    assert ledger.total_points == replay_balance(history, redemptions)
    assert ledger.total_points >= 0
