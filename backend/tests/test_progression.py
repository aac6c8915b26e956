import pytest

from greenpoints.utils.ledger import UserLedger
from greenpoints.utils.progression import (
    badges_for,
    level_for,
    points_to_next_level,
    progress_to_next_level,
    progression,
)


def _names(badges):
    return {b.name for b in badges}


@pytest.mark.parametrize("points, level, progress", [
    (0, 1, 0.0),
    (99, 1, 0.99),
    (100, 2, 0.0),
    (250, 3, 0.5),
    (1000, 11, 0.0),
])
def test_level_and_progress(points, level, progress):
    assert level_for(points) == level
    assert progress_to_next_level(points) == pytest.approx(progress)


def test_points_to_next_level():
    assert points_to_next_level(0) == 100
    assert points_to_next_level(250) == 50
    assert points_to_next_level(300) == 100


def test_no_badges_for_new_user():
    assert badges_for(0, 0) == ()


def test_badges_are_independent():
    assert _names(badges_for(10, 0)) == {"Eco Warrior"}
    assert _names(badges_for(0, 200)) == {"Redeemer"}
    assert _names(badges_for(100, 0)) == {"Eco Warrior", "Champion", "Legend"}
    assert _names(badges_for(55, 450)) == {"Eco Warrior", "Champion", "Redeemer"}


def test_badge_is_lost_when_points_drop():
    assert "Redeemer" in _names(badges_for(12, 210))
    assert "Redeemer" not in _names(badges_for(12, 60))


def test_progression_bundle():
    p = progression(UserLedger(user_id=1, total_items_recycled=50, total_points=250))
    assert p.level == 3
    assert p.progress == pytest.approx(0.5)
    assert _names(p.badges) == {"Eco Warrior", "Champion", "Redeemer"}
    d = p.to_dict()
    assert d["level"] == 3
    assert d["points_to_next_level"] == 50
    assert {b["key"] for b in d["badges"]} == {"eco_warrior", "champion", "redeemer"}
