from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict

from greenpoints.utils.errors import InvalidItemType


class ItemType(str, Enum):
    bottle = "bottle"  # plastic bottle
    can = "can"        # aluminium can


@dataclass(frozen=True)
class ItemReward:
    points: int
    co2_kg: float


ITEM_REWARDS: Dict[ItemType, ItemReward] = {
    ItemType.bottle: ItemReward(points=5, co2_kg=0.15),
    ItemType.can:    ItemReward(points=1, co2_kg=0.12),
}


def parse_item_type(raw) -> ItemType:
    if isinstance(raw, ItemType):
        return raw
    try:
        return ItemType((raw or "").strip().lower())
    except (ValueError, AttributeError):
        raise InvalidItemType(raw) from None


def reward_for(item_type) -> ItemReward:
    return ITEM_REWARDS[parse_item_type(item_type)]
