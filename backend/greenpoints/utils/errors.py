from __future__ import annotations


class PointsError(Exception):
    """Base for every recoverable points-engine error.

    `code` is the stable machine-readable name the HTTP layer returns,
    `status` the HTTP status it maps to.
    """

    code = "points_error"
    status = 400

    def to_dict(self) -> dict:
        return {"ok": False, "error": self.code, "message": str(self)}


class InvalidItemType(PointsError):
    code = "invalid_item_type"
    status = 400

    def __init__(self, item_type):
        self.item_type = item_type
        super().__init__(f"unknown item type: {item_type!r}")

    def to_dict(self) -> dict:
        out = super().to_dict()
        out["item_type"] = self.item_type
        return out


class InsufficientPoints(PointsError):
    code = "insufficient_points"
    status = 409

    def __init__(self, shortfall: int):
        self.shortfall = int(shortfall)
        super().__init__(f"{self.shortfall} more points needed")

    def to_dict(self) -> dict:
        out = super().to_dict()
        out["shortfall"] = self.shortfall
        return out


class OfferInactive(PointsError):
    code = "offer_inactive"
    status = 409

    def __init__(self, offer_id):
        self.offer_id = offer_id
        super().__init__(f"offer {offer_id} is not active")


class OfferNotFound(PointsError):
    code = "offer_not_found"
    status = 404

    def __init__(self, offer_id):
        self.offer_id = offer_id
        super().__init__(f"offer {offer_id} not found")


class ConcurrentRedemptionConflict(PointsError):
    """Another writer changed the ledger between read and write; retry with a fresh read."""

    code = "concurrent_redemption_conflict"
    status = 409

    def __init__(self, user_id):
        self.user_id = user_id
        super().__init__(f"ledger for user {user_id} changed during redemption")


class LedgerWriteFailed(PointsError):
    code = "ledger_write_failed"
    status = 503

    def __init__(self, user_id):
        self.user_id = user_id
        super().__init__(f"ledger for user {user_id} could not be saved")


class InvalidStatusTransition(PointsError):
    code = "invalid_status_transition"
    status = 409

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"cannot move redemption from {current} to {requested}")
