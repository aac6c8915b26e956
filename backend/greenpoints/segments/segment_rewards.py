from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from greenpoints.extensions import db
from greenpoints.services.points import get_points_service
from greenpoints.utils.idempotency import lookup_response, release_key, store_response
from greenpoints.utils.jwt_utils import current_user
from greenpoints.utils.ledger_store import list_active_offers, redemptions_for
from greenpoints.utils.redemptions import OfferCategory, can_afford, points_needed

rewards_bp = Blueprint("rewards_bp", __name__, url_prefix="/api/rewards")


@rewards_bp.get("/offers")
def offers():
    category = (request.args.get("category") or "").strip().lower()
    if category in ("", "all"):
        category = None
    elif category not in {c.value for c in OfferCategory}:
        return jsonify({"ok": False, "error": "bad_request", "message": f"unknown category: {category}"}), 400

    catalog = list_active_offers(category)
    u = current_user()
    ledger = get_points_service().ledger(int(u.id)) if u else None
    items = []
    for o in catalog:
        d = o.to_dict()
        if ledger is not None:
            d["can_afford"] = can_afford(ledger, o)
            d["points_needed"] = points_needed(ledger, o)
        items.append(d)
    return jsonify({"ok": True, "items": items}), 200


@rewards_bp.post("/redeem")
def redeem_offer():
    u = current_user()
    if not u:
        return jsonify({"message": "Unauthorized"}), 401
    payload = request.get_json(silent=True) or {}
    try:
        offer_id = int(payload.get("offer_id"))
    except (TypeError, ValueError):
        return jsonify({"ok": False, "error": "bad_request", "message": "offer_id required"}), 400

    state, row, status = lookup_response(int(u.id), "rewards.redeem", {"offer_id": offer_id})
    if state in ("hit", "conflict"):
        return jsonify(row), status

    try:
        ledger, redemption = get_points_service().redeem(int(u.id), offer_id)
    except Exception:
        # failures are not remembered, so a retry with the same key runs again
        if state == "miss":
            release_key(row)
        raise

    body = {"ok": True, "redemption": redemption.to_dict(), "total_points": ledger.total_points}
    if state == "miss":
        _remember(row, body, redemption.id)
    return jsonify(body), 201


def _remember(row, body: dict, redemption_id: str, attempts: int = 2):
    key_id = row.id
    # the redemption is already committed, so the key stays claimed
    for attempt in range(1, attempts + 1):
        try:
            store_response(row, body, 201)
            return
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.warning(
                "storing idempotent response for redemption %s failed (attempt %s): %s",
                redemption_id, attempt, e,
            )
    current_app.logger.error("idempotency key %s left without a response for redemption %s", key_id, redemption_id)


@rewards_bp.get("/redemptions")
def my_redemptions():
    u = current_user()
    if not u:
        return jsonify({"message": "Unauthorized"}), 401
    return jsonify([r.to_dict() for r in redemptions_for(int(u.id))]), 200
