from __future__ import annotations

from datetime import datetime

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy import func

from greenpoints.extensions import db
from greenpoints.models import AuditLog, Offer, PointsAccount, RecycleTxn, RedemptionRecord, User
from greenpoints.utils.jwt_utils import current_user
from greenpoints.utils.ledger_store import offer_from_row, redemption_from_row
from greenpoints.utils.redemptions import OfferCategory, transition

admin_bp = Blueprint("admin_bp", __name__, url_prefix="/api/admin")


def _admin():
    u = current_user()
    if not u or not bool(u.is_admin):
        return None
    return u


def _opt_num(raw, cast):
    if raw in (None, ""):
        return None
    try:
        return cast(raw)
    except (TypeError, ValueError):
        return None


def _bad(message: str):
    return jsonify({"ok": False, "error": "bad_request", "message": message}), 400


@admin_bp.get("/stats")
def stats():
    if not _admin():
        return jsonify({"message": "Forbidden"}), 403
    items, points = db.session.query(
        func.coalesce(func.sum(PointsAccount.total_items), 0),
        func.coalesce(func.sum(PointsAccount.total_points), 0),
    ).one()
    awarded = db.session.query(func.coalesce(func.sum(RecycleTxn.points), 0)).scalar()
    return jsonify({
        "ok": True,
        "stats": {
            "total_users": User.query.count(),
            "total_items_processed": int(items or 0),
            "total_points_awarded": int(awarded or 0),
            # balance still held by users
            "total_points_outstanding": int(points or 0),
            "active_offers": Offer.query.filter_by(is_active=True).count(),
            "pending_redemptions": RedemptionRecord.query.filter_by(status="pending").count(),
        },
    }), 200


@admin_bp.post("/offers")
def create_offer():
    admin = _admin()
    if not admin:
        return jsonify({"message": "Forbidden"}), 403
    payload = request.get_json(silent=True) or {}

    title = (payload.get("title") or "").strip()
    if not title:
        return _bad("title required")
    try:
        cost = int(payload.get("points_cost"))
    except (TypeError, ValueError):
        return _bad("points_cost required")
    if cost <= 0:
        return _bad("points_cost must be positive")
    category = (payload.get("category") or "store").strip().lower()
    if category not in {c.value for c in OfferCategory}:
        return _bad(f"unknown category: {category}")

    row = Offer(
        title=title[:160],
        description=(payload.get("description") or "")[:500],
        category=category,
        points_cost=cost,
        partner_name=(payload.get("partner_name") or None),
        address=(payload.get("address") or None),
        discount_percent=_opt_num(payload.get("discount_percent"), int),
        original_price=_opt_num(payload.get("original_price"), float),
        is_active=True,
    )
    db.session.add(row)
    db.session.flush()
    db.session.add(AuditLog.entry(
        "offer_created", actor_user_id=admin.id, target_type="offer", target_id=row.id,
        meta={"title": row.title, "points_cost": cost},
    ))
    db.session.commit()
    current_app.logger.info("admin %s created offer %s (%s points)", admin.id, row.id, cost)
    return jsonify({"ok": True, "offer": offer_from_row(row).to_dict()}), 201


@admin_bp.post("/offers/<int:offer_id>/deactivate")
def deactivate_offer(offer_id: int):
    admin = _admin()
    if not admin:
        return jsonify({"message": "Forbidden"}), 403
    row = db.session.get(Offer, offer_id)
    if not row:
        return jsonify({"ok": False, "error": "offer_not_found", "message": "Not found"}), 404
    if row.is_active:
        row.is_active = False
        row.updated_at = datetime.utcnow()
        db.session.add(AuditLog.entry("offer_deactivated", actor_user_id=admin.id, target_type="offer", target_id=row.id))
        db.session.commit()
    return jsonify({"ok": True, "offer": offer_from_row(row).to_dict()}), 200


@admin_bp.post("/redemptions/<redemption_id>/status")
def set_redemption_status(redemption_id: str):
    admin = _admin()
    if not admin:
        return jsonify({"message": "Forbidden"}), 403
    payload = request.get_json(silent=True) or {}
    row = db.session.get(RedemptionRecord, redemption_id)
    if not row:
        return jsonify({"ok": False, "error": "redemption_not_found", "message": "Not found"}), 404

    new_status = transition(row.status, (payload.get("status") or "").strip().lower())
    old_status = row.status
    row.status = new_status.value
    row.updated_at = datetime.utcnow()
    db.session.add(AuditLog.entry(
        "redemption_status", actor_user_id=admin.id, target_type="redemption", target_id=row.id,
        meta={"from": old_status, "to": new_status.value},
    ))
    db.session.commit()
    return jsonify({"ok": True, "redemption": redemption_from_row(row).to_dict()}), 200
