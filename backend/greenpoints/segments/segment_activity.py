from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from greenpoints.services.points import get_points_service
from greenpoints.utils.jwt_utils import current_user
from greenpoints.utils.progression import progression
from greenpoints.utils.streaks import current_streak

activity_bp = Blueprint("activity_bp", __name__, url_prefix="/api")


def _tz(u) -> str:
    return (getattr(u, "timezone", None) or current_app.config.get("DEFAULT_TIMEZONE") or "UTC").strip()


def profile_payload(u, ledger) -> dict:
    svc = get_points_service()
    now = svc.now_for(_tz(u))
    return {
        "ok": True,
        "user": {"id": int(u.id), "name": u.name, "is_admin": bool(u.is_admin)},
        "ledger": ledger.to_dict(),
        "progression": progression(ledger).to_dict(),
        "current_streak": current_streak(ledger.streak_days, ledger.last_activity_at, now),
    }


@activity_bp.get("/me")
def me():
    u = current_user()
    if not u:
        return jsonify({"message": "Unauthorized"}), 401
    ledger = get_points_service().ledger(int(u.id))
    return jsonify(profile_payload(u, ledger)), 200


@activity_bp.post("/activity")
def record():
    u = current_user()
    if not u:
        return jsonify({"message": "Unauthorized"}), 401
    payload = request.get_json(silent=True) or {}
    ledger = get_points_service().record(int(u.id), payload.get("item_type"), tz_name=_tz(u))
    out = profile_payload(u, ledger)
    out["event"] = ledger.recent_activity[0].to_dict()
    return jsonify(out), 201


@activity_bp.get("/activity")
def recent():
    u = current_user()
    if not u:
        return jsonify({"message": "Unauthorized"}), 401
    ledger = get_points_service().ledger(int(u.id))
    return jsonify([e.to_dict() for e in ledger.recent_activity]), 200
