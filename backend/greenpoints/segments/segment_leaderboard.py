from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from greenpoints.services.points import get_points_service
from greenpoints.utils.jwt_utils import current_user
from greenpoints.utils.leaderboard import rank

leaderboard_bp = Blueprint("leaderboard_bp", __name__, url_prefix="/api/leaderboard")

MAX_LIMIT = 100


def _limit() -> int:
    default = int(current_app.config.get("LEADERBOARD_LIMIT") or 50)
    raw_limit = (request.args.get("limit") or "").strip()
    try:
        limit = int(raw_limit) if raw_limit else default
    except ValueError:
        limit = default
    if limit < 1:
        limit = default
    if limit > MAX_LIMIT:
        limit = MAX_LIMIT
    return limit


@leaderboard_bp.get("")
def leaderboard():
    try:
        ranking = rank(
            get_points_service().store.snapshots(),
            time_frame=request.args.get("time_frame"),
            metric=request.args.get("metric"),
            limit=_limit(),
        )
    except ValueError as e:
        return jsonify({"ok": False, "error": "bad_request", "message": str(e)}), 400

    out = {
        "ok": True,
        "time_frame": ranking.time_frame.value,
        "metric": ranking.metric.value,
        # shorter windows are lifetime totals scaled down, not real per-period sums
        "is_estimate": ranking.is_estimate,
        "items": [e.to_dict() for e in ranking.entries],
    }
    u = current_user()
    if u:
        # None when outside the top-N
        out["my_rank"] = ranking.rank_of(int(u.id))
    return jsonify(out), 200
