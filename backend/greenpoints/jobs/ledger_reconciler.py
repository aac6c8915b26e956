from __future__ import annotations

from flask import current_app

from greenpoints.extensions import db
from greenpoints.models import AuditLog, PointsAccount
from greenpoints.utils.ledger import replay_balance
from greenpoints.utils.ledger_store import SqlLedgerStore


def reconcile_ledgers(*, limit: int = 500, tolerance: float = 0.01) -> dict:
    """Detect ledger anomalies (replayed history vs stored totals).

    This does NOT auto-correct totals. Anomalies are logged and written to AuditLog.
    """
    store = SqlLedgerStore()
    checked = 0
    anomalies = 0

    accounts = PointsAccount.query.order_by(PointsAccount.id.asc()).limit(int(limit)).all()

    for acct in accounts:
        checked += 1
        events, redemptions = store.history(int(acct.user_id))

        computed_points = replay_balance(events, redemptions)
        computed_items = len(events)
        computed_co2 = sum(e.co2_saved_kg for e in events)
        stored_points = int(acct.total_points or 0)

        issues = []
        if computed_points != stored_points:
            issues.append("points_mismatch")
        if computed_items != int(acct.total_items or 0):
            issues.append("items_mismatch")
        if abs(computed_co2 - float(acct.co2_saved or 0.0)) > float(tolerance):
            issues.append("co2_mismatch")
        if stored_points < 0:
            issues.append("negative_balance")

        if not issues:
            continue

        anomalies += 1
        meta = {
            "issues": issues,
            "user_id": int(acct.user_id),
            "computed_points": computed_points,
            "stored_points": stored_points,
            "computed_items": computed_items,
            "stored_items": int(acct.total_items or 0),
            "computed_co2": round(computed_co2, 4),
            "stored_co2": round(float(acct.co2_saved or 0.0), 4),
        }
        current_app.logger.warning("ledger anomaly for user %s: %s", acct.user_id, ", ".join(issues))
        db.session.add(AuditLog.entry("ledger_anomaly", target_type="points_account", target_id=acct.id, meta=meta))

    if anomalies:
        db.session.commit()

    return {"checked": checked, "anomalies": anomalies}
