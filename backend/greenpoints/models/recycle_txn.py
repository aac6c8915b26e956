from datetime import datetime

from greenpoints.extensions import db


class RecycleTxn(db.Model):
    """One recycled item. Full history; never updated or deleted."""

    __tablename__ = "recycle_txns"

    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(db.String(32), nullable=False, unique=True, index=True)
    account_id = db.Column(db.Integer, db.ForeignKey("points_accounts.id"), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    item_type = db.Column(db.String(16), nullable=False)  # bottle/can
    points = db.Column(db.Integer, nullable=False, default=0)
    co2_saved = db.Column(db.Float, nullable=False, default=0.0)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)
