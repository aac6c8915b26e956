from datetime import datetime

from greenpoints.extensions import db


class RedemptionRecord(db.Model):
    __tablename__ = "redemptions"

    id = db.Column(db.String(32), primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    offer_id = db.Column(db.Integer, db.ForeignKey("partner_offers.id"), nullable=False, index=True)

    points_used = db.Column(db.Integer, nullable=False)
    status = db.Column(db.String(16), nullable=False, default="pending")  # pending/fulfilled/cancelled

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
