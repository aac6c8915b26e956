from datetime import datetime

from greenpoints.extensions import db


class Offer(db.Model):
    __tablename__ = "partner_offers"

    id = db.Column(db.Integer, primary_key=True)

    title = db.Column(db.String(160), nullable=False)
    description = db.Column(db.String(500), nullable=True)
    category = db.Column(db.String(16), nullable=False, default="store")  # discount/product/voucher/store

    points_cost = db.Column(db.Integer, nullable=False)

    partner_name = db.Column(db.String(160), nullable=True)
    address = db.Column(db.String(255), nullable=True)
    discount_percent = db.Column(db.Integer, nullable=True)
    original_price = db.Column(db.Float, nullable=True)

    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        db.CheckConstraint("points_cost > 0", name="ck_partner_offers_cost_positive"),
    )
