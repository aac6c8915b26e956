from datetime import datetime

from greenpoints.extensions import db


class PointsAccount(db.Model):
    __tablename__ = "points_accounts"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, unique=True, index=True)

    total_items = db.Column(db.Integer, nullable=False, default=0)
    total_points = db.Column(db.Integer, nullable=False, default=0)
    co2_saved = db.Column(db.Float, nullable=False, default=0.0)
    streak_days = db.Column(db.Integer, nullable=False, default=0)
    last_activity_at = db.Column(db.DateTime, nullable=True)

    # bumped on every save; writers compare-and-swap on it
    version = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        db.CheckConstraint("total_points >= 0", name="ck_points_accounts_points_nonneg"),
    )

    def to_dict(self):
        return {
            "user_id": int(self.user_id),
            "total_items": int(self.total_items or 0),
            "total_points": int(self.total_points or 0),
            "co2_saved": float(self.co2_saved or 0.0),
            "streak_days": int(self.streak_days or 0),
            "last_activity_at": self.last_activity_at.isoformat() if self.last_activity_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
