from datetime import datetime

from greenpoints.extensions import db


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(120), nullable=False, default="")
    email = db.Column(db.String(255), unique=True, index=True, nullable=False)

    is_admin = db.Column(db.Boolean, nullable=False, default=False)

    # IANA zone name; streak days are counted on this calendar
    timezone = db.Column(db.String(64), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "is_admin": bool(self.is_admin),
            "timezone": self.timezone,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
