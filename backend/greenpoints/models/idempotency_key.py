from datetime import datetime

from greenpoints.extensions import db


class IdempotencyKey(db.Model):
    """Stored response for a client-supplied Idempotency-Key.

    Keys are scoped per user so two clients can't collide on the same value.
    """

    __tablename__ = "idempotency_keys"

    id = db.Column(db.Integer, primary_key=True)

    key = db.Column(db.String(128), nullable=False)
    user_id = db.Column(db.Integer, nullable=False)
    route = db.Column(db.String(128), nullable=False, default="")
    request_hash = db.Column(db.String(64), nullable=False, default="")

    # null until the first request finished
    response_json = db.Column(db.Text, nullable=True)
    status_code = db.Column(db.Integer, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        db.UniqueConstraint("user_id", "key", name="uq_idempotency_keys_user_key"),
    )
