from __future__ import annotations

import hashlib
import json
from typing import Any

from flask import request
from sqlalchemy.exc import IntegrityError

from greenpoints.extensions import db
from greenpoints.models import IdempotencyKey


def _hash_request(payload: Any) -> str:
    try:
        raw = json.dumps(payload, sort_keys=True, default=str).encode("utf-8")
    except (TypeError, ValueError):
        raw = str(payload).encode("utf-8")
    return hashlib.sha256(raw).hexdigest()


def get_idempotency_key() -> str | None:
    k = request.headers.get("Idempotency-Key") or request.headers.get("X-Idempotency-Key")
    if not k or not k.strip():
        return None
    return k.strip()[:128]


def lookup_response(user_id: int, route: str, payload: Any):
    """Claim the request's Idempotency-Key for `user_id`.

    Returns one of
      ("none", None, 0)           no key sent
      ("hit", body, status)       replay of a finished request
      ("conflict", body, 409)     key reused with another payload, or still in flight
      ("miss", row, 0)            key claimed; call store_response when done
    """
    k = get_idempotency_key()
    if not k:
        return ("none", None, 0)

    rh = _hash_request(payload)
    row = IdempotencyKey.query.filter_by(user_id=int(user_id), key=k).first()
    if row is None:
        row = IdempotencyKey(key=k, user_id=int(user_id), route=route, request_hash=rh)
        db.session.add(row)
        try:
            db.session.commit()
            return ("miss", row, 0)
        except IntegrityError:
            db.session.rollback()
            row = IdempotencyKey.query.filter_by(user_id=int(user_id), key=k).first()
            if row is None:
                raise

    if row.request_hash != rh or row.route != route:
        return ("conflict", {"ok": False, "error": "idempotency_conflict", "message": "Idempotency key reuse with different payload"}, 409)
    if row.response_json is None:
        return ("conflict", {"ok": False, "error": "idempotency_in_progress", "message": "Request with this key is still being processed"}, 409)
    return ("hit", json.loads(row.response_json), int(row.status_code or 200))


def store_response(row: IdempotencyKey, response_json: Any, status_code: int):
    row.response_json = json.dumps(response_json, default=str)
    row.status_code = int(status_code)
    db.session.add(row)
    db.session.commit()


def release_key(row: IdempotencyKey):
    """Forget a claimed key so the client may retry (used on retryable failures)."""
    key_id = row.id
    # the session may still hold a failed transaction
    db.session.rollback()
    IdempotencyKey.query.filter_by(id=key_id).delete(synchronize_session=False)
    db.session.commit()
