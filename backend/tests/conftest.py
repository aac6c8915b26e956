"""
Test configuration and fixtures
"""
import threading
from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from greenpoints import create_app
from greenpoints.extensions import db
from greenpoints.models import Offer, User
from greenpoints.utils.jwt_utils import create_access_token

START = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now=START):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


class MemoryLedgerStore:
    """Dict-backed store with the same version check as the SQL store."""

    def __init__(self):
        self.ledgers = {}
        self.redemptions = []
        self.saves = 0
        self._lock = threading.Lock()

    def load(self, user_id):
        return self.ledgers.get(user_id)

    def save(self, user_id, ledger, redemption=None):
        with self._lock:
            current = self.ledgers.get(user_id)
            stored_version = current.version if current else 0
            if stored_version != ledger.version:
                return False
            self.ledgers[user_id] = replace(ledger, version=stored_version + 1)
            if redemption is not None:
                self.redemptions.append(redemption)
            self.saves += 1
            return True


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def app(clock):
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite://",
        "SECRET_KEY": "test-secret-key-0123456789",
    })
    app.extensions["points_service"].clock = clock
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    def _make(name="Eco Emily", email=None, is_admin=False, timezone=None):
        u = User(name=name, email=email or f"{name.lower().replace(' ', '.')}@example.com", is_admin=is_admin, timezone=timezone)
        db.session.add(u)
        db.session.commit()
        return u
    return _make


@pytest.fixture
def make_offer(app):
    def _make(title="Coffee Shop Voucher", points_cost=75, category="voucher", is_active=True):
        o = Offer(title=title, points_cost=points_cost, category=category, is_active=is_active)
        db.session.add(o)
        db.session.commit()
        return o
    return _make


@pytest.fixture
def auth():
    def _headers(user, **extra):
        headers = {"Authorization": f"Bearer {create_access_token(int(user.id))}"}
        headers.update(extra)
        return headers
    return _headers
