import pytest

from greenpoints import create_app
from greenpoints.config import Config, _normalize_database_url


def test_postgres_url_normalized():
    assert _normalize_database_url("postgres://u:p@h/db") == "postgresql://u:p@h/db"
    assert _normalize_database_url("sqlite:///x.db") == "sqlite:///x.db"


def test_dev_defaults(monkeypatch):
    for name in ("GREENPOINTS_ENV", "DATABASE_URL", "SQLALCHEMY_DATABASE_URI", "CORS_ORIGINS", "LEADERBOARD_LIMIT"):
        monkeypatch.delenv(name, raising=False)
    cfg = Config()
    assert cfg.GREENPOINTS_ENV == "dev"
    assert cfg.SQLALCHEMY_DATABASE_URI.startswith("sqlite:///")
    assert cfg.SQLALCHEMY_DATABASE_URI.endswith("greenpoints.db")
    assert cfg.cors_origins() == ["*"]
    assert cfg.LEADERBOARD_LIMIT == 50


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("LEADERBOARD_LIMIT", "25")
    monkeypatch.setenv("CORS_ORIGINS", "https://a.example, https://b.example")
    monkeypatch.setenv("GREENPOINTS_DEFAULT_TZ", "Europe/London")
    cfg = Config()
    assert cfg.LEADERBOARD_LIMIT == 25
    assert cfg.cors_origins() == ["https://a.example", "https://b.example"]
    assert cfg.DEFAULT_TIMEZONE == "Europe/London"


def test_production_requires_secret_and_database(monkeypatch):
    monkeypatch.setenv("GREENPOINTS_ENV", "production")
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("SQLALCHEMY_DATABASE_URI", raising=False)
    monkeypatch.setenv("SECRET_KEY", "short")
    with pytest.raises(RuntimeError):
        create_app()

    monkeypatch.setenv("SECRET_KEY", "a-long-enough-production-secret")
    with pytest.raises(RuntimeError, match="DATABASE_URL"):
        create_app()

    monkeypatch.setenv("DATABASE_URL", "sqlite://")
    app = create_app()
    assert app.config["GREENPOINTS_ENV"] == "production"


def test_leaderboard_limit_from_config(client, make_user, auth, app):
    app.config["LEADERBOARD_LIMIT"] = 1
    a = make_user(name="A")
    b = make_user(name="B")
    client.post("/api/activity", json={"item_type": "bottle"}, headers=auth(a))
    client.post("/api/activity", json={"item_type": "can"}, headers=auth(b))
    body = client.get("/api/leaderboard", headers=auth(b)).get_json()
    assert len(body["items"]) == 1
    assert body["my_rank"] is None
