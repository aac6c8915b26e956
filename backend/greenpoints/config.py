import os


def _normalize_database_url(url: str) -> str:
    # Render/Heroku sometimes provide postgres:// which SQLAlchemy expects as postgresql://
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql://", 1)
    return url


def _int_env(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


class Config:
    # Base directory of the backend (one level above this package)
    BACKEND_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
    INSTANCE_DIR = os.path.join(BACKEND_DIR, "instance")

    def __init__(self):
        self.GREENPOINTS_ENV = (os.getenv("GREENPOINTS_ENV", "dev") or "dev").strip().lower()
        self.SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
        self.SQLALCHEMY_TRACK_MODIFICATIONS = False

        db_url = os.getenv("SQLALCHEMY_DATABASE_URI") or os.getenv("DATABASE_URL")
        if db_url:
            db_url = _normalize_database_url(db_url)
        elif not self.is_prod:
            sqlite_path = os.path.join(self.INSTANCE_DIR, "greenpoints.db").replace("\\", "/")
            db_url = f"sqlite:///{sqlite_path}"
        self.SQLALCHEMY_DATABASE_URI = db_url

        # CORS: comma-separated origins for web builds
        self.CORS_ORIGINS = (os.getenv("CORS_ORIGINS") or "").strip()

        self.LEADERBOARD_LIMIT = _int_env("LEADERBOARD_LIMIT", 50)
        self.DEFAULT_TIMEZONE = (os.getenv("GREENPOINTS_DEFAULT_TZ") or "UTC").strip()

    @property
    def is_prod(self) -> bool:
        return self.GREENPOINTS_ENV in ("prod", "production")

    def validate(self) -> None:
        """Production safety checks."""
        if not self.is_prod:
            return
        secret = (self.SECRET_KEY or "").strip()
        if not secret or len(secret) < 16 or secret == "dev-secret":
            raise RuntimeError("SECRET_KEY must be set and at least 16 chars in production")
        if not self.SQLALCHEMY_DATABASE_URI:
            raise RuntimeError("DATABASE_URL (or SQLALCHEMY_DATABASE_URI) must be set in production")

    def cors_origins(self):
        origins = [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]
        if self.is_prod:
            return origins
        return origins or ["*"]

    def to_flask(self) -> dict:
        return {k: getattr(self, k) for k in dir(self) if k.isupper()}
