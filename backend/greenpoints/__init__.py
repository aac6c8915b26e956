import os

from flask import Flask, jsonify
from sqlalchemy import text

from greenpoints.config import Config
from greenpoints.extensions import db, migrate, cors
from greenpoints.services.points import PointsService
from greenpoints.utils.errors import PointsError
from greenpoints.utils.ledger_store import SqlLedgerStore, get_offer
from greenpoints.segments.segment_activity import activity_bp
from greenpoints.segments.segment_leaderboard import leaderboard_bp
from greenpoints.segments.segment_rewards import rewards_bp
from greenpoints.segments.segment_admin import admin_bp


def create_app(overrides=None):
    app = Flask(__name__)

    cfg = Config()
    app.config.from_mapping(cfg.to_flask())
    if overrides:
        app.config.update(overrides)
        for key, value in overrides.items():
            if hasattr(cfg, key):
                setattr(cfg, key, value)
    cfg.validate()

    # Ensure instance dir exists for SQLite paths
    os.makedirs(Config.INSTANCE_DIR, exist_ok=True)

    cors.init_app(app, resources={r"/api/*": {"origins": cfg.cors_origins()}})

    # Init extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Ledger mutations go through one service per app so per-user locks are shared
    app.extensions["points_service"] = PointsService(SqlLedgerStore(), offers=get_offer)

    app.register_blueprint(activity_bp)
    app.register_blueprint(leaderboard_bp)
    app.register_blueprint(rewards_bp)
    app.register_blueprint(admin_bp)

    @app.errorhandler(PointsError)
    def _points_error(e: PointsError):
        return jsonify(e.to_dict()), e.status

    # Health check
    @app.get("/api/health")
    def health():
        db_state = "ok"
        try:
            db.session.execute(text("SELECT 1"))
        except Exception as e:
            app.logger.warning("health check db ping failed: %s", e)
            db_state = "fail"
        return jsonify({
            "ok": True,
            "service": "greenpoints-backend",
            "env": cfg.GREENPOINTS_ENV,
            "db": db_state,
        })

    @app.cli.command("reconcile-ledgers")
    def reconcile_ledgers_command():
        """Compare stored ledger totals with replayed history."""
        from greenpoints.jobs.ledger_reconciler import reconcile_ledgers

        result = reconcile_ledgers()
        app.logger.info("ledger reconcile: %s", result)
        print(result)

    app.logger.info("greenpoints backend ready (env=%s)", cfg.GREENPOINTS_ENV)
    return app
