"""
ScopeFlow — scope, deliverable and approval workflow for agencies.
Flask Application Factory.

Usage:
    from scopeflow import create_app
    app = create_app()           # defaults to "development"
    app = create_app("testing")  # explicit config
"""

import logging
import os

from flask import Flask, request
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from sqlalchemy import engine as _sa_engine
from sqlalchemy import event as _sa_event
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from scopeflow.config import config
from scopeflow.middleware.jwt_auth import init_jwt_middleware
from scopeflow.middleware.logging_config import configure_logging
from scopeflow.middleware.rate_limiter import init_rate_limits
from scopeflow.middleware.security_headers import init_security_headers
from scopeflow.middleware.timing import init_request_timing
from scopeflow.models import db
from scopeflow.utils.errors import E, api_error, register_error_handlers

logger = logging.getLogger(__name__)


# ── SQLite FK enforcement (global engine event) ─────────────────────────
@_sa_event.listens_for(_sa_engine.Engine, "connect")
def _enable_sqlite_fk(dbapi_conn, connection_record):
    """Enable foreign key enforcement for SQLite connections."""
    if "sqlite" in type(dbapi_conn).__module__:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


migrate = Migrate()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[],                     # no global limit — apply per-blueprint
)


def create_app(config_name=None):
    """
    Create and configure the Flask application.

    Args:
        config_name: Configuration environment name.
                     One of: "development", "testing", "production".
                     Defaults to APP_ENV env var, or "development" if unset.

    Returns:
        Configured Flask application instance.
    """
    if config_name is None:
        config_name = os.getenv("APP_ENV", "development")

    app = Flask(__name__, instance_relative_config=True)
    # Instantiated so ProductionConfig can refuse to start half-configured
    app.config.from_object(config[config_name]())

    # ── Structured logging (must be first) ───────────────────────────────
    configure_logging(app)

    # ── Extensions ───────────────────────────────────────────────────────
    db.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)
    cors_origins = app.config.get("CORS_ORIGINS", "*")
    if cors_origins and cors_origins != "*":
        CORS(app, origins=[o.strip() for o in cors_origins.split(",") if o.strip()])
    else:
        CORS(app)

    # ── Middleware ───────────────────────────────────────────────────────
    init_security_headers(app)
    init_request_timing(app)
    init_jwt_middleware(app)

    app.config.setdefault("MAX_CONTENT_LENGTH", 1 * 1024 * 1024)  # 1 MB

    # ── Import all models so Alembic can detect them ─────────────────────
    from scopeflow.models import auth as _auth_models              # noqa: F401
    from scopeflow.models import project as _project_models        # noqa: F401
    from scopeflow.models import scope as _scope_models            # noqa: F401
    from scopeflow.models import deliverable as _deliverable_models  # noqa: F401
    from scopeflow.models import invoice as _invoice_models        # noqa: F401

    # ── Auto-create tables (CREATE IF NOT EXISTS) ────────────────────────
    with app.app_context():
        try:
            db.create_all()
            app.logger.info("db.create_all() completed successfully")
        except SQLAlchemyError as e:
            app.logger.warning("db.create_all() failed: %s", e)

    # ── Blueprints ───────────────────────────────────────────────────────
    from scopeflow.blueprints.auth_bp import auth_bp
    from scopeflow.blueprints.client_bp import client_bp
    from scopeflow.blueprints.deliverable_bp import deliverable_bp
    from scopeflow.blueprints.health_bp import health_bp
    from scopeflow.blueprints.project_bp import project_bp
    from scopeflow.blueprints.scope_bp import scope_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(project_bp)
    app.register_blueprint(scope_bp)
    app.register_blueprint(deliverable_bp)
    app.register_blueprint(client_bp)
    app.register_blueprint(health_bp)

    # ── Error handlers ───────────────────────────────────────────────────
    register_error_handlers(app)

    @app.errorhandler(404)
    def not_found(e):
        return api_error(E.NOT_FOUND, "Not found", details={"path": request.path})

    @app.errorhandler(405)
    def method_not_allowed(e):
        return api_error(E.VALIDATION, "Method not allowed", status=405)

    @app.errorhandler(429)
    def rate_limited(e):
        return api_error(E.RATE_LIMITED, "Too many requests",
                         details={"retry_after": e.description})

    @app.errorhandler(Exception)
    def unhandled_error(e):
        if isinstance(e, HTTPException):
            return e
        logger.error("Unhandled error on %s %s", request.method, request.path, exc_info=e)
        db.session.rollback()
        return api_error(E.INTERNAL, "Internal server error")

    # ── Rate limiting (after blueprints registered) ──────────────────────
    init_rate_limits(app, limiter)

    return app
