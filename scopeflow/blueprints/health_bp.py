"""
Health check blueprint.

Endpoints:
    GET /api/v1/health/ready  — simple 200 for load balancers
    GET /api/v1/health/live   — liveness with database round-trip
"""

import logging
import time

from flask import Blueprint, jsonify
from sqlalchemy.exc import SQLAlchemyError

from scopeflow.models import db

logger = logging.getLogger(__name__)

health_bp = Blueprint("health", __name__, url_prefix="/api/v1/health")


@health_bp.route("/ready", methods=["GET"])
def ready():
    """Simple readiness probe — always 200 if app is running."""
    return jsonify({"status": "ok"}), 200


@health_bp.route("/live", methods=["GET"])
def live():
    """Liveness check: the database must answer ``SELECT 1``."""
    checks = {}
    try:
        t0 = time.perf_counter()
        db.session.execute(db.text("SELECT 1"))
        db_ms = (time.perf_counter() - t0) * 1000
        checks["database"] = {"status": "ok", "latency_ms": round(db_ms, 1)}
        overall = True
    except SQLAlchemyError as exc:
        db.session.rollback()
        checks["database"] = {"status": "error"}
        overall = False
        logger.error("Health check — database failed: %s", exc)

    status = "ok" if overall else "degraded"
    return jsonify({"status": status, "checks": checks}), 200 if overall else 503
