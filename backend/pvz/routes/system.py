# backend/pvz/routes/system.py
"""
System health endpoint.

Reports the configured store backend and, for the SQL backend, database
connectivity with latency.
"""

import time
from flask import Blueprint, current_app, jsonify
from sqlalchemy import text

from ..extensions import db

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    """
    Check database connectivity with a trivial query.

    Returns dict with status and details.
    """
    start_time = time.time()
    try:
        db.session.execute(text("SELECT 1"))
        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        db.session.rollback()
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error"
        }


@system_bp.get("/health")
def health_route():
    backend = current_app.config.get("STORE_BACKEND", "sql")
    checks = {}
    if backend == "sql":
        checks["database"] = check_database_health()

    healthy = all(c["status"] == "healthy" for c in checks.values())
    return jsonify({
        "status": "healthy" if healthy else "unhealthy",
        "store_backend": backend,
        "checks": checks,
    }), 200 if healthy else 503
