# Overview: Health endpoint; reports database reachability for load balancers and the UI.

import time

from flask import Blueprint, current_app

from ..extensions import get_database

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    """
    Round-trip `SELECT 1` through the query helpers.

    Returns {"status": "healthy"|"unhealthy", "latency_ms": float, ...}.
    """
    database = get_database()
    started = time.perf_counter()
    report = {"status": "healthy", "dialect": None}
    try:
        database.get("SELECT 1 AS ok")
        report["dialect"] = database.dialect
    except Exception:
        current_app.logger.exception("Database health check failed")
        report = {"status": "unhealthy", "error": "Database error"}
    report["latency_ms"] = round((time.perf_counter() - started) * 1000, 2)
    return report


@system_bp.get("/api/health")
def health():
    database = check_database_health()
    if database["status"] != "healthy":
        return {"status": "degraded", "database": database}, 503
    return {"status": "ok", "database": database}, 200
