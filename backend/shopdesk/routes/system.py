# backend/shopdesk/routes/system.py
"""
System health endpoint.
"""

import time
from flask import Blueprint, current_app
from ..extensions import db
from ..models import Product, Order, Customer, User

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    """Count the core tables; any failure marks the database unhealthy."""
    start_time = time.time()
    try:
        details = {
            "products": db.session.query(Product).count(),
            "orders": db.session.query(Order).count(),
            "customers": db.session.query(Customer).count(),
            "users": db.session.query(User).count(),
        }
        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": details,
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        db.session.rollback()
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error",
        }


@system_bp.get("/health")
def health():
    database = check_database_health()
    status = 200 if database["status"] == "healthy" else 503
    return {"status": database["status"], "checks": {"database": database}}, status
