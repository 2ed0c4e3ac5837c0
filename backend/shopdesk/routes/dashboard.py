# Overview: Flask API route for the dashboard summary.

from flask import Blueprint, g, current_app

from ..services.dashboard_service import dashboard_for
from ..decorators import require_auth
from . import internal_error

dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/dashboard")


@dashboard_bp.get("")
@require_auth
def dashboard_route():
    """
    Totals, low-stock count and the five most recent orders.

    Inventory value and revenue come back null (masked=true) for roles
    without VIEW_FINANCIALS.
    """
    try:
        return dashboard_for(g.session_context)
    except Exception:
        current_app.logger.exception("Failed to load dashboard")
        return internal_error()
