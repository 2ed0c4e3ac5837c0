"""
Dashboard aggregates.

The snapshot is computed from a full read of products and orders and kept
for at most DASHBOARD_CACHE_SECONDS, or until something in this process
invalidates it. New orders invalidate it through the order event feed;
other mutations call invalidate_dashboard_cache() after commit. Writes made
by other workers or the CLI only show up once the snapshot expires.
Recomputing is idempotent, so duplicate or reordered invalidations are
harmless.
"""
from __future__ import annotations

import threading
import time

from flask import current_app

from ..extensions import db
from ..events import subscribe_order_created
from ..models import Product, Order
from .order_status import STATUS_CANCELLED

RECENT_ACTIVITY_LIMIT = 5

_lock = threading.Lock()
_snapshot: dict | None = None
_cached_at = 0.0
_generation = 0


def invalidate_dashboard_cache(_order_id: int | None = None) -> None:
    global _snapshot, _generation
    with _lock:
        _snapshot = None
        _generation += 1


subscribe_order_created(invalidate_dashboard_cache)


def compute_dashboard_snapshot() -> dict:
    products = db.session.query(Product).all()
    orders = (
        db.session.query(Order)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )

    inventory_value = sum((p.purchase_cost_cents or 0) * (p.stock or 0) for p in products)
    low_stock = [p for p in products if p.is_low_stock]
    revenue = sum(o.total_price_cents or 0 for o in orders if o.status != STATUS_CANCELLED)

    return {
        "total_products": len(products),
        "low_stock_count": len(low_stock),
        "inventory_value_cents": inventory_value,
        "total_orders": len(orders),
        "revenue_cents": revenue,
        "recent_orders": [o.to_dict() for o in orders[:RECENT_ACTIVITY_LIMIT]],
    }


def get_dashboard_snapshot() -> dict:
    global _snapshot, _cached_at
    max_age = current_app.config.get("DASHBOARD_CACHE_SECONDS", 5)
    with _lock:
        cached = _snapshot
        cached_at = _cached_at
        generation = _generation
    if cached is not None and time.monotonic() - cached_at < max_age:
        return cached

    fresh = compute_dashboard_snapshot()
    with _lock:
        # An invalidation that raced the read wins; serve fresh but do not cache it.
        if generation == _generation:
            _snapshot = fresh
            _cached_at = time.monotonic()
    return fresh


def dashboard_for(context) -> dict:
    """
    Snapshot shaped for the caller's role.

    Roles without VIEW_FINANCIALS get inventory value and revenue blanked
    out with masked=True so the UI can render a placeholder.
    """
    data = dict(get_dashboard_snapshot())
    can_see = context.can("VIEW_FINANCIALS")
    if not can_see:
        data["inventory_value_cents"] = None
        data["revenue_cents"] = None
    data["masked"] = not can_see
    return data
