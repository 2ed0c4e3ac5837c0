# Overview: Service-layer operations for inventory; encapsulates business logic and database work.

"""
Shopdesk Inventory Invariants (authoritative)

Stock model:
- Product.stock is a stored counter. It is never negative.
- update_product_stock() is the only code path that moves it for stock
  movements: one atomic UPDATE ... SET stock = stock + :delta.

Movements:
- A movement is IN (adds) or OUT (removes) with quantity >= 1.
- apply_movement() runs two steps, each committed on its own:
    1. append an InventoryLog row
    2. adjust the stock counter
- If step 1 fails, step 2 is never issued.
- If step 2 fails, the log row stays and InventoryMovementError is raised
  carrying it. Nothing is rolled back. A deployment on a database that can
  span both steps in one transaction should do so instead.

Audit:
- InventoryLog rows are append-only (no updates/deletes).
"""
from __future__ import annotations

from flask import current_app
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import Product, InventoryLog
from ..order_items import coerce_quantity
from ..validation import ValidationError, NotFoundError, MAX_PRICE_CENTS, coerce_int
from .concurrency import run_with_retry
from .dashboard_service import invalidate_dashboard_cache


MOVEMENT_IN = "IN"
MOVEMENT_OUT = "OUT"
MOVEMENT_TYPES = {MOVEMENT_IN, MOVEMENT_OUT}

MOVEMENT_REASONS = ("New Shipment", "Return", "Correction", "Damage", "Sale", "Other")

MAX_NOTE_LENGTH = 255


class InventoryMovementError(Exception):
    """
    The log entry was written but the stock counter could not be adjusted.

    The log entry is NOT removed; callers surface this to the user.
    """
    def __init__(self, message: str, log_entry: InventoryLog):
        super().__init__(message)
        self.log_entry = log_entry


def _require_product(product_id: int) -> Product:
    product = db.session.get(Product, product_id)
    if product is None:
        raise NotFoundError("Product not found")
    return product


def update_product_stock(product_id: int, delta: int) -> int:
    """
    Atomically add delta to a product's stock and return the new value.

    Raises NotFoundError for an unknown product and ValueError when the
    result would be negative. Lock contention is retried.
    """
    def _op() -> int:
        stmt = (
            update(Product)
            .where(Product.id == product_id)
            .values(stock=Product.stock + delta)
            .execution_options(synchronize_session=False)
        )
        if delta < 0:
            stmt = stmt.where(Product.stock + delta >= 0)

        result = db.session.execute(stmt)
        if not result.rowcount:
            db.session.rollback()
            if db.session.get(Product, product_id) is None:
                raise NotFoundError("Product not found")
            raise ValueError("stock cannot go below zero")

        db.session.commit()
        return db.session.query(Product.stock).filter_by(id=product_id).scalar()

    return run_with_retry(_op)


def validate_movement(
    *,
    quantity,
    direction: str,
    unit_cost_cents,
    reason: str,
    note: str | None,
) -> dict:
    direction = (direction or "").strip().upper()
    if direction not in MOVEMENT_TYPES:
        raise ValidationError("type must be IN or OUT")

    qty = coerce_quantity(quantity)

    cost = coerce_int("unit_price_cents", unit_cost_cents if unit_cost_cents is not None else 0)
    if cost < 0:
        raise ValidationError("unit_price_cents must be >= 0")
    if cost > MAX_PRICE_CENTS:
        raise ValidationError(f"unit_price_cents cannot exceed {MAX_PRICE_CENTS}")

    reason = (reason or "").strip()
    if reason not in MOVEMENT_REASONS:
        raise ValidationError(f"reason must be one of: {', '.join(MOVEMENT_REASONS)}")

    note = (note or "").strip()
    if len(note) > MAX_NOTE_LENGTH:
        raise ValidationError(f"note exceeds max length {MAX_NOTE_LENGTH}")

    return {
        "type": direction,
        "quantity": qty,
        "unit_price_cents": cost,
        "reason": reason,
        "note": note or None,
    }


def apply_movement(
    *,
    product_id: int,
    quantity,
    direction: str,
    unit_cost_cents=0,
    reason: str = "New Shipment",
    note: str | None = None,
    user_id: int | None = None,
) -> InventoryLog:
    """
    Record a stock movement: append the log entry, then adjust stock.

    Returns the committed InventoryLog. Raises ValidationError before any
    write, and InventoryMovementError if only the log entry landed.
    """
    fields = validate_movement(
        quantity=quantity,
        direction=direction,
        unit_cost_cents=unit_cost_cents,
        reason=reason,
        note=note,
    )
    _require_product(product_id)

    entry = InventoryLog(product_id=product_id, created_by_user_id=user_id, **fields)
    db.session.add(entry)
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise

    delta = entry.quantity if entry.type == MOVEMENT_IN else -entry.quantity
    try:
        update_product_stock(product_id, delta)
    except (ValueError, LookupError, SQLAlchemyError) as exc:
        current_app.logger.warning(
            "Stock update failed for product %s after log entry %s was recorded: %s",
            product_id, entry.id, exc,
        )
        raise InventoryMovementError(f"Stock update failed: {exc}", log_entry=entry) from exc
    finally:
        invalidate_dashboard_cache()

    return entry


def list_inventory_logs(*, product_id: int, limit: int = 200) -> list[InventoryLog]:
    _require_product(product_id)

    return (
        InventoryLog.query.filter_by(product_id=product_id)
        .order_by(InventoryLog.created_at.desc(), InventoryLog.id.desc())
        .limit(limit)
        .all()
    )
