# Overview: Service-layer operations for orders; encapsulates business logic and database work.

"""
Orders Service

SAVING (create / update):
- customer_name is required, phone_number must normalise to 10 digits
- every line references an existing product; a product appears at most once
- on create, a line without unit_price_cents takes the product's current
  price_cents, and the product name is snapshotted onto the line
- total_price_cents = sum(quantity * unit_price_cents), computed here
- an empty item list is a valid order (total 0)
- orders never move stock; stock only changes through inventory movements

LIFECYCLE:
Approval, cancellation and status tracking go through order_status.py.
Each successful transition returns the customer notification (a prefilled
WhatsApp link) alongside the refreshed order.

Every write commits and then drops the dashboard snapshot.
"""
from __future__ import annotations

from typing import Any

from ..extensions import db
from ..models import Order, Product
from ..order_items import LineItem, StructuredItems, coerce_quantity
from ..validation import (
    ConflictError,
    NotFoundError,
    ValidationError,
    MAX_PRICE_CENTS,
    coerce_int,
    normalize_phone,
)
from . import order_status
from .customers_service import find_customer_by_phone
from .dashboard_service import invalidate_dashboard_cache
from .filters import filter_orders, ALL
from .messaging_service import order_notification

PAYMENT_STATUSES = {"PAID", "UNPAID"}
MAX_PAYMENT_METHOD_LENGTH = 32


def get_order(order_id: int) -> Order:
    order = db.session.get(Order, order_id)
    if order is None:
        raise NotFoundError("Order not found")
    return order


def list_orders(*, search: str = "", status: str = ALL) -> dict:
    orders = (
        db.session.query(Order)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )
    if status and status != ALL and status not in order_status.VALID_STATUSES:
        raise ValidationError(f"Unknown status filter '{status}'")
    rows = filter_orders([o.to_dict() for o in orders], search=search, status=status)
    return {"items": rows, "count": len(rows)}


def _unit_price(raw: dict, product: Product, existing: LineItem | None) -> int:
    value = raw.get("unit_price_cents")
    if value is None:
        if existing is not None:
            return existing.unit_price_cents
        return product.price_cents
    cents = coerce_int("unit_price_cents", value)
    if cents < 0:
        raise ValidationError("unit_price_cents must be >= 0")
    if cents > MAX_PRICE_CENTS:
        raise ValidationError(f"unit_price_cents cannot exceed {MAX_PRICE_CENTS}")
    return cents


def build_line_items(raw_items: Any, *, previous: StructuredItems | None = None) -> StructuredItems:
    """
    Validate submitted rows into StructuredItems.

    previous lets an edit keep the stored unit price and name of a line
    whose product was already on the order.
    """
    if raw_items is None:
        raw_items = []
    if not isinstance(raw_items, list):
        raise ValidationError("items must be a list")

    kept = {line.product_id: line for line in previous.lines} if previous else {}

    lines: list[LineItem] = []
    seen: set[int] = set()
    for raw in raw_items:
        if not isinstance(raw, dict):
            raise ValidationError("each item must be an object")
        if raw.get("product_id") is None:
            raise ValidationError("each item needs a product_id")

        product_id = coerce_int("product_id", raw["product_id"])
        if product_id in seen:
            raise ConflictError("A product can only appear once per order")
        seen.add(product_id)

        quantity = coerce_quantity(raw.get("quantity"))

        existing = kept.get(product_id)
        product = db.session.get(Product, product_id)
        if product is None:
            if existing is None:
                raise ValidationError(f"Product {product_id} does not exist")
            # Product deleted since the order was taken; keep the snapshot
            lines.append(existing.with_quantity(quantity))
            continue

        lines.append(LineItem(
            product_id=product_id,
            product_name=existing.product_name if existing else product.name,
            quantity=quantity,
            unit_price_cents=_unit_price(raw, product, existing),
        ))

    return StructuredItems(tuple(lines))


def _validate_header(payload: dict, *, partial: bool) -> dict:
    patch: dict = {}

    if "customer_name" in payload or not partial:
        name = (payload.get("customer_name") or "").strip()
        if not name:
            raise ValidationError("customer_name is required")
        if len(name) > 255:
            raise ValidationError("customer_name exceeds max length 255")
        patch["customer_name"] = name

    if "phone_number" in payload or not partial:
        patch["phone_number"] = normalize_phone(payload.get("phone_number"))

    if "payment_status" in payload:
        ps = (payload.get("payment_status") or "").strip().upper()
        if ps not in PAYMENT_STATUSES:
            raise ValidationError(f"payment_status must be one of: {', '.join(sorted(PAYMENT_STATUSES))}")
        patch["payment_status"] = ps

    if "payment_method" in payload:
        pm = (payload.get("payment_method") or "").strip()
        if len(pm) > MAX_PAYMENT_METHOD_LENGTH:
            raise ValidationError(f"payment_method exceeds max length {MAX_PAYMENT_METHOD_LENGTH}")
        patch["payment_method"] = pm or None

    return patch


def _link_customer(order: Order) -> None:
    customer = find_customer_by_phone(order.phone_number)
    order.customer_id = customer.id if customer else None


def create_order(*, payload: dict, user_id: int | None = None) -> Order:
    """Validate and save a new, unapproved order."""
    patch = _validate_header(payload, partial=False)
    items = build_line_items(payload.get("items"))

    patch.setdefault("payment_status", "PAID")
    order = Order(
        status=order_status.STATUS_NEW,
        is_approved=False,
        created_by_user_id=user_id,
        **patch,
    )
    order.items = items.to_stored()
    order.total_price_cents = items.grand_total_cents
    _link_customer(order)

    db.session.add(order)
    db.session.commit()
    invalidate_dashboard_cache()
    return order


def update_order(*, order_id: int, payload: dict) -> Order:
    """
    Edit an order's header and items.

    Cancelled orders are locked. Legacy text items are only replaced when
    the payload sends a new items list.
    """
    order = get_order(order_id)
    if order_status.is_terminal(order.status):
        raise order_status.OrderStateError("Cancelled orders cannot be edited")

    patch = _validate_header(payload, partial=True)

    if "items" in payload:
        parsed = order.parsed_items
        previous = parsed if isinstance(parsed, StructuredItems) else None
        items = build_line_items(payload.get("items"), previous=previous)
        order.items = items.to_stored()
        order.total_price_cents = items.grand_total_cents

    for k, v in patch.items():
        setattr(order, k, v)

    if "phone_number" in patch:
        _link_customer(order)

    db.session.commit()
    invalidate_dashboard_cache()
    return order


def delete_order(*, order_id: int) -> None:
    order = get_order(order_id)
    db.session.delete(order)
    db.session.commit()
    invalidate_dashboard_cache()


def approve_order(*, order_id: int) -> tuple[Order, dict | None]:
    """Unapproved -> approved (status New). Returns the order and its confirmation link."""
    order = get_order(order_id)
    order_status.check_approval(order.status, order.is_approved)

    order.is_approved = True
    order.status = order_status.STATUS_NEW
    db.session.commit()
    invalidate_dashboard_cache()

    return order, order_notification(order, order_status.STATUS_NEW)


def cancel_order(*, order_id: int) -> tuple[Order, dict | None]:
    """
    Unapproved -> cancelled. Cancelled is terminal.

    The cancellation message link is offered to the caller like the others;
    opening it is optional, nothing is sent from here.
    """
    order = get_order(order_id)
    order_status.check_approval(order.status, order.is_approved)

    order.status = order_status.STATUS_CANCELLED
    db.session.commit()
    invalidate_dashboard_cache()

    return order, order_notification(order, order_status.STATUS_CANCELLED)


def set_order_status(*, order_id: int, status: str) -> tuple[Order, dict | None]:
    order = get_order(order_id)
    order_status.check_transition(order.status, status, is_approved=order.is_approved)

    order.status = status
    db.session.commit()
    invalidate_dashboard_cache()

    return order, order_notification(order, status)

