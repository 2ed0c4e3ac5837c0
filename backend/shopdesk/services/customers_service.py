# Overview: Service-layer operations for customers; encapsulates business logic and database work.

"""
Customers Service

ORDER HISTORY RESOLUTION:
Orders link to customers by customer_id, but older orders were saved with
only the customer's name. resolve_order_history() therefore:
    1. fetches orders by customer_id, newest first
    2. if that is empty, fetches orders whose customer_name equals the
       customer's stored name exactly, newest first
    3. returns whichever set it used (possibly empty)

KNOWN LIMITATION: step 2 merges unrelated customers who share a name.

LIFETIME FIGURES:
When the resolved history is non-empty, order count and spend are
recomputed from it. Otherwise the stored aggregates are shown.
"""
from __future__ import annotations

from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import Customer, Order
from ..validation import ConflictError, NotFoundError, ValidationError
from .filters import filter_customers, CUSTOMER_SORTS

CUSTOMER_MUTABLE_FIELDS = {"customer_name", "phone", "total_orders", "total_spend_cents"}

DUPLICATE_PHONE_MESSAGE = "A customer with this phone number already exists."

SUGGESTION_MIN_CHARS = 2
SUGGESTION_LIMIT = 5


def get_customer(customer_id: int) -> Customer:
    customer = db.session.get(Customer, customer_id)
    if customer is None:
        raise NotFoundError("Customer not found")
    return customer


def find_customer_by_phone(phone: str) -> Customer | None:
    return db.session.query(Customer).filter_by(phone=phone).first()


def list_customers(*, search: str = "", sort_by: str = "recent") -> dict:
    if sort_by not in CUSTOMER_SORTS:
        raise ValidationError(f"sort must be one of: {', '.join(sorted(CUSTOMER_SORTS))}")
    customers = (
        db.session.query(Customer)
        .order_by(Customer.created_at.desc(), Customer.id.desc())
        .all()
    )
    rows = filter_customers([c.to_dict() for c in customers], search=search, sort_by=sort_by)
    return {"items": rows, "count": len(rows)}


def suggest_customers(query: str) -> list[dict]:
    """Name autocomplete for the order form (case-insensitive substring)."""
    query = (query or "").strip()
    if len(query) < SUGGESTION_MIN_CHARS:
        return []
    matches = (
        db.session.query(Customer)
        .filter(Customer.customer_name.ilike(f"%{query}%"))
        .order_by(Customer.customer_name.asc())
        .limit(SUGGESTION_LIMIT)
        .all()
    )
    return [{"id": c.id, "customer_name": c.customer_name, "phone": c.phone} for c in matches]


def _ensure_phone_free(phone: str, *, exclude_id: int | None = None) -> None:
    q = db.session.query(Customer).filter(Customer.phone == phone)
    if exclude_id is not None:
        q = q.filter(Customer.id != exclude_id)
    if q.first() is not None:
        raise ConflictError(DUPLICATE_PHONE_MESSAGE)


def _commit_customer() -> None:
    try:
        db.session.commit()
    except IntegrityError:
        # Lost a race with another insert of the same phone
        db.session.rollback()
        raise ConflictError(DUPLICATE_PHONE_MESSAGE)


def create_customer(*, patch: dict) -> Customer:
    _ensure_phone_free(patch["phone"])

    customer = Customer(total_orders=0, total_spend_cents=0)
    for k, v in patch.items():
        if k in CUSTOMER_MUTABLE_FIELDS:
            setattr(customer, k, v)

    db.session.add(customer)
    _commit_customer()
    return customer


def update_customer(*, customer_id: int, patch: dict) -> Customer:
    customer = get_customer(customer_id)
    if "phone" in patch and patch["phone"] != customer.phone:
        _ensure_phone_free(patch["phone"], exclude_id=customer.id)

    for k, v in patch.items():
        if k in CUSTOMER_MUTABLE_FIELDS:
            setattr(customer, k, v)

    _commit_customer()
    return customer


def delete_customer(*, customer_id: int) -> None:
    """Delete a customer; their orders stay, unlinked (customer_id = NULL)."""
    customer = get_customer(customer_id)
    db.session.delete(customer)
    db.session.commit()


def _orders_newest_first(*criteria) -> list[Order]:
    return (
        db.session.query(Order)
        .filter(*criteria)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )


def resolve_order_history(customer_id: int) -> list[Order]:
    customer = get_customer(customer_id)

    orders = _orders_newest_first(Order.customer_id == customer.id)
    if orders:
        return orders

    return _orders_newest_first(Order.customer_name == customer.customer_name)


def lifetime_figures(customer: Customer, orders: list[Order]) -> dict:
    if orders:
        return {
            "total_orders": len(orders),
            "total_spend_cents": sum(o.total_price_cents or 0 for o in orders),
            "source": "orders",
        }
    return {
        "total_orders": customer.total_orders or 0,
        "total_spend_cents": customer.total_spend_cents or 0,
        "source": "stored",
    }


def customer_profile(customer_id: int, *, search: str = "") -> dict:
    """
    Customer, resolved order history and lifetime figures.

    search narrows the listed orders by reference or id; the lifetime
    figures always cover the whole history.
    """
    customer = get_customer(customer_id)
    orders = resolve_order_history(customer_id)
    figures = lifetime_figures(customer, orders)

    needle = (search or "").strip().lower()
    listed = [
        o for o in orders
        if not needle or needle in o.reference.lower() or needle in str(o.id)
    ]

    return {
        "customer": customer.to_dict(),
        "orders": [o.to_dict() for o in listed],
        "lifetime": figures,
    }
