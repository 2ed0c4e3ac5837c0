"""
In-process order event feed.

Every INSERT of an Order row is published to the registered subscribers.
Subscribers only learn that "something changed" and are expected to
re-fetch whatever they derive from orders; no payload beyond the order id
is delivered and delivery order is not guaranteed to match commit order.

A failing subscriber is logged and skipped. Losing a notification only
delays a refresh, so it never fails the insert that triggered it.
"""
from __future__ import annotations

from typing import Callable

from flask import current_app, has_app_context
from sqlalchemy import event

from .models import Order

_order_created_subscribers: list[Callable[[int | None], None]] = []


def subscribe_order_created(fn: Callable[[int | None], None]) -> Callable[[int | None], None]:
    if fn not in _order_created_subscribers:
        _order_created_subscribers.append(fn)
    return fn


def unsubscribe_order_created(fn: Callable[[int | None], None]) -> None:
    if fn in _order_created_subscribers:
        _order_created_subscribers.remove(fn)


def publish_order_created(order_id: int | None) -> None:
    for fn in list(_order_created_subscribers):
        try:
            fn(order_id)
        except Exception:
            if has_app_context():
                current_app.logger.exception("Order event subscriber %r failed", fn)


@event.listens_for(Order, "after_insert")
def _order_inserted(mapper, connection, target):
    publish_order_created(target.id)
