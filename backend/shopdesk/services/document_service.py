# Overview: Service-layer operations for printable documents; renders invoice and statement HTML.

"""
Printable documents.

Both documents are self-contained HTML pages that call window.print() on
load. Amounts arrive as integer cents and are formatted here, once, with
the configured currency symbol.

Invoices branch on the order's parsed items: StructuredItems render one
table row per line, LegacyText renders a single row holding the text.
"""
from __future__ import annotations

from flask import current_app, render_template

from ..order_items import StructuredItems
from ..time_utils import format_display_date, utcnow
from .customers_service import get_customer, resolve_order_history, lifetime_figures
from .orders_service import get_order


def format_money(cents: int | None) -> str:
    """1234567 -> '₹12,345.67'"""
    cents = cents or 0
    sign = "-" if cents < 0 else ""
    whole, frac = divmod(abs(cents), 100)
    symbol = current_app.config.get("CURRENCY_SYMBOL", "")
    return f"{sign}{symbol}{whole:,}.{frac:02d}"


def _business() -> dict:
    return {
        "name": current_app.config.get("BUSINESS_NAME", ""),
        "address": current_app.config.get("BUSINESS_ADDRESS", ""),
    }


def render_invoice(order_id: int) -> str:
    order = get_order(order_id)
    parsed = order.parsed_items
    structured = isinstance(parsed, StructuredItems)

    return render_template(
        "invoice.html",
        business=_business(),
        order=order,
        date=format_display_date(order.created_at),
        lines=parsed.lines if structured else (),
        legacy_text=None if structured else parsed.text,
        money=format_money,
    )


def render_statement(customer_id: int) -> str:
    """Account statement over the customer's resolved order history."""
    customer = get_customer(customer_id)
    orders = resolve_order_history(customer_id)
    figures = lifetime_figures(customer, orders)

    return render_template(
        "statement.html",
        business=_business(),
        customer=customer,
        orders=orders,
        lifetime=figures,
        date=format_display_date(utcnow()),
        format_date=format_display_date,
        money=format_money,
    )
