"""
Outbound customer messaging.

Builds prefilled WhatsApp click-to-chat links. Nothing is sent from the
server and no delivery state is tracked: the link goes back to the caller,
which opens it.
"""
from __future__ import annotations

import re
from urllib.parse import quote

from flask import current_app

from .order_status import (
    STATUS_NEW,
    STATUS_PACKED,
    STATUS_SHIPPED,
    STATUS_DELIVERED,
    STATUS_CANCELLED,
)

WHATSAPP_BASE_URL = "https://wa.me"

# New is only reached through approval, so its template is the confirmation.
MESSAGE_TEMPLATES = {
    STATUS_NEW: (
        "Hello {name}, as per your confirmation on call, we have confirmed your order "
        "(Ref ID: {ref}). Thank you for shopping with {business}!"
    ),
    STATUS_PACKED: "Hello {name}, your order (Ref ID: {ref}) has been packed and will be shipped soon.",
    STATUS_SHIPPED: "Hello {name}, your order (Ref ID: {ref}) has been shipped. It will reach you shortly.",
    STATUS_DELIVERED: (
        "Hello {name}, your order (Ref ID: {ref}) has been delivered. "
        "Thank you for shopping with {business}!"
    ),
    STATUS_CANCELLED: (
        "Hello {name}, your order (Ref ID: {ref}) has been cancelled. "
        "Please contact {business} if this is unexpected."
    ),
}


def build_whatsapp_link(phone: str, message: str, *, country_code: str = "") -> str:
    digits = re.sub(r"\D", "", phone or "")
    if country_code and len(digits) == 10:
        digits = f"{country_code}{digits}"
    return f"{WHATSAPP_BASE_URL}/{digits}?text={quote(message, safe='')}"


def render_status_message(order, status: str) -> str | None:
    template = MESSAGE_TEMPLATES.get(status)
    if template is None:
        return None
    return template.format(
        name=order.customer_name or "Customer",
        ref=order.reference,
        business=current_app.config.get("BUSINESS_NAME", ""),
    )


def order_notification(order, status: str) -> dict | None:
    """Message + link for an order that just moved into status, or None."""
    message = render_status_message(order, status)
    if message is None:
        return None
    url = build_whatsapp_link(
        order.phone_number,
        message,
        country_code=current_app.config.get("PHONE_COUNTRY_CODE", ""),
    )
    return {"channel": "whatsapp", "status": status, "message": message, "url": url}
