# Overview: Flask API routes for orders operations; parses input and returns JSON responses.

# backend/shopdesk/routes/orders.py
"""
Order routes.

Orders are created unapproved. Approve / cancel / status return the
refreshed order plus a `notification` (prefilled WhatsApp link) for the
caller to open.

SECURITY: All routes require authentication.
- VIEW_ORDERS to read (including the printable invoice)
- MANAGE_ORDERS to create and edit
- APPROVE_ORDERS to approve, cancel and track status
- DELETE_ORDERS to delete
"""
from flask import Blueprint, request, g, current_app

from ..services import orders_service, document_service
from ..services.order_status import next_statuses
from ..decorators import require_auth, require_permission
from . import SERVICE_ERRORS, service_error_response, internal_error

orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")


def _order_dict(order) -> dict:
    data = order.to_dict()
    data["next_statuses"] = next_statuses(order.status, is_approved=order.is_approved)
    return data


def _transition_response(order, notification):
    return {"order": _order_dict(order), "notification": notification}, 200


@orders_bp.get("")
@require_auth
@require_permission("VIEW_ORDERS")
def list_orders():
    """
    Query params:
    - search: customer name (case-insensitive) or phone substring
    - status: New | Packed | Shipped | Delivered | Cancelled | All
    """
    try:
        return orders_service.list_orders(
            search=request.args.get("search", ""),
            status=request.args.get("status", "All"),
        )
    except SERVICE_ERRORS as e:
        return service_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to list orders")
        return internal_error()


@orders_bp.get("/<int:order_id>")
@require_auth
@require_permission("VIEW_ORDERS")
def get_order_route(order_id: int):
    try:
        order = orders_service.get_order(order_id)
    except SERVICE_ERRORS as e:
        return service_error_response(e)
    return _order_dict(order)


@orders_bp.post("")
@require_auth
@require_permission("MANAGE_ORDERS")
def create_order_route():
    """
    Body: {customer_name, phone_number, items: [{product_id, quantity, unit_price_cents?}],
           payment_status?, payment_method?}
    """
    payload = request.get_json(silent=True) or {}

    try:
        order = orders_service.create_order(payload=payload, user_id=g.current_user.id)
    except SERVICE_ERRORS as e:
        return service_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create order")
        return internal_error()

    return _order_dict(order), 201


@orders_bp.put("/<int:order_id>")
@require_auth
@require_permission("MANAGE_ORDERS")
def update_order_route(order_id: int):
    payload = request.get_json(silent=True) or {}

    try:
        order = orders_service.update_order(order_id=order_id, payload=payload)
    except SERVICE_ERRORS as e:
        return service_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update order %s", order_id)
        return internal_error()

    return _order_dict(order), 200


@orders_bp.delete("/<int:order_id>")
@require_auth
@require_permission("DELETE_ORDERS")
def delete_order_route(order_id: int):
    try:
        orders_service.delete_order(order_id=order_id)
    except SERVICE_ERRORS as e:
        return service_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to delete order %s", order_id)
        return internal_error()

    return {"ok": True}, 200


@orders_bp.post("/<int:order_id>/approve")
@require_auth
@require_permission("APPROVE_ORDERS")
def approve_order_route(order_id: int):
    try:
        order, notification = orders_service.approve_order(order_id=order_id)
    except SERVICE_ERRORS as e:
        return service_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to approve order %s", order_id)
        return internal_error()

    return _transition_response(order, notification)


@orders_bp.post("/<int:order_id>/cancel")
@require_auth
@require_permission("APPROVE_ORDERS")
def cancel_order_route(order_id: int):
    try:
        order, notification = orders_service.cancel_order(order_id=order_id)
    except SERVICE_ERRORS as e:
        return service_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to cancel order %s", order_id)
        return internal_error()

    return _transition_response(order, notification)


@orders_bp.post("/<int:order_id>/status")
@require_auth
@require_permission("APPROVE_ORDERS")
def set_status_route(order_id: int):
    """Body: {status: Packed | Shipped | Delivered}"""
    payload = request.get_json(silent=True) or {}
    status = (payload.get("status") or "").strip()
    if not status:
        return {"error": "status is required"}, 400

    try:
        order, notification = orders_service.set_order_status(order_id=order_id, status=status)
    except SERVICE_ERRORS as e:
        return service_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update status of order %s", order_id)
        return internal_error()

    return _transition_response(order, notification)


@orders_bp.get("/<int:order_id>/invoice")
@require_auth
@require_permission("VIEW_ORDERS")
def invoice_route(order_id: int):
    try:
        html = document_service.render_invoice(order_id)
    except SERVICE_ERRORS as e:
        return service_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to render invoice for order %s", order_id)
        return internal_error()

    return html, 200, {"Content-Type": "text/html; charset=utf-8"}
