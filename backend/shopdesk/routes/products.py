# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/shopdesk/routes/products.py
"""
Product catalogue and stock movement routes.

SECURITY: All routes require authentication.
- Read operations require VIEW_PRODUCTS
- Create / edit / clone / delete require MANAGE_PRODUCTS
- Recording stock movements requires ADJUST_STOCK
- purchase_cost_cents (and movement unit costs) need VIEW_COSTS
"""
from flask import Blueprint, request, g, current_app

from ..services import products_service, inventory_service
from ..models import Product
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_product,
)
from ..decorators import require_auth, require_permission
from . import SERVICE_ERRORS, service_error_response, internal_error

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={
        "name", "category", "description", "price_cents", "purchase_cost_cents",
        "stock", "min_stock", "barcode", "images",
    },
    required_on_create={"name", "price_cents"},
)

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


def _movement_dict(entry) -> dict:
    data = entry.to_dict()
    if not g.session_context.can("VIEW_COSTS"):
        data.pop("unit_price_cents", None)
    return data


@products_bp.get("")
@require_auth
@require_permission("VIEW_PRODUCTS")
def list_products():
    """
    List products, newest first.

    Query params:
    - search: name (case-insensitive) or barcode substring
    - category: category name, or All
    - stock_status: All | Low | Healthy
    - sort_by / sort_dir: column and asc|desc
    - page: int (optional) - page number (1-indexed). If omitted, returns all items.
    - per_page: int (optional) - defaults to PRODUCTS_PER_PAGE
    """
    try:
        return products_service.list_products(
            g.session_context,
            search=request.args.get("search", ""),
            category=request.args.get("category", "All"),
            stock_status=request.args.get("stock_status", "All"),
            sort_by=request.args.get("sort_by"),
            sort_dir=request.args.get("sort_dir", "asc"),
            page=request.args.get("page", type=int),
            per_page=request.args.get("per_page", type=int),
        )
    except SERVICE_ERRORS as e:
        return service_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to list products")
        return internal_error()


@products_bp.get("/categories")
@require_auth
@require_permission("VIEW_PRODUCTS")
def list_categories():
    return {"items": products_service.list_categories()}


@products_bp.get("/<int:product_id>")
@require_auth
@require_permission("VIEW_PRODUCTS")
def get_product_route(product_id: int):
    try:
        product = products_service.get_product(product_id)
    except SERVICE_ERRORS as e:
        return service_error_response(e)
    return products_service.serialize_product(product, g.session_context)


@products_bp.post("")
@require_auth
@require_permission("MANAGE_PRODUCTS")
def create_product_route():
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
        enforce_rules_product(patch)
        created = products_service.create_product(patch=patch)
    except SERVICE_ERRORS as e:
        return service_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create product")
        return internal_error()

    return products_service.serialize_product(created, g.session_context), 201


@products_bp.put("/<int:product_id>")
@require_auth
@require_permission("MANAGE_PRODUCTS")
def update_product_route(product_id: int):
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=True)
        enforce_rules_product(patch)
        updated = products_service.update_product(product_id=product_id, patch=patch)
    except SERVICE_ERRORS as e:
        return service_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update product %s", product_id)
        return internal_error()

    return products_service.serialize_product(updated, g.session_context), 200


@products_bp.post("/<int:product_id>/clone")
@require_auth
@require_permission("MANAGE_PRODUCTS")
def clone_product_route(product_id: int):
    try:
        clone = products_service.clone_product(product_id=product_id)
    except SERVICE_ERRORS as e:
        return service_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to clone product %s", product_id)
        return internal_error()

    return products_service.serialize_product(clone, g.session_context), 201


@products_bp.delete("/<int:product_id>")
@require_auth
@require_permission("MANAGE_PRODUCTS")
def delete_product_route(product_id: int):
    try:
        products_service.delete_product(product_id=product_id)
    except SERVICE_ERRORS as e:
        return service_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to delete product %s", product_id)
        return internal_error()

    return {"ok": True}, 200


@products_bp.get("/<int:product_id>/movements")
@require_auth
@require_permission("VIEW_PRODUCTS")
def list_movements_route(product_id: int):
    limit = request.args.get("limit", default=200, type=int)
    try:
        entries = inventory_service.list_inventory_logs(product_id=product_id, limit=max(1, min(limit, 500)))
    except SERVICE_ERRORS as e:
        return service_error_response(e)

    return {"items": [_movement_dict(e) for e in entries], "count": len(entries)}


@products_bp.post("/<int:product_id>/movements")
@require_auth
@require_permission("ADJUST_STOCK")
def create_movement_route(product_id: int):
    """
    Record a stock movement.

    Body: {type: IN|OUT, quantity, unit_price_cents, reason, note}

    502 means the log entry was written but the stock counter was not
    moved; the response carries that log entry.
    """
    payload = request.get_json(silent=True) or {}

    try:
        entry = inventory_service.apply_movement(
            product_id=product_id,
            quantity=payload.get("quantity"),
            direction=payload.get("type"),
            unit_cost_cents=payload.get("unit_price_cents", 0),
            reason=payload.get("reason") or "New Shipment",
            note=payload.get("note"),
            user_id=g.current_user.id,
        )
    except inventory_service.InventoryMovementError as e:
        return {"error": str(e), "log_entry": _movement_dict(e.log_entry)}, 502
    except SERVICE_ERRORS as e:
        return service_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to record stock movement for product %s", product_id)
        return internal_error()

    product = products_service.get_product(product_id)
    return {
        "log_entry": _movement_dict(entry),
        "product": products_service.serialize_product(product, g.session_context),
    }, 201
