# Overview: Flask API routes for customers operations; parses input and returns JSON responses.

# backend/shopdesk/routes/customers.py
"""
Customer routes.

GET /<id> returns the customer profile: the customer, their resolved order
history (by customer_id, falling back to an exact name match) and lifetime
figures.

SECURITY: All routes require authentication.
- VIEW_CUSTOMERS to read (including suggestions and statements)
- MANAGE_CUSTOMERS to create and edit
- DELETE_CUSTOMERS to delete
"""
from flask import Blueprint, request, current_app

from ..services import customers_service, document_service
from ..models import Customer
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_customer,
    normalize_phone,
)
from ..decorators import require_auth, require_permission
from . import SERVICE_ERRORS, service_error_response, internal_error

CUSTOMER_POLICY = ModelValidationPolicy(
    writable_fields={"customer_name", "phone", "total_orders", "total_spend_cents"},
    required_on_create={"customer_name", "phone"},
    normalizers={"phone": normalize_phone},
)

customers_bp = Blueprint("customers", __name__, url_prefix="/api/customers")


@customers_bp.get("")
@require_auth
@require_permission("VIEW_CUSTOMERS")
def list_customers():
    """
    Query params:
    - search: name (case-insensitive) or phone substring
    - sort: name | recent | spent (default recent)
    """
    try:
        return customers_service.list_customers(
            search=request.args.get("search", ""),
            sort_by=request.args.get("sort", "recent"),
        )
    except SERVICE_ERRORS as e:
        return service_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to list customers")
        return internal_error()


@customers_bp.get("/suggest")
@require_auth
@require_permission("VIEW_CUSTOMERS")
def suggest_customers():
    return {"items": customers_service.suggest_customers(request.args.get("q", ""))}


@customers_bp.get("/<int:customer_id>")
@require_auth
@require_permission("VIEW_CUSTOMERS")
def customer_profile_route(customer_id: int):
    try:
        return customers_service.customer_profile(customer_id, search=request.args.get("search", ""))
    except SERVICE_ERRORS as e:
        return service_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to load customer %s", customer_id)
        return internal_error()


@customers_bp.post("")
@require_auth
@require_permission("MANAGE_CUSTOMERS")
def create_customer_route():
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Customer, payload=payload, policy=CUSTOMER_POLICY, partial=False)
        enforce_rules_customer(patch)
        customer = customers_service.create_customer(patch=patch)
    except SERVICE_ERRORS as e:
        return service_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create customer")
        return internal_error()

    return customer.to_dict(), 201


@customers_bp.put("/<int:customer_id>")
@require_auth
@require_permission("MANAGE_CUSTOMERS")
def update_customer_route(customer_id: int):
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Customer, payload=payload, policy=CUSTOMER_POLICY, partial=True)
        enforce_rules_customer(patch)
        customer = customers_service.update_customer(customer_id=customer_id, patch=patch)
    except SERVICE_ERRORS as e:
        return service_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update customer %s", customer_id)
        return internal_error()

    return customer.to_dict(), 200


@customers_bp.delete("/<int:customer_id>")
@require_auth
@require_permission("DELETE_CUSTOMERS")
def delete_customer_route(customer_id: int):
    try:
        customers_service.delete_customer(customer_id=customer_id)
    except SERVICE_ERRORS as e:
        return service_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to delete customer %s", customer_id)
        return internal_error()

    return {"ok": True}, 200


@customers_bp.get("/<int:customer_id>/statement")
@require_auth
@require_permission("VIEW_CUSTOMERS")
def statement_route(customer_id: int):
    try:
        html = document_service.render_statement(customer_id)
    except SERVICE_ERRORS as e:
        return service_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to render statement for customer %s", customer_id)
        return internal_error()

    return html, 200, {"Content-Type": "text/html; charset=utf-8"}
