"""
Blueprints for the JSON API.

Service exceptions map to status codes in one place so every route
reports the same failure the same way.
"""
from ..services.inventory_service import InventoryMovementError
from ..services.order_status import OrderStateError
from ..validation import ConflictError, NotFoundError, ValidationError

SERVICE_ERRORS = (
    ValidationError,
    ConflictError,
    NotFoundError,
    OrderStateError,
    InventoryMovementError,
)


def service_error_response(exc: Exception):
    if isinstance(exc, InventoryMovementError):
        return {"error": str(exc), "log_entry": exc.log_entry.to_dict()}, 502
    if isinstance(exc, NotFoundError):
        return {"error": str(exc)}, 404
    if isinstance(exc, (ConflictError, OrderStateError)):
        return {"error": str(exc)}, 409
    return {"error": str(exc)}, 400


def internal_error():
    return {"error": "Internal server error"}, 500
