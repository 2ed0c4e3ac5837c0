"""
Order Approval & Fulfilment State Machine

================================================================================
PURPOSE: Decide which approval / status changes an order may make
================================================================================

APPROVAL:
    UNAPPROVED -> APPROVED   (status becomes New)
    UNAPPROVED -> CANCELLED  (status becomes Cancelled)

FULFILMENT (approved orders only, forward only, skipping allowed):
    New -> Packed -> Shipped -> Delivered

RULES:
1. Cancelled is terminal: no approval, no status change, no edits.
2. Approval cannot be withdrawn (no APPROVED -> UNAPPROVED path).
3. A cancelled order cannot be re-approved.
4. Status tracking is disabled until the order is approved.
5. Same-status and backward moves are rejected.

Pure functions only; orders_service applies the result to the row.
================================================================================
"""

from __future__ import annotations

STATUS_NEW = "New"
STATUS_PACKED = "Packed"
STATUS_SHIPPED = "Shipped"
STATUS_DELIVERED = "Delivered"
STATUS_CANCELLED = "Cancelled"

TRACKING_STATUSES = (STATUS_NEW, STATUS_PACKED, STATUS_SHIPPED, STATUS_DELIVERED)
VALID_STATUSES = set(TRACKING_STATUSES) | {STATUS_CANCELLED}


class OrderStateError(ValueError):
    """Raised when an approval or status change breaks the order lifecycle."""


def is_terminal(status: str) -> bool:
    return status == STATUS_CANCELLED


def validate_status(status: str) -> None:
    if status not in VALID_STATUSES:
        raise OrderStateError(
            f"Invalid status '{status}'. Must be one of: {', '.join(TRACKING_STATUSES)}"
        )


def can_transition(from_status: str, to_status: str, *, is_approved: bool) -> bool:
    """True when a tracked status change from -> to is allowed."""
    if not is_approved or is_terminal(from_status):
        return False
    if from_status not in TRACKING_STATUSES or to_status not in TRACKING_STATUSES:
        return False
    return TRACKING_STATUSES.index(to_status) > TRACKING_STATUSES.index(from_status)


def check_transition(from_status: str, to_status: str, *, is_approved: bool) -> None:
    """Raise OrderStateError explaining why a tracked status change is refused."""
    validate_status(to_status)
    if is_terminal(from_status):
        raise OrderStateError("Cancelled orders cannot change status")
    if to_status == STATUS_CANCELLED:
        raise OrderStateError("Use cancel to cancel an order")
    if not is_approved:
        raise OrderStateError("Order must be approved before its status can be tracked")
    if not can_transition(from_status, to_status, is_approved=is_approved):
        raise OrderStateError(f"Cannot move order from {from_status} back to {to_status}")


def check_approval(status: str, is_approved: bool) -> None:
    """Approve and cancel are only available on unapproved, live orders."""
    if is_terminal(status):
        raise OrderStateError("Order is already cancelled")
    if is_approved:
        raise OrderStateError("Order is already approved")


def next_statuses(status: str, *, is_approved: bool) -> list[str]:
    """Statuses the tracking control may offer for an order."""
    return [s for s in TRACKING_STATUSES if can_transition(status, s, is_approved=is_approved)]
