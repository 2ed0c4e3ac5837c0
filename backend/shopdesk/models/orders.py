from __future__ import annotations

from ..extensions import db
from shopdesk.order_items import parse_order_items, StructuredItems
from shopdesk.time_utils import to_utc_z, utcnow


class Order(db.Model):
    """
    Customer order.

    ITEMS: JSON column holding either a list of line items (current format)
    or a plain string (legacy rows written before line items existed). Use
    Order.parsed_items to read it; never inspect Order.items directly.

    TOTAL: total_price_cents is computed from the line items at save time
    and stored as-is. Nothing recomputes it afterwards.

    LIFECYCLE: is_approved gates status tracking. See order_status.py.
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.Index("ix_orders_customer_created", "customer_id", "created_at"),
        db.Index("ix_orders_customer_name", "customer_name"),
        db.Index("ix_orders_status", "status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id", ondelete="SET NULL"), nullable=True, index=True)
    customer_name = db.Column(db.String(255), nullable=False)
    phone_number = db.Column(db.String(16), nullable=False)

    items = db.Column(db.JSON, nullable=True)
    total_price_cents = db.Column(db.Integer, nullable=False, default=0)

    status = db.Column(db.String(16), nullable=False, default="New")
    is_approved = db.Column(db.Boolean, nullable=False, default=False)

    payment_status = db.Column(db.String(16), nullable=False, default="PAID")
    payment_method = db.Column(db.String(32), nullable=True)

    created_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now(), index=True)
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=db.func.now(),
        onupdate=utcnow,
    )

    customer = db.relationship("Customer", backref=db.backref("orders", lazy=True))

    @property
    def parsed_items(self):
        return parse_order_items(self.items)

    @property
    def reference(self) -> str:
        """Short human reference printed on invoices and messages."""
        return f"ORD-{self.id:05d}" if self.id else "ORD-NEW"

    def __repr__(self) -> str:
        return f"<Order id={self.id} customer={self.customer_name!r} status={self.status}>"

    def to_dict(self) -> dict:
        parsed = self.parsed_items
        structured = isinstance(parsed, StructuredItems)
        return {
            "id": self.id,
            "reference": self.reference,
            "customer_id": self.customer_id,
            "customer_name": self.customer_name,
            "phone_number": self.phone_number,
            "items_kind": "structured" if structured else "legacy",
            "items": [line.to_dict() for line in parsed.lines] if structured else [],
            "items_text": None if structured else parsed.text,
            "total_price_cents": self.total_price_cents,
            "status": self.status,
            "is_approved": self.is_approved,
            "payment_status": self.payment_status,
            "payment_method": self.payment_method,
            "created_by_user_id": self.created_by_user_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
