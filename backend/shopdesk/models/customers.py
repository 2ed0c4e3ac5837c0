from __future__ import annotations

from ..extensions import db
from shopdesk.time_utils import to_utc_z, utcnow


class Customer(db.Model):
    """
    Customer master data.

    PHONE: Stored as exactly 10 digits and unique across customers.

    Denormalized aggregates (total_orders, total_spend_cents) are whatever
    staff last saved. Profile views prefer figures recomputed from the
    customer's resolved order history when that history is non-empty.
    """
    __tablename__ = "customers"
    __table_args__ = (
        db.UniqueConstraint("phone", name="uq_customers_phone"),
        db.Index("ix_customers_name", "customer_name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    customer_name = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(16), nullable=False)

    total_orders = db.Column(db.Integer, nullable=False, default=0)
    total_spend_cents = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "customer_name": self.customer_name,
            "phone": self.phone,
            "total_orders": self.total_orders,
            "total_spend_cents": self.total_spend_cents,
            "created_at": to_utc_z(self.created_at),
        }
