"""
Order line items and totals.

Order.items is stored in one of two shapes:
- a JSON list of line items (current format)
- a plain string (legacy orders typed in before line items existed)

parse_order_items() resolves the stored value once into either
StructuredItems or LegacyText. Everything downstream (serialisation,
invoices, statements) branches on that type instead of re-parsing.

Totals: line_total = quantity * unit_price, grand_total = sum(line_total).
All amounts are integer cents.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, replace
from typing import Any, Union

from .validation import ValidationError, coerce_int


def coerce_quantity(value: Any) -> int:
    """Quantity must be an integer >= 1 (digit strings accepted)."""
    qty = coerce_int("quantity", value)
    if qty < 1:
        raise ValidationError("quantity must be at least 1")
    return qty


@dataclass(frozen=True)
class LineItem:
    product_id: int
    product_name: str
    quantity: int
    unit_price_cents: int

    @property
    def line_total_cents(self) -> int:
        return self.quantity * self.unit_price_cents

    def with_quantity(self, quantity: Any) -> "LineItem":
        return replace(self, quantity=coerce_quantity(quantity))

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "product_name": self.product_name,
            "quantity": self.quantity,
            "unit_price_cents": self.unit_price_cents,
            "line_total_cents": self.line_total_cents,
        }

    @classmethod
    def from_stored(cls, raw: dict) -> "LineItem":
        """
        Build from a stored JSON row.

        Older rows use productId / productName / qty / price (whole
        currency units); those are read too.
        """
        if not isinstance(raw, dict):
            raise ValueError("line item must be an object")

        product_id = raw.get("product_id", raw.get("productId"))
        name = raw.get("product_name") or raw.get("productName") or raw.get("name") or ""
        quantity = raw.get("quantity", raw.get("qty"))

        if "unit_price_cents" in raw:
            unit_price_cents = int(raw["unit_price_cents"])
        elif "price" in raw:
            unit_price_cents = int(round(float(raw["price"]) * 100))
        else:
            raise ValueError("line item has no price")

        if product_id is None or quantity is None:
            raise ValueError("line item missing product or quantity")

        return cls(
            product_id=int(product_id),
            product_name=str(name),
            quantity=int(quantity),
            unit_price_cents=unit_price_cents,
        )


@dataclass(frozen=True)
class StructuredItems:
    lines: tuple[LineItem, ...] = ()

    @property
    def grand_total_cents(self) -> int:
        return sum(line.line_total_cents for line in self.lines)

    def to_stored(self) -> list[dict]:
        return [line.to_dict() for line in self.lines]


@dataclass(frozen=True)
class LegacyText:
    text: str


OrderItems = Union[StructuredItems, LegacyText]


def parse_order_items(raw: Any) -> OrderItems:
    """Resolve a stored Order.items value into its tagged shape."""
    if raw is None:
        return StructuredItems()

    if isinstance(raw, str):
        stripped = raw.strip()
        if not stripped:
            return StructuredItems()
        if stripped.startswith("["):
            try:
                decoded = json.loads(stripped)
            except json.JSONDecodeError:
                return LegacyText(raw)
            if isinstance(decoded, list):
                return parse_order_items(decoded)
        return LegacyText(raw)

    if isinstance(raw, list):
        try:
            return StructuredItems(tuple(LineItem.from_stored(row) for row in raw))
        except (TypeError, ValueError):
            return LegacyText(json.dumps(raw))

    return LegacyText(str(raw))


def grand_total_cents(lines) -> int:
    return sum(line.line_total_cents for line in lines)


def set_item_quantity(items: StructuredItems, index: int, quantity: Any) -> StructuredItems:
    """
    Return a copy of items with one line's quantity replaced.

    Only that line's total changes; the grand total follows from the lines.
    """
    if index < 0 or index >= len(items.lines):
        raise ValidationError(f"no line item at position {index}")
    lines = list(items.lines)
    lines[index] = lines[index].with_quantity(quantity)
    return StructuredItems(tuple(lines))
