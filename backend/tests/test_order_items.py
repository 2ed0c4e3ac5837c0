# Overview: Pytest coverage for order line items and totals.

"""
Order line item tests.

Covers:
- line and grand totals in integer cents
- changing one line's quantity
- quantity coercion
- resolving stored items into StructuredItems / LegacyText
"""

import pytest

from shopdesk.order_items import (
    LineItem,
    StructuredItems,
    LegacyText,
    coerce_quantity,
    grand_total_cents,
    parse_order_items,
    set_item_quantity,
)
from shopdesk.validation import ValidationError


def _items():
    return StructuredItems((
        LineItem(product_id=1, product_name="Cotton Pads", quantity=2, unit_price_cents=4500),
        LineItem(product_id=2, product_name="Neck Pillow", quantity=1, unit_price_cents=79900),
    ))


class TestTotals:
    def test_grand_total_is_sum_of_line_totals(self):
        items = _items()
        assert [l.line_total_cents for l in items.lines] == [9000, 79900]
        assert items.grand_total_cents == 88900
        assert grand_total_cents(items.lines) == 88900

    def test_empty_order_totals_zero(self):
        assert StructuredItems().grand_total_cents == 0

    def test_changing_one_quantity_recomputes_that_line_only(self):
        items = set_item_quantity(_items(), 0, 5)
        assert items.lines[0].line_total_cents == 22500
        assert items.lines[1].line_total_cents == 79900
        assert items.grand_total_cents == 102400

    def test_original_items_are_untouched(self):
        items = _items()
        set_item_quantity(items, 1, 3)
        assert items.lines[1].quantity == 1

    def test_bad_index_rejected(self):
        with pytest.raises(ValidationError):
            set_item_quantity(_items(), 2, 1)


class TestQuantityCoercion:
    @pytest.mark.parametrize("raw,expected", [(1, 1), (12, 12), ("3", 3), (" 4 ", 4)])
    def test_accepts_integers_and_digit_strings(self, raw, expected):
        assert coerce_quantity(raw) == expected

    @pytest.mark.parametrize("raw", [0, -1, "0", "", "abc", 1.5, True, None])
    def test_rejects_everything_else(self, raw):
        with pytest.raises(ValidationError):
            coerce_quantity(raw)


class TestParseOrderItems:
    def test_list_of_rows_is_structured(self):
        parsed = parse_order_items([
            {"product_id": 7, "product_name": "Soap", "quantity": 3, "unit_price_cents": 2500},
        ])
        assert isinstance(parsed, StructuredItems)
        assert parsed.lines[0].product_name == "Soap"
        assert parsed.grand_total_cents == 7500

    def test_json_string_is_decoded(self):
        parsed = parse_order_items('[{"product_id": 7, "product_name": "Soap", "quantity": 1, "unit_price_cents": 2500}]')
        assert isinstance(parsed, StructuredItems)
        assert parsed.grand_total_cents == 2500

    def test_older_row_keys_are_read(self):
        parsed = parse_order_items([{"productId": 3, "productName": "Towel", "qty": 2, "price": 120.5}])
        assert isinstance(parsed, StructuredItems)
        line = parsed.lines[0]
        assert (line.product_id, line.quantity, line.unit_price_cents) == (3, 2, 12050)

    def test_plain_text_is_legacy(self):
        parsed = parse_order_items("2 x cotton pads, 1 x pillow")
        assert parsed == LegacyText("2 x cotton pads, 1 x pillow")

    def test_malformed_rows_fall_back_to_legacy(self):
        parsed = parse_order_items([{"name": "no ids here"}])
        assert isinstance(parsed, LegacyText)

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_missing_items_are_an_empty_order(self, raw):
        assert parse_order_items(raw) == StructuredItems()
