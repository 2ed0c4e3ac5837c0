# Overview: Pytest coverage for list filtering, sorting and paging.

from shopdesk.services.filters import (
    filter_customers,
    filter_orders,
    filter_products,
    is_low_stock,
    paginate,
)

PRODUCTS = [
    {"name": "Cotton Pads", "category": "Hygienic", "barcode": "8901", "price_cents": 4500, "stock": 5, "min_stock": 5},
    {"name": "Neck Pillow", "category": "Comfort", "barcode": "7702", "price_cents": 79900, "stock": 6, "min_stock": 5},
    {"name": "cotton buds", "category": "Hygienic", "barcode": None, "price_cents": 4500, "stock": 0, "min_stock": 2},
]


class TestLowStock:
    def test_threshold_is_inclusive(self):
        assert is_low_stock({"stock": 5, "min_stock": 5})
        assert not is_low_stock({"stock": 6, "min_stock": 5})


class TestProducts:
    def test_search_name_case_insensitive(self):
        names = [r["name"] for r in filter_products(PRODUCTS, search="COTTON")]
        assert names == ["Cotton Pads", "cotton buds"]

    def test_search_barcode(self):
        assert [r["name"] for r in filter_products(PRODUCTS, search="770")] == ["Neck Pillow"]

    def test_category_and_stock_status(self):
        low = filter_products(PRODUCTS, category="Hygienic", stock_status="Low")
        assert len(low) == 2
        healthy = filter_products(PRODUCTS, stock_status="Healthy")
        assert [r["name"] for r in healthy] == ["Neck Pillow"]

    def test_sort_is_stable(self):
        rows = filter_products(PRODUCTS, sort_by="price_cents", sort_dir="asc")
        assert [r["name"] for r in rows] == ["Cotton Pads", "cotton buds", "Neck Pillow"]

    def test_sort_desc(self):
        rows = filter_products(PRODUCTS, sort_by="stock", sort_dir="desc")
        assert [r["stock"] for r in rows] == [6, 5, 0]


class TestCustomers:
    ROWS = [
        {"customer_name": "Ravi", "phone": "9876543210", "total_spend_cents": 500, "created_at": "2026-01-01T00:00:00Z"},
        {"customer_name": "anita", "phone": "9123456789", "total_spend_cents": 9000, "created_at": "2026-03-01T00:00:00Z"},
        {"customer_name": "Bala", "phone": "9000000000", "total_spend_cents": 100, "created_at": "2026-02-01T00:00:00Z"},
    ]

    def test_sort_by_name(self):
        assert [r["customer_name"] for r in filter_customers(self.ROWS, sort_by="name")] == ["anita", "Bala", "Ravi"]

    def test_sort_recent(self):
        assert [r["customer_name"] for r in filter_customers(self.ROWS, sort_by="recent")] == ["anita", "Bala", "Ravi"]

    def test_sort_spent(self):
        assert [r["customer_name"] for r in filter_customers(self.ROWS, sort_by="spent")] == ["anita", "Ravi", "Bala"]

    def test_search_phone(self):
        assert [r["customer_name"] for r in filter_customers(self.ROWS, search="91234")] == ["anita"]


class TestOrders:
    ROWS = [
        {"customer_name": "Ravi", "phone_number": "9876543210", "status": "New"},
        {"customer_name": "Anita", "phone_number": "9123456789", "status": "Shipped"},
    ]

    def test_search_and_status(self):
        assert len(filter_orders(self.ROWS, search="ravi")) == 1
        assert len(filter_orders(self.ROWS, search="9123")) == 1
        assert [r["customer_name"] for r in filter_orders(self.ROWS, status="Shipped")] == ["Anita"]
        assert len(filter_orders(self.ROWS, status="All")) == 2


class TestPaginate:
    def test_pages(self):
        rows = [{"n": i} for i in range(10)]
        page = paginate(rows, page=2, per_page=8)
        assert [r["n"] for r in page["items"]] == [8, 9]
        assert page["pagination"]["total_pages"] == 2
        assert page["pagination"]["has_prev"] is True
        assert page["pagination"]["has_next"] is False

    def test_unpaged(self):
        assert paginate([{"n": 1}], page=None, per_page=8) == {"items": [{"n": 1}], "count": 1}
