# Overview: Pytest coverage for order saving, approval and status tracking.

"""
Order API tests.

Verifies:
- totals are computed from line items at save time
- phone numbers are normalised and validated
- duplicate products and unknown products are refused
- orders link to the customer whose phone matches
- approve / cancel / status follow the lifecycle and return WhatsApp links
- cancelled orders are locked
"""

from urllib.parse import unquote

import pytest

from shopdesk.models import Customer, Product


@pytest.fixture
def pillow(db_session):
    p = Product(name="Neck Pillow", category="Comfort", price_cents=79900, purchase_cost_cents=50000, stock=4, images=[])
    db_session.add(p)
    db_session.commit()
    return p


def _create(client, headers, product, **overrides):
    payload = {
        "customer_name": "Ravi Kumar",
        "phone_number": "98-765 43210",
        "items": [{"product_id": product.id, "quantity": 2}],
    }
    payload.update(overrides)
    return client.post("/api/orders", json=payload, headers=headers)


class TestSaving:
    def test_create_computes_total(self, client, staff_headers, product, pillow):
        resp = _create(
            client, staff_headers, product,
            items=[
                {"product_id": product.id, "quantity": 2},
                {"product_id": pillow.id, "quantity": "1", "unit_price_cents": 75000},
            ],
        )
        assert resp.status_code == 201
        body = resp.json
        assert body["phone_number"] == "9876543210"
        assert body["items_kind"] == "structured"
        assert [i["product_name"] for i in body["items"]] == ["Cotton Pads", "Neck Pillow"]
        assert body["total_price_cents"] == 2 * 4500 + 75000
        assert body["status"] == "New"
        assert body["is_approved"] is False
        assert body["next_statuses"] == []

    def test_create_does_not_move_stock(self, client, db_session, staff_headers, product):
        _create(client, staff_headers, product)
        db_session.refresh(product)
        assert product.stock == 20

    def test_zero_item_order(self, client, staff_headers, product):
        resp = _create(client, staff_headers, product, items=[])
        assert resp.status_code == 201
        assert resp.json["total_price_cents"] == 0

    @pytest.mark.parametrize("overrides", [
        {"customer_name": "  "},
        {"phone_number": "12345"},
        {"items": [{"product_id": 9999, "quantity": 1}]},
        {"items": [{"quantity": 1}]},
        {"items": "two pillows"},
        {"payment_status": "MAYBE"},
    ])
    def test_invalid_orders_rejected(self, client, staff_headers, product, overrides):
        assert _create(client, staff_headers, product, **overrides).status_code == 400

    def test_zero_quantity_rejected(self, client, staff_headers, product):
        resp = _create(client, staff_headers, product, items=[{"product_id": product.id, "quantity": 0}])
        assert resp.status_code == 400

    def test_duplicate_product_conflicts(self, client, staff_headers, product):
        resp = _create(
            client, staff_headers, product,
            items=[{"product_id": product.id, "quantity": 1}, {"product_id": product.id, "quantity": 2}],
        )
        assert resp.status_code == 409

    def test_links_customer_by_phone(self, client, db_session, staff_headers, product):
        customer = Customer(customer_name="Ravi Kumar", phone="9876543210")
        db_session.add(customer)
        db_session.commit()

        resp = _create(client, staff_headers, product)
        assert resp.json["customer_id"] == customer.id

    def test_update_quantity_recomputes_total(self, client, staff_headers, product):
        order = _create(client, staff_headers, product, items=[{"product_id": product.id, "quantity": 2, "unit_price_cents": 4000}]).json

        resp = client.put(
            f"/api/orders/{order['id']}",
            json={"items": [{"product_id": product.id, "quantity": 5}]},
            headers=staff_headers,
        )
        assert resp.status_code == 200
        # Stored unit price is kept for a product already on the order
        assert resp.json["items"][0]["unit_price_cents"] == 4000
        assert resp.json["total_price_cents"] == 20000

    def test_list_filters(self, client, staff_headers, product):
        _create(client, staff_headers, product)
        _create(client, staff_headers, product, customer_name="Anita", phone_number="9123456789")

        assert client.get("/api/orders?search=anita", headers=staff_headers).json["count"] == 1
        assert client.get("/api/orders?search=98765", headers=staff_headers).json["count"] == 1
        assert client.get("/api/orders?status=Shipped", headers=staff_headers).json["count"] == 0
        assert client.get("/api/orders?status=Lost", headers=staff_headers).status_code == 400


class TestLifecycle:
    def test_approve_returns_whatsapp_link(self, client, staff_headers, product):
        order = _create(client, staff_headers, product).json

        resp = client.post(f"/api/orders/{order['id']}/approve", headers=staff_headers)
        assert resp.status_code == 200
        assert resp.json["order"]["is_approved"] is True
        assert resp.json["order"]["status"] == "New"

        note = resp.json["notification"]
        assert note["url"].startswith("https://wa.me/919876543210?text=")
        message = unquote(note["url"].split("text=", 1)[1])
        assert order["reference"] in message
        assert "Hygienic & Comfort Co." in message

    def test_status_moves_forward_only(self, client, staff_headers, product):
        order_id = _create(client, staff_headers, product).json["id"]
        client.post(f"/api/orders/{order_id}/approve", headers=staff_headers)

        shipped = client.post(f"/api/orders/{order_id}/status", json={"status": "Shipped"}, headers=staff_headers)
        assert shipped.status_code == 200
        assert shipped.json["notification"]["status"] == "Shipped"
        assert shipped.json["order"]["next_statuses"] == ["Delivered"]

        back = client.post(f"/api/orders/{order_id}/status", json={"status": "New"}, headers=staff_headers)
        assert back.status_code == 409

    def test_unapproved_order_cannot_be_tracked(self, client, staff_headers, product):
        order_id = _create(client, staff_headers, product).json["id"]
        resp = client.post(f"/api/orders/{order_id}/status", json={"status": "Packed"}, headers=staff_headers)
        assert resp.status_code == 409

    def test_cancelled_order_is_locked(self, client, staff_headers, product):
        order_id = _create(client, staff_headers, product).json["id"]

        cancelled = client.post(f"/api/orders/{order_id}/cancel", headers=staff_headers)
        assert cancelled.status_code == 200
        assert cancelled.json["order"]["status"] == "Cancelled"
        note = cancelled.json["notification"]
        assert note["status"] == "Cancelled"
        assert "has been cancelled" in note["message"]
        assert note["url"].startswith("https://wa.me/919876543210?text=")

        assert client.post(f"/api/orders/{order_id}/approve", headers=staff_headers).status_code == 409
        assert client.post(f"/api/orders/{order_id}/status", json={"status": "Packed"}, headers=staff_headers).status_code == 409
        assert client.put(f"/api/orders/{order_id}", json={"customer_name": "X"}, headers=staff_headers).status_code == 409

    def test_approved_order_cannot_be_cancelled(self, client, staff_headers, product):
        order_id = _create(client, staff_headers, product).json["id"]
        client.post(f"/api/orders/{order_id}/approve", headers=staff_headers)
        assert client.post(f"/api/orders/{order_id}/cancel", headers=staff_headers).status_code == 409

    def test_missing_status(self, client, staff_headers, product):
        order_id = _create(client, staff_headers, product).json["id"]
        assert client.post(f"/api/orders/{order_id}/status", json={}, headers=staff_headers).status_code == 400

    def test_unknown_order(self, client, staff_headers, db_session):
        assert client.post("/api/orders/999/approve", headers=staff_headers).status_code == 404


class TestDeletion:
    def test_only_admin_deletes(self, client, staff_headers, admin_headers, product):
        order_id = _create(client, staff_headers, product).json["id"]
        assert client.delete(f"/api/orders/{order_id}", headers=staff_headers).status_code == 403
        assert client.delete(f"/api/orders/{order_id}", headers=admin_headers).status_code == 200
        assert client.get(f"/api/orders/{order_id}", headers=admin_headers).status_code == 404
