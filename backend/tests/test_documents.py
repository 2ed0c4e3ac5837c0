# Overview: Pytest coverage for printable invoices and statements.

from shopdesk.models import Customer, Order
from shopdesk.services.document_service import format_money


class TestFormatMoney:
    def test_formats_cents(self, app):
        assert format_money(1234567) == "₹12,345.67"
        assert format_money(5) == "₹0.05"
        assert format_money(None) == "₹0.00"


class TestInvoice:
    def test_structured_invoice(self, client, staff_headers, product):
        order = client.post(
            "/api/orders",
            json={"customer_name": "Ravi Kumar", "phone_number": "9876543210",
                  "items": [{"product_id": product.id, "quantity": 3}]},
            headers=staff_headers,
        ).json

        resp = client.get(f"/api/orders/{order['id']}/invoice", headers=staff_headers)
        assert resp.status_code == 200
        assert resp.content_type.startswith("text/html")
        html = resp.get_data(as_text=True)
        assert "INVOICE" in html
        assert "Hygienic &amp; Comfort Co." in html
        assert "Cotton Pads" in html
        assert "₹135.00" in html
        assert "window.print()" in html

    def test_legacy_invoice(self, client, db_session, staff_headers):
        order = Order(customer_name="Old Timer", phone_number="9876543210", items="2 x soap", total_price_cents=9000)
        db_session.add(order)
        db_session.commit()

        html = client.get(f"/api/orders/{order.id}/invoice", headers=staff_headers).get_data(as_text=True)
        assert "2 x soap" in html
        assert "₹90.00" in html

    def test_missing_order(self, client, staff_headers):
        assert client.get("/api/orders/999/invoice", headers=staff_headers).status_code == 404


class TestStatement:
    def test_statement_lists_resolved_orders(self, client, db_session, staff_headers):
        customer = Customer(customer_name="Ravi Kumar", phone="9876543210")
        db_session.add(customer)
        db_session.commit()
        for total in (1000, 2500):
            db_session.add(Order(customer_name="Ravi Kumar", phone_number="9876543210", items=[], total_price_cents=total))
        db_session.commit()

        resp = client.get(f"/api/customers/{customer.id}/statement", headers=staff_headers)
        assert resp.status_code == 200
        html = resp.get_data(as_text=True)
        assert "STATEMENT" in html
        assert "₹35.00" in html
        assert "2 orders" in html
