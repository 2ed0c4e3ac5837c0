# Overview: Pytest coverage for health, dashboard route, CORS and CLI commands.

from shopdesk.models import User


class TestHealth:
    def test_health(self, client, db_session):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json["status"] == "healthy"


class TestDashboardRoute:
    def test_staff_masked(self, client, staff_headers, product):
        body = client.get("/api/dashboard", headers=staff_headers).json
        assert body["masked"] is True
        assert body["revenue_cents"] is None

    def test_admin_sees_value(self, client, admin_headers, product):
        body = client.get("/api/dashboard", headers=admin_headers).json
        assert body["inventory_value_cents"] == 60000

    def test_order_refreshes_dashboard(self, client, admin_headers, product):
        assert client.get("/api/dashboard", headers=admin_headers).json["total_orders"] == 0
        client.post(
            "/api/orders",
            json={"customer_name": "Ravi", "phone_number": "9876543210", "items": []},
            headers=admin_headers,
        )
        assert client.get("/api/dashboard", headers=admin_headers).json["total_orders"] == 1


class TestCors:
    def test_allowed_origin_echoed(self, client, db_session):
        resp = client.get("/health", headers={"Origin": "http://localhost:5173"})
        assert resp.headers["Access-Control-Allow-Origin"] == "http://localhost:5173"

    def test_other_origin_ignored(self, client, db_session):
        resp = client.get("/health", headers={"Origin": "http://evil.example"})
        assert "Access-Control-Allow-Origin" not in resp.headers


class TestCli:
    def test_system_init_creates_admin_once(self, app, db_session):
        runner = app.test_cli_runner()

        result = runner.invoke(args=["system", "init"])
        assert "PASS Created admin: admin@shopdesk.local" in result.output

        again = runner.invoke(args=["system", "init"])
        assert "Using existing admin" in again.output
        assert db_session.query(User).filter_by(role="admin").count() == 1

    def test_users_create_and_list(self, app, db_session):
        runner = app.test_cli_runner()
        result = runner.invoke(args=[
            "users", "create",
            "--email", "desk@shopdesk.test",
            "--password", "Password123!",
            "--role", "staff",
            "--name", "Desk",
            "--employee-id", "E-010",
        ])
        assert "PASS Created user: desk@shopdesk.test" in result.output

        listing = runner.invoke(args=["users", "list"])
        assert "desk@shopdesk.test" in listing.output
        assert "E-010" in listing.output

    def test_users_create_weak_password(self, app, db_session):
        runner = app.test_cli_runner()
        result = runner.invoke(args=[
            "users", "create", "--email", "weak@shopdesk.test", "--password", "weak", "--role", "staff",
        ])
        assert "FAIL Password validation failed" in result.output
