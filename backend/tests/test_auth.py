# Overview: Pytest coverage for login, sessions and password reset.

"""
Authentication tests.

Verifies:
- login returns a token, role and permission set
- protected endpoints return 401 without a valid token
- logout revokes the token
- idle sessions are revoked
- password reset consumes the token and signs the user out everywhere
"""

from datetime import timedelta

import pytest

from shopdesk.models import SessionToken
from shopdesk.services import auth_service, session_service
from shopdesk.time_utils import utcnow
from shopdesk.validation import ConflictError, ValidationError

from conftest import TEST_PASSWORD, auth_headers, get_auth_token


class TestLogin:
    def test_login_returns_context(self, client, admin_user):
        resp = client.post("/api/auth/login", json={"email": "ADMIN@shopdesk.test", "password": TEST_PASSWORD})
        assert resp.status_code == 200
        body = resp.json
        assert body["token"]
        assert body["role"] == "admin"
        assert body["display_name"] == "Asha Admin"
        assert "VIEW_FINANCIALS" in body["permissions"]

    def test_bad_password(self, client, admin_user):
        resp = client.post("/api/auth/login", json={"email": admin_user.email, "password": "wrong"})
        assert resp.status_code == 401

    def test_missing_fields(self, client, db_session):
        assert client.post("/api/auth/login", json={"email": "x@y.z"}).status_code == 400

    def test_inactive_user_cannot_login(self, client, db_session, staff_user):
        staff_user.is_active = False
        db_session.commit()
        resp = client.post("/api/auth/login", json={"email": staff_user.email, "password": TEST_PASSWORD})
        assert resp.status_code == 401


class TestProtectedRoutes:
    @pytest.mark.parametrize("method,path", [
        ("GET", "/api/auth/me"),
        ("GET", "/api/products"),
        ("GET", "/api/orders"),
        ("GET", "/api/customers"),
        ("GET", "/api/dashboard"),
        ("GET", "/api/profile"),
        ("POST", "/api/products/1/movements"),
    ])
    def test_requires_auth(self, client, db_session, method, path):
        resp = getattr(client, method.lower())(path)
        assert resp.status_code == 401, f"{method} {path} returned {resp.status_code}"

    def test_garbage_token(self, client, db_session):
        assert client.get("/api/auth/me", headers=auth_headers("nope")).status_code == 401

    def test_me(self, client, staff_headers):
        resp = client.get("/api/auth/me", headers=staff_headers)
        assert resp.status_code == 200
        assert resp.json["role"] == "staff"
        assert resp.json["display_name"] == "Sam Staff"
        assert "VIEW_COSTS" not in resp.json["permissions"]


class TestSessions:
    def test_logout_revokes(self, client, admin_headers):
        assert client.post("/api/auth/logout", headers=admin_headers).status_code == 200
        assert client.get("/api/auth/me", headers=admin_headers).status_code == 401

    def test_idle_session_revoked(self, db_session, admin_user):
        session, token = session_service.create_session(admin_user.id)
        session.last_used_at = utcnow() - session_service.SESSION_IDLE_TIMEOUT - timedelta(minutes=1)
        db_session.commit()

        assert session_service.validate_session(token) is None
        db_session.refresh(session)
        assert session.is_revoked
        assert session.revoked_reason == "Idle timeout"

    def test_expired_session_rejected(self, db_session, admin_user):
        session, token = session_service.create_session(admin_user.id)
        session.expires_at = utcnow() - timedelta(seconds=1)
        db_session.commit()
        assert session_service.validate_session(token) is None

    def test_context_for_valid_token(self, db_session, staff_user):
        _, token = session_service.create_session(staff_user.id)
        context = session_service.validate_session(token)
        assert context.role == "staff"
        assert context.can("ADJUST_STOCK")
        assert not context.can("MANAGE_PRODUCTS")


class TestUsers:
    def test_weak_password(self, db_session):
        with pytest.raises(auth_service.PasswordValidationError):
            auth_service.create_user(email="weak@shopdesk.test", password="password")

    def test_unknown_role(self, db_session):
        with pytest.raises(ValidationError):
            auth_service.create_user(email="x@shopdesk.test", password=TEST_PASSWORD, role="owner")

    def test_duplicate_email(self, db_session, admin_user):
        with pytest.raises(ConflictError):
            auth_service.create_user(email="admin@shopdesk.test", password=TEST_PASSWORD)


class TestPasswordReset:
    NEW_PASSWORD = "Fresh-Pass42!"

    def test_request_is_uniform(self, client, admin_user):
        known = client.post("/api/auth/password-reset", json={"email": admin_user.email})
        unknown = client.post("/api/auth/password-reset", json={"email": "ghost@shopdesk.test"})
        assert known.status_code == unknown.status_code == 200
        assert known.json == unknown.json

    def test_confirm_resets_and_signs_out(self, client, db_session, admin_user):
        headers = auth_headers(get_auth_token(client, admin_user.email, TEST_PASSWORD))
        token = auth_service.request_password_reset(admin_user.email)

        resp = client.post("/api/auth/password-reset/confirm", json={"token": token, "password": self.NEW_PASSWORD})
        assert resp.status_code == 200

        assert client.get("/api/auth/me", headers=headers).status_code == 401
        assert get_auth_token(client, admin_user.email, TEST_PASSWORD) is None
        assert get_auth_token(client, admin_user.email, self.NEW_PASSWORD)

        again = client.post("/api/auth/password-reset/confirm", json={"token": token, "password": self.NEW_PASSWORD})
        assert again.status_code == 400

    def test_weak_new_password_keeps_token(self, client, admin_user):
        token = auth_service.request_password_reset(admin_user.email)
        weak = client.post("/api/auth/password-reset/confirm", json={"token": token, "password": "short"})
        assert weak.status_code == 400

        ok = client.post("/api/auth/password-reset/confirm", json={"token": token, "password": self.NEW_PASSWORD})
        assert ok.status_code == 200

    def test_reset_token_is_logged(self, app, admin_user, caplog):
        with caplog.at_level("INFO"):
            token = auth_service.request_password_reset(admin_user.email)
        assert token in caplog.text
