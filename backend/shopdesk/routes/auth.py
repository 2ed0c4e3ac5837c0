# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/shopdesk/routes/auth.py
"""
Authentication API routes

- Email + password login returning a bearer token
- Logout revokes the presented token
- Password reset: request issues a single-use token (logged for the
  operator), confirm sets the new password and revokes all sessions

Self-registration does not exist; accounts come from `flask users create`.
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..services import auth_service
from ..services import session_service
from ..decorators import require_auth, bearer_token
from ..validation import ValidationError


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.post("/login")
def login_route():
    """
    Authenticate and create a session token.

    The token must be sent as `Authorization: Bearer <token>`.
    """
    try:
        data = request.get_json(silent=True) or {}
        email = data.get("email")
        password = data.get("password")

        if not all([email, password]):
            return jsonify({"error": "email and password required"}), 400

        user = auth_service.authenticate(email, password)
        if not user:
            return jsonify({"error": "Invalid credentials"}), 401

        session, token = session_service.create_session(
            user_id=user.id,
            user_agent=request.headers.get("User-Agent"),
            ip_address=request.remote_addr,
        )
        context = session_service.SessionContext.for_user(user, session)

        return jsonify({
            **context.to_dict(),
            "token": token,
            "session": session.to_dict(),
            "message": "Login successful",
        }), 200

    except Exception:
        current_app.logger.exception("Failed to login user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/logout")
@require_auth
def logout_route():
    session_service.revoke_session(bearer_token(), reason="User logout")
    return jsonify({"message": "Logged out"}), 200


@auth_bp.get("/me")
@require_auth
def me_route():
    return jsonify(g.session_context.to_dict()), 200


@auth_bp.post("/password-reset")
def password_reset_request_route():
    """Always answers the same way so callers cannot probe for accounts."""
    data = request.get_json(silent=True) or {}
    email = data.get("email")
    if not email:
        return jsonify({"error": "email required"}), 400

    try:
        auth_service.request_password_reset(email)
    except Exception:
        current_app.logger.exception("Failed to issue password reset")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"message": "If the account exists, a reset link has been issued"}), 200


@auth_bp.post("/password-reset/confirm")
def password_reset_confirm_route():
    data = request.get_json(silent=True) or {}
    token = data.get("token")
    password = data.get("password")
    if not all([token, password]):
        return jsonify({"error": "token and password required"}), 400

    try:
        auth_service.confirm_password_reset(token, password)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to reset password")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"message": "Password updated. Please sign in again."}), 200
