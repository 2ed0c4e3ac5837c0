# Overview: Flask API routes for the signed-in user's profile and UI preferences.

from flask import Blueprint, request, g

from ..services import preferences_service
from ..validation import ValidationError
from ..decorators import require_auth

profile_bp = Blueprint("profile", __name__, url_prefix="/api/profile")


@profile_bp.get("")
@require_auth
def profile_route():
    """Profile card: identity, role, permissions and saved preferences."""
    data = g.session_context.to_dict()
    data["preferences"] = preferences_service.get_preferences(g.current_user.id)
    return data


@profile_bp.get("/preferences")
@require_auth
def list_preferences_route():
    return {"preferences": preferences_service.get_preferences(g.current_user.id)}


@profile_bp.put("/preferences/<key>")
@require_auth
def set_preference_route(key: str):
    """Body: {value: ...}"""
    payload = request.get_json(silent=True) or {}
    if "value" not in payload:
        return {"error": "value is required"}, 400

    try:
        row = preferences_service.set_preference(g.current_user.id, key, payload["value"])
    except ValidationError as e:
        return {"error": str(e)}, 400

    return row.to_dict(), 200


@profile_bp.delete("/preferences/<key>")
@require_auth
def remove_preference_route(key: str):
    try:
        removed = preferences_service.remove_preference(g.current_user.id, key)
    except ValidationError as e:
        return {"error": str(e)}, 400

    return {"ok": True, "removed": removed}, 200
