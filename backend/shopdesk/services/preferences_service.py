"""
Per-user UI preferences.

Small key/value pairs the screens persist between sessions (light/dark
theme, the category list used by the order form). Keys are allowlisted;
each key has its own validator that returns the string to store.
"""
from __future__ import annotations

import json

from ..extensions import db
from ..models import UserPreference
from ..time_utils import utcnow
from ..validation import ValidationError

THEMES = {"light", "dark"}
MAX_VALUE_LENGTH = 1024


def _theme(value) -> str:
    value = str(value or "").strip().lower()
    if value not in THEMES:
        raise ValidationError(f"theme must be one of: {', '.join(sorted(THEMES))}")
    return value


def _categories(value) -> str:
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            raise ValidationError("categories must be a list of names")
    if not isinstance(value, list) or not all(isinstance(v, str) and v.strip() for v in value):
        raise ValidationError("categories must be a list of names")
    return json.dumps([v.strip() for v in value])


PREFERENCE_VALIDATORS = {
    "theme": _theme,
    "categories": _categories,
}


def _check_key(key: str) -> None:
    if key not in PREFERENCE_VALIDATORS:
        raise ValidationError(f"Unknown preference '{key}'")


def get_preferences(user_id: int) -> dict:
    rows = db.session.query(UserPreference).filter_by(user_id=user_id).all()
    return {row.key: row.value for row in rows}


def set_preference(user_id: int, key: str, value) -> UserPreference:
    _check_key(key)
    stored = PREFERENCE_VALIDATORS[key](value)
    if len(stored) > MAX_VALUE_LENGTH:
        raise ValidationError(f"{key} exceeds max length {MAX_VALUE_LENGTH}")

    row = db.session.query(UserPreference).filter_by(user_id=user_id, key=key).first()
    if row is None:
        row = UserPreference(user_id=user_id, key=key)
        db.session.add(row)
    row.value = stored
    row.updated_at = utcnow()
    db.session.commit()
    return row


def remove_preference(user_id: int, key: str) -> bool:
    """Returns True if a stored value was removed."""
    _check_key(key)
    deleted = db.session.query(UserPreference).filter_by(user_id=user_id, key=key).delete()
    db.session.commit()
    return bool(deleted)
