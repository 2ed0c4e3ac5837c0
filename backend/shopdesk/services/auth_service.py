# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Authentication Service

Every action must be attributable: each person signs in with their own
email and password. Passwords are hashed with bcrypt and checked for
strength on creation and reset.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor 12)
- Minimum 8 characters, upper, lower, digit and special char
- Session tokens managed separately (see session_service.py)
- Password reset tokens are single-use, hashed, and expire after
  PASSWORD_RESET_TTL_MINUTES. There is no mail transport: the token is
  written to the application log for an operator to pass on.
"""

import bcrypt
import re
from datetime import timedelta

from flask import current_app

from ..extensions import db
from ..models import PasswordResetToken, User
from ..permissions import VALID_ROLES, ROLE_STAFF
from ..time_utils import utcnow
from ..validation import ConflictError, ValidationError
from .session_service import generate_token, hash_token, revoke_all_user_sessions


class PasswordValidationError(ValidationError):
    """Raised when password doesn't meet strength requirements."""
    pass


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def validate_password_strength(password: str) -> None:
    """
    Requirements:
    - Minimum 8 characters
    - At least one uppercase letter
    - At least one lowercase letter
    - At least one digit
    - At least one special character (!@#$%^&*(),.'":{}|<>)
    """
    if len(password) < 8:
        raise PasswordValidationError("Password must be at least 8 characters long")

    if not re.search(r'[A-Z]', password):
        raise PasswordValidationError("Password must contain at least one uppercase letter")

    if not re.search(r'[a-z]', password):
        raise PasswordValidationError("Password must contain at least one lowercase letter")

    if not re.search(r'\d', password):
        raise PasswordValidationError("Password must contain at least one digit")

    if not re.search(r"[!@#$%^&*(),.'\":{}|<>]", password):
        raise PasswordValidationError("Password must contain at least one special character")


def hash_password(password: str) -> str:
    """Validate strength, then hash with bcrypt (cost 12)."""
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=12)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """Timing-safe bcrypt check. A malformed stored hash never matches."""
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def create_user(
    email: str,
    password: str,
    role: str = ROLE_STAFF,
    full_name: str | None = None,
    employee_id: str | None = None,
) -> User:
    """
    Create a user account.

    Raises:
        ValidationError: bad email or role, or weak password
        ConflictError: email or employee id already taken
    """
    email = normalize_email(email)
    if not email or "@" not in email:
        raise ValidationError("A valid email is required")

    role = (role or "").strip().lower()
    if role not in VALID_ROLES:
        raise ValidationError(f"role must be one of: {', '.join(sorted(VALID_ROLES))}")

    employee_id = (employee_id or "").strip() or None

    existing = db.session.query(User).filter(
        db.or_(
            User.email == email,
            db.and_(User.employee_id.isnot(None), User.employee_id == employee_id),
        )
    ).first()
    if existing:
        raise ConflictError("Email or employee id already exists")

    user = User(
        email=email,
        password_hash=hash_password(password),
        role=role,
        full_name=(full_name or "").strip() or None,
        employee_id=employee_id,
    )

    db.session.add(user)
    db.session.commit()
    return user


def authenticate(email: str, password: str) -> User | None:
    """
    Returns the active User if credentials are valid, None otherwise.

    Updates last_login_at on success.
    """
    user = db.session.query(User).filter(
        User.email == normalize_email(email),
        User.is_active.is_(True),
    ).first()

    if not user:
        return None

    if verify_password(password or "", user.password_hash):
        user.last_login_at = utcnow()
        db.session.commit()
        return user

    return None


def request_password_reset(email: str) -> str | None:
    """
    Issue a reset token for an active account.

    Returns the plaintext token, or None for an unknown email. Callers
    must not reveal which of the two happened.
    """
    user = db.session.query(User).filter(
        User.email == normalize_email(email),
        User.is_active.is_(True),
    ).first()
    if not user:
        return None

    token = generate_token()
    now = utcnow()
    ttl = timedelta(minutes=current_app.config.get("PASSWORD_RESET_TTL_MINUTES", 30))

    db.session.add(PasswordResetToken(
        user_id=user.id,
        token_hash=hash_token(token),
        created_at=now,
        expires_at=now + ttl,
    ))
    db.session.commit()

    current_app.logger.info("Password reset requested for user %s; token=%s", user.id, token)
    return token


def confirm_password_reset(token: str, new_password: str) -> User:
    """
    Set a new password with a reset token and sign the user out everywhere.

    Raises ValidationError for an unknown, used or expired token, or a weak
    password. The token is only consumed when the reset succeeds.
    """
    record = db.session.query(PasswordResetToken).filter_by(
        token_hash=hash_token(token or ""),
    ).first()

    now = utcnow()
    if not record or record.used_at is not None or record.expires_at < now:
        raise ValidationError("Reset link is invalid or has expired")

    user = record.user
    user.password_hash = hash_password(new_password or "")
    record.used_at = now
    db.session.commit()

    revoke_all_user_sessions(user.id, reason="Password reset")
    return user
