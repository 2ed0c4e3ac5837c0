# Overview: Service-layer operations for session; encapsulates business logic and database work.

"""
Session Token Management Service

Tokens are random, stored only as a SHA-256 hash, and time-limited.

SESSION CONTEXT:
validate_session() returns a SessionContext holding the user, their role,
display name and permission set. It is built once per request by
@require_auth and handed to services that mask fields by role, so no
screen or service re-derives "is this an admin" on its own.

SECURITY FEATURES:
- 32-byte tokens from secrets.token_hex
- 24-hour absolute timeout (SESSION_ABSOLUTE_TIMEOUT)
- 2-hour idle timeout (SESSION_IDLE_TIMEOUT)
- Revocable on logout, password reset or account deactivation
"""

import secrets
import hashlib
from dataclasses import dataclass, field
from datetime import timedelta

from ..extensions import db
from ..models import SessionToken, User
from ..permissions import permissions_for_role
from ..time_utils import utcnow


SESSION_ABSOLUTE_TIMEOUT = timedelta(hours=24)
SESSION_IDLE_TIMEOUT = timedelta(hours=2)


@dataclass
class SessionContext:
    """Who is making this request and what they may see."""
    user: User
    session: SessionToken | None
    role: str
    display_name: str
    permissions: frozenset = field(default_factory=frozenset)

    @classmethod
    def for_user(cls, user: User, session: SessionToken | None = None) -> "SessionContext":
        return cls(
            user=user,
            session=session,
            role=user.role,
            display_name=user.display_name,
            permissions=permissions_for_role(user.role),
        )

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def can(self, code: str) -> bool:
        return code in self.permissions

    def to_dict(self) -> dict:
        return {
            "user": self.user.to_dict(),
            "role": self.role,
            "display_name": self.display_name,
            "permissions": sorted(self.permissions),
        }


def generate_token() -> str:
    """64-character hex string. This is the plaintext sent to the client (never stored)."""
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    """SHA-256 is enough for high-entropy tokens; bcrypt is for passwords."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def create_session(
    user_id: int,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> tuple[SessionToken, str]:
    """
    Create a session token for the user.

    Returns (session_record, plaintext_token).
    Raises ValueError for an unknown or inactive user.
    """
    user = db.session.get(User, user_id)
    if not user:
        raise ValueError("User not found")
    if not user.is_active:
        raise ValueError("User account is deactivated")

    plaintext_token = generate_token()
    now = utcnow()

    session = SessionToken(
        user_id=user_id,
        token_hash=hash_token(plaintext_token),
        created_at=now,
        last_used_at=now,
        expires_at=now + SESSION_ABSOLUTE_TIMEOUT,
        user_agent=(user_agent or "")[:255] or None,
        ip_address=ip_address,
        is_revoked=False,
    )

    db.session.add(session)
    db.session.commit()

    return session, plaintext_token


def _revoke(session: SessionToken, reason: str, now=None) -> None:
    session.is_revoked = True
    session.revoked_at = now or utcnow()
    session.revoked_reason = reason


def validate_session(token: str) -> SessionContext | None:
    """
    Return a SessionContext for a live token, else None.

    None when the token is unknown, revoked, past its absolute expiry, idle
    too long, or its user is deactivated. Idle and deactivated sessions are
    revoked on the way out. Updates last_used_at on success.
    """
    now = utcnow()

    session = db.session.query(SessionToken).filter_by(
        token_hash=hash_token(token),
        is_revoked=False,
    ).first()

    if not session:
        return None

    if session.expires_at < now:
        return None

    if now - session.last_used_at > SESSION_IDLE_TIMEOUT:
        _revoke(session, "Idle timeout", now)
        db.session.commit()
        return None

    user = session.user
    if not user or not user.is_active:
        _revoke(session, "User account deactivated", now)
        db.session.commit()
        return None

    session.last_used_at = now
    db.session.commit()

    return SessionContext.for_user(user, session)


def revoke_session(token: str, reason: str = "User logout") -> bool:
    """Returns True if a live session was revoked, False if not found."""
    session = db.session.query(SessionToken).filter_by(
        token_hash=hash_token(token),
        is_revoked=False,
    ).first()

    if not session:
        return False

    _revoke(session, reason)
    db.session.commit()
    return True


def revoke_all_user_sessions(user_id: int, reason: str = "Revoke all sessions") -> int:
    """Force re-authentication everywhere. Returns count of sessions revoked."""
    now = utcnow()

    sessions = db.session.query(SessionToken).filter_by(
        user_id=user_id,
        is_revoked=False,
    ).all()

    for session in sessions:
        _revoke(session, reason, now)

    db.session.commit()
    return len(sessions)
