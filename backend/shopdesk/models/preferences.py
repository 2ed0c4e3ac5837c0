from __future__ import annotations

from ..extensions import db
from shopdesk.time_utils import to_utc_z, utcnow


class UserPreference(db.Model):
    """
    Per-user string key/value preferences (theme and similar UI flags).

    Keys are allowlisted and each value is validated per key in
    preferences_service before it is stored.
    """
    __tablename__ = "user_preferences"
    __table_args__ = (
        db.UniqueConstraint("user_id", "key", name="uq_user_preferences_user_key"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    key = db.Column(db.String(64), nullable=False)
    value = db.Column(db.String(1024), nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    user = db.relationship("User", backref=db.backref("preferences", lazy=True))

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "value": self.value,
            "updated_at": to_utc_z(self.updated_at),
        }
