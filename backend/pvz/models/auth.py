from __future__ import annotations

from ..extensions import db


class UserRow(db.Model):
    """
    User accounts for authentication and attribution.

    Email is globally unique. Role is employee or moderator.
    """
    __tablename__ = "users"

    id = db.Column(db.String(36), primary_key=True)
    email = db.Column(db.String(255), nullable=False, unique=True, index=True)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    role = db.Column(db.String(16), nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def __repr__(self) -> str:
        return f"<UserRow id={self.id} email={self.email!r} role={self.role}>"


class SessionTokenRow(db.Model):
    """
    Bearer session.

    Only the keyed hash of the token is stored. user_id is NULL for
    dummy-login sessions, which carry a role but no account.
    """
    __tablename__ = "session_tokens"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    token_hash = db.Column(db.String(64), nullable=False, unique=True, index=True)
    user_id = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=True, index=True)
    role = db.Column(db.String(16), nullable=False)

    created_at = db.Column(db.DateTime, nullable=False)
    expires_at = db.Column(db.DateTime, nullable=False)
    revoked_at = db.Column(db.DateTime, nullable=True)

    user = db.relationship("UserRow", backref=db.backref("sessions", lazy=True))
