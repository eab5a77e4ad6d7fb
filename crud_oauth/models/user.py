"""User model."""

import secrets

from sqlalchemy import CheckConstraint, Column, Enum, String

from crud_oauth.database import Base
from crud_oauth.models.enums import AuthMode
from crud_oauth.models.mixins import TimestampMixin


def generate_user_id() -> str:
    """24 lowercase hex characters, the public id format of user records."""
    return secrets.token_hex(12)


class User(Base, TimestampMixin):
    """User model for local and Google accounts."""

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            "(auth_mode = 'local' AND password_hash IS NOT NULL) "
            "OR (auth_mode = 'google' AND password_hash IS NULL)",
            name="ck_users_password_matches_auth_mode",
        ),
    )

    id = Column(String(24), primary_key=True, default=generate_user_id)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=True)
    oauth_id = Column(String(255), unique=True, nullable=True, index=True)
    avatar_url = Column(String(2048), nullable=True)
    auth_mode = Column(
        Enum(
            AuthMode,
            name="authmode",
            native_enum=False,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
        default=AuthMode.LOCAL,
    )

    def __repr__(self) -> str:
        return f"User(id={self.id!r}, email={self.email!r}, auth_mode={self.auth_mode!r})"
