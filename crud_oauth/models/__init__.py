"""SQLAlchemy models."""

from crud_oauth.models.enums import AuthMode
from crud_oauth.models.user import User

__all__ = [
    "AuthMode",
    "User",
]
