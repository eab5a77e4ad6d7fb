"""Enums for model fields."""

from enum import Enum


class AuthMode(str, Enum):
    """How a user account authenticates."""

    LOCAL = "local"
    OAUTH = "google"

    def has_password(self) -> bool:
        """Check if accounts of this mode carry a password hash."""
        return self == AuthMode.LOCAL
