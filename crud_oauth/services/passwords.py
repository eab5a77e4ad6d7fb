"""Password hashing for local accounts."""

import logging

from passlib.context import CryptContext

logger = logging.getLogger(__name__)


class PasswordHasher:
    """Salted bcrypt hashing with a configurable cost factor."""

    def __init__(self, rounds: int = 10):
        self.rounds = rounds
        self.context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)

    def hash(self, plaintext: str) -> str:
        """Hash a password. Every call draws a fresh salt."""
        return self.context.hash(plaintext)

    def verify(self, plaintext: str, hashed: str | None) -> bool:
        """Verify a password against its hash.

        Accounts without a hash (Google sign-in) never match.
        """
        if not hashed:
            return False
        try:
            return self.context.verify(plaintext, hashed)
        except ValueError as e:
            # Unknown or corrupt hash format
            logger.warning(f"Password hash could not be verified: {e}")
            return False
