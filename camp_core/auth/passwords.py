"""Password hashing and verification using bcrypt.

bcrypt releases the GIL while hashing, so under Flask's threaded server a
slow hash only occupies the worker thread serving that request.
"""

import logging

import bcrypt

from ..config import Settings

logger = logging.getLogger(__name__)

# bcrypt only reads the first 72 bytes; newer releases reject longer input
BCRYPT_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


class PasswordHasher:
    """Hash and compare passwords with a fixed bcrypt work factor."""

    def __init__(self, rounds: int = 12):
        self.rounds = rounds

    @classmethod
    def from_settings(cls, settings: Settings) -> "PasswordHasher":
        return cls(rounds=settings.bcrypt_work_factor)

    def hash(self, password: str) -> str:
        """Hash a password with a fresh salt.

        Returns:
            60-character bcrypt hash string
        """
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(_encode(password), salt).decode("utf-8")

    def verify(self, password: str, password_hash: str | None) -> bool:
        """Check a password against a stored hash.

        Returns False (never raises) for a missing or malformed hash.
        """
        if not password_hash:
            return False
        try:
            return bcrypt.checkpw(_encode(password), password_hash.encode("utf-8"))
        except ValueError:
            logger.warning("Stored password hash is not a valid bcrypt hash")
            return False
