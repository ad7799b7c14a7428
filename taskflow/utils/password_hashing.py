"""
Password hashing utilities using bcrypt
"""

import bcrypt
from loguru import logger

# bcrypt only consumes the first 72 bytes of a secret
BCRYPT_MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """bcrypt password hashing with a configurable work factor"""

    def __init__(self, rounds: int = 10):
        self.rounds = rounds

    @staticmethod
    def _encode(password: str) -> bytes:
        return password.encode("utf-8")[:BCRYPT_MAX_PASSWORD_BYTES]

    def hash_password(self, password: str) -> str:
        """
        Hash a password using bcrypt.

        Args:
            password: Plain text password

        Returns:
            Hashed password as string
        """
        salt = bcrypt.gensalt(rounds=self.rounds)
        hashed = bcrypt.hashpw(self._encode(password), salt)
        return hashed.decode("utf-8")

    def verify_password(self, password: str, hashed_password: str) -> bool:
        """
        Verify a password against its hash.

        Args:
            password: Plain text password
            hashed_password: Previously hashed password

        Returns:
            True if password matches, False otherwise (including malformed hashes)
        """
        try:
            return bcrypt.checkpw(
                self._encode(password), hashed_password.encode("utf-8")
            )
        except (ValueError, TypeError) as e:
            logger.warning(f"Password verification against malformed hash: {e}")
            return False
