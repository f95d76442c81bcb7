"""Salted, iterated password hashing for the credential store."""

import hashlib
import hmac
import os


ALGORITHM = "pbkdf2_sha256"
SALT_BYTES = 16


class PasswordHasher:
    """
    Turns plaintext passwords into one-way verification tokens.

    Token format: ``pbkdf2_sha256$<iterations>$<salt hex>$<digest hex>``.
    The plaintext is never stored.
    """

    def __init__(self, iterations: int = 260000):
        if iterations < 1:
            raise ValueError("iterations must be positive")
        self.iterations = iterations

    def _derive(self, password: str, salt: bytes, iterations: int) -> bytes:
        return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)

    def hash(self, password: str) -> str:
        """Create a new token for a password using a random salt."""
        salt = os.urandom(SALT_BYTES)
        digest = self._derive(password, salt, self.iterations)
        return f"{ALGORITHM}${self.iterations}${salt.hex()}${digest.hex()}"

    def verify(self, password: str, token: str) -> bool:
        """
        Check a password against a stored token.

        Args:
            password: Plaintext password
            token: Token previously produced by ``hash``

        Returns:
            True if the password matches; False on mismatch or malformed token
        """
        parts = token.split("$")
        if len(parts) != 4 or parts[0] != ALGORITHM:
            return False

        try:
            iterations = int(parts[1])
            salt = bytes.fromhex(parts[2])
            expected = bytes.fromhex(parts[3])
        except ValueError:
            return False

        if iterations < 1:
            return False

        # Constant-time comparison
        return hmac.compare_digest(self._derive(password, salt, iterations), expected)
