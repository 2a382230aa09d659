"""Security utilities: credential hashing and random tokens."""

import base64
import hashlib
import secrets

import bcrypt


def generate_secure_token(length: int = 32) -> str:
    """Generate a cryptographically secure random token.

    Args:
        length: Number of random bytes to generate (default 32)

    Returns:
        URL-safe base64 encoded token
    """
    return (
        base64.urlsafe_b64encode(secrets.token_bytes(length))
        .decode("utf-8")
        .rstrip("=")
    )


def generate_state() -> str:
    """Generate a state parameter for the provider consent redirect."""
    return generate_secure_token(32)


def generate_session_id() -> str:
    return secrets.token_urlsafe(32)


class CredentialVerifier:
    """Creates and verifies salted password credentials.

    The stored credential is an opaque bcrypt hash string; callers never inspect it.
    Secrets are reduced to a SHA-256 digest first since bcrypt reads at most 72 bytes.
    """

    def __init__(self, rounds: int = 12) -> None:
        self._rounds = rounds
        # same cost as real credentials so a missing account is not faster to reject
        self._dummy_credential = self.create(generate_secure_token(16))

    @staticmethod
    def _prehash(secret: str) -> bytes:
        return base64.b64encode(hashlib.sha256(secret.encode("utf-8")).digest())

    def create(self, secret: str) -> str:
        """Derive a non-reversible credential from a plaintext secret."""
        return bcrypt.hashpw(
            self._prehash(secret), bcrypt.gensalt(rounds=self._rounds)
        ).decode("utf-8")

    def verify(self, credential: str | None, secret: str) -> bool:
        """Check ``secret`` against ``credential``.

        An absent credential is compared against a dummy hash and always fails, so the
        caller cannot tell from timing whether the account exists.
        """
        stored = credential or self._dummy_credential
        try:
            matched = bcrypt.checkpw(self._prehash(secret), stored.encode("utf-8"))
        except ValueError:
            # malformed stored hash
            return False
        return matched and credential is not None
