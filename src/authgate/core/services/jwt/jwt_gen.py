import time
from collections.abc import Callable
from typing import Any

from authlib.jose import JoseError, jwt

from src.authgate.core.errors import ConfigurationError
from src.authgate.runtime.config.config_data import ServiceAccountConfig


class AssertionGenerator:
    """Builds the signed service-account assertion for the JWT-bearer grant."""

    algorithm = "RS256"

    def __init__(
        self,
        config: ServiceAccountConfig,
        clock: Callable[[], float] = time.time,
    ):
        self.config = config
        self._clock = clock

    def build_claims(self, now: int | None = None) -> dict[str, Any]:
        """Claims of a fresh assertion issued at ``now`` (defaults to the clock)."""
        issued_at = int(self._clock()) if now is None else now
        return {
            "iss": self.config.issuer_email,
            "scope": self.config.scope,
            "aud": self.config.token_endpoint,
            "iat": issued_at,
            "exp": issued_at + self.config.token_lifetime_seconds,
        }

    def generate(self, claims: dict[str, Any] | None = None) -> tuple[str, dict[str, Any]]:
        """Sign an assertion.

        Args:
            claims: Pre-built claims; a fresh set from :meth:`build_claims` otherwise.

        Returns:
            The compact JWT and the claims it carries.

        Raises:
            ConfigurationError: If the issuer e-mail or private key is missing or unusable.
        """
        if not self.config.issuer_email:
            raise ConfigurationError("Service account issuer e-mail not configured")

        try:
            private_key = self.config.signing_key
        except ValueError as e:
            raise ConfigurationError(str(e)) from e
        if not private_key:
            raise ConfigurationError("Service account private key not configured")

        payload = claims or self.build_claims()
        header = {"alg": self.algorithm, "typ": "JWT"}
        try:
            token = jwt.encode(header, payload, private_key)
        except (JoseError, ValueError) as e:
            raise ConfigurationError(
                f"Failed to sign service account assertion: {e}"
            ) from e

        # authlib returns bytes, decode to string
        assertion = token.decode() if isinstance(token, bytes) else token
        return assertion, payload
