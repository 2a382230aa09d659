"""Typed failures raised by the core and mapped to HTTP responses by the API layer."""

from __future__ import annotations

from typing import Any


class GatewayError(Exception):
    """Base class for every failure the core surfaces to its callers."""

    status_code: int = 500
    default_detail: str = "Internal gateway error"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)

    def to_dict(self) -> dict[str, Any]:
        return {"detail": self.detail}


class MissingGrant(GatewayError):
    """The provider callback is missing the ``code`` (or ``state``) query parameter."""

    status_code = 400
    default_detail = "Provider did not pass grant token."


class ProviderExchangeError(GatewayError):
    """Exchanging the authorization code for an access token failed."""

    status_code = 502
    default_detail = "Authorization code exchange failed."


class ProviderProfileError(GatewayError):
    """Fetching or parsing the provider user profile failed."""

    status_code = 502
    default_detail = "Could not fetch the provider profile."


class ConstraintViolation(GatewayError):
    """A directory uniqueness constraint rejected an insert."""

    status_code = 400
    default_detail = "Username already taken"


class NotFound(GatewayError):
    """A directory lookup by key found nothing."""

    status_code = 404
    default_detail = "The entry does not exist"


class InvalidCredentials(GatewayError):
    """Username/password authentication failed."""

    status_code = 401
    default_detail = "unauthorized"


class UnknownProvider(GatewayError):
    """No OAuth2 provider is configured under the requested name."""

    status_code = 404
    default_detail = "Unknown provider"


class ConfigurationError(GatewayError):
    """A component was used before its required configuration was supplied."""

    status_code = 500
    default_detail = "Gateway misconfigured"


class SessionStoreUnavailable(GatewayError):
    """The session backend did not answer."""

    status_code = 503
    default_detail = "Session store unavailable"


class MintError(GatewayError):
    """The JWT-bearer exchange did not yield an access token.

    Carries the raw token endpoint response and the signed assertion so the failure
    can be diagnosed; the cached token is left untouched.
    """

    status_code = 502
    default_detail = "Service account token exchange failed."

    def __init__(
        self,
        detail: str | None = None,
        *,
        response: Any = None,
        assertion: str | None = None,
    ) -> None:
        super().__init__(detail)
        self.response = response
        self.assertion = assertion

    def to_dict(self) -> dict[str, Any]:
        return {"detail": self.detail, "error": True, "response": self.response}
