"""OAuth2 authorization-code client shared by every login provider."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar
from urllib.parse import parse_qsl, urlencode

import httpx
from loguru import logger
from pydantic import BaseModel, Field, ValidationError

from src.authgate.core.errors import (
    ConfigurationError,
    MissingGrant,
    ProviderExchangeError,
    ProviderProfileError,
)
from src.authgate.runtime.config.config_data import OAuth2ProviderConfig


class NormalizedProfile(BaseModel):
    """Provider-agnostic subset of a user-info response used for account matching."""

    provider_id: str | None = Field(default=None, description="Provider user id")
    display_name: str = Field(description="Name the local account is shown under")
    email: str | None = Field(default=None, description="Primary e-mail, if shared")
    picture_url: str | None = Field(default=None, description="Avatar URL")


class OAuth2ProviderClient(ABC):
    """Three-legged OAuth2 exchange against one provider.

    Subclasses only describe the provider: its name, its scopes and how
    its profile payload maps onto a :class:`NormalizedProfile`.
    """

    name: ClassVar[str]
    requires_state: ClassVar[bool] = False
    default_scopes: ClassVar[tuple[str, ...]] = ()
    extra_authorization_params: ClassVar[dict[str, str]] = {}

    def __init__(self, config: OAuth2ProviderConfig):
        self.config = config

    @property
    def scopes(self) -> list[str]:
        return self.config.scopes or list(self.default_scopes)

    def authorization_url(self, state: str) -> str:
        """Build the provider consent page URL for a new sign-in."""
        self._require_configured()
        params = {
            "client_id": self.config.client_id,
            "redirect_uri": self.config.redirect_uri,
            "response_type": "code",
            "state": state,
            **self.extra_authorization_params,
        }
        if self.scopes:
            params["scope"] = " ".join(self.scopes)
        return f"{self.config.authorization_endpoint}?{urlencode(params)}"

    def validate_grant(self, code: str | None, state: str | None = None) -> str:
        """Return the authorization code, or raise MissingGrant when absent."""
        if not code:
            raise MissingGrant()
        if self.requires_state and not state:
            raise MissingGrant("Provider did not pass grant token and state.")
        return code

    async def exchange_code(self, code: str, state: str | None = None) -> str:
        """Exchange an authorization code for the provider access token."""
        self._require_configured()
        data = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": self.config.redirect_uri,
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret,
        }
        if state:
            data["state"] = state

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    self.config.token_endpoint,
                    data=data,
                    headers={"Accept": "application/json"},
                )
                response.raise_for_status()
                payload = self._parse_token_payload(response)
        except httpx.HTTPError as e:
            logger.warning(f"{self.name} token exchange failed: {e}")
            raise ProviderExchangeError() from e

        access_token = payload.get("access_token")
        if not access_token:
            logger.warning(
                f"{self.name} token response carried no access_token "
                f"(error={payload.get('error')!r})"
            )
            raise ProviderExchangeError()
        return access_token

    async def fetch_profile(self, access_token: str) -> NormalizedProfile:
        """Fetch and normalize the profile of the user the token belongs to."""
        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(
                    self.config.userinfo_endpoint,
                    headers={
                        "Authorization": f"Bearer {access_token}",
                        "Accept": "application/json",
                    },
                )
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPError as e:
            logger.warning(f"{self.name} profile request failed: {e}")
            raise ProviderProfileError() from e
        except ValueError as e:
            logger.warning(f"{self.name} profile response is not JSON")
            raise ProviderProfileError() from e

        try:
            return self.normalize(payload)
        except (KeyError, IndexError, TypeError, ValidationError) as e:
            logger.warning(f"{self.name} profile response has an unexpected shape: {e}")
            raise ProviderProfileError() from e

    async def authenticate(
        self, code: str | None, state: str | None = None
    ) -> tuple[NormalizedProfile, str]:
        """Run the callback flow up to reconciliation.

        Returns:
            The normalized profile and the provider access token.
        """
        grant = self.validate_grant(code, state)
        access_token = await self.exchange_code(grant, state)
        profile = await self.fetch_profile(access_token)
        return profile, access_token

    @abstractmethod
    def normalize(self, payload: dict[str, Any]) -> NormalizedProfile:
        """Map the provider profile payload onto a normalized profile."""

    def _require_configured(self) -> None:
        if not self.config.is_configured:
            raise ConfigurationError(f"OAuth2 provider '{self.name}' is not configured")

    @staticmethod
    def _parse_token_payload(response: Any) -> dict[str, Any]:
        # Some providers still answer with a form-encoded body
        try:
            payload = response.json()
        except ValueError:
            return dict(parse_qsl(response.text))
        return payload if isinstance(payload, dict) else {}
