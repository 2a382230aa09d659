"""GitHub, Google, Facebook and LinkedIn login clients."""

from typing import Any

from loguru import logger

from src.authgate.core.errors import UnknownProvider
from src.authgate.core.services.oauth.base import NormalizedProfile, OAuth2ProviderClient
from src.authgate.runtime.config.config_data import OAuth2Config


def _optional_str(value: Any) -> str | None:
    return None if value is None else str(value)


class GitHubClient(OAuth2ProviderClient):
    """GitHub profiles carry no e-mail; the numeric user id identifies the account."""

    name = "github"
    default_scopes = ("user",)

    def normalize(self, payload: dict[str, Any]) -> NormalizedProfile:
        return NormalizedProfile(
            provider_id=str(payload["id"]),
            display_name=payload["login"],
            picture_url=payload.get("avatar_url"),
        )


class GoogleClient(OAuth2ProviderClient):
    name = "google"
    default_scopes = ("email",)
    extra_authorization_params = {"access_type": "offline"}

    def normalize(self, payload: dict[str, Any]) -> NormalizedProfile:
        emails = payload.get("emails") or []
        image = payload.get("image") or {}
        return NormalizedProfile(
            provider_id=str(payload["id"]),
            display_name=payload["displayName"],
            email=emails[0]["value"] if emails else None,
            picture_url=image.get("url"),
        )


class FacebookClient(OAuth2ProviderClient):
    name = "facebook"
    default_scopes = ("email",)

    def normalize(self, payload: dict[str, Any]) -> NormalizedProfile:
        picture = (payload.get("picture") or {}).get("data") or {}
        return NormalizedProfile(
            provider_id=str(payload["id"]),
            display_name=payload["name"],
            email=payload.get("email"),
            picture_url=picture.get("url"),
        )


class LinkedInClient(OAuth2ProviderClient):
    """LinkedIn needs the ``state`` echoed back; its member id is not kept."""

    name = "linkedin"
    requires_state = True
    default_scopes = ("r_basicprofile", "r_emailaddress")

    def normalize(self, payload: dict[str, Any]) -> NormalizedProfile:
        return NormalizedProfile(
            provider_id=_optional_str(payload.get("id")),
            display_name=f"{payload['firstName']}_{payload['lastName']}",
            email=payload.get("emailAddress"),
            picture_url=payload.get("pictureUrl"),
        )


PROVIDER_CLIENTS: dict[str, type[OAuth2ProviderClient]] = {
    cls.name: cls for cls in (GitHubClient, GoogleClient, FacebookClient, LinkedInClient)
}


def build_provider_clients(config: OAuth2Config) -> dict[str, OAuth2ProviderClient]:
    """Instantiate a client for every configured provider with a known implementation."""
    clients: dict[str, OAuth2ProviderClient] = {}
    for name, provider_config in config.providers.items():
        client_class = PROVIDER_CLIENTS.get(name)
        if client_class is None:
            logger.warning(f"No OAuth2 client implementation for provider '{name}'")
            continue
        clients[name] = client_class(provider_config)
    return clients


def get_provider_client(
    clients: dict[str, OAuth2ProviderClient], name: str
) -> OAuth2ProviderClient:
    try:
        return clients[name]
    except KeyError:
        raise UnknownProvider(f"Unknown provider: {name}") from None
