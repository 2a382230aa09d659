"""OAuth2 login provider clients."""

from .base import NormalizedProfile, OAuth2ProviderClient
from .providers import (
    PROVIDER_CLIENTS,
    FacebookClient,
    GitHubClient,
    GoogleClient,
    LinkedInClient,
    build_provider_clients,
    get_provider_client,
)

__all__ = [
    "NormalizedProfile",
    "OAuth2ProviderClient",
    "PROVIDER_CLIENTS",
    "GitHubClient",
    "GoogleClient",
    "FacebookClient",
    "LinkedInClient",
    "build_provider_clients",
    "get_provider_client",
]
