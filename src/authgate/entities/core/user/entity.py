"""User domain entity."""

from typing import Any

from pydantic import Field

from src.authgate.entities.core._base import Entity

PROVIDERS = ("github", "google", "facebook", "linkedin")


class User(Entity):
    """One local account.

    ``credential`` is present only for locally-registered users. Each OAuth2 provider
    contributes a ``<provider>_id`` (LinkedIn ids are not stored) and the latest
    ``<provider>_token`` obtained for this account.
    """

    username: str = Field(description="Display name, derived per provider for OAuth users")
    email: str | None = Field(default=None, description="Cross-provider match key")
    credential: str | None = Field(
        default=None, description="Opaque password credential (local accounts only)"
    )
    github_id: str | None = None
    github_token: str | None = None
    google_id: str | None = None
    google_token: str | None = None
    facebook_id: str | None = None
    facebook_token: str | None = None
    linkedin_token: str | None = None
    picture_url: str | None = Field(default=None, description="Avatar URL")

    def provider_id(self, provider: str) -> str | None:
        return getattr(self, f"{provider}_id", None)

    def provider_token(self, provider: str) -> str | None:
        return getattr(self, f"{provider}_token", None)

    @property
    def is_local(self) -> bool:
        return self.credential is not None

    def public_view(self) -> dict[str, Any]:
        """Serialisable view without the credential."""
        return self.model_dump(mode="json", exclude={"credential"})
