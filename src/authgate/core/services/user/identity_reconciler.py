from typing import Any

from loguru import logger

from src.authgate.core.services.oauth.base import NormalizedProfile
from src.authgate.entities.core.user.entity import User
from src.authgate.entities.core.user.repository import UserRepository

# Providers not listed here match accounts by e-mail
MATCH_FIELDS: dict[str, str] = {"github": "github_id"}


class IdentityReconciler:
    """Finds or creates the local account behind an OAuth2 sign-in.

    GitHub accounts are matched by GitHub user id, every other provider by e-mail.
    A matched account is only written when the provider token changed.
    """

    def __init__(self, users: UserRepository):
        self._users = users

    def reconcile(
        self, provider: str, profile: NormalizedProfile, access_token: str
    ) -> User:
        """Return the account for ``profile``, creating or refreshing it as needed.

        Args:
            provider: Provider name (``github``, ``google``, ...)
            profile: Normalized provider profile
            access_token: Token just obtained from the provider

        Returns:
            The stored user after the match-or-create step.
        """
        match_field = MATCH_FIELDS.get(provider, "email")
        match_value = profile.email if match_field == "email" else profile.provider_id
        existing = None
        if match_value is not None:
            existing = self._users.find_one({match_field: match_value})

        if existing is None:
            if provider == "github":
                logger.info("create new git user")
            else:
                logger.info(f"create new {provider} user")
            return self._users.insert(self._new_user(provider, profile, access_token))

        if existing.provider_token(provider) == access_token:
            return existing

        if provider == "github":
            logger.info("update git user")
        return self._users.update(
            existing.id,
            {
                "username": profile.display_name,
                f"{provider}_token": access_token,
                "picture_url": profile.picture_url,
            },
        )

    @staticmethod
    def _new_user(provider: str, profile: NormalizedProfile, access_token: str) -> User:
        fields: dict[str, Any] = {
            "username": profile.display_name,
            "email": profile.email,
            "picture_url": profile.picture_url,
            f"{provider}_token": access_token,
        }
        if f"{provider}_id" in User.model_fields:
            fields[f"{provider}_id"] = profile.provider_id
        return User(**fields)
