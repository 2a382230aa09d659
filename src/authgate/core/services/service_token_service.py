"""Google service-account bearer token: JWT-bearer grant plus single-slot cache."""

import asyncio

import httpx
from loguru import logger

from src.authgate.core.errors import MintError
from src.authgate.core.services.jwt.jwt_gen import AssertionGenerator
from src.authgate.core.storage.service_token_cache import ServiceTokenCache
from src.authgate.entities.core.service_token import ServiceTokenRecord
from src.authgate.runtime.config.config_data import (
    JWT_BEARER_GRANT_TYPE,
    ServiceAccountConfig,
)


class ServiceTokenService:
    """Mints service-account bearer tokens and serves them from the cache.

    ``get_or_mint`` is the entry point for callers; ``mint`` always talks to the token
    endpoint and replaces the cached record on success only.
    """

    def __init__(
        self,
        config: ServiceAccountConfig,
        cache: ServiceTokenCache,
        generator: AssertionGenerator | None = None,
    ):
        self.config = config
        self.cache = cache
        self.generator = generator or AssertionGenerator(config)

    async def mint(self) -> str:
        """Exchange a freshly signed assertion for a bearer token.

        Returns:
            The token as ``"<token_type> <access_token>"``.

        Raises:
            MintError: The token endpoint failed or answered without a token. The
                cache is left as it was.
            ConfigurationError: The service account is not configured.
        """
        assertion, claims = self.generator.generate()
        form = {"grant_type": JWT_BEARER_GRANT_TYPE, "assertion": assertion}

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(self.config.token_endpoint, data=form)
        except httpx.HTTPError as e:
            logger.error(f"Service token request failed: {e}")
            raise MintError(response=str(e), assertion=assertion) from e

        try:
            payload = response.json()
        except ValueError:
            payload = response.text

        token_type = payload.get("token_type") if isinstance(payload, dict) else None
        access_token = (
            payload.get("access_token") if isinstance(payload, dict) else None
        )
        if not token_type or not access_token:
            logger.error(
                f"Service token endpoint returned no token (status {response.status_code})"
            )
            raise MintError(response=payload, assertion=assertion)

        token = f"{token_type} {access_token}"
        # cache backends may block on database I/O
        await asyncio.to_thread(
            self.cache.replace,
            ServiceTokenRecord(
                access_token=token,
                issued_at=claims["iat"],
                expires_at=claims["exp"],
            ),
        )
        logger.info(f"Minted service account token valid until {claims['exp']}")
        return token

    async def get_or_mint(self) -> str:
        """Return the cached token while fresh, otherwise mint a new one."""
        record = await asyncio.to_thread(self.cache.read)
        if record is not None:
            logger.debug("Serving cached service account token")
            return record.access_token
        return await self.mint()
