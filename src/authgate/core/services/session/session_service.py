import time

from src.authgate.core.models.session import GatewaySession
from src.authgate.core.security import generate_session_id
from src.authgate.core.storage.session_storage import SessionStorage
from src.authgate.entities.core.user.entity import User


class SessionService:
    """Service for managing gateway sessions."""

    def __init__(self, session_storage: SessionStorage, max_age_seconds: int) -> None:
        self._storage = session_storage
        self._max_age = max_age_seconds

    async def get(self, session_id: str) -> GatewaySession | None:
        session = await self._storage.load(session_id)
        if session is None or session.is_expired():
            return None
        return session

    async def load_or_create(self, session_id: str | None) -> GatewaySession:
        """Return the live session for ``session_id`` or start a new anonymous one.

        A new session is not stored until ``attach_user`` or ``logout`` saves it.
        """
        if session_id:
            session = await self.get(session_id)
            if session is not None:
                return session
        return GatewaySession.create(generate_session_id(), self._max_age)

    async def save(self, session: GatewaySession) -> None:
        ttl = max(int(session.expires_at - time.time()), 1)
        await self._storage.save(session, ttl)

    async def attach_user(
        self,
        session: GatewaySession,
        user: User,
        provider: str | None = None,
        access_token: str | None = None,
    ) -> GatewaySession:
        """Sign ``user`` into ``session`` and remember the provider token, if any."""
        session.uid = user.id
        if provider and access_token:
            session.provider_tokens[provider] = access_token
        await self.save(session)
        return session

    async def logout(self, session: GatewaySession) -> GatewaySession:
        session.uid = None
        session.provider_tokens = {}
        await self.save(session)
        return session
