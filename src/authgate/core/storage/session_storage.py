"""Where gateway sessions live between requests.

Redis when configured and reachable, process memory otherwise. Both backends expire a
session together with its TTL, so a stale id simply stops resolving.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod

from loguru import logger
from pydantic import ValidationError

from src.authgate.core.errors import SessionStoreUnavailable
from src.authgate.core.models.session import GatewaySession
from src.authgate.runtime.config.config_data import RedisConfig


class SessionStorage(ABC):
    """Keyed store of ``GatewaySession`` objects with per-entry TTL."""

    key_prefix = "session:"

    def _key(self, session_id: str) -> str:
        return f"{self.key_prefix}{session_id}"

    @abstractmethod
    async def save(self, session: GatewaySession, ttl_seconds: int) -> None:
        """Store ``session`` under its id, replacing any previous value."""

    @abstractmethod
    async def load(self, session_id: str) -> GatewaySession | None:
        """Return the stored session, or None when unknown, expired or unreadable."""

    @abstractmethod
    async def discard(self, session_id: str) -> None:
        """Forget a session; unknown ids are ignored."""

    @abstractmethod
    async def contains(self, session_id: str) -> bool:
        """Whether a live entry exists for ``session_id``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the backend answered its last operation."""


class InMemorySessionStorage(SessionStorage):
    """Per-process storage; entries are serialised so callers never share objects."""

    def __init__(self, sweep_interval_seconds: float = 60) -> None:
        # key -> (deadline, serialised session)
        self._entries: dict[str, tuple[float, str]] = {}
        self._sweep_interval = sweep_interval_seconds
        self._next_sweep = time.time() + sweep_interval_seconds

    def _live_entry(self, key: str) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        deadline, payload = entry
        if time.time() > deadline:
            del self._entries[key]
            return None
        return payload

    async def save(self, session: GatewaySession, ttl_seconds: int) -> None:
        now = time.time()
        if now >= self._next_sweep:
            self.purge_expired()
            self._next_sweep = now + self._sweep_interval
        self._entries[self._key(session.id)] = (
            now + ttl_seconds,
            session.model_dump_json(),
        )

    async def load(self, session_id: str) -> GatewaySession | None:
        key = self._key(session_id)
        payload = self._live_entry(key)
        if payload is None:
            return None
        try:
            return GatewaySession.model_validate_json(payload)
        except ValidationError:
            logger.warning(f"Dropping unreadable session entry {key}")
            del self._entries[key]
            return None

    async def discard(self, session_id: str) -> None:
        self._entries.pop(self._key(session_id), None)

    async def contains(self, session_id: str) -> bool:
        return self._live_entry(self._key(session_id)) is not None

    def purge_expired(self) -> int:
        """Drop every expired entry and return how many were removed."""
        now = time.time()
        expired = [key for key, (deadline, _) in self._entries.items() if now > deadline]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def is_available(self) -> bool:
        return True


class RedisSessionStorage(SessionStorage):
    """Sessions as JSON strings under ``session:<id>`` with a Redis-side expiry."""

    def __init__(self, redis_client):
        self._redis = redis_client
        self._available = True

    def _failed(self, operation: str, error: Exception) -> SessionStoreUnavailable:
        self._available = False
        logger.error(f"Redis {operation} failed: {error}")
        return SessionStoreUnavailable(f"Session store {operation} failed")

    async def save(self, session: GatewaySession, ttl_seconds: int) -> None:
        try:
            await self._redis.setex(
                self._key(session.id), ttl_seconds, session.model_dump_json()
            )
        except Exception as e:
            raise self._failed("write", e) from e
        self._available = True

    async def load(self, session_id: str) -> GatewaySession | None:
        try:
            payload = await self._redis.get(self._key(session_id))
        except Exception as e:
            raise self._failed("read", e) from e
        self._available = True

        if payload is None:
            return None
        if isinstance(payload, bytes):
            payload = payload.decode("utf-8")
        try:
            return GatewaySession.model_validate_json(payload)
        except ValidationError:
            logger.warning(f"Ignoring unreadable session {session_id}")
            return None

    async def discard(self, session_id: str) -> None:
        try:
            await self._redis.delete(self._key(session_id))
        except Exception as e:
            raise self._failed("delete", e) from e

    async def contains(self, session_id: str) -> bool:
        try:
            return bool(await self._redis.exists(self._key(session_id)))
        except Exception as e:
            raise self._failed("lookup", e) from e

    def is_available(self) -> bool:
        return self._available

    async def ping(self) -> bool:
        try:
            await self._redis.ping()
        except Exception as e:
            logger.debug(f"Redis ping failed: {e}")
            self._available = False
            return False
        self._available = True
        return True


async def open_session_storage(config: RedisConfig) -> SessionStorage:
    """Connect to Redis when enabled, falling back to memory when it cannot be reached."""
    if not config.enabled or not config.url:
        logger.info("Redis not configured; sessions are kept in memory")
        return InMemorySessionStorage()

    import redis.asyncio as redis

    try:
        client = redis.from_url(
            config.url,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
    except Exception as e:
        logger.warning(f"Invalid Redis URL ({e}); sessions are kept in memory")
        return InMemorySessionStorage()

    storage = RedisSessionStorage(client)
    if await storage.ping():
        logger.info("Session storage: Redis connected")
        return storage

    logger.warning("Redis unreachable; sessions are kept in memory")
    return InMemorySessionStorage()


_storage: SessionStorage | None = None


async def get_session_storage() -> SessionStorage:
    """Process-wide session storage chosen from the active configuration."""
    global _storage

    if _storage is None:
        from src.authgate.runtime.context import get_config

        _storage = await open_session_storage(get_config().redis)
    return _storage


def reset_session_storage() -> None:
    """Forget the process-wide storage so the next call re-detects it."""
    global _storage
    _storage = None
