"""Single-slot cache for the Google service-account bearer token.

``read`` only returns a record that stays valid past the refresh margin, so a caller
that gets ``None`` simply mints a new token. ``replace`` discards whatever was stored
before; the cache never holds more than one record.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from contextlib import AbstractContextManager, contextmanager

from loguru import logger
from sqlmodel import Session

from src.authgate.entities.core.service_token import (
    ServiceTokenRecord,
    ServiceTokenRepository,
)

DEFAULT_REFRESH_MARGIN_SECONDS = 60


class ServiceTokenCache(ABC):
    """Abstract interface for service token cache backends."""

    def __init__(
        self,
        refresh_margin_seconds: int = DEFAULT_REFRESH_MARGIN_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._margin = refresh_margin_seconds
        self._clock = clock

    def read(self) -> ServiceTokenRecord | None:
        """Return the cached record if it expires after ``now + margin``."""
        record = self._load()
        if record is None:
            return None
        if not record.is_fresh(self._clock(), self._margin):
            logger.debug("Cached service token is expiring; a new one is required")
            return None
        return record

    @abstractmethod
    def replace(self, record: ServiceTokenRecord) -> None:
        """Atomically make ``record`` the only cached record."""

    @abstractmethod
    def _load(self) -> ServiceTokenRecord | None:
        """Return the stored record regardless of expiry."""


class InMemoryServiceTokenCache(ServiceTokenCache):
    """Process-local cache, used in tests and single-process deployments."""

    def __init__(
        self,
        refresh_margin_seconds: int = DEFAULT_REFRESH_MARGIN_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(refresh_margin_seconds, clock)
        self._record: ServiceTokenRecord | None = None

    def replace(self, record: ServiceTokenRecord) -> None:
        self._record = record.model_copy()

    def _load(self) -> ServiceTokenRecord | None:
        return self._record


class DatabaseServiceTokenCache(ServiceTokenCache):
    """Cache persisted in the ``servicetokentable`` table."""

    def __init__(
        self,
        session_factory: Callable[[], AbstractContextManager[Session]],
        refresh_margin_seconds: int = DEFAULT_REFRESH_MARGIN_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(refresh_margin_seconds, clock)
        self._session_factory = session_factory

    def replace(self, record: ServiceTokenRecord) -> None:
        with self._session_factory() as session:
            ServiceTokenRepository(session).replace(record)

    def _load(self) -> ServiceTokenRecord | None:
        with self._session_factory() as session:
            return ServiceTokenRepository(session).latest()


def single_session_factory(
    session: Session,
) -> Callable[[], AbstractContextManager[Session]]:
    """Adapt one open session to the factory interface (tests, scripts)."""

    @contextmanager
    def _factory() -> Iterator[Session]:
        yield session

    return _factory
