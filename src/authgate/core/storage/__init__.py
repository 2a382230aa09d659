"""Storage backends for sessions and the service token cache."""

from .service_token_cache import (
    DatabaseServiceTokenCache,
    InMemoryServiceTokenCache,
    ServiceTokenCache,
)
from .session_storage import (
    InMemorySessionStorage,
    RedisSessionStorage,
    SessionStorage,
    get_session_storage,
    open_session_storage,
)

__all__ = [
    "SessionStorage",
    "InMemorySessionStorage",
    "RedisSessionStorage",
    "get_session_storage",
    "open_session_storage",
    "ServiceTokenCache",
    "InMemoryServiceTokenCache",
    "DatabaseServiceTokenCache",
]
