"""Core services exports."""

from .database.db_session import DbSessionService
from .jwt.jwt_gen import AssertionGenerator
from .oauth import (
    NormalizedProfile,
    OAuth2ProviderClient,
    build_provider_clients,
    get_provider_client,
)
from .service_token_service import ServiceTokenService
from .session.session_service import SessionService
from .user.account_service import LocalAccountService
from .user.identity_reconciler import IdentityReconciler

__all__ = [
    "DbSessionService",
    "AssertionGenerator",
    "NormalizedProfile",
    "OAuth2ProviderClient",
    "build_provider_clients",
    "get_provider_client",
    "ServiceTokenService",
    "SessionService",
    "LocalAccountService",
    "IdentityReconciler",
]
