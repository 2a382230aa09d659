from dataclasses import dataclass

from src.authgate.core.security import CredentialVerifier
from src.authgate.core.services import (
    DbSessionService,
    OAuth2ProviderClient,
    ServiceTokenService,
    SessionService,
)
from src.authgate.core.storage import SessionStorage


@dataclass
class ApplicationDependencies:
    database_service: DbSessionService
    session_storage: SessionStorage
    session_service: SessionService
    credential_verifier: CredentialVerifier
    provider_clients: dict[str, OAuth2ProviderClient]
    service_token_service: ServiceTokenService
