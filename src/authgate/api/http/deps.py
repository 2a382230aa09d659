"""FastAPI dependency implementations."""

from __future__ import annotations

from collections.abc import Iterator

from fastapi import Depends, Request, Response
from sqlmodel import Session

from src.authgate.api.http.app_data import ApplicationDependencies
from src.authgate.core.models.session import GatewaySession
from src.authgate.core.services import (
    IdentityReconciler,
    LocalAccountService,
    OAuth2ProviderClient,
    ServiceTokenService,
    SessionService,
    get_provider_client,
)
from src.authgate.entities.core.user import UserRepository
from src.authgate.runtime.context import get_config


def get_app_dependencies(request: Request) -> ApplicationDependencies:
    return request.app.state.app_dependencies


def get_db_session(request: Request) -> Iterator[Session]:
    """Yield a database session scoped to the request."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    db = app_deps.database_service.get_session()
    try:
        yield db
    finally:
        db.close()


def get_user_repository(db: Session = Depends(get_db_session)) -> UserRepository:
    return UserRepository(db)


def get_session_service(request: Request) -> SessionService:
    """Get the session service instance."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    return app_deps.session_service


def get_service_token_service(request: Request) -> ServiceTokenService:
    """Get the service account token service instance."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    return app_deps.service_token_service


def get_provider(provider: str, request: Request) -> OAuth2ProviderClient:
    """Resolve the ``{provider}`` path parameter to its client."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    return get_provider_client(app_deps.provider_clients, provider)


def get_account_service(
    request: Request, users: UserRepository = Depends(get_user_repository)
) -> LocalAccountService:
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    return LocalAccountService(users, app_deps.credential_verifier)


def get_identity_reconciler(
    users: UserRepository = Depends(get_user_repository),
) -> IdentityReconciler:
    return IdentityReconciler(users)


async def get_gateway_session(
    request: Request,
    session_service: SessionService = Depends(get_session_service),
) -> GatewaySession:
    """Load the caller's session (header first, then cookie) or start a new one."""
    app_config = get_config().app
    session_id = request.headers.get(app_config.session_header_name) or request.cookies.get(
        app_config.session_cookie_name
    )
    session = await session_service.load_or_create(session_id)
    request.state.session_id = session.id
    return session


def write_session(response: Response, session: GatewaySession) -> None:
    """Send the session id back as both cookie and header."""
    app_config = get_config().app
    response.headers[app_config.session_header_name] = session.id
    response.set_cookie(
        key=app_config.session_cookie_name,
        value=session.id,
        max_age=app_config.session_max_age,
        httponly=True,
        secure=app_config.environment == "production",
        samesite="lax",
        path="/",
    )
