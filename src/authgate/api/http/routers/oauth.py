"""OAuth2 sign-in endpoints, one pair per configured provider."""

from urllib.parse import quote

from fastapi import APIRouter, Depends, status
from fastapi.responses import RedirectResponse
from loguru import logger

from src.authgate.api.http.deps import (
    get_gateway_session,
    get_identity_reconciler,
    get_provider,
    get_session_service,
    write_session,
)
from src.authgate.core.models.session import GatewaySession
from src.authgate.core.security import generate_state
from src.authgate.core.services import (
    IdentityReconciler,
    OAuth2ProviderClient,
    SessionService,
)
from src.authgate.runtime.context import get_config

router = APIRouter(tags=["oauth"])


@router.get("/{provider}/login")
async def provider_login(
    client: OAuth2ProviderClient = Depends(get_provider),
) -> RedirectResponse:
    """Send the browser to the provider consent page."""
    return RedirectResponse(
        url=client.authorization_url(generate_state()),
        status_code=status.HTTP_302_FOUND,
    )


@router.get("/{provider}/callback")
async def provider_callback(
    code: str | None = None,
    state: str | None = None,
    client: OAuth2ProviderClient = Depends(get_provider),
    session: GatewaySession = Depends(get_gateway_session),
    reconciler: IdentityReconciler = Depends(get_identity_reconciler),
    session_service: SessionService = Depends(get_session_service),
) -> RedirectResponse:
    """Finish the sign-in: exchange the code, reconcile the account, redirect."""
    profile, access_token = await client.authenticate(code, state)
    user = reconciler.reconcile(client.name, profile, access_token)
    await session_service.attach_user(session, user, client.name, access_token)
    logger.info(f"{client.name} sign-in attached user {user.id} to session")

    base = get_config().app.redirect_base_url.rstrip("/")
    response = RedirectResponse(
        url=f"{base}/{session.id}/{quote(user.username, safe='')}",
        status_code=status.HTTP_303_SEE_OTHER,
    )
    write_session(response, session)
    return response
