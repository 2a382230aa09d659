"""Local account endpoints and the service account token accessor."""

from typing import Any

from fastapi import APIRouter, Depends, Response
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, ConfigDict, Field

from src.authgate.api.http.deps import (
    get_account_service,
    get_gateway_session,
    get_service_token_service,
    get_session_service,
    write_session,
)
from src.authgate.core.models.session import GatewaySession
from src.authgate.core.services import (
    LocalAccountService,
    ServiceTokenService,
    SessionService,
)

router = APIRouter(tags=["auth"])


class CredentialsRequest(BaseModel):
    username: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1)


class SessionUserResponse(BaseModel):
    """Session id and display name of the signed-in user."""

    model_config = ConfigDict(populate_by_name=True)

    sid: str
    user_name: str = Field(serialization_alias="userName")


@router.get("/whoami")
async def whoami(
    session: GatewaySession = Depends(get_gateway_session),
    accounts: LocalAccountService = Depends(get_account_service),
) -> dict[str, Any]:
    user = accounts.whoami(session.uid)
    return user.public_view()


@router.post("/signup", response_model=SessionUserResponse)
async def signup(
    body: CredentialsRequest,
    response: Response,
    session: GatewaySession = Depends(get_gateway_session),
    accounts: LocalAccountService = Depends(get_account_service),
    session_service: SessionService = Depends(get_session_service),
) -> SessionUserResponse:
    user = accounts.signup(body.username, body.password)
    await session_service.attach_user(session, user)
    write_session(response, session)
    return SessionUserResponse(sid=session.id, user_name=user.username)


@router.post("/login", response_model=SessionUserResponse)
async def login(
    body: CredentialsRequest,
    response: Response,
    session: GatewaySession = Depends(get_gateway_session),
    accounts: LocalAccountService = Depends(get_account_service),
    session_service: SessionService = Depends(get_session_service),
) -> SessionUserResponse:
    user = accounts.login(body.username, body.password)
    await session_service.attach_user(session, user)
    write_session(response, session)
    return SessionUserResponse(sid=session.id, user_name=user.username)


@router.post("/logout")
async def logout(
    response: Response,
    session: GatewaySession = Depends(get_gateway_session),
    session_service: SessionService = Depends(get_session_service),
) -> dict[str, bool]:
    await session_service.logout(session)
    write_session(response, session)
    return {"success": True}


@router.get("/access", response_class=PlainTextResponse)
async def access_token(
    token_service: ServiceTokenService = Depends(get_service_token_service),
) -> str:
    """Bearer token for the Google API, minted on demand."""
    return await token_service.get_or_mint()
