"""FastAPI application factory and setup."""

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from loguru import logger
from starlette.responses import JSONResponse

from src.authgate.api.http.app_data import ApplicationDependencies
from src.authgate.api.http.routers.auth import router as auth_router
from src.authgate.api.http.routers.health import router as health_router
from src.authgate.api.http.routers.oauth import router as oauth_router
from src.authgate.api.utils.app_startup import configure_logging
from src.authgate.core.errors import GatewayError, MintError
from src.authgate.core.security import CredentialVerifier
from src.authgate.core.services import (
    DbSessionService,
    ServiceTokenService,
    SessionService,
    build_provider_clients,
)
from src.authgate.core.storage import DatabaseServiceTokenCache, get_session_storage
from src.authgate.runtime.context import get_config


async def build_dependencies() -> ApplicationDependencies:
    """Wire the core services from the active configuration."""
    config = get_config()

    database_service = DbSessionService()
    database_service.create_all()
    session_storage = await get_session_storage()
    token_cache = DatabaseServiceTokenCache(
        database_service.session_scope,
        refresh_margin_seconds=config.service_account.refresh_margin_seconds,
    )

    return ApplicationDependencies(
        database_service=database_service,
        session_storage=session_storage,
        session_service=SessionService(session_storage, config.app.session_max_age),
        credential_verifier=CredentialVerifier(),
        provider_clients=build_provider_clients(config.oauth),
        service_token_service=ServiceTokenService(config.service_account, token_cache),
    )


def create_app(dependencies: ApplicationDependencies | None = None) -> FastAPI:
    """Create the application.

    Args:
        dependencies: Pre-built services (tests); built from config on startup otherwise.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        config = get_config()
        logger.info("Starting up application in {} environment", config.app.environment)
        app.state.app_dependencies = dependencies or await build_dependencies()
        if not app.state.app_dependencies.provider_clients:
            logger.warning("No OAuth2 providers configured; only local sign-in is available")
        try:
            yield
        finally:
            logger.info("Shutting down application")

    production = get_config().app.environment == "production"
    app = FastAPI(
        title="authgate",
        lifespan=lifespan,
        docs_url=None if production else "/docs",
        redoc_url=None if production else "/redoc",
    )

    @app.exception_handler(GatewayError)
    async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
        request_id = getattr(request.state, "request_id", "-")
        if isinstance(exc, MintError):
            logger.bind(status_code=exc.status_code).error("request.mint_error")
        else:
            logger.bind(
                status_code=exc.status_code, error_type=type(exc).__name__
            ).info(f"request.rejected: {exc.detail}")
        content = {**exc.to_dict(), "request_id": request_id}
        return JSONResponse(
            status_code=exc.status_code,
            content=content,
            headers={"X-Request-ID": request_id},
        )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        base_ctx = {
            "request_id": request_id,
            "method": request.method,
            # query strings carry authorization codes; never logged
            "path": request.url.path,
            "client_ip": request.client.host if request.client else "unknown",
        }

        start = time.perf_counter()
        with logger.contextualize(**base_ctx):
            try:
                logger.info("request.start")
                response = await call_next(request)

                duration_ms = (time.perf_counter() - start) * 1000
                logger.bind(
                    status_code=response.status_code,
                    duration_ms=round(duration_ms, 1),
                ).info("request.end")

                response.headers.setdefault("X-Request-ID", request_id)
                return response

            except Exception as exc:
                duration_ms = (time.perf_counter() - start) * 1000
                logger.bind(
                    status_code=500,
                    duration_ms=round(duration_ms, 1),
                    error_type=type(exc).__name__,
                ).exception("request.error")
                return JSONResponse(
                    status_code=500,
                    content={"detail": "Internal Server Error", "request_id": request_id},
                    headers={"X-Request-ID": request_id},
                )

    app.include_router(health_router)
    app.include_router(auth_router, prefix="/auth")
    app.include_router(oauth_router, prefix="/auth")
    return app


def get_app() -> FastAPI:
    """Application entry point for uvicorn (``--factory``)."""
    configure_logging()
    return create_app()


if __name__ == "__main__":
    import uvicorn

    config = get_config()
    uvicorn.run(
        get_app(),
        host=config.app.host,
        port=config.app.port,
        access_log=False,  # We handle access logging in middleware
    )
