"""Health check endpoints router for monitoring service availability."""

from typing import Any

from fastapi import APIRouter, Request
from starlette.responses import JSONResponse

from src.authgate.api.http.app_data import ApplicationDependencies

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health() -> dict[str, str]:
    """Liveness probe; does not check dependencies."""
    return {"status": "healthy", "service": "authgate"}


@router.get("/ready", response_model=None)
async def readiness(request: Request) -> dict[str, Any] | JSONResponse:
    """Readiness probe: 200 when the database answers, 503 otherwise.

    Session storage is reported but never fails the check since it falls back to
    memory.
    """
    app_deps: ApplicationDependencies = request.app.state.app_dependencies

    db_healthy = app_deps.database_service.health_check()
    checks = {
        "database": {"status": "healthy" if db_healthy else "unhealthy"},
        "session_storage": {
            "status": "healthy" if app_deps.session_storage.is_available() else "degraded",
            "type": type(app_deps.session_storage).__name__,
        },
        "oauth_providers": {"configured": sorted(app_deps.provider_clients)},
    }
    body = {"status": "ready" if db_healthy else "not_ready", "checks": checks}
    if not db_healthy:
        return JSONResponse(status_code=503, content=body)
    return body
