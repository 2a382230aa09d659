"""Operational commands: database provisioning, service token, server."""

import asyncio

import typer
from rich.console import Console
from rich.panel import Panel

from src.authgate.core.errors import GatewayError, MintError

console = Console()

app = typer.Typer(
    help="🔐 authgate CLI - session and identity gateway",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


@app.command(name="init-db")
def init_db() -> None:
    """Create the user and service token tables and their indexes."""
    from src.authgate.runtime.init_db import init_db as create_tables

    create_tables()
    console.print("[green]✅ Database tables created[/green]")


@app.command()
def token(
    force: bool = typer.Option(
        False, "--force", help="Mint a new token even if the cached one is fresh"
    ),
) -> None:
    """Print the Google service account bearer token."""
    from src.authgate.core.services import DbSessionService, ServiceTokenService
    from src.authgate.core.storage import DatabaseServiceTokenCache
    from src.authgate.runtime.context import get_config

    config = get_config()
    database_service = DbSessionService()
    database_service.create_all()
    service = ServiceTokenService(
        config.service_account,
        DatabaseServiceTokenCache(
            database_service.session_scope,
            refresh_margin_seconds=config.service_account.refresh_margin_seconds,
        ),
    )

    try:
        value = asyncio.run(service.mint() if force else service.get_or_mint())
    except MintError as e:
        console.print(f"[red]❌ {e.detail}[/red]")
        console.print(f"[dim]Token endpoint response: {e.response}[/dim]")
        raise typer.Exit(code=1) from e
    except GatewayError as e:
        console.print(f"[red]❌ {e.detail}[/red]")
        raise typer.Exit(code=1) from e

    console.print(value)


@app.command()
def serve(
    host: str | None = typer.Option(None, help="Host to bind (defaults to app.host)"),
    port: int | None = typer.Option(None, help="Port to bind (defaults to app.port)"),
    reload: bool = typer.Option(False, help="Enable auto-reload on code changes"),
) -> None:
    """🚀 Start the gateway HTTP server."""
    import uvicorn

    from src.authgate.runtime.context import get_config

    app_config = get_config().app
    bind_host = host or app_config.host
    bind_port = port or app_config.port

    console.print(
        Panel.fit(
            f"[bold green]Starting authgate on http://{bind_host}:{bind_port}[/bold green]",
            border_style="green",
        )
    )
    uvicorn.run(
        "src.authgate.api.http.app:get_app",
        factory=True,
        host=bind_host,
        port=bind_port,
        reload=reload,
        access_log=False,
    )
