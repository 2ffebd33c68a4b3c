from __future__ import annotations

import json
from typing import Optional

import typer
import uvicorn

from shared.logging import setup_logging

from .app import create_app
from .config import get_settings
from .db import run_in_transaction
from .errors import IdentityError
from .repository.memory import InMemoryContactStore
from .repository.postgres import PostgresContactStore
from .services.resolver import IdentityResolver

cli = typer.Typer(help="Identity Service entrypoint")


@cli.command()
def serve(host: str = "0.0.0.0", port: int = 3000) -> None:
    """Start the Identity Service using uvicorn."""

    app = create_app()
    uvicorn.run(app, host=host, port=port, log_level="info", lifespan="on")


@cli.command()
def identify(
    email: Optional[str] = typer.Option(None, "--email", help="Email address to resolve"),
    phone: Optional[str] = typer.Option(None, "--phone", help="Phone number to resolve"),
) -> None:
    """Resolve one (email, phone) fact against the configured store and print the summary.

    With IDENTITY_STORE=memory this is a dry run against an empty store: nothing
    persists between invocations, so the fact always comes back as a new primary.
    """

    settings = get_settings()
    setup_logging(settings.log_level, settings.service_name)
    try:
        if settings.store_backend == "memory":
            summary = IdentityResolver(InMemoryContactStore()).identify(email, phone)
        else:
            IdentityResolver.validate(email, phone)
            summary = run_in_transaction(
                lambda conn: IdentityResolver(PostgresContactStore(conn)).identify(email, phone),
                settings.database_url,
            )
    except IdentityError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(json.dumps({"contact": summary.model_dump(by_alias=True)}, indent=2))


@cli.command("init-db")
def init_db() -> None:
    """Create the contacts table and its indexes if they are missing."""

    settings = get_settings()
    setup_logging(settings.log_level, settings.service_name)
    try:
        run_in_transaction(lambda conn: PostgresContactStore(conn).ensure_schema(), settings.database_url)
    except IdentityError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    typer.echo("contacts schema ready")


if __name__ == "__main__":
    cli()
