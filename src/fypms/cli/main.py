"""fypms CLI — run the server, seed the admin account, read the audit log.

Usage:
    fypms serve                      # Run the API with uvicorn
    fypms serve --reload             # ... with auto-reload for development
    fypms init-admin                 # Create the default admin if missing
    fypms init-admin --email a@b.c   # ... with a different email
    fypms audit student:<uuid>       # Print one entity's audit trail
"""

from __future__ import annotations

import asyncio
import json
import sys
from typing import Optional

import click

from fypms import __version__
from fypms.config import settings


@click.group()
@click.version_option(version=__version__, prog_name="fypms")
def main():
    """FYPMS — final-year project management backend."""


@main.command()
@click.option("--host", default=None, help="Bind address (default: FYPMS_HOST)")
@click.option("--port", "-p", type=int, default=None, help="Port (default: FYPMS_PORT)")
@click.option("--reload", is_flag=True, help="Reload on code changes")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the API server."""
    import uvicorn

    uvicorn.run(
        "fypms.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


@main.command("init-admin")
@click.option("--email", default=None, help="Admin email (default: FYPMS_DEFAULT_ADMIN_EMAIL)")
@click.option(
    "--password",
    default=None,
    help="Admin password (default: FYPMS_DEFAULT_ADMIN_PASSWORD)",
)
def init_admin(email: Optional[str], password: Optional[str]):
    """Create the admin account if it does not exist yet."""
    from fypms.db.engine import async_session_factory, engine
    from fypms.services.bootstrap import ensure_default_admin

    async def _run():
        try:
            async with async_session_factory() as db:
                return await ensure_default_admin(
                    db,
                    email or settings.default_admin_email,
                    password or settings.default_admin_password,
                )
        finally:
            await engine.dispose()

    try:
        admin = asyncio.run(_run())
    except Exception as e:
        click.secho(f"Error: could not create admin: {e}", fg="red", err=True)
        sys.exit(1)

    if admin:
        click.secho(f"Created admin {admin.email}", fg="green")
    else:
        click.echo(f"Admin {email or settings.default_admin_email} already exists")


@main.command()
@click.argument("stream_id")
@click.option("--after", type=int, default=0, help="Only events after this id")
@click.option("--limit", "-n", type=int, default=100, help="Max events to print")
def audit(stream_id: str, after: int, limit: int):
    """Print one entity's audit trail, e.g. `fypms audit student:<uuid>`."""
    from fypms.db.engine import async_session_factory, engine
    from fypms.events.store import EventStore

    async def _run():
        try:
            async with async_session_factory() as db:
                return await EventStore(db).read_stream(stream_id, after, limit)
        finally:
            await engine.dispose()

    try:
        events = asyncio.run(_run())
    except Exception as e:
        click.secho(f"Error: could not read audit log: {e}", fg="red", err=True)
        sys.exit(1)

    if not events:
        click.echo(f"No events for {stream_id}")
        return
    for event in events:
        actor = event.meta.get("actor_role", "-")
        click.echo(
            f"{event.id:>6}  {event.created_at:%Y-%m-%d %H:%M:%S}  "
            f"{event.type:<26} {actor:<10} {json.dumps(event.data, sort_keys=True)}"
        )
