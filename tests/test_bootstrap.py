"""Tests for the default admin bootstrap and the CLI that wraps it."""

import pytest
from click.testing import CliRunner

from fypms import __version__
from fypms.cli.main import main
from fypms.db.engine import engine
from fypms.events.store import EventStore
from fypms.events.types import ADMIN_CREATED
from fypms.services.bootstrap import bootstrap_admin, ensure_default_admin

from conftest import LOGIN_PATHS


@pytest.mark.asyncio
async def test_creates_admin_once(db_session):
    admin = await ensure_default_admin(db_session, "Admin@FYP.com", "admin123")
    assert admin is not None
    assert admin.email == "admin@fyp.com"
    assert admin.role == "admin"
    assert admin.password_hash != "admin123"

    assert await ensure_default_admin(db_session, "admin@fyp.com", "other") is None

    events = await EventStore(db_session).read_stream(f"admin:{admin.id}")
    assert [e.type for e in events] == [ADMIN_CREATED]


@pytest.mark.asyncio
async def test_bootstrapped_admin_can_log_in(client, session_factory):
    async with session_factory() as s:
        await ensure_default_admin(s, "admin@fyp.com", "admin123")

    r = await client.post(
        LOGIN_PATHS["admin"], json={"email": "admin@fyp.com", "password": "admin123"}
    )
    assert r.status_code == 200
    assert r.json()["data"]["admin"]["email"] == "admin@fyp.com"


@pytest.mark.asyncio
async def test_bootstrap_never_raises():
    # The process-wide database is an empty in-memory SQLite: no tables.
    try:
        await bootstrap_admin()
    finally:
        await engine.dispose()


def test_cli_version():
    result = CliRunner().invoke(main, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_cli_init_admin_reports_database_errors():
    result = CliRunner().invoke(main, ["init-admin", "--email", "x@y.com"])
    assert result.exit_code == 1
