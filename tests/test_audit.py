"""Tests for reading the audit log: EventStore.read_stream and `fypms audit`."""

import asyncio

import pytest
from click.testing import CliRunner
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from fypms.cli.main import main
from fypms.db import engine as db_engine
from fypms.db.models import Base
from fypms.events.store import EventStore
from fypms.events.types import LOGIN, LOGOUT


@pytest.mark.asyncio
async def test_read_stream_pages_in_append_order(db_session):
    store = EventStore(db_session)
    for n in range(5):
        await store.append("student:abc", LOGIN, {"n": n})
    await store.append("student:other", LOGIN, {"n": 99})
    await db_session.commit()

    first = await store.read_stream("student:abc", limit=3)
    assert [e.data["n"] for e in first] == [0, 1, 2]

    rest = await store.read_stream("student:abc", after_id=first[-1].id)
    assert [e.data["n"] for e in rest] == [3, 4]


@pytest.fixture()
def audit_db(tmp_path, monkeypatch):
    """A seeded SQLite file the CLI reads through a patched session factory."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'audit.db'}", poolclass=NullPool
    )
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def seed():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        async with factory() as db:
            store = EventStore(db)
            await store.append("student:abc", LOGIN, {"email": "a@b.com"})
            await store.append(
                "student:abc",
                LOGOUT,
                {},
                {"actor_id": "abc", "actor_role": "student"},
            )
            await store.append("student:other", LOGIN, {"email": "x@y.com"})
            await db.commit()
        await engine.dispose()

    asyncio.run(seed())
    monkeypatch.setattr(db_engine, "async_session_factory", factory)
    return factory


def test_cli_audit_prints_one_stream(audit_db):
    result = CliRunner().invoke(main, ["audit", "student:abc"])
    assert result.exit_code == 0, result.output

    lines = result.output.strip().splitlines()
    assert len(lines) == 2
    assert LOGIN in lines[0] and '{"email": "a@b.com"}' in lines[0]
    assert LOGOUT in lines[1] and "student" in lines[1]
    assert "x@y.com" not in result.output


def test_cli_audit_empty_stream(audit_db):
    result = CliRunner().invoke(main, ["audit", "project:nope"])
    assert result.exit_code == 0
    assert "No events for project:nope" in result.output


def test_cli_audit_reports_database_errors():
    # The default in-memory database has no tables
    result = CliRunner().invoke(main, ["audit", "student:abc"])
    assert result.exit_code == 1
    assert "could not read audit log" in result.output
