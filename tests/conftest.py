"""Test fixtures — a fresh SQLite database per test, real auth pipeline.

Learn: Testing pattern for async SQLAlchemy + FastAPI:

1. Env vars are set *before* fypms is imported, so settings pick up
   test secrets, a throwaway database URL and the minimum bcrypt cost.
2. Each test gets its own SQLite file (aiosqlite) with the schema created
   from Base.metadata — no cross-test pollution, no Postgres needed.
3. The app's get_db is overridden to hand out sessions on that database,
   one per request, exactly like production. Auth is NOT mocked: tests
   log in and present real tokens.
"""

import os

os.environ.setdefault("FYPMS_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("FYPMS_ACCESS_TOKEN_SECRET", "test-access-secret")
os.environ.setdefault("FYPMS_REFRESH_TOKEN_SECRET", "test-refresh-secret")
os.environ.setdefault("FYPMS_BCRYPT_ROUNDS", "4")
# Nothing listens on port 1, so Redis-dependent features stay disabled.
os.environ.setdefault("FYPMS_REDIS_URL", "redis://127.0.0.1:1/0")

import uuid  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool  # noqa: E402

from fypms.auth.gate import get_token_service  # noqa: E402
from fypms.auth.password import hash_password  # noqa: E402
from fypms.db.engine import get_db  # noqa: E402
from fypms.db.models import Admin, Base, Student, Supervisor  # noqa: E402
from fypms.main import app  # noqa: E402

LOGIN_PATHS = {
    "admin": "/api/v1/admin/login-admin",
    "supervisor": "/api/v1/supervisor/login-supervisor",
    "student": "/api/v1/student/login-student",
}

LOGOUT_PATHS = {
    "admin": "/api/v1/admin/admin-logout",
    "supervisor": "/api/v1/supervisor/logout-supervisor",
    "student": "/api/v1/student/student-logout",
}

DEFAULT_PASSWORD = "password_123"


@pytest_asyncio.fixture()
async def session_factory(tmp_path):
    """Session factory bound to a brand-new SQLite database file."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        poolclass=NullPool,
    )

    # Enforce ON DELETE CASCADE like PostgreSQL does.
    @event.listens_for(engine.sync_engine, "connect")
    def _foreign_keys_on(dbapi_connection, _record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture()
async def db_session(session_factory):
    """A session for service-level tests."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture()
async def client(session_factory):
    """HTTP client with get_db pointed at the per-test database.

    Learn: Only the database is overridden. Tokens, gates and cookies all
    run for real, so tests must log in like a browser would.
    """
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture()
def tokens():
    """The token service the app uses (same secrets as the app)."""
    return get_token_service()


# ─── Factories ──────────────────────────────────────────


def _email(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}@uni.edu"


@pytest.fixture()
def make_admin(session_factory):
    async def _make(email=None, password=DEFAULT_PASSWORD):
        async with session_factory() as s:
            admin = Admin(
                email=email or _email("admin"),
                password_hash=hash_password(password),
            )
            s.add(admin)
            await s.commit()
            return admin

    return _make


@pytest.fixture()
def make_supervisor(session_factory):
    async def _make(email=None, password=DEFAULT_PASSWORD, name="Dr. Ada Lovelace"):
        async with session_factory() as s:
            supervisor = Supervisor(
                name=name,
                email=email or _email("sup"),
                password_hash=hash_password(password),
                department="Computer Science",
            )
            s.add(supervisor)
            await s.commit()
            return supervisor

    return _make


@pytest.fixture()
def make_student(session_factory, make_supervisor):
    async def _make(
        email=None, password=DEFAULT_PASSWORD, supervisor=None, roll_number=None
    ):
        supervisor = supervisor or await make_supervisor()
        async with session_factory() as s:
            student = Student(
                name="Grace Hopper",
                email=email or _email("stu"),
                password_hash=hash_password(password),
                roll_number=roll_number or f"R-{uuid.uuid4().hex[:6]}",
                added_by=supervisor.id,
            )
            s.add(student)
            await s.commit()
            return student

    return _make


@pytest.fixture()
def login(client):
    """Log in through the API; returns Bearer headers.

    Cookies set by the login are dropped, so every later request is
    authenticated only by the headers the test passes explicitly.
    """
    async def _login(role: str, email: str, password: str = DEFAULT_PASSWORD) -> dict:
        r = await client.post(
            LOGIN_PATHS[role], json={"email": email, "password": password}
        )
        assert r.status_code == 200, r.text
        client.cookies.clear()
        return {"Authorization": f"Bearer {r.json()['data']['accessToken']}"}

    return _login
