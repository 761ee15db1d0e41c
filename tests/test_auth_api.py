"""Tests for login and logout over HTTP, through the full auth pipeline."""

import pytest
from httpx import ASGITransport, AsyncClient

from conftest import LOGIN_PATHS, LOGOUT_PATHS
from fypms.auth.stores import IdentityStore
from fypms.config import settings
from fypms.main import app


def _set_cookies(response) -> str:
    return "\n".join(response.headers.get_list("set-cookie")).lower()


# ─── Login ──────────────────────────────────────────────


@pytest.mark.asyncio
async def test_student_login_returns_tokens_and_public_profile(client, make_student):
    student = await make_student(email="a@b.com", password="pw123")

    r = await client.post(
        LOGIN_PATHS["student"], json={"email": "a@b.com", "password": "pw123"}
    )
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["statusCode"] == 200
    assert body["message"] == "Student logged in successfully"

    data = body["data"]
    assert data["accessToken"] and data["refreshToken"]
    profile = data["student"]
    assert profile["_id"] == str(student.id)
    assert profile["email"] == "a@b.com"
    assert profile["rollNumber"] == student.roll_number
    assert "password_hash" not in profile
    assert "refresh_token" not in profile
    assert "refreshToken" not in profile


@pytest.mark.asyncio
@pytest.mark.parametrize("role", ["admin", "supervisor", "student"])
async def test_login_each_role(client, make_admin, make_supervisor, make_student, role):
    factory = {"admin": make_admin, "supervisor": make_supervisor, "student": make_student}
    user = await factory[role](email=f"{role}@uni.edu")

    r = await client.post(
        LOGIN_PATHS[role], json={"email": f"{role}@uni.edu", "password": "password_123"}
    )
    assert r.status_code == 200
    assert r.json()["message"] == f"{role.capitalize()} logged in successfully"
    assert r.json()["data"][role]["_id"] == str(user.id)
    assert r.json()["data"][role]["role"] == role


@pytest.mark.asyncio
async def test_login_sets_httponly_cookies(client, make_admin):
    await make_admin(email="root@uni.edu")
    r = await client.post(
        LOGIN_PATHS["admin"], json={"email": "root@uni.edu", "password": "password_123"}
    )
    cookies = _set_cookies(r)
    assert "accesstoken=" in cookies
    assert "refreshtoken=" in cookies
    assert "httponly" in cookies
    assert "samesite=lax" in cookies
    # Not production, so no Secure flag
    assert "; secure" not in cookies


@pytest.mark.asyncio
async def test_production_cookies_are_secure_and_cross_site(client, make_admin, monkeypatch):
    monkeypatch.setattr(settings, "environment", "production")
    await make_admin(email="root@uni.edu")
    r = await client.post(
        LOGIN_PATHS["admin"], json={"email": "root@uni.edu", "password": "password_123"}
    )
    assert r.status_code == 200

    set_cookies = [c.lower() for c in r.headers.get_list("set-cookie")]
    assert len(set_cookies) == 2
    for cookie in set_cookies:
        assert "; secure" in cookie
        assert "samesite=none" in cookie
        assert "httponly" in cookie


@pytest.mark.asyncio
async def test_login_email_is_case_insensitive(client, make_student):
    await make_student(email="a@b.com", password="pw123")
    r = await client.post(
        LOGIN_PATHS["student"], json={"email": " A@B.COM ", "password": "pw123"}
    )
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_login_wrong_password(client, make_student):
    await make_student(email="a@b.com", password="pw123")
    r = await client.post(
        LOGIN_PATHS["student"], json={"email": "a@b.com", "password": "nope"}
    )
    assert r.status_code == 401
    assert r.json() == {
        "statusCode": 401,
        "data": None,
        "message": "Invalid credentials",
        "success": False,
    }
    assert "set-cookie" not in r.headers


@pytest.mark.asyncio
async def test_login_unknown_email(client):
    r = await client.post(
        LOGIN_PATHS["supervisor"], json={"email": "x@y.com", "password": "pw"}
    )
    assert r.status_code == 404
    assert r.json()["message"] == "Supervisor not found. Please contact admin"


@pytest.mark.asyncio
async def test_login_missing_fields(client):
    r = await client.post(LOGIN_PATHS["admin"], json={"email": "x@y.com"})
    assert r.status_code == 400
    assert r.json()["message"] == "Email and password are required"


@pytest.mark.asyncio
async def test_login_without_body(client):
    r = await client.post(LOGIN_PATHS["admin"])
    assert r.status_code == 400
    assert r.json()["message"] == "Email and password are required"


# ─── Logout ─────────────────────────────────────────────


@pytest.mark.asyncio
async def test_logout_with_cookie_then_again_without(client, make_student):
    await make_student(email="a@b.com", password="pw123")
    await client.post(
        LOGIN_PATHS["student"], json={"email": "a@b.com", "password": "pw123"}
    )

    # Cookie jar carries the access token
    r = await client.post(LOGOUT_PATHS["student"])
    assert r.status_code == 200
    assert r.json()["message"] == "Student logged out successfully"
    assert r.json()["data"] == {}
    cookies = _set_cookies(r)
    assert "accesstoken=" in cookies and "refreshtoken=" in cookies

    # Cookies were cleared, so there is nothing left to authenticate with
    r = await client.post(LOGOUT_PATHS["student"])
    assert r.status_code == 401
    assert r.json()["message"] == "Unauthorized Access!"


@pytest.mark.asyncio
async def test_logout_twice_with_header_is_idempotent(client, make_supervisor, login):
    await make_supervisor(email="sup@uni.edu")
    headers = await login("supervisor", "sup@uni.edu")

    r1 = await client.post(LOGOUT_PATHS["supervisor"], headers=headers)
    r2 = await client.post(LOGOUT_PATHS["supervisor"], headers=headers)
    assert r1.status_code == 200
    assert r2.status_code == 200


@pytest.mark.asyncio
async def test_logout_with_wrong_role_is_forbidden(client, make_student, login):
    await make_student(email="a@b.com", password="pw123")
    headers = await login("student", "a@b.com", "pw123")

    r = await client.post(LOGOUT_PATHS["admin"], headers=headers)
    assert r.status_code == 403
    assert r.json()["message"] == "Forbidden: admin access required"


# ─── Misc ───────────────────────────────────────────────


@pytest.mark.asyncio
async def test_root_welcome(client):
    r = await client.get("/")
    assert r.status_code == 200
    assert "Welcome" in r.text


@pytest.mark.asyncio
async def test_unknown_route_uses_envelope(client):
    r = await client.get("/api/v1/nope")
    assert r.status_code == 404
    assert r.json()["success"] is False


@pytest.mark.asyncio
async def test_unexpected_failure_uses_envelope(client, monkeypatch):
    async def broken_lookup(self, email):
        raise RuntimeError("connection reset by peer")

    monkeypatch.setattr(IdentityStore, "find_by_email", broken_lookup)

    # The client fixture installed the get_db override; this one keeps the
    # server error as a response instead of re-raising it into the test.
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        r = await ac.post(
            LOGIN_PATHS["admin"], json={"email": "root@uni.edu", "password": "pw"}
        )

    assert r.status_code == 500
    assert r.json() == {
        "statusCode": 500,
        "data": None,
        "message": "Internal server error",
        "success": False,
    }
    assert "connection reset" not in r.text
