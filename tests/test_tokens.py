"""Tests for access/refresh token issuing and access-token verification."""

import uuid
from dataclasses import replace
from datetime import timedelta
from types import SimpleNamespace

import jwt
import pytest

from fypms.auth.tokens import (
    TokenConfig,
    TokenExpired,
    TokenInvalid,
    TokenMalformed,
    TokenService,
)

CONFIG = TokenConfig(
    access_secret="unit-access",
    access_expires=timedelta(hours=1),
    refresh_secret="unit-refresh",
    refresh_expires=timedelta(days=10),
)


@pytest.fixture()
def svc():
    return TokenService(CONFIG)


@pytest.fixture()
def student():
    return SimpleNamespace(id=uuid.uuid4(), email="a@b.com", role="student")


def test_access_token_roundtrip(svc, student):
    claims = svc.verify_access_token(svc.issue_access_token(student))
    assert claims.id == str(student.id)
    assert claims.role == "student"
    assert claims.email == "a@b.com"


def test_access_token_lifetime_matches_config(svc, student):
    payload = jwt.decode(
        svc.issue_access_token(student), "unit-access", algorithms=["HS256"]
    )
    assert payload["exp"] - payload["iat"] == 3600


def test_refresh_token_carries_only_the_id(svc, student):
    payload = jwt.decode(
        svc.issue_refresh_token(student), "unit-refresh", algorithms=["HS256"]
    )
    assert payload["id"] == str(student.id)
    assert "email" not in payload
    assert "role" not in payload
    assert payload["exp"] - payload["iat"] == 10 * 24 * 3600


def test_tokens_minted_back_to_back_differ(svc, student):
    assert svc.issue_refresh_token(student) != svc.issue_refresh_token(student)
    assert svc.issue_access_token(student) != svc.issue_access_token(student)


def test_expired_access_token(student):
    expired = TokenService(replace(CONFIG, access_expires=timedelta(seconds=-5)))
    token = expired.issue_access_token(student)
    with pytest.raises(TokenExpired, match="Token has expired"):
        TokenService(CONFIG).verify_access_token(token)


def test_wrong_secret_is_invalid(svc, student):
    other = TokenService(replace(CONFIG, access_secret="someone-else"))
    with pytest.raises(TokenInvalid, match="Invalid token"):
        svc.verify_access_token(other.issue_access_token(student))


def test_garbage_is_invalid(svc):
    with pytest.raises(TokenInvalid):
        svc.verify_access_token("not-a-jwt")


def test_refresh_token_is_not_an_access_token(svc, student):
    with pytest.raises(TokenInvalid):
        svc.verify_access_token(svc.issue_refresh_token(student))


def test_missing_role_claim_is_malformed(svc):
    token = jwt.encode(
        {"id": str(uuid.uuid4()), "exp": 9999999999}, "unit-access", algorithm="HS256"
    )
    with pytest.raises(TokenMalformed, match="Invalid token payload"):
        svc.verify_access_token(token)


def test_token_without_exp_is_rejected(svc):
    token = jwt.encode(
        {"id": str(uuid.uuid4()), "role": "admin"}, "unit-access", algorithm="HS256"
    )
    with pytest.raises(TokenInvalid):
        svc.verify_access_token(token)
