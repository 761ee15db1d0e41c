"""JWT token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication.
- Access token: short-lived (minutes to hours), carries id + email + role,
  presented on every request (cookie or Bearer header).
- Refresh token: long-lived (days), carries only the id. The one live
  refresh token per user is stored on the user row; login overwrites it
  and logout clears it. There is no renewal endpoint.

The two kinds are signed with different secrets, so a refresh token never
verifies as an access token.

Embedding the role in the access token lets the authorization gate pick
the right identity table without a lookup. Roles never change, so the
claim can't go stale.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import jwt

ACCESS = "access"
REFRESH = "refresh"


class TokenError(Exception):
    """Raised when token verification fails."""


class TokenExpired(TokenError):
    """The token's exp claim is in the past."""


class TokenInvalid(TokenError):
    """Bad signature, wrong secret, or not a JWT at all."""


class TokenMalformed(TokenError):
    """Signature is fine but required claims are missing."""


@dataclass(frozen=True)
class TokenConfig:
    """Process-wide signing configuration. Read-only after startup."""

    access_secret: str
    access_expires: timedelta
    refresh_secret: str
    refresh_expires: timedelta
    algorithm: str = "HS256"

    @classmethod
    def from_settings(cls, settings) -> "TokenConfig":
        return cls(
            access_secret=settings.access_token_secret,
            access_expires=timedelta(minutes=settings.access_token_expire_minutes),
            refresh_secret=settings.refresh_token_secret,
            refresh_expires=timedelta(days=settings.refresh_token_expire_days),
            algorithm=settings.jwt_algorithm,
        )


@dataclass(frozen=True)
class TokenClaims:
    """What a verified access token tells us about its bearer."""

    id: str
    role: str
    email: Optional[str] = None


class TokenService:
    """Issues and verifies access/refresh tokens.

    Learn: the config is passed in rather than read from settings, so
    tests can build a service with known secrets and lifetimes
    (including negative ones, to mint already-expired tokens).
    """

    def __init__(self, config: TokenConfig):
        self.config = config

    def issue_access_token(self, identity: Any) -> str:
        """Create an access token for an Admin/Supervisor/Student row."""
        payload = {
            "id": str(identity.id),
            "email": identity.email,
            "role": identity.role,
        }
        return self._encode(
            payload, ACCESS, self.config.access_secret, self.config.access_expires
        )

    def issue_refresh_token(self, identity: Any) -> str:
        """Create a refresh token. Only the id is embedded."""
        return self._encode(
            {"id": str(identity.id)},
            REFRESH,
            self.config.refresh_secret,
            self.config.refresh_expires,
        )

    def verify_access_token(self, token: str) -> TokenClaims:
        """Verify signature + expiry and return the bearer's claims.

        Raises TokenExpired, TokenInvalid or TokenMalformed.
        """
        payload = self._decode(token, self.config.access_secret)
        if not payload.get("id") or not payload.get("role"):
            raise TokenMalformed("Invalid token payload")
        if payload.get("type", ACCESS) != ACCESS:
            raise TokenMalformed("Invalid token payload")
        return TokenClaims(
            id=str(payload["id"]),
            role=str(payload["role"]),
            email=payload.get("email"),
        )

    # ─── Internals ──────────────────────────────────────

    def _encode(
        self, claims: dict, token_type: str, secret: str, lifetime: timedelta
    ) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            **claims,
            "type": token_type,
            # Two tokens minted in the same second must still differ.
            "jti": uuid.uuid4().hex,
            "iat": now,
            "exp": now + lifetime,
        }
        return jwt.encode(payload, secret, algorithm=self.config.algorithm)

    def _decode(self, token: str, secret: str) -> dict:
        try:
            return jwt.decode(
                token,
                secret,
                algorithms=[self.config.algorithm],
                options={"require": ["exp"]},
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpired("Token has expired")
        except jwt.InvalidTokenError as e:
            raise TokenInvalid(f"Invalid token: {e}")
