"""Session service — login and logout for every role.

Learn: One service serves all three roles. The role only decides which
credential store to use and how "not found" is phrased, so the token
logic lives in exactly one place.

Write discipline: a login writes the new refresh token and its audit
event in one commit, and only after every check has passed. A failed
login writes nothing. Logout clears the stored token before the HTTP
layer clears cookies; if the write fails, the exception escapes before
any cookie is touched.
"""

from dataclasses import dataclass
from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from fypms.auth.gate import AuthContext
from fypms.auth.password import verify_password
from fypms.auth.stores import Identity, IdentityStore, get_store
from fypms.auth.tokens import TokenService
from fypms.db.models import Role
from fypms.errors import NotFoundError, UnauthorizedError, ValidationError
from fypms.events.store import EventStore
from fypms.events.types import LOGIN, LOGOUT

logger = structlog.get_logger()

NOT_FOUND_MESSAGES = {
    Role.ADMIN: "Admin not found",
    Role.SUPERVISOR: "Supervisor not found. Please contact admin",
    Role.STUDENT: "Student not found. Please contact your supervisor",
}


@dataclass
class LoginResult:
    identity: Identity
    access_token: str
    refresh_token: str


class SessionService:
    """Credential verification and token-pair lifecycle."""

    def __init__(self, db: AsyncSession, tokens: TokenService):
        self.db = db
        self.tokens = tokens
        self.events = EventStore(db)

    async def login(
        self, role: Role, email: Optional[str], password: Optional[str]
    ) -> LoginResult:
        """Verify email/password within one role partition and issue tokens."""
        role = Role(role)
        if not email or not email.strip() or not password or not password.strip():
            raise ValidationError("Email and password are required")

        store = get_store(self.db, role)
        identity = await store.find_by_email(email)
        if identity is None:
            logger.info("auth.login_failed", role=role.value, reason="not_found")
            raise NotFoundError(NOT_FOUND_MESSAGES[role])

        valid = await run_in_threadpool(
            verify_password, password, identity.password_hash
        )
        if not valid:
            logger.info("auth.login_failed", role=role.value, reason="bad_password")
            raise UnauthorizedError("Invalid credentials")

        result = await self._start_session(store, identity)
        logger.info("auth.login_succeeded", role=role.value, user_id=str(identity.id))
        return result

    async def logout(self, ctx: AuthContext) -> None:
        """Invalidate the caller's stored refresh token. Idempotent."""
        store = get_store(self.db, ctx.role)
        await store.set_refresh_token(ctx.id, None)
        await self.events.append(
            stream_id=f"{ctx.role.value}:{ctx.id}",
            event_type=LOGOUT,
            data={"email": ctx.email},
        )
        await self.db.commit()
        logger.info("auth.logout", role=ctx.role.value, user_id=str(ctx.id))

    async def _start_session(
        self, store: IdentityStore, identity: Identity
    ) -> LoginResult:
        """Issue a pair and overwrite the stored refresh token, in one commit."""
        access_token = self.tokens.issue_access_token(identity)
        refresh_token = self.tokens.issue_refresh_token(identity)

        await store.set_refresh_token(identity.id, refresh_token)
        await self.events.append(
            stream_id=f"{store.role.value}:{identity.id}",
            event_type=LOGIN,
            data={"email": identity.email},
        )
        await self.db.commit()

        return LoginResult(
            identity=identity,
            access_token=access_token,
            refresh_token=refresh_token,
        )
