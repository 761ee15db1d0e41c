"""Authorization gate — FastAPI dependencies that authenticate requests.

Learn: Two stages.
1. authenticate(): find the access token (accessToken cookie first, then
   "Authorization: Bearer ..."), verify it, and load the live identity
   from the store named by the token's role claim. Any failure is a 401.
2. RoleGate: require the resolved role to be one of an allowed set.
   A mismatch is a 403 — the caller *is* authenticated, just not allowed.

Route handlers receive the result as an AuthContext parameter:

    @router.post("/add-student")
    async def add_student(body: StudentCreate, ctx: AuthContext = Depends(require_supervisor)):
        ...

so the identity is an explicit value, not something stashed on the request.
"""

import uuid
from dataclasses import dataclass
from typing import Any, Optional

import structlog
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from fypms.auth.cookies import ACCESS_COOKIE
from fypms.auth.stores import get_store
from fypms.auth.tokens import TokenConfig, TokenError, TokenService
from fypms.config import settings
from fypms.db.engine import get_db
from fypms.db.models import Role
from fypms.errors import ForbiddenError, UnauthorizedError

logger = structlog.get_logger()


@dataclass(frozen=True)
class AuthContext:
    """The authenticated caller. Built by the gate, consumed by handlers.

    identity is the live ORM row (Admin, Supervisor or Student). Handlers
    only ever project public fields out of it.
    """

    id: uuid.UUID
    role: Role
    email: str
    identity: Any


def get_token_service() -> TokenService:
    """FastAPI dependency — token service built from process settings."""
    return TokenService(TokenConfig.from_settings(settings))


def extract_token(request: Request) -> Optional[str]:
    """Cookie first, then Bearer header. Returns None if neither is present."""
    token = request.cookies.get(ACCESS_COOKIE)
    if token:
        return token
    authorization = request.headers.get("Authorization")
    if authorization and authorization.startswith("Bearer "):
        return authorization[7:].strip() or None
    return None


async def authenticate(
    request: Request, db: AsyncSession, tokens: TokenService
) -> AuthContext:
    """Verify the request's access token and resolve the live identity."""
    token = extract_token(request)
    if not token:
        raise UnauthorizedError("Unauthorized Access!")

    try:
        claims = tokens.verify_access_token(token)
    except TokenError as e:
        logger.info("auth.gate_rejected", reason=str(e), path=request.url.path)
        raise UnauthorizedError(str(e))

    try:
        store = get_store(db, claims.role)
    except ValueError:
        logger.info("auth.gate_rejected", reason="unknown_role", role=claims.role)
        raise UnauthorizedError("Invalid user role")

    identity = await store.get(claims.id)
    if identity is None:
        # Deleted after the token was issued (or an id that never existed)
        logger.info("auth.gate_rejected", reason="user_not_found", role=claims.role)
        raise UnauthorizedError("User not found")

    return AuthContext(
        id=identity.id,
        role=store.role,
        email=identity.email,
        identity=identity,
    )


async def current_identity(
    request: Request,
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> AuthContext:
    """Any authenticated user, regardless of role."""
    return await authenticate(request, db, tokens)


class RoleGate:
    """Dependency that admits only the given roles.

    Learn: FastAPI accepts any callable as a dependency, including class
    instances with an async __call__. One class covers admin-only,
    supervisor-only, student-only and mixed-role endpoints.
    """

    def __init__(self, *roles: Role):
        self.roles = frozenset(Role(r) for r in roles)
        names = ", ".join(r.value for r in roles)
        self.denied_message = f"Forbidden: {names} access required"

    async def __call__(
        self, ctx: AuthContext = Depends(current_identity)
    ) -> AuthContext:
        if ctx.role not in self.roles:
            logger.info(
                "auth.gate_forbidden",
                role=ctx.role.value,
                allowed=sorted(r.value for r in self.roles),
            )
            raise ForbiddenError(self.denied_message)
        return ctx


def require_roles(*roles: Role) -> RoleGate:
    return RoleGate(*roles)


require_admin = RoleGate(Role.ADMIN)
require_supervisor = RoleGate(Role.SUPERVISOR)
require_student = RoleGate(Role.STUDENT)
