"""Login / logout routes, stamped onto each role's router.

Learn: The three roles share one session flow, so instead of three
copies of each handler, add_session_routes() registers the handlers on
a role's router with that role baked in:

    add_session_routes(router, Role.STUDENT,
                       login_path="/login-student",
                       logout_path="/student-logout",
                       gate=require_student)
"""

from typing import Optional

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from fypms.auth.cookies import clear_auth_cookies, set_auth_cookies
from fypms.auth.gate import AuthContext, RoleGate, get_token_service
from fypms.auth.tokens import TokenService
from fypms.db.engine import get_db
from fypms.db.models import Role
from fypms.schemas.auth import LoginRequest, public_identity
from fypms.schemas.common import api_response
from fypms.services.session_service import LoginResult, SessionService


def _svc(
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> SessionService:
    return SessionService(db, tokens)


def _token_payload(role: Role, result: LoginResult) -> dict:
    return {
        role.value: public_identity(role, result.identity),
        "accessToken": result.access_token,
        "refreshToken": result.refresh_token,
    }


def add_session_routes(
    router: APIRouter,
    role: Role,
    *,
    login_path: str,
    logout_path: str,
    gate: RoleGate,
) -> None:
    label = role.value.capitalize()

    @router.post(login_path, name=f"{role.value}_login")
    async def login(
        response: Response,
        body: Optional[LoginRequest] = None,
        svc: SessionService = Depends(_svc),
    ):
        """Email/password → token pair (also set as HTTP-only cookies)."""
        body = body or LoginRequest()
        result = await svc.login(role, body.email, body.password)
        set_auth_cookies(response, result.access_token, result.refresh_token)
        return api_response(
            _token_payload(role, result), f"{label} logged in successfully"
        )

    @router.post(logout_path, name=f"{role.value}_logout")
    async def logout(
        response: Response,
        ctx: AuthContext = Depends(gate),
        svc: SessionService = Depends(_svc),
    ):
        """Invalidate the stored refresh token, then clear both cookies."""
        await svc.logout(ctx)
        clear_auth_cookies(response)
        return api_response({}, f"{label} logged out successfully")
