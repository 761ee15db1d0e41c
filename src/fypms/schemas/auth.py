"""Pydantic schemas for login and logout."""

from typing import Optional

from pydantic import BaseModel

from fypms.db.models import Role
from fypms.schemas.people import AdminRead, StudentRead, SupervisorRead


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


# Public projection returned on login, keyed by role.
PUBLIC_SCHEMAS = {
    Role.ADMIN: AdminRead,
    Role.SUPERVISOR: SupervisorRead,
    Role.STUDENT: StudentRead,
}


def public_identity(role: Role, identity) -> BaseModel:
    return PUBLIC_SCHEMAS[role].model_validate(identity)
