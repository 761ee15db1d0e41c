"""Credential store adapters — one per role partition.

Learn: The auth core never branches on role strings to pick a table.
Instead, each role has an IdentityStore bound to its model, and
get_store(db, role) selects one by an explicit Role key. Adding a role
means adding a store class and a registry entry, not editing the gate.

The only write the auth core makes is set_refresh_token(): a single-row
UPDATE. Concurrent logins for the same user race on it and the last
write wins — no locks.
"""

import uuid
from typing import Optional, Union

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from fypms.db.models import Admin, Role, Student, Supervisor

Identity = Union[Admin, Supervisor, Student]


def normalize_email(email: str) -> str:
    return email.strip().lower()


def parse_id(identity_id: Union[str, uuid.UUID]) -> Optional[uuid.UUID]:
    """Parse an id claim. Returns None for anything that isn't a UUID."""
    if isinstance(identity_id, uuid.UUID):
        return identity_id
    try:
        return uuid.UUID(str(identity_id))
    except ValueError:
        return None


class IdentityStore:
    """Lookup + refresh-token persistence for one role's table."""

    model: type = None
    role: Role = None

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_email(self, email: str) -> Optional[Identity]:
        result = await self.db.execute(
            select(self.model).where(self.model.email == normalize_email(email))
        )
        return result.scalars().first()

    async def get(self, identity_id: Union[str, uuid.UUID]) -> Optional[Identity]:
        pk = parse_id(identity_id)
        if pk is None:
            return None
        return await self.db.get(self.model, pk)

    async def set_refresh_token(
        self, identity_id: uuid.UUID, token: Optional[str]
    ) -> None:
        """Overwrite (or clear, with None) the stored refresh token.

        Does not commit — the caller commits together with its audit event.
        Clearing an already-empty token is a no-op, not an error.
        """
        await self.db.execute(
            update(self.model)
            .where(self.model.id == identity_id)
            .values(refresh_token=token)
        )


class AdminStore(IdentityStore):
    model = Admin
    role = Role.ADMIN


class SupervisorStore(IdentityStore):
    model = Supervisor
    role = Role.SUPERVISOR


class StudentStore(IdentityStore):
    model = Student
    role = Role.STUDENT


_STORES: dict[Role, type[IdentityStore]] = {
    Role.ADMIN: AdminStore,
    Role.SUPERVISOR: SupervisorStore,
    Role.STUDENT: StudentStore,
}


def get_store(db: AsyncSession, role: Union[Role, str]) -> IdentityStore:
    """Return the store for a role. Raises ValueError for unknown roles."""
    return _STORES[Role(role)](db)
