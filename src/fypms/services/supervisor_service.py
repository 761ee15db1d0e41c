"""Supervisor service — admin-side management of supervisor accounts.

Learn: Service layer separates business logic from HTTP routing.
API routes call services, services call the database. Every write
appends an audit event and commits in one go.
"""

import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from fypms.auth.gate import AuthContext
from fypms.auth.password import hash_password
from fypms.auth.stores import normalize_email
from fypms.db.models import Role, Supervisor
from fypms.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from fypms.events.store import EventStore
from fypms.events.types import SUPERVISOR_CREATED, SUPERVISOR_DELETED, SUPERVISOR_UPDATED

SEARCH_LIMIT = 10
DUPLICATE_EMAIL = "Supervisor with this email already exists"


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


class SupervisorService:
    """Business logic for supervisor accounts."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.events = EventStore(db)

    async def create(
        self,
        name: Optional[str],
        email: Optional[str],
        password: Optional[str],
        department: Optional[str] = None,
    ) -> Supervisor:
        if _blank(name) or _blank(email) or _blank(password):
            raise ValidationError("Name, email and password are required")

        email = normalize_email(email)
        if await self._by_email(email):
            raise ConflictError(DUPLICATE_EMAIL)

        supervisor = Supervisor(
            name=name.strip(),
            email=email,
            password_hash=await run_in_threadpool(hash_password, password),
            department=department.strip() if department else None,
        )
        self.db.add(supervisor)
        await self._flush_unique()

        await self.events.append(
            stream_id=f"supervisor:{supervisor.id}",
            event_type=SUPERVISOR_CREATED,
            data={"name": supervisor.name, "email": email},
        )
        await self.db.commit()
        return supervisor

    async def list_all(self) -> list[Supervisor]:
        result = await self.db.execute(select(Supervisor).order_by(Supervisor.name))
        return list(result.scalars().all())

    async def update(
        self,
        supervisor_id: uuid.UUID,
        actor: AuthContext,
        name: Optional[str] = None,
        email: Optional[str] = None,
        password: Optional[str] = None,
        department: Optional[str] = None,
    ) -> Supervisor:
        """Update a supervisor. Admins may edit anyone, supervisors only themselves."""
        if actor.role == Role.SUPERVISOR and actor.id != supervisor_id:
            raise ForbiddenError("Forbidden: supervisors can only update their own profile")

        supervisor = await self.db.get(Supervisor, supervisor_id)
        if not supervisor:
            raise NotFoundError("Supervisor not found")

        changed = []
        if not _blank(name):
            supervisor.name = name.strip()
            changed.append("name")
        if not _blank(email):
            email = normalize_email(email)
            if email != supervisor.email:
                existing = await self._by_email(email)
                if existing and existing.id != supervisor.id:
                    raise ConflictError(DUPLICATE_EMAIL)
                supervisor.email = email
                changed.append("email")
        if not _blank(password):
            supervisor.password_hash = await run_in_threadpool(hash_password, password)
            changed.append("password")
        if department is not None:
            supervisor.department = department.strip() or None
            changed.append("department")

        if changed:
            await self._flush_unique()
            await self.events.append(
                stream_id=f"supervisor:{supervisor.id}",
                event_type=SUPERVISOR_UPDATED,
                data={"fields": changed},
                metadata={"actor_id": str(actor.id), "actor_role": actor.role.value},
            )
            await self.db.commit()
        return supervisor

    async def delete(self, supervisor_id: uuid.UUID) -> None:
        supervisor = await self.db.get(Supervisor, supervisor_id)
        if not supervisor:
            raise NotFoundError("Supervisor not found")

        await self.db.delete(supervisor)
        await self.events.append(
            stream_id=f"supervisor:{supervisor_id}",
            event_type=SUPERVISOR_DELETED,
            data={"email": supervisor.email},
        )
        await self.db.commit()

    async def search(self, name: Optional[str]) -> list[Supervisor]:
        """Case-insensitive substring match on name, A-Z, first 10."""
        if _blank(name):
            raise ValidationError("Search query is required")
        result = await self.db.execute(
            select(Supervisor)
            .where(Supervisor.name.icontains(name.strip(), autoescape=True))
            .order_by(Supervisor.name)
            .limit(SEARCH_LIMIT)
        )
        return list(result.scalars().all())

    async def _flush_unique(self) -> None:
        """Flush pending writes, reporting a lost race on the email index as 409."""
        try:
            await self.db.flush()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError(DUPLICATE_EMAIL)

    async def _by_email(self, email: str) -> Optional[Supervisor]:
        result = await self.db.execute(
            select(Supervisor).where(Supervisor.email == email)
        )
        return result.scalars().first()
