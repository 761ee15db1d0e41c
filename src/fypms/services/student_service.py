"""Student service — supervisor-side management of student accounts.

Learn: Every query is scoped by added_by, so a supervisor can only see
or touch the students they created. "Not yours" and "doesn't exist"
are deliberately the same 404.
"""

import uuid
from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from fypms.auth.password import hash_password
from fypms.auth.stores import normalize_email
from fypms.db.models import Student
from fypms.errors import ConflictError, NotFoundError, ValidationError
from fypms.events.store import EventStore
from fypms.events.types import STUDENT_CREATED, STUDENT_DELETED, STUDENT_UPDATED

DUPLICATE_STUDENT = "Student with this email or roll number already exists"


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


class StudentService:
    """Business logic for student accounts."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.events = EventStore(db)

    async def create(
        self,
        supervisor_id: uuid.UUID,
        name: Optional[str],
        email: Optional[str],
        password: Optional[str],
        roll_number: Optional[str],
    ) -> Student:
        if any(_blank(v) for v in (name, email, password, roll_number)):
            raise ValidationError("All fields are required")

        email = normalize_email(email)
        roll_number = roll_number.strip()
        existing = await self.db.execute(
            select(Student).where(
                or_(Student.email == email, Student.roll_number == roll_number)
            )
        )
        if existing.scalars().first():
            raise ConflictError(DUPLICATE_STUDENT)

        student = Student(
            name=name.strip(),
            email=email,
            roll_number=roll_number,
            password_hash=await run_in_threadpool(hash_password, password),
            added_by=supervisor_id,
        )
        self.db.add(student)
        await self._flush_unique()

        await self.events.append(
            stream_id=f"student:{student.id}",
            event_type=STUDENT_CREATED,
            data={"email": email, "roll_number": roll_number},
            metadata={"actor_id": str(supervisor_id), "actor_role": "supervisor"},
        )
        await self.db.commit()
        return student

    async def list_for_supervisor(self, supervisor_id: uuid.UUID) -> list[Student]:
        result = await self.db.execute(
            select(Student)
            .where(Student.added_by == supervisor_id)
            .order_by(Student.created_at.desc())
        )
        return list(result.scalars().all())

    async def update(
        self,
        supervisor_id: uuid.UUID,
        student_id: uuid.UUID,
        name: Optional[str] = None,
        email: Optional[str] = None,
        password: Optional[str] = None,
        roll_number: Optional[str] = None,
    ) -> Student:
        """Update name/email/roll number/password of one of the supervisor's students."""
        if all(_blank(v) for v in (name, email, password, roll_number)):
            raise ValidationError("No valid fields provided for update")

        student = await self._owned(supervisor_id, student_id)

        changed = []
        if not _blank(email):
            email = normalize_email(email)
            if email != student.email:
                await self._ensure_unique(Student.email == email, student.id)
                student.email = email
                changed.append("email")
        if not _blank(roll_number):
            roll_number = roll_number.strip()
            if roll_number != student.roll_number:
                await self._ensure_unique(Student.roll_number == roll_number, student.id)
                student.roll_number = roll_number
                changed.append("roll_number")
        if not _blank(name):
            student.name = name.strip()
            changed.append("name")
        if not _blank(password):
            student.password_hash = await run_in_threadpool(hash_password, password)
            changed.append("password")

        await self._flush_unique()
        await self.events.append(
            stream_id=f"student:{student.id}",
            event_type=STUDENT_UPDATED,
            data={"fields": changed},
            metadata={"actor_id": str(supervisor_id), "actor_role": "supervisor"},
        )
        await self.db.commit()
        return student

    async def delete(self, supervisor_id: uuid.UUID, student_id: uuid.UUID) -> None:
        student = await self._owned(supervisor_id, student_id)
        await self.db.delete(student)
        await self.events.append(
            stream_id=f"student:{student_id}",
            event_type=STUDENT_DELETED,
            data={"email": student.email},
            metadata={"actor_id": str(supervisor_id), "actor_role": "supervisor"},
        )
        await self.db.commit()

    async def _owned(self, supervisor_id: uuid.UUID, student_id: uuid.UUID) -> Student:
        result = await self.db.execute(
            select(Student).where(
                Student.id == student_id, Student.added_by == supervisor_id
            )
        )
        student = result.scalars().first()
        if not student:
            raise NotFoundError("Student not found or unauthorized")
        return student

    async def _flush_unique(self) -> None:
        """Flush pending writes, reporting a lost race on a unique index as 409."""
        try:
            await self.db.flush()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError(DUPLICATE_STUDENT)

    async def _ensure_unique(self, clause, student_id: uuid.UUID) -> None:
        # Pending edits are flushed together in _flush_unique
        with self.db.no_autoflush:
            result = await self.db.execute(
                select(Student.id).where(clause, Student.id != student_id)
            )
        if result.first():
            raise ConflictError(DUPLICATE_STUDENT)
