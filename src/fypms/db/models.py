"""SQLAlchemy ORM models — single source of truth for the database schema.

Learn: Declarative ORM mapping with SQLAlchemy 2.0 style (Mapped[] + mapped_column).
Each class = one table. Alembic migrations mirror these models.

Key concepts:
- Three identity tables (admins, supervisors, students) — one per role.
  They are independent key spaces: email is unique per table, not globally.
- Each identity row holds at most one live refresh token. Login overwrites
  it, logout clears it.
- UUID primary keys and portable JSON columns, so the same models run on
  PostgreSQL (asyncpg) in production and SQLite (aiosqlite) in tests.
"""

import enum
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    JSON,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_uuid() -> uuid.UUID:
    return uuid.uuid4()


class Role(str, enum.Enum):
    """The three role partitions. Fixed at creation, never user-editable."""

    ADMIN = "admin"
    SUPERVISOR = "supervisor"
    STUDENT = "student"


class ItemStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# ══════════════════════════════════════════════════════════════
# Identities
# ══════════════════════════════════════════════════════════════


class IdentityMixin:
    """Columns shared by every role table.

    Learn: password_hash and refresh_token are secret fields — they are
    read by the auth core and never copied into a response schema.
    """

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    refresh_token: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )


class Admin(IdentityMixin, Base):
    """Platform administrator. Normally just the bootstrap account."""

    __tablename__ = "admins"

    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default=Role.ADMIN.value
    )


class Supervisor(IdentityMixin, Base):
    """Faculty member who adds students and reviews their submissions."""

    __tablename__ = "supervisors"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    department: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default=Role.SUPERVISOR.value
    )

    students: Mapped[list["Student"]] = relationship(
        back_populates="supervisor", passive_deletes=True
    )


class Student(IdentityMixin, Base):
    """A student, always created by (and belonging to) one supervisor."""

    __tablename__ = "students"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    roll_number: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    added_by: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("supervisors.id", ondelete="CASCADE"), nullable=False
    )
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default=Role.STUDENT.value
    )

    supervisor: Mapped["Supervisor"] = relationship(back_populates="students")


# ══════════════════════════════════════════════════════════════
# Submissions
# ══════════════════════════════════════════════════════════════


class Proposal(Base):
    """A project idea submitted by a student to their supervisor."""

    __tablename__ = "proposals"
    __table_args__ = (
        Index("idx_proposals_supervisor_status", "supervisor_id", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    submitted_by: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("students.id", ondelete="CASCADE"), nullable=False
    )
    supervisor_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("supervisors.id", ondelete="CASCADE"), nullable=False
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ItemStatus.PENDING.value
    )  # pending, approved, rejected
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    student: Mapped["Student"] = relationship(lazy="joined")


class Project(Base):
    """A finished project submission (file hosted externally)."""

    __tablename__ = "projects"
    __table_args__ = (
        Index("idx_projects_supervisor_status", "supervisor_id", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    submitted_by: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("students.id", ondelete="CASCADE"), nullable=False
    )
    supervisor_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("supervisors.id", ondelete="CASCADE"), nullable=False
    )
    proposal_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("proposals.id", ondelete="SET NULL"), nullable=True
    )
    file_url: Mapped[str] = mapped_column(Text, nullable=False)
    file_public_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ItemStatus.PENDING.value
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    student: Mapped["Student"] = relationship(lazy="joined")
    supervisor: Mapped["Supervisor"] = relationship(lazy="joined")
    proposal: Mapped[Optional["Proposal"]] = relationship(lazy="joined")


# ══════════════════════════════════════════════════════════════
# Audit log
# ══════════════════════════════════════════════════════════════


class Event(Base):
    """Append-only audit log.

    stream_id examples: "student:<uuid>", "supervisor:<uuid>", "project:<uuid>"
    type examples: "auth.login", "student.created", "project.status_changed"
    """

    __tablename__ = "events"
    __table_args__ = (
        Index("idx_events_stream", "stream_id", "id"),
        Index("idx_events_type", "type"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    stream_id: Mapped[str] = mapped_column(String(200), nullable=False)
    type: Mapped[str] = mapped_column(String(100), nullable=False)
    data: Mapped[dict] = mapped_column(JSON, nullable=False)
    meta: Mapped[dict] = mapped_column(
        "metadata", JSON, nullable=False, default=dict
    )  # actor_id, actor_role
    # Note: Python attr is "meta" because "metadata" is reserved by SQLAlchemy.
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
