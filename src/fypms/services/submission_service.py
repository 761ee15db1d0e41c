"""Submission service — proposals and projects.

Learn: Students submit, supervisors review, admins get the global view.
A submission is always routed to the supervisor who created the
student (Student.added_by). Status moves pending → approved/rejected
exactly once; re-reviewing a decided item is a 404 ("already processed").
"""

import uuid
from typing import Optional, Union

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from fypms.db.models import ItemStatus, Project, Proposal, Student
from fypms.errors import NotFoundError, ValidationError
from fypms.events.store import EventStore
from fypms.events.types import ITEM_STATUS_CHANGED, PROJECT_SUBMITTED, PROPOSAL_SUBMITTED

ITEM_MODELS = {"project": Project, "proposal": Proposal}
REVIEW_STATUSES = {ItemStatus.APPROVED.value, ItemStatus.REJECTED.value}

Item = Union[Project, Proposal]


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def _item_model(item_type: str) -> type:
    model = ITEM_MODELS.get(item_type)
    if model is None:
        raise ValidationError("Invalid type specified")
    return model


class SubmissionService:
    """Business logic for proposals and projects."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.events = EventStore(db)

    # ─── Student side ───────────────────────────────────

    async def submit_proposal(
        self, student: Student, title: Optional[str], description: Optional[str]
    ) -> Proposal:
        if _blank(title) or _blank(description):
            raise ValidationError("Title and description are required")

        proposal = Proposal(
            title=title.strip(),
            description=description.strip(),
            submitted_by=student.id,
            supervisor_id=student.added_by,
        )
        self.db.add(proposal)
        await self.db.flush()

        await self.events.append(
            stream_id=f"proposal:{proposal.id}",
            event_type=PROPOSAL_SUBMITTED,
            data={"title": proposal.title, "student_id": str(student.id)},
        )
        await self.db.commit()
        await self.db.refresh(proposal, ["student"])
        return proposal

    async def list_student_proposals(self, student_id: uuid.UUID) -> list[Proposal]:
        result = await self.db.execute(
            select(Proposal)
            .where(Proposal.submitted_by == student_id)
            .order_by(Proposal.created_at.desc())
        )
        return list(result.unique().scalars().all())

    async def submit_project(
        self,
        student: Student,
        title: Optional[str],
        file_url: Optional[str],
        file_public_id: Optional[str] = None,
        proposal_id: Optional[uuid.UUID] = None,
    ) -> Project:
        """Record a project whose file was uploaded to the file host by the client."""
        if _blank(title):
            raise ValidationError("Project title is required")
        if _blank(file_url):
            raise ValidationError("Project file is required")

        if proposal_id is not None:
            result = await self.db.execute(
                select(Proposal.id).where(
                    Proposal.id == proposal_id, Proposal.submitted_by == student.id
                )
            )
            if result.first() is None:
                raise NotFoundError("Proposal not found")

        project = Project(
            title=title.strip(),
            submitted_by=student.id,
            supervisor_id=student.added_by,
            proposal_id=proposal_id,
            file_url=file_url.strip(),
            file_public_id=file_public_id,
        )
        self.db.add(project)
        await self.db.flush()

        await self.events.append(
            stream_id=f"project:{project.id}",
            event_type=PROJECT_SUBMITTED,
            data={"title": project.title, "student_id": str(student.id)},
        )
        await self.db.commit()
        await self.db.refresh(project, ["student", "supervisor", "proposal"])
        return project

    async def list_student_projects(self, student_id: uuid.UUID) -> list[Project]:
        result = await self.db.execute(
            select(Project)
            .where(Project.submitted_by == student_id)
            .order_by(Project.created_at.desc())
        )
        return list(result.unique().scalars().all())

    # ─── Supervisor side ────────────────────────────────

    async def list_for_supervisor(
        self, supervisor_id: uuid.UUID, item_type: str
    ) -> list[Item]:
        """Projects or proposals routed to this supervisor, latest activity first."""
        model = _item_model(item_type)
        result = await self.db.execute(
            select(model)
            .where(model.supervisor_id == supervisor_id)
            .order_by(model.updated_at.desc())
        )
        return list(result.unique().scalars().all())

    async def review(
        self,
        supervisor_id: uuid.UUID,
        item_type: str,
        item_id: uuid.UUID,
        status: Optional[str],
    ) -> Item:
        """Approve or reject a pending item owned by this supervisor.

        The pending check and the status change are one conditional UPDATE,
        so when two reviews race only one of them matches a row.
        """
        model = _item_model(item_type)
        if status not in REVIEW_STATUSES:
            raise ValidationError("Invalid status specified")

        result = await self.db.execute(
            update(model)
            .where(
                model.id == item_id,
                model.supervisor_id == supervisor_id,
                model.status == ItemStatus.PENDING.value,
            )
            .values(status=status)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            await self.db.rollback()
            raise NotFoundError(f"{item_type} not found or already processed")

        await self.events.append(
            stream_id=f"{item_type}:{item_id}",
            event_type=ITEM_STATUS_CHANGED,
            data={"from": ItemStatus.PENDING.value, "to": status},
            metadata={"actor_id": str(supervisor_id), "actor_role": "supervisor"},
        )
        await self.db.commit()
        return await self.db.get(model, item_id, populate_existing=True)

    # ─── Admin side ─────────────────────────────────────

    async def list_all_projects(self) -> tuple[list[Project], dict[str, int]]:
        """Every project (newest first) plus per-status counts for the dashboard."""
        result = await self.db.execute(
            select(Project).order_by(Project.created_at.desc())
        )
        projects = list(result.unique().scalars().all())

        counts = {"total": 0, **{s.value: 0 for s in ItemStatus}}
        rows = await self.db.execute(
            select(Project.status, func.count()).group_by(Project.status)
        )
        for status, n in rows.all():
            counts[status] = n
            counts["total"] += n
        return projects, counts

    async def search_projects(self, title: Optional[str]) -> list[Project]:
        if _blank(title):
            raise ValidationError("Project title query is required")
        result = await self.db.execute(
            select(Project)
            .where(Project.title.icontains(title.strip(), autoescape=True))
            .order_by(Project.created_at.desc())
        )
        return list(result.unique().scalars().all())
