"""Supervisor API — session routes, student management, reviews."""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fypms.api.sessions import add_session_routes
from fypms.auth.gate import AuthContext, require_supervisor
from fypms.db.engine import get_db
from fypms.db.models import Project, Role
from fypms.schemas.common import api_response
from fypms.schemas.people import StudentCreate, StudentRead, StudentUpdate
from fypms.schemas.submission import ProjectRead, ProposalRead, StatusUpdate
from fypms.services.student_service import StudentService
from fypms.services.submission_service import SubmissionService

router = APIRouter(prefix="/supervisor")

add_session_routes(
    router,
    Role.SUPERVISOR,
    login_path="/login-supervisor",
    logout_path="/logout-supervisor",
    gate=require_supervisor,
)


def _students(db: AsyncSession = Depends(get_db)) -> StudentService:
    return StudentService(db)


def _submissions(db: AsyncSession = Depends(get_db)) -> SubmissionService:
    return SubmissionService(db)


def _item_read(item):
    if isinstance(item, Project):
        return ProjectRead.model_validate(item)
    return ProposalRead.model_validate(item)


# ─── Students ───────────────────────────────────────────

@router.post("/add-student", status_code=201)
async def add_student(
    body: StudentCreate,
    ctx: AuthContext = Depends(require_supervisor),
    svc: StudentService = Depends(_students),
):
    student = await svc.create(
        supervisor_id=ctx.id,
        name=body.name,
        email=body.email,
        password=body.password,
        roll_number=body.roll_number,
    )
    return api_response(
        StudentRead.model_validate(student),
        "Student added successfully",
        status_code=201,
    )


@router.get("/get-all-students")
async def get_all_students(
    ctx: AuthContext = Depends(require_supervisor),
    svc: StudentService = Depends(_students),
):
    students = await svc.list_for_supervisor(ctx.id)
    return api_response(
        [StudentRead.model_validate(s) for s in students],
        "Students retrieved successfully",
    )


@router.patch("/update-student/{student_id}")
async def update_student(
    student_id: uuid.UUID,
    body: StudentUpdate,
    ctx: AuthContext = Depends(require_supervisor),
    svc: StudentService = Depends(_students),
):
    student = await svc.update(
        ctx.id,
        student_id,
        name=body.name,
        email=body.email,
        password=body.password,
        roll_number=body.roll_number,
    )
    return api_response(
        StudentRead.model_validate(student), "Student updated successfully"
    )


@router.delete("/delete-student/{student_id}")
async def delete_student(
    student_id: uuid.UUID,
    ctx: AuthContext = Depends(require_supervisor),
    svc: StudentService = Depends(_students),
):
    await svc.delete(ctx.id, student_id)
    return api_response(None, "Student deleted successfully")


# ─── Projects & proposals ───────────────────────────────

@router.get("/items/{item_type}")
async def get_items(
    item_type: str,
    ctx: AuthContext = Depends(require_supervisor),
    svc: SubmissionService = Depends(_submissions),
):
    """List this supervisor's projects or proposals (item_type = project | proposal)."""
    items = await svc.list_for_supervisor(ctx.id, item_type)
    return api_response(
        [_item_read(i) for i in items], f"{item_type}s retrieved successfully"
    )


@router.patch("/items/{item_type}/{item_id}")
async def update_item_status(
    item_type: str,
    item_id: uuid.UUID,
    body: StatusUpdate,
    ctx: AuthContext = Depends(require_supervisor),
    svc: SubmissionService = Depends(_submissions),
):
    """Approve or reject a pending project/proposal."""
    item = await svc.review(ctx.id, item_type, item_id, body.status)
    return api_response(_item_read(item), f"{item_type} {body.status} successfully")
