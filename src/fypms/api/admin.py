"""Admin API — session routes plus supervisor and project management.

Learn: Every route except login requires an admin access token.
PATCH /supervisor/{id} is the one mixed-role route: a supervisor may
edit their own profile through it.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from fypms.api.sessions import add_session_routes
from fypms.auth.gate import AuthContext, require_admin, require_roles
from fypms.db.engine import get_db
from fypms.db.models import Role
from fypms.schemas.common import api_response
from fypms.schemas.people import SupervisorCreate, SupervisorRead, SupervisorUpdate
from fypms.schemas.submission import ProjectRead
from fypms.services.submission_service import SubmissionService
from fypms.services.supervisor_service import SupervisorService

router = APIRouter(prefix="/admin")

add_session_routes(
    router,
    Role.ADMIN,
    login_path="/login-admin",
    logout_path="/admin-logout",
    gate=require_admin,
)


def _supervisors(db: AsyncSession = Depends(get_db)) -> SupervisorService:
    return SupervisorService(db)


def _submissions(db: AsyncSession = Depends(get_db)) -> SubmissionService:
    return SubmissionService(db)


# ─── Supervisors ────────────────────────────────────────

@router.post("/add-supervisor", status_code=201)
async def add_supervisor(
    body: SupervisorCreate,
    ctx: AuthContext = Depends(require_admin),
    svc: SupervisorService = Depends(_supervisors),
):
    supervisor = await svc.create(
        name=body.name,
        email=body.email,
        password=body.password,
        department=body.department,
    )
    return api_response(
        SupervisorRead.model_validate(supervisor),
        "Supervisor added successfully",
        status_code=201,
    )


@router.get("/get-all-supervisors")
async def get_all_supervisors(
    ctx: AuthContext = Depends(require_admin),
    svc: SupervisorService = Depends(_supervisors),
):
    supervisors = await svc.list_all()
    return api_response(
        [SupervisorRead.model_validate(s) for s in supervisors],
        "Supervisors retrieved successfully",
    )


@router.patch("/supervisor/{supervisor_id}")
async def update_supervisor(
    supervisor_id: uuid.UUID,
    body: SupervisorUpdate,
    ctx: AuthContext = Depends(require_roles(Role.ADMIN, Role.SUPERVISOR)),
    svc: SupervisorService = Depends(_supervisors),
):
    supervisor = await svc.update(
        supervisor_id,
        actor=ctx,
        name=body.name,
        email=body.email,
        password=body.password,
        department=body.department,
    )
    return api_response(
        SupervisorRead.model_validate(supervisor), "Supervisor updated successfully"
    )


@router.delete("/supervisor/{supervisor_id}")
async def delete_supervisor(
    supervisor_id: uuid.UUID,
    ctx: AuthContext = Depends(require_admin),
    svc: SupervisorService = Depends(_supervisors),
):
    await svc.delete(supervisor_id)
    return api_response(None, "Supervisor deleted successfully")


@router.get("/search-supervisors")
async def search_supervisors(
    name: Optional[str] = Query(None),
    ctx: AuthContext = Depends(require_admin),
    svc: SupervisorService = Depends(_supervisors),
):
    supervisors = await svc.search(name)
    return api_response(
        [SupervisorRead.model_validate(s) for s in supervisors],
        f'Found {len(supervisors)} supervisors matching "{name.strip()}"',
    )


# ─── Projects ───────────────────────────────────────────

@router.get("/get-all-projects")
async def get_all_projects(
    ctx: AuthContext = Depends(require_admin),
    svc: SubmissionService = Depends(_submissions),
):
    projects, counts = await svc.list_all_projects()
    return api_response(
        {
            "projects": [ProjectRead.model_validate(p) for p in projects],
            "counts": counts,
        },
        "All projects retrieved successfully",
    )


@router.get("/search-projects")
async def search_projects(
    title: Optional[str] = Query(None),
    ctx: AuthContext = Depends(require_admin),
    svc: SubmissionService = Depends(_submissions),
):
    projects = await svc.search_projects(title)
    return api_response(
        [ProjectRead.model_validate(p) for p in projects], "Projects found by title"
    )
