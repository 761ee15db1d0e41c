"""Student API — session routes, proposals and project submissions."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fypms.api.sessions import add_session_routes
from fypms.auth.gate import AuthContext, require_student
from fypms.db.engine import get_db
from fypms.db.models import Role
from fypms.schemas.common import api_response
from fypms.schemas.submission import (
    ProjectCreate,
    ProjectRead,
    ProposalCreate,
    ProposalRead,
)
from fypms.services.submission_service import SubmissionService

router = APIRouter(prefix="/student")

add_session_routes(
    router,
    Role.STUDENT,
    login_path="/login-student",
    logout_path="/student-logout",
    gate=require_student,
)


def _submissions(db: AsyncSession = Depends(get_db)) -> SubmissionService:
    return SubmissionService(db)


@router.post("/submit-proposal", status_code=201)
async def submit_proposal(
    body: ProposalCreate,
    ctx: AuthContext = Depends(require_student),
    svc: SubmissionService = Depends(_submissions),
):
    proposal = await svc.submit_proposal(ctx.identity, body.title, body.description)
    return api_response(
        ProposalRead.model_validate(proposal),
        "Proposal submitted successfully",
        status_code=201,
    )


@router.get("/get-student-proposals")
async def get_student_proposals(
    ctx: AuthContext = Depends(require_student),
    svc: SubmissionService = Depends(_submissions),
):
    proposals = await svc.list_student_proposals(ctx.id)
    return api_response(
        [ProposalRead.model_validate(p) for p in proposals],
        "Proposals retrieved successfully",
    )


@router.post("/submit-project", status_code=201)
async def submit_project(
    body: ProjectCreate,
    ctx: AuthContext = Depends(require_student),
    svc: SubmissionService = Depends(_submissions),
):
    """Record a project. The file itself is uploaded by the client beforehand."""
    project = await svc.submit_project(
        ctx.identity,
        title=body.title,
        file_url=body.file_url,
        file_public_id=body.file_public_id,
        proposal_id=body.proposal_id,
    )
    return api_response(
        ProjectRead.model_validate(project),
        "Project submitted successfully",
        status_code=201,
    )


@router.get("/get-student-projects")
async def get_student_projects(
    ctx: AuthContext = Depends(require_student),
    svc: SubmissionService = Depends(_submissions),
):
    projects = await svc.list_student_projects(ctx.id)
    return api_response(
        [
            ProjectRead.model_validate(p).model_dump(
                mode="json", by_alias=True, exclude={"file_public_id"}
            )
            for p in projects
        ],
        "Projects retrieved successfully",
    )
