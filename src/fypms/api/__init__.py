"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Auth is applied per route (via role gates), not per router,
because each role router mixes an open route (login) with
protected ones. Health is open.
"""

from fastapi import APIRouter

from fypms.api.admin import router as admin_router
from fypms.api.health import router as health_router
from fypms.api.student import router as student_router
from fypms.api.supervisor import router as supervisor_router

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(health_router, tags=["health"])
api_router.include_router(admin_router, tags=["admin"])
api_router.include_router(supervisor_router, tags=["supervisor"])
api_router.include_router(student_router, tags=["student"])
