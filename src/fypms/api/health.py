"""Health check endpoint.

Learn: The database is required, so if it can't answer the endpoint
returns 503 and the status is "unhealthy". Redis only backs login rate
limiting: when it was never connected it reports "disabled", and when a
connected client stops answering the API still works, so the status is
"degraded". The check reuses the app's session and Redis client rather
than opening connections of its own, and it also reports whether the
default admin exists, since without one nobody can create supervisors.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fypms import __version__, cache
from fypms.config import settings
from fypms.db.engine import get_db
from fypms.db.models import Admin
from fypms.schemas.common import api_response

router = APIRouter()


async def _check_database(db: AsyncSession) -> dict:
    try:
        admins = (await db.execute(select(func.count()).select_from(Admin))).scalar_one()
    except Exception as e:
        return {"database": f"error: {e}", "adminBootstrapped": None}
    return {"database": "ok", "adminBootstrapped": admins > 0}


async def _check_redis() -> str:
    try:
        redis = cache.get_redis()
    except RuntimeError:
        return "disabled"
    try:
        await redis.ping()
    except Exception as e:
        return f"error: {e}"
    return "ok"


@router.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    """Report database and Redis reachability for load balancers."""
    checks = {
        "server": "ok",
        "version": __version__,
        "environment": settings.environment,
        **await _check_database(db),
        "redis": await _check_redis(),
    }

    if checks["database"] != "ok":
        status, code = "unhealthy", 503
    elif checks["redis"] not in ("ok", "disabled"):
        status, code = "degraded", 200
    else:
        status, code = "healthy", 200
    checks["status"] = status

    return JSONResponse(
        status_code=code,
        content=api_response(checks, f"Service is {status}", code),
    )
