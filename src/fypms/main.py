"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Lifespan manages startup/shutdown (Redis, default admin,
database engine). Middleware, CORS, error handlers and routers are all
registered here.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fypms import __version__
from fypms.api import api_router
from fypms.config import settings
from fypms.errors import register_exception_handlers

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: Anything before `yield` runs at startup, after `yield` runs
    at shutdown. Neither Redis nor the admin bootstrap is allowed to
    stop the server from starting.
    """
    logger.info(
        "fypms.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    from fypms.cache import close_redis, init_redis
    try:
        await init_redis()
        logger.info("fypms.redis_connected", url=settings.redis_url)
    except Exception as e:
        logger.warning("fypms.redis_unavailable", error=str(e))
        # Redis is optional; only rate limiting is lost

    from fypms.services.bootstrap import bootstrap_admin
    await bootstrap_admin()

    yield

    logger.info("fypms.shutdown")
    await close_redis()

    from fypms.db.engine import engine
    await engine.dispose()


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    app = FastAPI(
        title="FYPMS",
        description="Final-year project management API — admins, supervisors, students",
        version=__version__,
        lifespan=lifespan,
    )

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: CORS → RateLimit → Security → RequestId → handler

    from fypms.middleware.rate_limit import RateLimitMiddleware
    from fypms.middleware.request_id import RequestIdMiddleware
    from fypms.middleware.security import SecurityHeadersMiddleware

    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        default_rpm=settings.rate_limit_rpm,
        auth_rpm=settings.rate_limit_auth_rpm,
    )
    # Credentials (cookies) are only sent cross-origin to listed origins.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(api_router)

    @app.get("/", include_in_schema=False)
    async def root():
        return {"message": "Welcome to the FYP MANAGEMENT SYSTEM API"}

    return app


# Default app instance (used by uvicorn: fypms.main:app)
app = create_app()
