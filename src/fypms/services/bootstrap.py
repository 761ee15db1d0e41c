"""Default admin bootstrap.

Learn: There is no sign-up flow for admins. On startup the app makes
sure the configured admin account exists. A failure here (database not
reachable yet, say) is logged and swallowed — startup continues, and
the admin can be created later with `fypms init-admin`.
"""

from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from fypms.auth.password import hash_password
from fypms.auth.stores import AdminStore, normalize_email
from fypms.config import settings
from fypms.db.models import Admin
from fypms.events.store import EventStore
from fypms.events.types import ADMIN_CREATED

logger = structlog.get_logger()


async def ensure_default_admin(
    db: AsyncSession, email: str, password: str
) -> Optional[Admin]:
    """Create the admin if no admin with this email exists.

    Returns the new Admin, or None if one was already there.
    """
    if await AdminStore(db).find_by_email(email):
        return None

    admin = Admin(
        email=normalize_email(email),
        password_hash=await run_in_threadpool(hash_password, password),
    )
    db.add(admin)
    await db.flush()

    await EventStore(db).append(
        stream_id=f"admin:{admin.id}",
        event_type=ADMIN_CREATED,
        data={"email": admin.email, "bootstrap": True},
    )
    await db.commit()
    return admin


async def bootstrap_admin() -> None:
    """Startup hook. Never raises."""
    from fypms.db.engine import async_session_factory

    try:
        async with async_session_factory() as db:
            admin = await ensure_default_admin(
                db, settings.default_admin_email, settings.default_admin_password
            )
        if admin:
            logger.info("fypms.admin_created", email=admin.email)
        else:
            logger.info("fypms.admin_exists", email=settings.default_admin_email)
    except Exception as e:
        logger.warning("fypms.admin_bootstrap_failed", error=str(e))
