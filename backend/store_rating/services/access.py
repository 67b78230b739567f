"""Role checks and integrity-error mapping shared by the resource services."""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from store_rating.core.exceptions import Conflict, Forbidden
from store_rating.models.user import UserRole
from store_rating.schemas.auth import Principal

logger = logging.getLogger(__name__)


def ensure_role(principal: Principal, *allowed: UserRole) -> None:
    if principal.role not in allowed:
        logger.warning(
            "Denied user %s: role %s not in %s",
            principal.id, principal.role.value, [r.value for r in allowed],
        )
        raise Forbidden("Access denied")


# SQLSTATE for unique_violation (asyncpg exposes it as ``sqlstate``)
UNIQUE_VIOLATION = "23505"


def is_unique_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate:
        return sqlstate == UNIQUE_VIOLATION
    return "UNIQUE constraint failed" in str(orig)


async def flush_or_conflict(session: AsyncSession, message: str) -> None:
    """Flush pending writes, reporting a unique-constraint race as a Conflict.

    Other integrity failures (foreign keys, checks) propagate unchanged.
    """
    try:
        await session.flush()
    except IntegrityError as exc:
        if not is_unique_violation(exc):
            raise
        logger.warning("Unique constraint violated on flush: %s", exc.orig)
        raise Conflict(message) from exc
