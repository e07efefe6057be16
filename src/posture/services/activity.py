"""Audit trail of administrative changes."""

import logging
from enum import Enum

from sqlalchemy.ext.asyncio import AsyncSession

from posture.repositories.user_repo import ActivityLogRepository

logger = logging.getLogger(__name__)


class ActivityAction(str, Enum):
    CREATE_SERVICE = "CREATE_SERVICE"
    UPDATE_SERVICE = "UPDATE_SERVICE"
    DELETE_SERVICE = "DELETE_SERVICE"
    UPDATE_RISK_SCORE = "UPDATE_RISK_SCORE"
    INGEST_FINDINGS = "INGEST_FINDINGS"


async def log_activity(
    session: AsyncSession,
    user: dict,
    action: ActivityAction,
    service_name: str | None = None,
    details: str | None = None,
) -> None:
    """Record an activity entry for the acting user and commit it."""
    await ActivityLogRepository(session).create(
        user_id=int(user["sub"]),
        username=user.get("username", ""),
        action=ActivityAction(action).value,
        service_name=service_name,
        details=details,
    )
    await session.commit()
    logger.info(
        "activity_logged",
        extra={"action": ActivityAction(action).value, "service_name": service_name},
    )
