"""Administration: user management, system metrics and the activity log."""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from posture.auth.passwords import hash_password
from posture.db.base import utcnow
from posture.dependencies import get_db, get_findings_collector, require_role
from posture.errors.exceptions import ConflictError, NotFoundError, ValidationError
from posture.integrations.service import FindingsCollector
from posture.models.user import ActivityLogEntry, BulkDelete, UserCreate, UserResponse, UserUpdate
from posture.repositories.user_repo import ActivityLogRepository, UserRepository
from posture.services.aggregation import aggregate_findings
from posture.services.registry import ServiceRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/users", response_model=list[UserResponse])
async def list_users(
    user: dict = Depends(require_role("admin")),
    db: AsyncSession = Depends(get_db),
):
    return [UserResponse.model_validate(row) for row in await UserRepository(db).list_all()]


@router.post("/users", response_model=UserResponse, status_code=201)
async def create_user(
    body: UserCreate,
    user: dict = Depends(require_role("admin")),
    db: AsyncSession = Depends(get_db),
):
    repo = UserRepository(db)
    if await repo.get_by_username(body.username) is not None:
        raise ConflictError("Username already exists")

    row = await repo.create(
        name=body.name,
        username=body.username,
        type=body.type,
        status=body.status,
        password_hash=hash_password(body.password),
        password_updated_at=utcnow(),
    )
    await db.commit()
    logger.info("user_created", extra={"user_id": row.id, "created_by": user["sub"]})
    return UserResponse.model_validate(row)


@router.delete("/users/bulk")
async def bulk_delete_users(
    body: BulkDelete,
    user: dict = Depends(require_role("admin")),
    db: AsyncSession = Depends(get_db),
) -> dict:
    if int(user["sub"]) in body.user_ids:
        raise ValidationError("You cannot delete your own account")
    deleted = await UserRepository(db).delete_many(body.user_ids)
    await db.commit()
    return {
        "success": True,
        "message": f"Successfully deleted {deleted} users",
        "deletedCount": deleted,
    }


@router.patch("/users/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    body: UserUpdate,
    user: dict = Depends(require_role("admin")),
    db: AsyncSession = Depends(get_db),
):
    repo = UserRepository(db)
    row = await repo.get(user_id)
    if row is None:
        raise NotFoundError("User", user_id)

    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    if "username" in changes and changes["username"] != row.username:
        if await repo.get_by_username(changes["username"]) is not None:
            raise ConflictError("Username already exists")
    password = changes.pop("password", None)
    if password:
        changes["password_hash"] = hash_password(password)
        changes["password_updated_at"] = utcnow()

    await repo.update(row, **changes)
    await db.commit()
    return UserResponse.model_validate(row)


@router.delete("/users/{user_id}")
async def delete_user(
    user_id: int,
    user: dict = Depends(require_role("admin")),
    db: AsyncSession = Depends(get_db),
) -> dict:
    if int(user["sub"]) == user_id:
        raise ValidationError("You cannot delete your own account")
    repo = UserRepository(db)
    row = await repo.get(user_id)
    if row is None:
        raise NotFoundError("User", user_id)
    await repo.delete(row)
    await db.commit()
    return {"success": True}


@router.get("/metrics")
async def admin_metrics(
    user: dict = Depends(require_role("admin")),
    db: AsyncSession = Depends(get_db),
    collector: FindingsCollector = Depends(get_findings_collector),
) -> dict:
    repo = UserRepository(db)
    by_status = await repo.count_by("status")
    by_type = await repo.count_by("type")
    services = await ServiceRegistry(db).list()
    tallies = aggregate_findings((await collector.collect()).values())
    return {
        "totalUsers": sum(by_status.values()),
        "activeUsers": by_status.get("Active", 0),
        "adminUsers": by_type.get("Admin", 0),
        "totalServices": len(services),
        "totalFindings": sum(t.total for t in tallies.values()),
        "criticalFindings": sum(t.critical for t in tallies.values()),
        "systemHealth": "healthy",
    }


@router.get("/activity-logs", response_model=list[ActivityLogEntry])
async def activity_logs(
    limit: int = Query(50, ge=1, le=500),
    user: dict = Depends(require_role("admin")),
    db: AsyncSession = Depends(get_db),
):
    rows = await ActivityLogRepository(db).list_recent(limit)
    return [ActivityLogEntry.model_validate(row) for row in rows]
