"""Login, session and profile routes."""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from posture.api.middleware.rate_limit import limiter
from posture.auth.passwords import hash_password, needs_rehash, verify_password
from posture.auth.tokens import create_access_token
from posture.config import settings
from posture.db.base import utcnow
from posture.dependencies import get_current_user, get_db
from posture.errors.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
)
from posture.models.user import (
    PasswordChange,
    ProfileUpdate,
    TokenResponse,
    UserLogin,
    UserResponse,
)
from posture.repositories.user_repo import UserRepository

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


@router.post("/login", response_model=TokenResponse)
@limiter.limit(settings.rate_limit_login)
async def login(request: Request, body: UserLogin, db: AsyncSession = Depends(get_db)):
    repo = UserRepository(db)
    user = await repo.get_by_username(body.username)
    # Same message for unknown users and bad passwords.
    if user is None or not verify_password(user.password_hash, body.password):
        logger.info("login_failed", extra={"username": body.username})
        raise AuthenticationError("Invalid credentials")

    if user.status == "Disabled":
        raise AuthorizationError(
            "Your account has been disabled. Please contact AppSec Team!",
            details={"accountDisabled": True},
        )

    if needs_rehash(user.password_hash):
        user.password_hash = hash_password(body.password)
        user.password_algo = "argon2id"
        user.password_updated_at = utcnow()
        logger.info("password_rehashed", extra={"user_id": user.id})

    await repo.update_last_login(user)
    await db.commit()

    return TokenResponse(
        access_token=create_access_token(user.id, user.username, user.type),
        expires_in=settings.jwt_access_token_expire_minutes * 60,
        user=UserResponse.model_validate(user),
    )


@router.post("/logout")
async def logout() -> dict:
    """Tokens are stateless; the client discards its copy."""
    return {"success": True, "message": "Logged out successfully"}


@router.get("/auth/user", response_model=UserResponse)
async def current_user(
    user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return UserResponse.model_validate(await _load_user(db, user))


@router.post("/auth/change-password")
@limiter.limit(settings.rate_limit_login)
async def change_password(
    request: Request,
    body: PasswordChange,
    user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict:
    row = await _load_user(db, user)
    if not verify_password(row.password_hash, body.current_password):
        raise AuthenticationError("Current password is incorrect")

    row.password_hash = hash_password(body.new_password)
    row.password_algo = "argon2id"
    row.password_updated_at = utcnow()
    await db.commit()
    logger.info("password_changed", extra={"user_id": row.id})
    return {"success": True, "message": "Password changed successfully"}


@router.get("/profile", response_model=UserResponse)
async def get_profile(
    user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return UserResponse.model_validate(await _load_user(db, user))


@router.patch("/profile", response_model=UserResponse)
async def update_profile(
    body: ProfileUpdate,
    user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    repo = UserRepository(db)
    row = await _load_user(db, user)

    existing = await repo.get_by_username(body.username)
    if existing is not None and existing.id != row.id:
        raise ConflictError("Username is already taken")

    await repo.update(row, name=body.name, username=body.username)
    await db.commit()
    return UserResponse.model_validate(row)


async def _load_user(db: AsyncSession, user: dict):
    row = await UserRepository(db).get(int(user["sub"]))
    if row is None:
        raise NotFoundError("User", user["sub"])
    return row
