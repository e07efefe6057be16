"""Pydantic models for users, authentication and the activity log."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from posture.models.common import CamelModel

UserType = Literal["User", "Admin"]
UserStatus = Literal["Active", "Disabled"]


# ── Request models ─────────────────────────────────────────────────────────────

class UserLogin(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class UserCreate(CamelModel):
    name: str = Field(min_length=1, max_length=200)
    username: str = Field(min_length=1, max_length=320)
    password: str = Field(min_length=8)
    type: UserType = "User"
    status: UserStatus = "Active"


class UserUpdate(CamelModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    username: str | None = Field(None, min_length=1, max_length=320)
    password: str | None = Field(None, min_length=8)
    type: UserType | None = None
    status: UserStatus | None = None


class PasswordChange(CamelModel):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=8)


class ProfileUpdate(CamelModel):
    name: str = Field(min_length=1, max_length=200)
    username: str = Field(min_length=1, max_length=320)


class BulkDelete(CamelModel):
    user_ids: list[int] = Field(min_length=1)


# ── Response models ────────────────────────────────────────────────────────────

class UserResponse(CamelModel):
    id: int
    name: str
    username: str
    type: str
    status: str
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class TokenResponse(BaseModel):
    access_token: str
    token_type: Literal["bearer"] = "bearer"
    expires_in: int
    user: UserResponse


class ActivityLogEntry(CamelModel):
    id: int
    user_id: int
    username: str
    action: str
    service_name: str | None = None
    details: str | None = None
    timestamp: datetime | None = None

    model_config = {"from_attributes": True}
