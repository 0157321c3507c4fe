"""Admin user management request and response schemas."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from app.models.admin_user import UserRole
from app.utils.schemas import CamelModel


class UserCreateRequest(CamelModel):
    username: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=1, description="Stored only as a bcrypt hash")
    role: UserRole = Field(default=UserRole.ADMIN)

    model_config = {"json_schema_extra": {"example": {
        "username": "ops1",
        "password": "change-me",
        "role": "admin",
    }}}


class UserUpdateRequest(CamelModel):
    """Partial update. Missing or empty fields are left unchanged."""

    role: Optional[str] = Field(default=None, description="'admin' or 'super_admin'")
    password: Optional[str] = None


class AdminUserResponse(CamelModel):
    """Account as listed to super admins. Never carries credential material."""

    id: int
    username: str
    role: UserRole
    created_at: datetime


class UserCreatedResponse(CamelModel):
    id: int
    username: str


class UserLogResponse(CamelModel):
    id: int
    user_id: int
    username: str
    change_type: str
    change_details: str
    timestamp: datetime
    admin_user: str
