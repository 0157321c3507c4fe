"""Authentication request and response schemas."""

from typing import Optional

from pydantic import BaseModel, Field

from app.models.admin_user import UserRole


class LoginRequest(BaseModel):
    """Request schema for admin login."""

    username: str = Field(..., min_length=1, description="Admin username")
    password: str = Field(..., description="Admin password")
    client_code: Optional[str] = Field(default=None, description="Tenant code, required only when the server has one configured")

    model_config = {"json_schema_extra": {"example": {
        "username": "admin",
        "password": "admin",
    }}}


class SessionUser(BaseModel):
    """The resolved identity a console keeps for the session."""

    username: str
    role: UserRole


class TokenResponse(BaseModel):
    """Response schema for authentication tokens."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(..., description="Token expiration time in seconds")
    user: SessionUser

    model_config = {"json_schema_extra": {"example": {
        "access_token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
        "token_type": "bearer",
        "expires_in": 28800,
        "user": {"username": "admin", "role": "super_admin"},
    }}}
