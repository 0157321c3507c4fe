"""Admin user model."""

from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import Column, DateTime, Text
from sqlmodel import Field, SQLModel


class UserRole(str, Enum):
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


class AdminUser(SQLModel, table=True):
    """Console account. Only super admins manage these rows."""

    __tablename__ = "admin_users"

    id: int | None = Field(default=None, primary_key=True)
    username: str = Field(unique=True, index=True, max_length=50)
    hashed_password: str = Field(max_length=255)
    role: str = Field(default=UserRole.ADMIN.value, max_length=20)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )


class AdminUserAuditEntry(SQLModel, table=True):
    """Append-only trail of admin-user mutations.

    ``user_id`` is not a foreign key; entries outlive the account they describe.
    """

    __tablename__ = "admin_user_logs"

    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(index=True)
    username: str = Field(max_length=50)
    change_type: str = Field(max_length=20)
    change_details: str = Field(default="", sa_column=Column(Text, nullable=False))
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), index=True, nullable=False)
    )
    admin_user: str = Field(max_length=50)
