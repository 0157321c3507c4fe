"""Authentication attempt model, written by field devices."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime
from sqlmodel import Field, SQLModel


class AuthLog(SQLModel, table=True):
    """One biometric authentication attempt.

    This service never writes these rows; it only lists and exports them.
    """

    __tablename__ = "auth_logs"

    id: int | None = Field(default=None, primary_key=True)
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), index=True, nullable=False)
    )
    user_id: str = Field(max_length=100, index=True)
    user_name: str | None = Field(default=None, max_length=255)
    device_name: str = Field(default="", max_length=100)
    serial_no: str = Field(max_length=50, index=True)
    auth_mode: int = Field(default=0)
    is_success: bool = Field(default=False)
    error_message: str | None = None
