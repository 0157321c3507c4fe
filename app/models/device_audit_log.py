"""Device change log model (WORM - Write Once Read Many)."""

from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import Column, DateTime, Text
from sqlmodel import Field, SQLModel


class ChangeType(str, Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class DeviceAuditEntry(SQLModel, table=True):
    """Immutable record of one device mutation.

    WORM (Write Once Read Many) - rows are only ever inserted.
    ``serial_no`` is deliberately not a foreign key so the history of a
    deleted device stays queryable.
    """

    __tablename__ = "device_logs"

    id: int | None = Field(default=None, primary_key=True)
    serial_no: str = Field(max_length=50, index=True)
    change_type: str = Field(max_length=20)
    change_details: str = Field(default="", sa_column=Column(Text, nullable=False))
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), index=True, nullable=False)
    )
    admin_user: str = Field(max_length=50)
