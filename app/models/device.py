"""Registered biometric device model."""

from datetime import datetime, timezone
from enum import IntEnum

from sqlalchemy import Column, DateTime
from sqlmodel import Field, SQLModel


class AuthMode(IntEnum):
    """Biometric factor(s) a field device requires. Stored as its integer value."""

    FACE = 0
    VEIN = 1
    FACE_AND_VEIN = 2

    @property
    def label(self) -> str:
        return AUTH_MODE_LABELS[self]


AUTH_MODE_LABELS = {
    AuthMode.FACE: "Face",
    AuthMode.VEIN: "Vein",
    AuthMode.FACE_AND_VEIN: "Dual",
}


class Device(SQLModel, table=True):
    """A face/vein authentication terminal.

    ``serial_no`` is either a hardware-reported serial or a manually assigned
    ID; both are treated identically and never change after creation.
    """

    __tablename__ = "devices"

    serial_no: str = Field(primary_key=True, max_length=50)
    device_name: str = Field(max_length=100)
    auth_mode: int = Field(default=AuthMode.FACE.value, ge=0, le=2)
    is_active: bool = Field(default=True)
    last_updated: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )
