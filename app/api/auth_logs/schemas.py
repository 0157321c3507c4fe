"""Auth log response schemas."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from app.utils.schemas import CamelModel


class AuthLogResponse(CamelModel):
    id: int
    timestamp: datetime
    user_id: str
    user_name: Optional[str] = None
    device_name: str
    serial_no: str
    # Written by field devices; values outside 0-2 are passed through as-is
    auth_mode: int = Field(..., description="0=Face, 1=Vein, 2=Face+Vein")
    is_success: bool
    error_message: Optional[str] = None
