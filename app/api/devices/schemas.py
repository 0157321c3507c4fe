"""Device registry request and response schemas."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from app.models.device import AuthMode
from app.utils.schemas import CamelModel


class AuthModeRequest(CamelModel):
    """Body a field device posts at boot."""

    serial_no: str = Field(..., min_length=1, max_length=50, description="Hardware serial or assigned device ID")

    model_config = {"json_schema_extra": {"example": {"serialNo": "KF5KW2124062200091"}}}


class AuthModeResponse(CamelModel):
    auth_mode: AuthMode = Field(..., description="0=Face, 1=Vein, 2=Face+Vein")
    device_name: str
    is_active: bool

    model_config = {"json_schema_extra": {"example": {
        "authMode": 2,
        "deviceName": "サーバールーム (Server Room)",
        "isActive": True,
    }}}


class DeviceCreate(CamelModel):
    serial_no: str = Field(..., min_length=1, max_length=50)
    device_name: str = Field(..., min_length=1, max_length=100)
    auth_mode: AuthMode = Field(default=AuthMode.FACE)
    is_active: bool = Field(default=True)

    model_config = {"json_schema_extra": {"example": {
        "serialNo": "BC9001",
        "deviceName": "Lobby",
        "authMode": 0,
        "isActive": True,
    }}}


class DeviceUpdate(CamelModel):
    """Partial update. Omitted fields are left unchanged; a ``serialNo`` in the body is ignored."""

    device_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    auth_mode: Optional[AuthMode] = None
    is_active: Optional[bool] = None


class DeviceResponse(CamelModel):
    serial_no: str
    device_name: str
    auth_mode: AuthMode
    is_active: bool
    last_updated: datetime


class DeviceLogResponse(CamelModel):
    id: int
    serial_no: str
    change_type: str
    change_details: str
    timestamp: datetime
    admin_user: str
