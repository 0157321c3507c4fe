"""Device registry API routes.

``POST /api/device/getAuthMode`` is called by field devices without a session
and returns a bare JSON object; every other route needs a signed-in admin and
answers with the standard envelope.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.db import get_session
from app.services import device_registry
from app.utils.auth import Caller, get_current_caller
from app.utils.responses import SuccessResponse, success_response
from app.api.devices.schemas import (
    AuthModeRequest,
    AuthModeResponse,
    DeviceCreate,
    DeviceLogResponse,
    DeviceResponse,
    DeviceUpdate,
)

router = APIRouter(prefix="/api/device", tags=["devices"])


@router.post("/getAuthMode", response_model=AuthModeResponse)
async def get_auth_mode(request: AuthModeRequest, session: AsyncSession = Depends(get_session)):
    """Tell a field device which biometric flow to run."""
    projection = await device_registry.get_auth_mode(session, request.serial_no)
    return AuthModeResponse(**projection)


@router.get("", response_model=SuccessResponse[List[DeviceResponse]])
async def list_devices(
    search: Optional[str] = Query(default=None, description="Substring of device name or serial"),
    session: AsyncSession = Depends(get_session),
    caller: Caller = Depends(get_current_caller),
):
    devices = await device_registry.list_devices(session, search)
    return success_response(
        data=[DeviceResponse.model_validate(d) for d in devices],
        message="Devices retrieved successfully",
    )


@router.post("", response_model=SuccessResponse[DeviceResponse], status_code=status.HTTP_201_CREATED)
async def create_device(
    request: DeviceCreate,
    session: AsyncSession = Depends(get_session),
    caller: Caller = Depends(get_current_caller),
):
    """Register a device. A duplicate serial answers 409 and changes nothing."""
    device = await device_registry.create_device(
        session,
        caller,
        serial_no=request.serial_no,
        device_name=request.device_name,
        auth_mode=request.auth_mode,
        is_active=request.is_active,
    )
    return success_response(data=DeviceResponse.model_validate(device), message="Device registered")


@router.get("/logs/{serial_no}", response_model=SuccessResponse[List[DeviceLogResponse]])
async def get_device_logs(
    serial_no: str,
    session: AsyncSession = Depends(get_session),
    caller: Caller = Depends(get_current_caller),
):
    """Change history for a serial, newest first. Deleted devices keep their history."""
    entries = await device_registry.get_device_logs(session, serial_no)
    return success_response(
        data=[DeviceLogResponse.model_validate(e) for e in entries],
        message="Device logs retrieved successfully",
    )


@router.get("/{serial_no}", response_model=SuccessResponse[DeviceResponse])
async def get_device(
    serial_no: str,
    session: AsyncSession = Depends(get_session),
    caller: Caller = Depends(get_current_caller),
):
    device = await device_registry.get_device(session, serial_no)
    return success_response(data=DeviceResponse.model_validate(device), message="Device retrieved successfully")


@router.put("/{serial_no}", response_model=SuccessResponse[DeviceResponse])
async def update_device(
    serial_no: str,
    request: DeviceUpdate,
    session: AsyncSession = Depends(get_session),
    caller: Caller = Depends(get_current_caller),
):
    device = await device_registry.update_device(
        session,
        caller,
        serial_no,
        device_name=request.device_name,
        auth_mode=request.auth_mode,
        is_active=request.is_active,
    )
    return success_response(data=DeviceResponse.model_validate(device), message="Device updated")


@router.delete("/{serial_no}", response_model=SuccessResponse[dict])
async def delete_device(
    serial_no: str,
    session: AsyncSession = Depends(get_session),
    caller: Caller = Depends(get_current_caller),
):
    await device_registry.delete_device(session, caller, serial_no)
    return success_response(data={"serialNo": serial_no}, message="Device deleted")
