"""Device registry: the only writer of device rows.

Every mutation stages its audit entry in the same session and commits once,
so a device change and its log entry either both land or neither does.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.config.logger import app_logger
from app.db.db import commit_or_raise
from app.models.device import AuthMode, Device
from app.models.device_audit_log import ChangeType, DeviceAuditEntry
from app.services.query_filters import filter_devices
from app.utils.audit import append_device_change, list_device_changes
from app.utils.auth import Caller
from app.utils.errors import ConflictError, NotFoundError, ValidationFailedError


def _require_text(value: Optional[str], field: str) -> str:
    if value is None or not value.strip():
        raise ValidationFailedError(f"{field} is required")
    return value.strip()


def _auth_mode(value: Any) -> AuthMode:
    try:
        return AuthMode(value)
    except ValueError as exc:
        raise ValidationFailedError(f"Unknown auth mode {value}") from exc


def _conflict_detail(serial_no: str) -> str:
    return f"Device {serial_no} is already registered"


async def _serial_taken(session: AsyncSession, serial_no: str) -> bool:
    return await session.get(Device, serial_no) is not None


async def get_device(session: AsyncSession, serial_no: str) -> Device:
    device = await session.get(Device, serial_no)
    if device is None:
        raise NotFoundError(f"Device {serial_no} not found")
    return device


async def list_devices(session: AsyncSession, search: Optional[str] = None) -> List[Device]:
    result = await session.execute(select(Device).order_by(Device.serial_no))
    return filter_devices(result.scalars().all(), search)


async def get_auth_mode(session: AsyncSession, serial_no: str) -> Dict[str, Any]:
    """Projection a field device reads at boot to pick its biometric flow."""
    device = await session.get(Device, serial_no)
    if device is None:
        raise NotFoundError("Device not registered")
    return {
        "auth_mode": AuthMode(device.auth_mode),
        "device_name": device.device_name,
        "is_active": device.is_active,
    }


async def create_device(
    session: AsyncSession,
    caller: Caller,
    serial_no: str,
    device_name: str,
    auth_mode: AuthMode = AuthMode.FACE,
    is_active: bool = True,
) -> Device:
    """Register a device and log a CREATE entry.

    Raises:
        ValidationFailedError: If serial or name is blank
        ConflictError: If the serial is already registered
    """
    serial_no = _require_text(serial_no, "serialNo")
    device_name = _require_text(device_name, "deviceName")
    auth_mode = _auth_mode(auth_mode)

    if await _serial_taken(session, serial_no):
        app_logger.warning(f"Rejected duplicate device registration: {serial_no} by {caller.username}")
        raise ConflictError(_conflict_detail(serial_no))

    device = Device(
        serial_no=serial_no,
        device_name=device_name,
        auth_mode=auth_mode.value,
        is_active=is_active,
        last_updated=datetime.now(timezone.utc),
    )
    session.add(device)
    append_device_change(
        session,
        serial_no,
        ChangeType.CREATE,
        f"Device registered: {device_name}",
        caller.username,
    )
    # The primary key still rejects a concurrent insert of the same serial
    await commit_or_raise(session, _conflict_detail(serial_no))

    app_logger.info(f"Device created: {serial_no} ({device_name})")
    return device


def _describe_changes(device: Device, changes: Dict[str, Any]) -> str:
    parts = []
    for field, new_value in changes.items():
        old_value = getattr(device, field)
        if old_value == new_value:
            continue
        if field == "auth_mode":
            parts.append(f"authMode: {AuthMode(old_value).label} -> {AuthMode(new_value).label}")
        elif field == "device_name":
            parts.append(f"deviceName: {old_value} -> {new_value}")
        elif field == "is_active":
            parts.append(f"isActive: {old_value} -> {new_value}")
    return "Updated " + ", ".join(parts) if parts else "Updated: no field changes"


async def update_device(
    session: AsyncSession,
    caller: Caller,
    serial_no: str,
    device_name: Optional[str] = None,
    auth_mode: Optional[AuthMode] = None,
    is_active: Optional[bool] = None,
) -> Device:
    """Merge the supplied fields into a device and log an UPDATE entry.

    Fields left as None are unchanged. The serial itself is never updated.
    """
    device = await get_device(session, serial_no)

    changes: Dict[str, Any] = {}
    if device_name is not None:
        changes["device_name"] = _require_text(device_name, "deviceName")
    if auth_mode is not None:
        changes["auth_mode"] = _auth_mode(auth_mode).value
    if is_active is not None:
        changes["is_active"] = is_active

    details = _describe_changes(device, changes)
    for field, value in changes.items():
        setattr(device, field, value)
    device.last_updated = datetime.now(timezone.utc)
    session.add(device)

    append_device_change(session, device.serial_no, ChangeType.UPDATE, details, caller.username)
    await commit_or_raise(session, f"Device {device.serial_no} could not be updated")

    app_logger.info(f"Device updated: {device.serial_no} - {details}")
    return device


async def delete_device(session: AsyncSession, caller: Caller, serial_no: str) -> None:
    """Remove a device. Its audit history is kept and stays queryable."""
    device = await get_device(session, serial_no)

    await session.delete(device)
    append_device_change(
        session,
        serial_no,
        ChangeType.DELETE,
        f"Device deleted: {device.device_name}",
        caller.username,
    )
    await commit_or_raise(session, f"Device {serial_no} could not be deleted")

    app_logger.info(f"Device deleted: {serial_no}")


async def get_device_logs(session: AsyncSession, serial_no: str) -> List[DeviceAuditEntry]:
    """Change history for a serial, newest first. Works for deleted devices too."""
    return await list_device_changes(session, serial_no)
