"""Audit logging utility for the WORM (Write Once Read Many) change trails.

Only insert and read helpers exist here. Nothing in the application updates or
deletes an audit row.
"""

from typing import List

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.config.logger import app_logger
from app.models.admin_user import AdminUserAuditEntry
from app.models.device_audit_log import ChangeType, DeviceAuditEntry


def append_device_change(
    session: AsyncSession,
    serial_no: str,
    change_type: ChangeType,
    details: str,
    acting_user: str,
) -> DeviceAuditEntry:
    """Stage a device change entry in the caller's transaction.

    Args:
        session: Database session holding the device mutation
        serial_no: Serial of the device that changed
        change_type: CREATE, UPDATE or DELETE
        details: Free-text summary of the change
        acting_user: Username of the admin who made the change

    Returns:
        The pending DeviceAuditEntry (not yet committed)
    """
    change_type = ChangeType(change_type)
    entry = DeviceAuditEntry(
        serial_no=serial_no,
        change_type=change_type.value,
        change_details=details,
        admin_user=acting_user,
    )
    # Don't commit here - the entry must land in the same transaction
    # as the mutation it describes
    session.add(entry)
    app_logger.info(f"AUDIT device {change_type.value} {serial_no} by {acting_user}: {details}")
    return entry


async def list_device_changes(session: AsyncSession, serial_no: str) -> List[DeviceAuditEntry]:
    """Return every entry for a serial, newest first."""
    result = await session.execute(
        select(DeviceAuditEntry)
        .where(DeviceAuditEntry.serial_no == serial_no)
        .order_by(DeviceAuditEntry.timestamp.desc(), DeviceAuditEntry.id.desc())
    )
    return list(result.scalars().all())


def append_user_change(
    session: AsyncSession,
    user_id: int,
    username: str,
    change_type: ChangeType,
    details: str,
    acting_user: str,
) -> AdminUserAuditEntry:
    """Stage an admin-user change entry in the caller's transaction."""
    change_type = ChangeType(change_type)
    entry = AdminUserAuditEntry(
        user_id=user_id,
        username=username,
        change_type=change_type.value,
        change_details=details,
        admin_user=acting_user,
    )
    session.add(entry)
    app_logger.info(f"AUDIT user {change_type.value} {username} by {acting_user}: {details}")
    return entry


async def list_user_changes(session: AsyncSession, user_id: int) -> List[AdminUserAuditEntry]:
    result = await session.execute(
        select(AdminUserAuditEntry)
        .where(AdminUserAuditEntry.user_id == user_id)
        .order_by(AdminUserAuditEntry.timestamp.desc(), AdminUserAuditEntry.id.desc())
    )
    return list(result.scalars().all())
