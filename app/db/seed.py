"""Database seed helpers."""

from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.config.logger import app_logger
from app.config.settings import settings
from app.models.admin_user import AdminUser, UserRole
from app.models.device import AuthMode, Device
from app.models.device_audit_log import ChangeType
from app.utils.audit import append_device_change
from app.utils.passwords import hash_password

SAMPLE_DEVICES = [
    ("BC0001", "本社受付 (Main Reception)", AuthMode.FACE, True),
    ("222222", "サーバールーム (Server Room)", AuthMode.FACE_AND_VEIN, True),
    ("KF5KW2124062200091", "大阪支社 (HW ID)", AuthMode.VEIN, True),
    ("BC0004", "物流センター", AuthMode.FACE, False),
]


async def ensure_bootstrap_admin(session: AsyncSession) -> AdminUser:
    """Create the bootstrap super admin if it doesn't exist.

    An existing row is left as is, including its password.
    """
    username = settings.BOOTSTRAP_ADMIN_USERNAME
    result = await session.execute(select(AdminUser).where(AdminUser.username == username))
    existing = result.scalar_one_or_none()
    if existing:
        app_logger.info(f"Bootstrap admin already exists: {username}")
        return existing

    user = AdminUser(
        username=username,
        hashed_password=hash_password(settings.BOOTSTRAP_ADMIN_PASSWORD),
        role=UserRole.SUPER_ADMIN.value,
        created_at=datetime.now(timezone.utc),
    )
    session.add(user)
    await session.commit()
    app_logger.info(f"Seeded bootstrap admin: {username}")
    return user


async def ensure_sample_devices(session: AsyncSession) -> int:
    """Register the sample devices that are missing. Returns how many were added."""
    added = 0
    for serial_no, device_name, auth_mode, is_active in SAMPLE_DEVICES:
        if await session.get(Device, serial_no) is not None:
            continue
        session.add(Device(
            serial_no=serial_no,
            device_name=device_name,
            auth_mode=auth_mode.value,
            is_active=is_active,
            last_updated=datetime.now(timezone.utc),
        ))
        append_device_change(
            session,
            serial_no,
            ChangeType.CREATE,
            f"Device registered: {device_name}",
            settings.BOOTSTRAP_ADMIN_USERNAME,
        )
        added += 1
    if added:
        await session.commit()
        app_logger.info(f"Seeded {added} sample devices")
    return added
