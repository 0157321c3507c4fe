"""Models module - imports all models for SQLModel registration."""

# Import all models so SQLModel can register them
from app.models.device import AuthMode, Device
from app.models.device_audit_log import ChangeType, DeviceAuditEntry
from app.models.admin_user import AdminUser, AdminUserAuditEntry, UserRole
from app.models.auth_log import AuthLog

__all__ = [
    "AuthMode",
    "Device",
    "ChangeType",
    "DeviceAuditEntry",
    "AdminUser",
    "AdminUserAuditEntry",
    "UserRole",
    "AuthLog",
]
