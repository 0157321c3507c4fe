"""User directory: admin accounts, roles and the bootstrap-account floor.

Only super admins may read or change the directory. The bootstrap account
(``settings.BOOTSTRAP_ADMIN_USERNAME``) can never be demoted or deleted, and
nobody can delete their own account.
"""

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.config.logger import app_logger
from app.config.settings import settings
from app.db.db import commit_or_raise, flush_or_raise
from app.models.admin_user import AdminUser, AdminUserAuditEntry, UserRole
from app.models.device_audit_log import ChangeType
from app.utils.audit import append_user_change, list_user_changes
from app.utils.auth import Caller
from app.utils.errors import (
    ConflictError,
    ForbiddenError,
    InvariantViolationError,
    NotFoundError,
    UnauthorizedError,
    ValidationFailedError,
)
from app.utils.passwords import hash_password, verify_password


def is_bootstrap_account(user: AdminUser) -> bool:
    return user.username == settings.BOOTSTRAP_ADMIN_USERNAME


def require_super_admin(caller: Caller) -> None:
    if not caller.is_super_admin:
        app_logger.warning(f"Forbidden user-directory access by {caller.username} ({caller.role.value})")
        raise ForbiddenError("Super admin access required")


def _parse_role(role: Optional[str]) -> Optional[UserRole]:
    if role is None or role == "":
        return None
    try:
        return UserRole(role)
    except ValueError as exc:
        raise ValidationFailedError(f"Unknown role '{role}'") from exc


async def _get_user(session: AsyncSession, user_id: int) -> AdminUser:
    user = await session.get(AdminUser, user_id)
    if user is None:
        raise NotFoundError(f"User {user_id} not found")
    return user


async def get_user_by_username(session: AsyncSession, username: str) -> Optional[AdminUser]:
    result = await session.execute(select(AdminUser).where(AdminUser.username == username))
    return result.scalar_one_or_none()


async def list_users(session: AsyncSession, caller: Caller) -> List[AdminUser]:
    """All accounts, oldest first. Callers must not expose ``hashed_password``."""
    require_super_admin(caller)
    result = await session.execute(select(AdminUser).order_by(AdminUser.id))
    return list(result.scalars().all())


async def create_user(
    session: AsyncSession,
    caller: Caller,
    username: str,
    role: str,
    password: str,
) -> AdminUser:
    """Create an account with a bcrypt-hashed password.

    Raises:
        ForbiddenError: Caller is not a super admin
        ValidationFailedError: Blank username/password or unknown role
        ConflictError: Username already taken
    """
    require_super_admin(caller)

    if not username or not username.strip():
        raise ValidationFailedError("username is required")
    if not password:
        raise ValidationFailedError("password is required")
    username = username.strip()
    parsed_role = _parse_role(role) or UserRole.ADMIN

    if await get_user_by_username(session, username) is not None:
        app_logger.warning(f"Rejected duplicate username: {username} by {caller.username}")
        raise ConflictError(f"Username {username} is already in use")

    user = AdminUser(
        username=username,
        hashed_password=hash_password(password),
        role=parsed_role.value,
        created_at=datetime.now(timezone.utc),
    )
    session.add(user)
    # Flush for the generated id; the unique index catches a racing create
    await flush_or_raise(session, f"Username {username} is already in use")

    append_user_change(
        session,
        user.id,
        username,
        ChangeType.CREATE,
        f"User created with role {parsed_role.value}",
        caller.username,
    )
    await commit_or_raise(session, f"Username {username} is already in use")

    app_logger.info(f"Admin user created: {username} ({parsed_role.value}) by {caller.username}")
    return user


async def update_user(
    session: AsyncSession,
    caller: Caller,
    user_id: int,
    role: Optional[str] = None,
    password: Optional[str] = None,
) -> AdminUser:
    """Partially update an account. Omitted or empty fields are left alone.

    Raises:
        ForbiddenError: Caller is not a super admin
        NotFoundError: No such user
        InvariantViolationError: Demoting the bootstrap account
    """
    require_super_admin(caller)
    user = await _get_user(session, user_id)
    new_role = _parse_role(role)

    if is_bootstrap_account(user) and new_role is not None and new_role != UserRole.SUPER_ADMIN:
        app_logger.warning(f"Rejected demotion of bootstrap account by {caller.username}")
        raise InvariantViolationError("The bootstrap admin account cannot be demoted")

    changes = []
    if new_role is not None and new_role.value != user.role:
        changes.append(f"role: {user.role} -> {new_role.value}")
        user.role = new_role.value
    if password:
        user.hashed_password = hash_password(password)
        changes.append("password changed")
    session.add(user)

    details = "Updated " + ", ".join(changes) if changes else "Updated: no field changes"
    append_user_change(session, user.id, user.username, ChangeType.UPDATE, details, caller.username)
    await commit_or_raise(session, f"User {user_id} could not be updated")

    app_logger.info(f"Admin user updated: {user.username} - {details}")
    return user


async def delete_user(session: AsyncSession, caller: Caller, user_id: int) -> None:
    """Delete an account other than the bootstrap account or the caller's own.

    Raises:
        ForbiddenError: Caller is not a super admin
        NotFoundError: No such user
        InvariantViolationError: Target is the bootstrap account or the caller
    """
    require_super_admin(caller)
    user = await _get_user(session, user_id)

    if user.id == caller.id or user.username == caller.username:
        raise InvariantViolationError("You cannot delete your own account")
    if is_bootstrap_account(user):
        raise InvariantViolationError("The bootstrap admin account cannot be deleted")

    username = user.username
    await session.delete(user)
    append_user_change(session, user_id, username, ChangeType.DELETE, "User deleted", caller.username)
    await commit_or_raise(session, f"User {user_id} could not be deleted")

    app_logger.info(f"Admin user deleted: {username} by {caller.username}")


async def get_user_logs(session: AsyncSession, caller: Caller, user_id: int) -> List[AdminUserAuditEntry]:
    require_super_admin(caller)
    return await list_user_changes(session, user_id)


async def authenticate(
    session: AsyncSession,
    username: str,
    password: str,
    client_code: Optional[str] = None,
) -> AdminUser:
    """Check credentials (and the tenant code, when one is configured).

    Raises:
        UnauthorizedError: On any mismatch; the message does not say which part failed
    """
    if settings.CLIENT_CODE and client_code != settings.CLIENT_CODE:
        app_logger.warning(f"Login rejected for {username}: client code mismatch")
        raise UnauthorizedError("Invalid username or password")

    user = await get_user_by_username(session, username)
    if user is None or not verify_password(password, user.hashed_password):
        app_logger.warning(f"Login rejected for {username}")
        raise UnauthorizedError("Invalid username or password")

    app_logger.info(f"Admin logged in: {username} ({user.role})")
    return user
