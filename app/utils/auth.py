"""Authentication utilities and dependency injection."""

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.db.db import get_session
from app.models.admin_user import AdminUser, UserRole
from app.utils.local_tokens import decode_local_token


@dataclass(frozen=True)
class Caller:
    """Resolved identity of the admin making a request.

    Services take this explicitly; the role always comes from the database row,
    never from anything the client sent.
    """

    id: int
    username: str
    role: UserRole

    @property
    def is_super_admin(self) -> bool:
        return self.role == UserRole.SUPER_ADMIN

    @classmethod
    def from_user(cls, user: AdminUser) -> "Caller":
        return cls(id=user.id, username=user.username, role=UserRole(user.role))


# HTTP Bearer token security scheme
security_scheme = HTTPBearer(
    scheme_name="Bearer",
    description="Bearer token authentication",
    auto_error=False,  # We'll handle errors manually for better control
)


async def get_auth_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security_scheme),
) -> str:
    """Extract the Bearer token from the Authorization header.

    Raises:
        HTTPException: If token is missing
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing or invalid authorization header",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = credentials.credentials.strip()
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authentication token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return token


async def verify_token(token: str = Depends(get_auth_token)) -> str:
    """Verify the JWT and return the username it was issued for.

    Raises:
        HTTPException: If token is invalid or expired
    """
    try:
        payload = decode_local_token(token)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc

    username = payload.get("sub")
    if not username:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return username


async def get_current_caller(
    username: str = Depends(verify_token),
    session: AsyncSession = Depends(get_session),
) -> Caller:
    """Resolve the token subject to a live admin account.

    A token for a deleted account is rejected even if it has not expired.
    """
    result = await session.execute(select(AdminUser).where(AdminUser.username == username))
    user = result.scalar_one_or_none()
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return Caller.from_user(user)


# Convenience alias for cleaner imports
RequireCaller = Depends(get_current_caller)
