"""Authentication API routes."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.settings import settings
from app.db.db import get_session
from app.services import user_directory
from app.utils.auth import Caller, get_current_caller
from app.utils.local_tokens import create_local_token
from app.utils.responses import SuccessResponse, success_response
from app.api.auth.schemas import LoginRequest, SessionUser, TokenResponse

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", response_model=SuccessResponse[TokenResponse])
async def login(request: LoginRequest, session: AsyncSession = Depends(get_session)):
    """Authenticate an admin and return an access token plus the session identity."""
    user = await user_directory.authenticate(
        session,
        request.username,
        request.password,
        client_code=request.client_code,
    )

    token_response = TokenResponse(
        access_token=create_local_token(user.username),
        token_type="bearer",
        expires_in=settings.LOCAL_AUTH_TOKEN_EXP_SECONDS,
        user=SessionUser(username=user.username, role=user.role),
    )
    return success_response(data=token_response, message="Login successful")


@router.get("/me", response_model=SuccessResponse[SessionUser])
async def get_current_user(caller: Caller = Depends(get_current_caller)):
    """Return the caller's identity with the role as currently stored."""
    return success_response(
        data=SessionUser(username=caller.username, role=caller.role),
        message="User information retrieved successfully",
    )
