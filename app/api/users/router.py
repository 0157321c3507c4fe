"""Admin user management API routes (super admins only)."""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.db import get_session
from app.services import user_directory
from app.utils.auth import Caller, get_current_caller
from app.utils.responses import SuccessResponse, success_response
from app.api.users.schemas import (
    AdminUserResponse,
    UserCreatedResponse,
    UserCreateRequest,
    UserLogResponse,
    UserUpdateRequest,
)

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("", response_model=SuccessResponse[List[AdminUserResponse]])
async def list_users(
    session: AsyncSession = Depends(get_session),
    caller: Caller = Depends(get_current_caller),
):
    users = await user_directory.list_users(session, caller)
    return success_response(
        data=[AdminUserResponse.model_validate(u) for u in users],
        message="Users retrieved successfully",
    )


@router.post("", response_model=SuccessResponse[UserCreatedResponse], status_code=status.HTTP_201_CREATED)
async def create_user(
    request: UserCreateRequest,
    session: AsyncSession = Depends(get_session),
    caller: Caller = Depends(get_current_caller),
):
    user = await user_directory.create_user(
        session,
        caller,
        username=request.username,
        role=request.role.value,
        password=request.password,
    )
    return success_response(data=UserCreatedResponse.model_validate(user), message="User created")


@router.put("/{user_id}", response_model=SuccessResponse[AdminUserResponse])
async def update_user(
    user_id: int,
    request: UserUpdateRequest,
    session: AsyncSession = Depends(get_session),
    caller: Caller = Depends(get_current_caller),
):
    user = await user_directory.update_user(
        session,
        caller,
        user_id,
        role=request.role,
        password=request.password,
    )
    return success_response(data=AdminUserResponse.model_validate(user), message="User updated")


@router.delete("/{user_id}", response_model=SuccessResponse[dict])
async def delete_user(
    user_id: int,
    session: AsyncSession = Depends(get_session),
    caller: Caller = Depends(get_current_caller),
):
    await user_directory.delete_user(session, caller, user_id)
    return success_response(data={"id": user_id}, message="User deleted")


@router.get("/{user_id}/logs", response_model=SuccessResponse[List[UserLogResponse]])
async def get_user_logs(
    user_id: int,
    session: AsyncSession = Depends(get_session),
    caller: Caller = Depends(get_current_caller),
):
    entries = await user_directory.get_user_logs(session, caller, user_id)
    return success_response(
        data=[UserLogResponse.model_validate(e) for e in entries],
        message="User logs retrieved successfully",
    )
