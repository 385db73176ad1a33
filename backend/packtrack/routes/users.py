"""
PackTrack Backend — User Route Handlers
========================================

Endpoints (prefix /api/v1):
    POST   /users/register           create account, returns user + token
    POST   /users/login              returns user + token
    GET    /users/all/admin          list every user                 admin
    GET    /users/{user_id}          one user                        self or admin
    PUT    /users/update/{user_id}   partial update                  self or admin
    DELETE /users/{user_id}          delete account                  self or admin

`/users/all/admin` is declared before `/users/{user_id}` so the literal path
wins the match.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status

from packtrack.dependencies import (
    ensure_self_or_admin,
    get_current_user,
    get_user_service,
    require_admin,
)
from packtrack.models.user import User
from packtrack.schemas.common import ApiResponse, ErrorResponse
from packtrack.schemas.user import (
    AuthResponse,
    UserLogin,
    UserRegister,
    UserResponse,
    UserUpdate,
)
from packtrack.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[AuthResponse],
    responses={409: {"description": "Email already in use", "model": ErrorResponse}},
)
async def register_user(
    payload: UserRegister,
    users: UserService = Depends(get_user_service),
) -> ApiResponse[AuthResponse]:
    account = await users.register(payload)
    return ApiResponse(message="User created successfully", data=account)


@router.post(
    "/login",
    response_model=ApiResponse[AuthResponse],
    responses={400: {"description": "Invalid credentials", "model": ErrorResponse}},
)
async def login_user(
    payload: UserLogin,
    users: UserService = Depends(get_user_service),
) -> ApiResponse[AuthResponse]:
    account = await users.login(payload)
    return ApiResponse(message="Login successful", data=account)


@router.get("/all/admin", response_model=ApiResponse[List[UserResponse]])
async def list_users(
    users: UserService = Depends(get_user_service),
    admin: User = Depends(require_admin),
) -> ApiResponse[List[UserResponse]]:
    return ApiResponse(message="Users retrieved successfully", data=await users.list_users())


@router.get("/{user_id}", response_model=ApiResponse[UserResponse])
async def get_user(
    user_id: UUID,
    users: UserService = Depends(get_user_service),
    current_user: User = Depends(get_current_user),
) -> ApiResponse[UserResponse]:
    ensure_self_or_admin(current_user, user_id)
    return ApiResponse(message="User retrieved successfully", data=await users.get_user(user_id))


@router.put("/update/{user_id}", response_model=ApiResponse[UserResponse])
async def update_user(
    user_id: UUID,
    payload: UserUpdate,
    users: UserService = Depends(get_user_service),
    current_user: User = Depends(get_current_user),
) -> ApiResponse[UserResponse]:
    ensure_self_or_admin(current_user, user_id)
    updated = await users.update_user(user_id, payload)
    return ApiResponse(message="User updated successfully", data=updated)


@router.delete("/{user_id}", response_model=ApiResponse[None])
async def delete_user(
    user_id: UUID,
    users: UserService = Depends(get_user_service),
    current_user: User = Depends(get_current_user),
) -> ApiResponse[None]:
    ensure_self_or_admin(current_user, user_id)
    await users.delete_user(user_id)
    return ApiResponse(message="User deleted successfully")
