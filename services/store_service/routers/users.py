"""Store user administration router."""

from fastapi import APIRouter, Body, Depends, status
from libs.auth.dependencies import require_admin, require_super_admin
from libs.auth.models import AuthUser, Role
from libs.db.session import get_async_db
from services.store_service.schemas import (
    EmployeeCreateRequest,
    UserCreateRequest,
    UserDeleteRequest,
    UserDeleteResponse,
    UserResponse,
    UserUpdateRequest,
)
from services.store_service.services import user_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["users"])


@router.post(
    "/admin/auth", response_model=UserResponse, status_code=status.HTTP_201_CREATED
)
async def create_employee(
    payload: EmployeeCreateRequest,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Admins onboard staff; the new account always gets the employee role."""
    return await user_ops.create_user(
        db,
        email=payload.email,
        username=payload.username,
        password=payload.password,
        role=Role.EMPLOYEE,
        first_name=payload.first_name,
        last_name=payload.last_name,
    )


@router.get("/users", response_model=list[UserResponse])
async def list_users(
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    return await user_ops.list_users(db)


@router.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: UserCreateRequest,
    current_user: AuthUser = Depends(require_super_admin),
    db: AsyncSession = Depends(get_async_db),
):
    return await user_ops.create_user(
        db,
        email=payload.email,
        username=payload.username,
        password=payload.password,
        role=payload.role,
        first_name=payload.first_name,
        last_name=payload.last_name,
    )


@router.put("/users/{username}", response_model=UserResponse)
async def update_user(
    username: str,
    payload: UserUpdateRequest,
    current_user: AuthUser = Depends(require_super_admin),
    db: AsyncSession = Depends(get_async_db),
):
    return await user_ops.update_user(db, username=username, payload=payload)


@router.delete("/users", response_model=UserDeleteResponse)
async def delete_users(
    payload: UserDeleteRequest = Body(...),
    current_user: AuthUser = Depends(require_super_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Deactivate several accounts at once."""
    deleted, not_found = await user_ops.delete_users(
        db, usernames=payload.usernames, acting_user_id=current_user.user_id
    )
    return UserDeleteResponse(deleted=deleted, not_found=not_found)
