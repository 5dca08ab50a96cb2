"""Store auth router: registration, login and token refresh."""

from fastapi import APIRouter, Depends, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser, Role
from libs.db.session import get_async_db
from services.store_service.schemas import (
    AuthResponse,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    UserResponse,
)
from services.store_service.services import user_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterRequest,
    db: AsyncSession = Depends(get_async_db),
):
    """Create a shopper account and sign it in."""
    user = await user_ops.create_user(
        db,
        email=payload.email,
        username=payload.username,
        password=payload.password,
        role=Role.SHOPPER,
        first_name=payload.first_name,
        last_name=payload.last_name,
    )
    return user_ops.issue_token(user)


@router.post("/login", response_model=AuthResponse)
async def login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_async_db),
):
    user = await user_ops.authenticate(db, email=payload.email, password=payload.password)
    return user_ops.issue_token(user)


@router.post("/logout", response_model=MessageResponse)
async def logout(current_user: AuthUser = Depends(get_current_user)):
    """Tokens are stateless; the client discards its copy."""
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=UserResponse)
async def me(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return await user_ops.get_active_user(db, current_user.user_id)


@router.post("/refresh", response_model=AuthResponse)
async def refresh(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Issue a fresh token with the account's current role."""
    user = await user_ops.get_active_user(db, current_user.user_id)
    return user_ops.issue_token(user)
