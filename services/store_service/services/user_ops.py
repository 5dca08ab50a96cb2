"""Account registration, login and user administration."""

import uuid
from typing import Optional

from libs.auth.models import Role
from libs.auth.passwords import hash_password, password_policy_violation, verify_password
from libs.auth.tokens import create_access_token
from libs.common.datetime_utils import utc_now
from libs.common.errors import (
    ConflictError,
    NotFoundError,
    UnauthorizedError,
    ValidationFailureError,
)
from libs.common.logging import get_logger
from services.store_service.models import User
from services.store_service.repositories import UserRepository
from services.store_service.schemas import AuthResponse, UserResponse, UserUpdateRequest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


def _check_password(password: str) -> None:
    violation = password_policy_violation(password)
    if violation:
        raise ValidationFailureError(violation)


async def create_user(
    db: AsyncSession,
    *,
    email: str,
    username: str,
    password: str,
    role: Role = Role.SHOPPER,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
) -> User:
    """Create an account. Email and username are unique case-insensitively."""
    _check_password(password)
    repo = UserRepository(db)
    email = email.strip().lower()
    username = username.strip().lower()

    if await repo.get_by_email(email):
        raise ConflictError("Email is already registered")
    if await repo.get_by_username(username):
        raise ConflictError("Username is already taken")

    user = User(
        email=email,
        username=username,
        first_name=first_name,
        last_name=last_name,
        password_hash=hash_password(password),
        role=role,
        is_active=True,
    )
    try:
        await repo.add(user)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Email or username is already in use")

    logger.info("Created %s account %s", role.value, username)
    return user


def issue_token(user: User) -> AuthResponse:
    token, expires_at = create_access_token(
        user_id=user.id, email=user.email, username=user.username, role=user.role
    )
    return AuthResponse(
        token=token, expires_at=expires_at, user=UserResponse.model_validate(user)
    )


async def authenticate(db: AsyncSession, *, email: str, password: str) -> User:
    user = await UserRepository(db).get_by_email(email)
    if not user or not verify_password(password, user.password_hash):
        logger.info("Failed login for %s", email)
        raise UnauthorizedError("Invalid email or password")
    if not user.is_active:
        raise UnauthorizedError("Account is deactivated")

    user.last_login_at = utc_now()
    await db.commit()
    return user


async def get_active_user(db: AsyncSession, user_id: uuid.UUID) -> User:
    user = await UserRepository(db).get_by_id(user_id)
    if not user or not user.is_active:
        raise UnauthorizedError("Account not found or deactivated")
    return user


async def list_users(db: AsyncSession) -> list[User]:
    return await UserRepository(db).list_users()


async def update_user(
    db: AsyncSession, *, username: str, payload: UserUpdateRequest
) -> User:
    repo = UserRepository(db)
    user = await repo.get_by_username(username)
    if not user:
        raise NotFoundError(f"User {username} not found")

    changes = payload.model_dump(exclude_unset=True)
    password = changes.pop("password", None)
    if password is not None:
        _check_password(password)
        changes["password_hash"] = hash_password(password)

    email = changes.get("email")
    if email:
        email = email.strip().lower()
        clash = await repo.get_by_email(email)
        if clash and clash.id != user.id:
            raise ConflictError("Email is already registered")
        changes["email"] = email

    await repo.update(user, changes)
    await db.commit()
    logger.info("Updated user %s: %s", user.username, sorted(changes))
    return user


async def delete_users(
    db: AsyncSession, *, usernames: list[str], acting_user_id: uuid.UUID
) -> tuple[list[str], list[str]]:
    """Deactivate accounts by username. Returns (deleted, not_found)."""
    repo = UserRepository(db)
    deleted, not_found = [], []
    for username in usernames:
        user = await repo.get_by_username(username)
        if not user:
            not_found.append(username)
            continue
        if user.id == acting_user_id:
            raise ValidationFailureError("You cannot delete your own account")
        user.is_active = False
        deleted.append(user.username)

    await db.commit()
    if deleted:
        logger.info("Deactivated users %s", deleted)
    return deleted, not_found
