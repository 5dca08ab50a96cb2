"""Password hashing with a per-hash salt (bcrypt via passlib)."""

import re
from functools import lru_cache
from typing import Optional

from passlib.context import CryptContext

from libs.common.config import get_settings

MIN_PASSWORD_LENGTH = 6


@lru_cache
def _password_context() -> CryptContext:
    settings = get_settings()
    return CryptContext(
        schemes=["bcrypt"],
        deprecated="auto",
        bcrypt__rounds=settings.BCRYPT_ROUNDS,
    )


def hash_password(password: str) -> str:
    return _password_context().hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return _password_context().verify(password, password_hash)


def password_policy_violation(password: str) -> Optional[str]:
    """Return why a password is too weak, or None when it is acceptable."""
    if len(password) < MIN_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
    if not re.search(r"\d", password):
        return "Password must contain a digit"
    if not re.search(r"[a-z]", password):
        return "Password must contain a lowercase letter"
    if not re.search(r"[A-Z]", password):
        return "Password must contain an uppercase letter"
    return None
