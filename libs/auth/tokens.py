"""Access token issuing and verification (HS256 JWT)."""

import uuid
from datetime import datetime, timedelta
from typing import Optional

from jose import jwt

from libs.auth.models import Role
from libs.common.config import get_settings
from libs.common.datetime_utils import utc_now


def create_access_token(
    *,
    user_id: uuid.UUID,
    email: str,
    username: str,
    role: Role,
    now: Optional[datetime] = None,
) -> tuple[str, datetime]:
    """Issue a signed access token and return it with its expiry."""
    settings = get_settings()
    issued_at = now or utc_now()
    expires_at = issued_at + timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
    claims = {
        "sub": str(user_id),
        "email": email,
        "name": username,
        "role": role.value,
        "iss": settings.JWT_ISSUER,
        "aud": settings.JWT_AUDIENCE,
        "iat": int(issued_at.timestamp()),
        "exp": int(expires_at.timestamp()),
        "jti": uuid.uuid4().hex,
    }
    token = jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    return token, expires_at


def decode_access_token(token: str) -> dict:
    """Verify signature, issuer, audience and expiry. Raises ``JWTError``."""
    settings = get_settings()
    return jwt.decode(
        token,
        settings.JWT_SECRET,
        algorithms=[settings.JWT_ALGORITHM],
        audience=settings.JWT_AUDIENCE,
        issuer=settings.JWT_ISSUER,
    )
