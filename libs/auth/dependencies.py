from typing import Annotated, Callable, Iterable, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from pydantic import ValidationError

from libs.auth.models import (
    ADMIN_ONLY,
    EMPLOYEE_ONLY,
    SUPER_ADMIN_ONLY,
    AuthUser,
    Role,
)
from libs.auth.tokens import decode_access_token
from libs.common.errors import ForbiddenError, UnauthorizedError
from libs.common.logging import get_logger

logger = get_logger(__name__)
security = HTTPBearer(auto_error=False)


async def get_current_user(
    token: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)]
) -> AuthUser:
    """
    Validate the bearer token and return the authenticated principal.
    """
    if token is None:
        raise UnauthorizedError("Not authenticated")

    try:
        payload = decode_access_token(token.credentials)
        return AuthUser(**payload)
    except (JWTError, ValidationError) as e:
        logger.info("Rejected access token: %s", e)
        raise UnauthorizedError()


def require_roles(allowed: Iterable[Role]) -> Callable:
    """Build a dependency that admits only principals holding one of ``allowed``."""
    allowed = frozenset(allowed)

    async def _require(
        current_user: Annotated[AuthUser, Depends(get_current_user)]
    ) -> AuthUser:
        if not current_user.has_any_role(allowed):
            raise ForbiddenError()
        return current_user

    return _require


require_admin = require_roles(ADMIN_ONLY)
require_employee = require_roles(EMPLOYEE_ONLY)
require_super_admin = require_roles(SUPER_ADMIN_ONLY)
