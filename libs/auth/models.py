import enum
import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Role(str, enum.Enum):
    SHOPPER = "shopper"
    EMPLOYEE = "employee"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"

    @classmethod
    def parse(cls, value: "str | Role") -> "Role":
        """Parse a role name case-insensitively.

        Accepts the spellings older clients send ("Administrator",
        "SuperAdmin", "Super_Admin").
        """
        if isinstance(value, Role):
            return value
        key = str(value).strip().lower().replace("_", "").replace(" ", "")
        try:
            return _ROLE_ALIASES[key]
        except KeyError:
            raise ValueError(f"Unknown role: {value!r}") from None


_ROLE_ALIASES = {
    "shopper": Role.SHOPPER,
    "employee": Role.EMPLOYEE,
    "admin": Role.ADMIN,
    "administrator": Role.ADMIN,
    "superadmin": Role.SUPER_ADMIN,
}

# Authorization policies: the set of roles allowed through.
ADMIN_ONLY = frozenset({Role.ADMIN, Role.SUPER_ADMIN})
EMPLOYEE_ONLY = frozenset({Role.EMPLOYEE, Role.ADMIN, Role.SUPER_ADMIN})
SUPER_ADMIN_ONLY = frozenset({Role.SUPER_ADMIN})


class AuthUser(BaseModel):
    """
    The authenticated principal carried by a verified access token.
    """

    model_config = ConfigDict(populate_by_name=True)

    user_id: uuid.UUID = Field(..., alias="sub")
    email: Optional[str] = None
    username: Optional[str] = Field(None, alias="name")
    role: Role = Role.SHOPPER

    @field_validator("role", mode="before")
    @classmethod
    def parse_role(cls, v):
        return Role.parse(v)

    def has_any_role(self, allowed: frozenset) -> bool:
        return self.role in allowed
