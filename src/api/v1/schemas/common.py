"""Common Pydantic schemas and wire helpers shared across the API."""

from enum import IntEnum
from typing import Any, TypeVar

from pydantic import BaseModel

from core.exceptions import InvalidRoleError

RoleT = TypeVar("RoleT", bound=IntEnum)


class ErrorResponse(BaseModel):
    """Standardized error response."""

    error_code: str
    message: str
    details: Any | None = None


def role_to_str(role: IntEnum | None) -> str:
    """Render a role enum as its lower-case wire name."""
    return role.name.lower() if role is not None else "unknown"


def parse_role(value: str, role_type: type[RoleT], allowed: frozenset[RoleT]) -> RoleT:
    """Parse a lower-case wire role, rejecting anything outside ``allowed``.

    Raises:
        InvalidRoleError: Unknown role name or role not accepted here.
    """
    allowed_names = sorted(r.name.lower() for r in allowed)
    try:
        role = role_type[value.strip().upper()]
    except KeyError:
        raise InvalidRoleError(value, allowed_names) from None
    if role not in allowed:
        raise InvalidRoleError(value, allowed_names)
    return role
