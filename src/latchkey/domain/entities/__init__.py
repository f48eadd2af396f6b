"""Domain entities for Latchkey."""

from latchkey.domain.entities.user import (
    DEFAULT_ROLE,
    PublicUser,
    UserRole,
    normalize_email,
    normalize_username,
)

__all__ = [
    "DEFAULT_ROLE",
    "PublicUser",
    "UserRole",
    "normalize_email",
    "normalize_username",
]
