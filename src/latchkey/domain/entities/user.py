"""User-facing view of an account and identity normalization rules.

Emails and usernames are unique across the whole store, compared after
trimming surrounding whitespace and lower-casing.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class UserRole(str, Enum):
    """Roles a user can hold."""

    CUSTOMER = "customer"
    STAFF = "staff"
    ADMIN = "admin"


DEFAULT_ROLE = UserRole.CUSTOMER


def normalize_email(email: str) -> str:
    """Trim and lower-case an email address."""
    return email.strip().lower()


def normalize_username(username: str | None) -> str | None:
    """Trim and lower-case a username. Blank usernames count as absent."""
    if username is None:
        return None
    normalized = username.strip().lower()
    return normalized or None


class PublicUser(BaseModel):
    """Public projection of a user. Never carries the password hash."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str = Field(..., description="User ID")
    email: str = Field(..., description="Normalized email address")
    username: str | None = Field(None, description="Normalized username")
    full_name: str | None = Field(None, description="Display name")
    phone: str | None = Field(None, description="Phone number")
    avatar_url: str | None = Field(None, description="Avatar image URL")
    loyalty_points: int = Field(0, description="Customer loyalty balance")
    membership_tier: str | None = Field(None, description="Customer membership tier")
    staff_department: str | None = Field(None, description="Department of a staff member")
    staff_start_date: datetime | None = Field(None, description="When a staff member started")
    role: UserRole = Field(..., description="User's role")
    created_at: datetime = Field(..., description="When the user was created")
    updated_at: datetime = Field(..., description="When the user was last updated")
