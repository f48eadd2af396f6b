"""Pydantic schemas for authentication endpoints.

Request and response bodies use camelCase keys on the wire; snake_case
names are accepted too.
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from latchkey.domain.entities.user import PublicUser


class CamelModel(BaseModel):
    """Base model serializing fields under camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegisterRequest(CamelModel):
    """Request body for registration."""

    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(..., min_length=8, max_length=64, description="User's password")
    username: str | None = Field(None, min_length=3, max_length=50)
    full_name: str | None = Field(None, min_length=1, max_length=120)
    phone: str | None = Field(None, min_length=8, max_length=20)


class LoginRequest(CamelModel):
    """Request body for login."""

    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(..., min_length=1, description="User's password")


class ForgotPasswordRequest(CamelModel):
    """Request body for requesting a password reset token."""

    email: EmailStr


class ResetPasswordRequest(CamelModel):
    """Request body for redeeming a password reset token."""

    token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8, max_length=64)


class RefreshRequest(CamelModel):
    """Request body for exchanging a refresh token."""

    refresh_token: str = Field(..., min_length=1)


class LogoutRequest(CamelModel):
    """Request body for logout. The refresh token is optional."""

    refresh_token: str | None = Field(None, min_length=1)


class TokenPairResponse(CamelModel):
    """Access/refresh token pair."""

    access_token: str = Field(..., description="Access token")
    refresh_token: str = Field(..., description="Refresh token")


class AuthResponse(CamelModel):
    """Response for successful registration or login."""

    user: PublicUser
    tokens: TokenPairResponse


class MessageResponse(CamelModel):
    """Response carrying only a human-readable message."""

    message: str


class ErrorResponse(CamelModel):
    """Error body shared by every failed auth request."""

    error: str = Field(..., description="Error kind")
    message: str = Field(..., description="Human-readable error message")
    field: str | None = Field(None, description="Field that caused a conflict")
