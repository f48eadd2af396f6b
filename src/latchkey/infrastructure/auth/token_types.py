"""Token types and payload models.

Payloads form a discriminated union on ``type``: a decoded claim set is only
trusted as a given kind of token after its tag has been matched.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class TokenType(str, Enum):
    """Purposes a signed token can be minted for."""

    ACCESS = "access"
    REFRESH = "refresh"
    PASSWORD_RESET = "password_reset"


class _BaseTokenPayload(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    sub: str = Field(..., description="Subject (user ID)")
    iat: int = Field(..., description="Unix timestamp when the token was issued")
    exp: int = Field(..., description="Unix timestamp when the token expires")


class AccessTokenPayload(_BaseTokenPayload):
    """Short-lived token carrying email and role for stateless authorization."""

    type: Literal["access"]
    email: str
    role: str


class RefreshTokenPayload(_BaseTokenPayload):
    """Long-lived token used to obtain new access tokens."""

    type: Literal["refresh"]
    jti: str = Field(..., description="Unique token ID (session identifier)")


class PasswordResetTokenPayload(_BaseTokenPayload):
    """Short-lived, single-use token authorizing one password change."""

    type: Literal["password_reset"]
    email: str
    jti: str = Field(..., description="Unique token ID (single-use tracking)")


TokenPayload = Annotated[
    Union[AccessTokenPayload, RefreshTokenPayload, PasswordResetTokenPayload],
    Field(discriminator="type"),
]

_payload_adapter: TypeAdapter[Any] = TypeAdapter(TokenPayload)


def parse_token_payload(claims: dict[str, Any]) -> TokenPayload:
    """Validate decoded claims into the payload model selected by their tag.

    Raises:
        pydantic.ValidationError: If the tag is missing or unknown, or a field
            required by the tagged variant is absent.
    """
    return _payload_adapter.validate_python(claims)


@dataclass(frozen=True)
class AuthTokens:
    """Access/refresh token pair returned by login, register and refresh."""

    access_token: str
    refresh_token: str


@dataclass(frozen=True)
class RotatedRefreshToken:
    """Result of rotating a refresh token."""

    user_id: str
    refresh_token: str


@dataclass(frozen=True)
class PasswordResetTokenIssue:
    """A freshly minted password reset token."""

    token: str
    jti: str
    expires_at: int
