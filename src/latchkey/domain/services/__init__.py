"""Domain services for Latchkey."""

from latchkey.domain.services.auth_service import (
    INVALID_CREDENTIALS_MESSAGE,
    AuthResult,
    AuthService,
    LoginInput,
    RegisterInput,
    ResetPasswordInput,
    forgot_password_message,
)

__all__ = [
    "INVALID_CREDENTIALS_MESSAGE",
    "AuthResult",
    "AuthService",
    "LoginInput",
    "RegisterInput",
    "ResetPasswordInput",
    "forgot_password_message",
]
