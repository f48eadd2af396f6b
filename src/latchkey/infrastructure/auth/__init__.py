"""Authentication infrastructure components.

This module provides password hashing, the token codec, the token service
and the stores backing reset-token consumption and refresh revocation.
"""

from latchkey.infrastructure.auth.consumed_token_store import (
    ConsumedTokenStore,
    DatabaseConsumedTokenStore,
    InMemoryConsumedTokenStore,
)
from latchkey.infrastructure.auth.password_hasher import (
    DUMMY_PASSWORD_HASH,
    hash_password,
    needs_rehash,
    verify_password,
)
from latchkey.infrastructure.auth.session_registry import (
    NullSessionRegistry,
    PersistedSessionRegistry,
    SessionRegistry,
)
from latchkey.infrastructure.auth.token_codec import (
    InvalidTokenError,
    JWTError,
    TokenCodec,
    TokenExpiredError,
)
from latchkey.infrastructure.auth.token_service import TokenService
from latchkey.infrastructure.auth.token_types import (
    AccessTokenPayload,
    AuthTokens,
    PasswordResetTokenIssue,
    PasswordResetTokenPayload,
    RefreshTokenPayload,
    RotatedRefreshToken,
    TokenType,
)

__all__ = [
    "DUMMY_PASSWORD_HASH",
    "AccessTokenPayload",
    "AuthTokens",
    "ConsumedTokenStore",
    "DatabaseConsumedTokenStore",
    "InMemoryConsumedTokenStore",
    "InvalidTokenError",
    "JWTError",
    "NullSessionRegistry",
    "PasswordResetTokenIssue",
    "PasswordResetTokenPayload",
    "PersistedSessionRegistry",
    "RefreshTokenPayload",
    "RotatedRefreshToken",
    "SessionRegistry",
    "TokenCodec",
    "TokenExpiredError",
    "TokenService",
    "TokenType",
    "hash_password",
    "needs_rehash",
    "verify_password",
]
