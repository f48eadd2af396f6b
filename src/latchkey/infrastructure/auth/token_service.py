"""Token service.

Issues and verifies the three kinds of tokens Latchkey hands out:

* access tokens (short-lived, carry email and role),
* refresh tokens (long-lived, carry a ``jti``, rotated on every refresh),
* password reset tokens (short-lived, carry a ``jti``, redeemable once).

Each kind is signed with its own secret and tagged with its ``type``; a
token presented for the wrong purpose is rejected even when its signature
is valid.
"""

import time
import uuid

from pydantic import ValidationError

from latchkey.core.config import Settings
from latchkey.core.durations import parse_duration_seconds
from latchkey.core.logging import get_logger
from latchkey.domain.exceptions import UnauthorizedError
from latchkey.infrastructure.auth.consumed_token_store import (
    ConsumedTokenStore,
    InMemoryConsumedTokenStore,
)
from latchkey.infrastructure.auth.session_registry import NullSessionRegistry, SessionRegistry
from latchkey.infrastructure.auth.token_codec import InvalidTokenError, TokenCodec, TokenExpiredError
from latchkey.infrastructure.auth.token_types import (
    AccessTokenPayload,
    AuthTokens,
    PasswordResetTokenIssue,
    PasswordResetTokenPayload,
    RefreshTokenPayload,
    RotatedRefreshToken,
    TokenPayload,
    TokenType,
    parse_token_payload,
)

logger = get_logger(__name__)


class TokenService:
    """Service for issuing, verifying, rotating and consuming tokens."""

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        reset_secret: str,
        access_ttl_seconds: int = 15 * 60,
        refresh_ttl_seconds: int = 7 * 24 * 60 * 60,
        reset_ttl_seconds: int = 30 * 60,
        consumed_store: ConsumedTokenStore | None = None,
        session_registry: SessionRegistry | None = None,
    ) -> None:
        """Initialize the token service.

        Args:
            access_secret: Secret for signing access tokens.
            refresh_secret: Secret for signing refresh tokens.
            reset_secret: Secret for signing password reset tokens.
            access_ttl_seconds: Access token lifetime.
            refresh_ttl_seconds: Refresh token lifetime.
            reset_ttl_seconds: Password reset token lifetime.
            consumed_store: Store of redeemed reset token IDs. Defaults to a
                process-local in-memory store.
            session_registry: Refresh session registry. Defaults to the
                non-revoking null registry.
        """
        if len({access_secret, refresh_secret, reset_secret}) != 3:
            raise ValueError("Each token type needs its own signing secret")

        self._access_secret = access_secret
        self._refresh_secret = refresh_secret
        self._reset_secret = reset_secret
        self.access_ttl_seconds = access_ttl_seconds
        self.refresh_ttl_seconds = refresh_ttl_seconds
        self.reset_ttl_seconds = reset_ttl_seconds
        self.consumed_store = consumed_store or InMemoryConsumedTokenStore()
        self.session_registry = session_registry or NullSessionRegistry()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        consumed_store: ConsumedTokenStore | None = None,
        session_registry: SessionRegistry | None = None,
    ) -> "TokenService":
        """Build a token service, parsing the configured TTL strings once."""
        return cls(
            access_secret=settings.jwt_access_secret,
            refresh_secret=settings.jwt_refresh_secret,
            reset_secret=settings.jwt_reset_secret,
            access_ttl_seconds=parse_duration_seconds(
                settings.jwt_access_expires_in, "jwt_access_expires_in"
            ),
            refresh_ttl_seconds=parse_duration_seconds(
                settings.jwt_refresh_expires_in, "jwt_refresh_expires_in"
            ),
            reset_ttl_seconds=parse_duration_seconds(
                settings.jwt_reset_expires_in, "jwt_reset_expires_in"
            ),
            consumed_store=consumed_store,
            session_registry=session_registry,
        )

    # Issuing

    def create_access_token(self, user_id: str, email: str, role: str) -> str:
        """Create an access token carrying email and role."""
        return TokenCodec.sign(
            {
                "sub": user_id,
                "email": email,
                "role": role,
                "type": TokenType.ACCESS.value,
            },
            self._access_secret,
            self.access_ttl_seconds,
        )

    async def _create_refresh_token(self, user_id: str) -> str:
        jti = str(uuid.uuid4())
        issued_at = int(time.time())
        token = TokenCodec.sign(
            {"sub": user_id, "jti": jti, "type": TokenType.REFRESH.value},
            self._refresh_secret,
            self.refresh_ttl_seconds,
            issued_at=issued_at,
        )
        await self.session_registry.store(user_id, jti, issued_at + self.refresh_ttl_seconds)
        return token

    async def issue_auth_tokens(self, user_id: str, email: str, role: str) -> AuthTokens:
        """Issue an access token and a fresh refresh token."""
        return AuthTokens(
            access_token=self.create_access_token(user_id, email, role),
            refresh_token=await self._create_refresh_token(user_id),
        )

    async def issue_password_reset_token(self, user_id: str, email: str) -> PasswordResetTokenIssue:
        """Mint a single-use password reset token."""
        jti = str(uuid.uuid4())
        issued_at = int(time.time())
        token = TokenCodec.sign(
            {
                "sub": user_id,
                "email": email,
                "jti": jti,
                "type": TokenType.PASSWORD_RESET.value,
            },
            self._reset_secret,
            self.reset_ttl_seconds,
            issued_at=issued_at,
        )
        return PasswordResetTokenIssue(
            token=token, jti=jti, expires_at=issued_at + self.reset_ttl_seconds
        )

    # Verification

    def _decode(self, token: str, secret: str) -> TokenPayload:
        try:
            claims = TokenCodec.verify(token, secret)
        except TokenExpiredError as e:
            raise UnauthorizedError("Token has expired") from e
        except InvalidTokenError as e:
            raise UnauthorizedError("Invalid token") from e

        try:
            return parse_token_payload(claims)
        except ValidationError as e:
            raise UnauthorizedError("Invalid token") from e

    def verify_access_token(self, token: str) -> AccessTokenPayload:
        """Verify an access token.

        Raises:
            UnauthorizedError: If the token is invalid, expired or not an access token.
        """
        payload = self._decode(token, self._access_secret)
        if not isinstance(payload, AccessTokenPayload):
            raise UnauthorizedError("Invalid access token type")
        return payload

    async def verify_refresh_token(self, token: str) -> RefreshTokenPayload:
        """Verify a refresh token and check that its session is still live.

        Raises:
            UnauthorizedError: If the token is invalid, expired, not a refresh
                token, or its session was revoked.
        """
        payload = self._decode(token, self._refresh_secret)
        if not isinstance(payload, RefreshTokenPayload):
            raise UnauthorizedError("Invalid refresh token type")
        if not await self.session_registry.is_active(payload.sub, payload.jti):
            logger.info("Refresh token rejected: session inactive", user_id=payload.sub)
            raise UnauthorizedError("Refresh token has been revoked")
        return payload

    async def rotate_refresh_token(self, refresh_token: str) -> RotatedRefreshToken:
        """Exchange a refresh token for a new one bound to the same subject.

        The old session is claimed before the new token is minted, so of two
        concurrent rotations of one token only one succeeds. With the null
        registry every claim succeeds and the old token keeps working until
        its natural expiry.

        Raises:
            UnauthorizedError: If the token is invalid, or its session was
                revoked or already rotated.
        """
        payload = await self.verify_refresh_token(refresh_token)
        if not await self.session_registry.consume(payload.sub, payload.jti):
            logger.warning("Refresh token reused during rotation", user_id=payload.sub)
            raise UnauthorizedError("Refresh token has been revoked")
        new_token = await self._create_refresh_token(payload.sub)
        return RotatedRefreshToken(user_id=payload.sub, refresh_token=new_token)

    async def consume_password_reset_token(self, token: str) -> PasswordResetTokenPayload:
        """Verify a password reset token and mark it as used.

        Raises:
            UnauthorizedError: If the token is invalid, expired, not a reset
                token, or was already consumed.
        """
        payload = self._decode(token, self._reset_secret)
        if not isinstance(payload, PasswordResetTokenPayload):
            raise UnauthorizedError("Invalid reset token type")

        if not await self.consumed_store.mark_consumed(payload.jti, payload.exp):
            logger.info("Password reset token replayed", user_id=payload.sub)
            raise UnauthorizedError("Reset token is invalid or expired")

        return payload

    # Revocation

    async def revoke_refresh_session(self, user_id: str, jti: str) -> bool:
        """Revoke one refresh session. A no-op with the null registry."""
        return await self.session_registry.revoke(user_id, jti)

    async def revoke_all_refresh_sessions_for_user(self, user_id: str) -> int:
        """Revoke every refresh session of a user. A no-op with the null registry."""
        return await self.session_registry.revoke_all_for_user(user_id)
