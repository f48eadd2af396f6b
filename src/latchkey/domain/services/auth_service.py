"""Authentication flows.

Coordinates the user store, password hashing, the token service and the
mailer into the register, login, logout, refresh, forgot-password and
reset-password flows. Each flow is a straight sequence of steps that stops
at the first failure by raising an ``AuthError``.
"""

import asyncio
import html
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from latchkey.core.logging import get_logger
from latchkey.domain.entities.user import (
    DEFAULT_ROLE,
    PublicUser,
    normalize_email,
    normalize_username,
)
from latchkey.domain.exceptions import ConflictError, NotFoundError, UnauthorizedError
from latchkey.infrastructure.auth.password_hasher import (
    DUMMY_PASSWORD_HASH,
    hash_password,
    needs_rehash,
    verify_password,
)
from latchkey.infrastructure.auth.token_service import TokenService
from latchkey.infrastructure.auth.token_types import AuthTokens
from latchkey.infrastructure.persistence.models import UserModel
from latchkey.infrastructure.persistence.repositories import UserRepository
from latchkey.infrastructure.services.email_service import EmailService

logger = get_logger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"


@dataclass(frozen=True)
class RegisterInput:
    email: str
    password: str
    username: str | None = None
    full_name: str | None = None
    phone: str | None = None


@dataclass(frozen=True)
class LoginInput:
    email: str
    password: str


@dataclass(frozen=True)
class ResetPasswordInput:
    token: str
    new_password: str


@dataclass(frozen=True)
class AuthResult:
    """Public profile plus a fresh token pair."""

    user: PublicUser
    tokens: AuthTokens


def forgot_password_message(is_development: bool) -> str:
    """Message returned for every forgot-password request, whether or not the email exists."""
    if is_development:
        return "If the email exists, a reset token was generated (check logs if SMTP is missing)."
    return "If the email exists, a reset email has been sent."


class AuthService:
    """Service for the account authentication flows."""

    def __init__(
        self,
        session: AsyncSession,
        user_repo: UserRepository,
        token_service: TokenService,
        email_service: EmailService,
        app_url: str | None = None,
        log_reset_tokens: bool = False,
    ) -> None:
        """Initialize the auth service.

        Args:
            session: SQLAlchemy async session, committed at the end of write flows.
            user_repo: Repository for user operations.
            token_service: Service issuing and verifying tokens.
            email_service: Service for sending emails.
            app_url: Frontend base URL used to build reset links.
            log_reset_tokens: Log the reset token when mail delivery fails.
                Must stay off in production.
        """
        self.session = session
        self.user_repo = user_repo
        self.token_service = token_service
        self.email_service = email_service
        self.app_url = app_url
        self.log_reset_tokens = log_reset_tokens

    async def _issue_tokens_for(self, user: UserModel) -> AuthTokens:
        return await self.token_service.issue_auth_tokens(
            user_id=user.id,
            email=user.email,
            role=user.role.value,
        )

    async def _raise_conflict(self, email: str, username: str | None) -> None:
        existing = await self.user_repo.find_by_email_or_username(email, username)
        if existing is None:
            return
        if existing.email == email:
            raise ConflictError("Email already exists", field="email")
        raise ConflictError("Username already exists", field="username")

    async def register(self, data: RegisterInput) -> AuthResult:
        """Create an account and log it in.

        Raises:
            ConflictError: If the email or the username is already taken.
        """
        email = normalize_email(data.email)
        username = normalize_username(data.username)

        # Fast path; the unique constraints are the real guard
        await self._raise_conflict(email, username)

        password_hash = await asyncio.to_thread(hash_password, data.password)

        user = UserModel(
            email=email,
            username=username,
            password_hash=password_hash,
            full_name=data.full_name,
            phone=data.phone,
            role=DEFAULT_ROLE,
        )
        try:
            await self.user_repo.create(user)
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            logger.info("Registration lost a uniqueness race", email=email)
            await self._raise_conflict(email, username)
            raise ConflictError("Account already exists")

        logger.info("User registered", user_id=user.id, email=email)

        tokens = await self._issue_tokens_for(user)
        return AuthResult(user=PublicUser.model_validate(user), tokens=tokens)

    async def login(self, data: LoginInput) -> AuthResult:
        """Check credentials and issue tokens.

        Raises:
            UnauthorizedError: If the email is unknown or the password is
                wrong. The message is identical in both cases.
        """
        email = normalize_email(data.email)
        user = await self.user_repo.get_by_email(email, include_password_hash=True)

        if user is None:
            # Spend the same hashing time as a real check
            await asyncio.to_thread(verify_password, data.password, DUMMY_PASSWORD_HASH)
            logger.info("Login failed")
            raise UnauthorizedError(INVALID_CREDENTIALS_MESSAGE)

        if not await asyncio.to_thread(verify_password, data.password, user.password_hash):
            logger.info("Login failed", user_id=user.id)
            raise UnauthorizedError(INVALID_CREDENTIALS_MESSAGE)

        if needs_rehash(user.password_hash):
            user.password_hash = await asyncio.to_thread(hash_password, data.password)
            await self.user_repo.save(user)
            await self.session.commit()
            logger.info("Password hash upgraded", user_id=user.id)

        logger.info("Login succeeded", user_id=user.id)
        tokens = await self._issue_tokens_for(user)
        return AuthResult(user=PublicUser.model_validate(user), tokens=tokens)

    async def forgot_password(self, email: str) -> None:
        """Send a password reset token to the user, if the user exists.

        Unknown emails return silently so the response does not reveal
        which addresses have accounts.
        """
        email = normalize_email(email)
        user = await self.user_repo.get_by_email(email)
        if user is None:
            return

        issue = await self.token_service.issue_password_reset_token(user.id, user.email)

        text = f"Use this token to reset your password: {issue.token}"
        body = f"<p>Use this token to reset your password:</p><pre>{html.escape(issue.token)}</pre>"
        if self.app_url:
            reset_url = f"{self.app_url.rstrip('/')}/reset-password?token={issue.token}"
            text += f"\n\nOr open this link: {reset_url}"
            body += f'<p><a href="{html.escape(reset_url)}">Reset your password</a></p>'

        sent = await self.email_service.send(
            to=user.email,
            subject="Reset your password",
            text=text,
            html=body,
        )

        if sent:
            logger.info("Password reset email sent", user_id=user.id)
        elif self.log_reset_tokens:
            logger.warning(
                "Mailer unavailable, password reset token logged instead",
                email=user.email,
                token=issue.token,
            )
        else:
            logger.warning("Mailer unavailable, password reset email not sent", user_id=user.id)

    async def reset_password(self, data: ResetPasswordInput) -> None:
        """Set a new password using a single-use reset token.

        Raises:
            UnauthorizedError: If the token is invalid, expired or already used.
            NotFoundError: If the token's user no longer exists.
        """
        payload = await self.token_service.consume_password_reset_token(data.token)

        user = await self.user_repo.get_by_id(payload.sub)
        if user is None:
            logger.warning("Password reset for missing user", user_id=payload.sub)
            raise NotFoundError("User not found")

        user.password_hash = await asyncio.to_thread(hash_password, data.new_password)
        await self.user_repo.save(user)
        await self.session.commit()

        revoked = await self.token_service.revoke_all_refresh_sessions_for_user(user.id)
        logger.info("Password reset", user_id=user.id, refresh_sessions_revoked=revoked)

    async def refresh_auth_tokens(self, refresh_token: str) -> AuthTokens:
        """Rotate a refresh token and mint an access token from the user's current state.

        Raises:
            UnauthorizedError: If the refresh token is invalid or its user is gone.
        """
        rotated = await self.token_service.rotate_refresh_token(refresh_token)

        user = await self.user_repo.get_by_id(rotated.user_id)
        if user is None:
            raise UnauthorizedError("Invalid refresh token")

        access_token = self.token_service.create_access_token(
            user_id=user.id,
            email=user.email,
            role=user.role.value,
        )
        return AuthTokens(access_token=access_token, refresh_token=rotated.refresh_token)

    async def logout(self, user_id: str, refresh_token: str | None = None) -> None:
        """Revoke the caller's refresh session. Without a token this is a no-op.

        Raises:
            UnauthorizedError: If the refresh token is invalid or belongs to
                another user.
        """
        if not refresh_token:
            return

        payload = await self.token_service.verify_refresh_token(refresh_token)
        if payload.sub != user_id:
            logger.warning("Logout with another user's refresh token", user_id=user_id)
            raise UnauthorizedError("Refresh token does not belong to user")

        await self.token_service.revoke_refresh_session(payload.sub, payload.jti)
        logger.info("User logged out", user_id=user_id)

    async def get_me(self, user_id: str) -> PublicUser:
        """Return the public profile of a user.

        Raises:
            NotFoundError: If the user does not exist.
        """
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return PublicUser.model_validate(user)
