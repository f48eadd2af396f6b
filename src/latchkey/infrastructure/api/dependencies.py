"""FastAPI dependencies for authentication.

Provides the auth service for a request and the current user extracted
from a Bearer access token.
"""

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from latchkey.core.config import Settings
from latchkey.core.logging import get_logger
from latchkey.domain.exceptions import UnauthorizedError
from latchkey.domain.services import AuthService
from latchkey.infrastructure.auth import TokenService
from latchkey.infrastructure.persistence.database import get_db_session
from latchkey.infrastructure.persistence.repositories import UserRepository
from latchkey.infrastructure.services import EmailService

logger = get_logger(__name__)


@dataclass
class CurrentUser:
    """The authenticated caller, as described by a valid access token."""

    user_id: str
    email: str
    role: str


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_email_service(request: Request) -> EmailService:
    return request.app.state.email_service


async def get_auth_service(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    token_service: Annotated[TokenService, Depends(get_token_service)],
    email_service: Annotated[EmailService, Depends(get_email_service)],
) -> AuthService:
    """Build the auth service for one request."""
    return AuthService(
        session=session,
        user_repo=UserRepository(session),
        token_service=token_service,
        email_service=email_service,
        app_url=settings.app_url,
        log_reset_tokens=not settings.is_production,
    )


async def get_current_user(
    token_service: Annotated[TokenService, Depends(get_token_service)],
    authorization: Annotated[str | None, Header()] = None,
) -> CurrentUser:
    """Extract and validate the current user from the Authorization header.

    Raises:
        UnauthorizedError: If the header is missing or malformed, or the
            token is not a valid access token.
    """
    if authorization is None:
        logger.info("Authentication failed: missing Authorization header")
        raise UnauthorizedError("Missing Authorization header")

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        logger.info("Authentication failed: invalid Authorization header format")
        raise UnauthorizedError("Could not validate credentials")

    payload = token_service.verify_access_token(parts[1])
    return CurrentUser(user_id=payload.sub, email=payload.email, role=payload.role)


AuthenticatedUser = Annotated[CurrentUser, Depends(get_current_user)]
AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
