"""Refresh session registries.

A registry decides whether an otherwise valid refresh token still names a
live session. Two variants exist:

* ``NullSessionRegistry`` keeps refresh tokens fully stateless. Nothing is
  recorded and revocation does nothing: a refresh token stays usable until
  it expires, even after rotation, logout or a password reset.
* ``PersistedSessionRegistry`` records every issued refresh token in the
  ``refresh_sessions`` table and is consulted on every refresh
  verification, which makes rotation, logout and password resets revoke
  for real.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from latchkey.core.logging import get_logger
from latchkey.infrastructure.persistence.models import RefreshSessionModel
from latchkey.infrastructure.persistence.repositories import RefreshSessionRepository

logger = get_logger(__name__)


class SessionRegistry(Protocol):
    """Capability interface for tracking and revoking refresh sessions."""

    async def store(self, user_id: str, jti: str, expires_at: int) -> None:
        ...

    async def is_active(self, user_id: str, jti: str) -> bool:
        ...

    async def consume(self, user_id: str, jti: str) -> bool:
        """Atomically revoke an active session. True only for the caller that revoked it."""
        ...

    async def revoke(self, user_id: str, jti: str) -> bool:
        ...

    async def revoke_all_for_user(self, user_id: str) -> int:
        ...


class NullSessionRegistry:
    """Registry that tracks nothing. Revocation calls are no-ops."""

    async def store(self, user_id: str, jti: str, expires_at: int) -> None:
        return None

    async def is_active(self, user_id: str, jti: str) -> bool:
        return True

    async def consume(self, user_id: str, jti: str) -> bool:
        return True

    async def revoke(self, user_id: str, jti: str) -> bool:
        return False

    async def revoke_all_for_user(self, user_id: str) -> int:
        return 0


class PersistedSessionRegistry:
    """Registry backed by the ``refresh_sessions`` table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """Initialize the registry.

        Args:
            session_factory: Factory for short-lived sessions, one per call.
        """
        self._session_factory = session_factory

    async def store(self, user_id: str, jti: str, expires_at: int) -> None:
        async with self._session_factory() as session:
            await RefreshSessionRepository(session).create(
                RefreshSessionModel(jti=jti, user_id=user_id, expires_at=expires_at)
            )
            await session.commit()

    async def is_active(self, user_id: str, jti: str) -> bool:
        async with self._session_factory() as session:
            return await RefreshSessionRepository(session).is_active(user_id, jti)

    async def consume(self, user_id: str, jti: str) -> bool:
        async with self._session_factory() as session:
            claimed = await RefreshSessionRepository(session).revoke(user_id, jti)
            await session.commit()
        return claimed

    async def revoke(self, user_id: str, jti: str) -> bool:
        async with self._session_factory() as session:
            revoked = await RefreshSessionRepository(session).revoke(user_id, jti)
            await session.commit()
        logger.debug("Refresh session revoked", user_id=user_id, jti=jti, revoked=revoked)
        return revoked

    async def revoke_all_for_user(self, user_id: str) -> int:
        async with self._session_factory() as session:
            count = await RefreshSessionRepository(session).revoke_all_for_user(user_id)
            await session.commit()
        logger.info("Refresh sessions revoked", user_id=user_id, count=count)
        return count
