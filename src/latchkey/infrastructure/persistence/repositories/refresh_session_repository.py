"""Repository for refresh session operations."""

import time
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from latchkey.infrastructure.persistence.models import RefreshSessionModel


class RefreshSessionRepository:
    """Repository for refresh session database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self._session = session

    async def create(self, model: RefreshSessionModel) -> RefreshSessionModel:
        """Store a new refresh session."""
        self._session.add(model)
        await self._session.flush()
        return model

    async def get(self, jti: str) -> RefreshSessionModel | None:
        """Look up a refresh session by token ID."""
        result = await self._session.execute(
            select(RefreshSessionModel).where(RefreshSessionModel.jti == jti)
        )
        return result.scalar_one_or_none()

    async def is_active(self, user_id: str, jti: str) -> bool:
        """Check that a session exists for the user, is not revoked and not expired."""
        session = await self.get(jti)
        if session is None or session.user_id != user_id:
            return False
        if session.revoked_at is not None:
            return False
        return session.expires_at > int(time.time())

    async def revoke(self, user_id: str, jti: str) -> bool:
        """Revoke one session.

        Returns:
            True if an active session was revoked, False otherwise.
        """
        result = await self._session.execute(
            update(RefreshSessionModel)
            .where(
                RefreshSessionModel.jti == jti,
                RefreshSessionModel.user_id == user_id,
                RefreshSessionModel.revoked_at.is_(None),
            )
            .values(revoked_at=datetime.now(timezone.utc))
        )
        return result.rowcount > 0

    async def revoke_all_for_user(self, user_id: str) -> int:
        """Revoke every active session of a user.

        Returns:
            Number of sessions revoked.
        """
        result = await self._session.execute(
            update(RefreshSessionModel)
            .where(
                RefreshSessionModel.user_id == user_id,
                RefreshSessionModel.revoked_at.is_(None),
            )
            .values(revoked_at=datetime.now(timezone.utc))
        )
        return result.rowcount
