"""Repository for consumed password reset tokens."""

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from latchkey.infrastructure.persistence.models import ConsumedResetTokenModel


class ConsumedResetTokenRepository:
    """Repository for consumed reset token database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self._session = session

    async def add_if_absent(self, jti: str, expires_at: int) -> bool:
        """Insert a consumed token ID and commit.

        Returns:
            True if the ID was recorded now, False if it was already present.
        """
        self._session.add(ConsumedResetTokenModel(jti=jti, expires_at=expires_at))
        try:
            await self._session.commit()
        except IntegrityError:
            await self._session.rollback()
            return False
        return True

    async def delete_expired(self, now: int) -> int:
        """Delete rows whose token expired at or before ``now``.

        Returns:
            Number of rows deleted.
        """
        result = await self._session.execute(
            delete(ConsumedResetTokenModel).where(ConsumedResetTokenModel.expires_at <= now)
        )
        await self._session.commit()
        return result.rowcount
