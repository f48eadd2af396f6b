"""Stores that remember which password reset tokens were already redeemed.

Recording a token ID is an atomic check-and-insert: of two concurrent
redemptions of the same token exactly one wins. Entries only have to live
until the token itself expires, because an expired token fails signature
verification before the store is consulted. Eviction waits
``EVICTION_GRACE_SECONDS`` past expiry so that a token verified just before
it expired still finds its entry.
"""

import time
from threading import Lock
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from latchkey.core.logging import get_logger
from latchkey.infrastructure.persistence.repositories import ConsumedResetTokenRepository

logger = get_logger(__name__)

EVICTION_GRACE_SECONDS = 60


class ConsumedTokenStore(Protocol):
    """Set of consumed reset token IDs with atomic check-and-insert."""

    async def mark_consumed(self, jti: str, expires_at: int) -> bool:
        """Record ``jti`` as consumed.

        Returns:
            True if the ID was recorded by this call, False if it was
            already consumed.
        """
        ...


class InMemoryConsumedTokenStore:
    """Process-local consumed token store.

    Suitable for a single process and for tests. Entries are evicted once
    their token has expired, at most once per ``cleanup_interval`` seconds.
    """

    def __init__(self, cleanup_interval: int = 300) -> None:
        """Initialize storage.

        Args:
            cleanup_interval: Minimum seconds between eviction sweeps.
        """
        self._consumed: dict[str, int] = {}
        self._lock = Lock()
        self._cleanup_interval = cleanup_interval
        self._last_cleanup = time.time()

    async def mark_consumed(self, jti: str, expires_at: int) -> bool:
        now = time.time()
        with self._lock:
            if now - self._last_cleanup >= self._cleanup_interval:
                self._evict_expired(now)

            if jti in self._consumed:
                return False
            self._consumed[jti] = expires_at
            return True

    def __contains__(self, jti: str) -> bool:
        with self._lock:
            return jti in self._consumed

    def __len__(self) -> int:
        with self._lock:
            return len(self._consumed)

    def _evict_expired(self, now: float) -> None:
        # Caller holds the lock
        cutoff = now - EVICTION_GRACE_SECONDS
        expired = [jti for jti, expires_at in self._consumed.items() if expires_at <= cutoff]
        for jti in expired:
            del self._consumed[jti]
        self._last_cleanup = now
        if expired:
            logger.debug("Evicted expired reset token IDs", count=len(expired))


class DatabaseConsumedTokenStore:
    """Consumed token store shared by every process using the same database."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """Initialize the store.

        Args:
            session_factory: Factory for short-lived sessions, one per call.
        """
        self._session_factory = session_factory

    async def mark_consumed(self, jti: str, expires_at: int) -> bool:
        async with self._session_factory() as session:
            return await ConsumedResetTokenRepository(session).add_if_absent(jti, expires_at)

    async def prune_expired(self) -> int:
        """Delete rows of tokens that expired more than ``EVICTION_GRACE_SECONDS`` ago.

        Returns:
            Number of rows deleted.
        """
        async with self._session_factory() as session:
            deleted = await ConsumedResetTokenRepository(session).delete_expired(
                int(time.time()) - EVICTION_GRACE_SECONDS
            )
        logger.info("Pruned consumed reset tokens", deleted=deleted)
        return deleted
