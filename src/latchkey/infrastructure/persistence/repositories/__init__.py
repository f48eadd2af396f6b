"""Repositories for Latchkey persistence."""

from latchkey.infrastructure.persistence.repositories.consumed_reset_token_repository import (
    ConsumedResetTokenRepository,
)
from latchkey.infrastructure.persistence.repositories.refresh_session_repository import (
    RefreshSessionRepository,
)
from latchkey.infrastructure.persistence.repositories.user_repository import UserRepository

__all__ = [
    "ConsumedResetTokenRepository",
    "RefreshSessionRepository",
    "UserRepository",
]
