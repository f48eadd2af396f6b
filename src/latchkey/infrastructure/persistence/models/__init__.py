"""SQLAlchemy models for Latchkey tables.

All models inherit from the Base class defined in database.py.
"""

from latchkey.infrastructure.persistence.models.consumed_reset_token import (
    ConsumedResetTokenModel,
)
from latchkey.infrastructure.persistence.models.refresh_session import RefreshSessionModel
from latchkey.infrastructure.persistence.models.user import UserModel

__all__ = [
    "ConsumedResetTokenModel",
    "RefreshSessionModel",
    "UserModel",
]
