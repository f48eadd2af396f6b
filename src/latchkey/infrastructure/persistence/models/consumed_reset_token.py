"""SQLAlchemy model for consumed password reset tokens.

The primary key on ``jti`` makes "record as consumed" an atomic
check-and-insert: a second insert of the same jti fails.
"""

from datetime import datetime, timezone

from sqlalchemy import BigInteger, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from latchkey.infrastructure.persistence.database import Base


class ConsumedResetTokenModel(Base):
    """A password reset token that has already been redeemed."""

    __tablename__ = "consumed_reset_tokens"

    jti: Mapped[str] = mapped_column(String(36), primary_key=True)
    # Unix timestamp after which the row can be pruned
    expires_at: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    consumed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"ConsumedResetTokenModel(jti={self.jti!r}, expires_at={self.expires_at!r})"
