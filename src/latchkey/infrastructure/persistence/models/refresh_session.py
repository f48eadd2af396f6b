"""SQLAlchemy model for refresh sessions.

One row per issued refresh token, keyed by the token's ``jti``. Only used
when the persisted session registry is enabled.
"""

from datetime import datetime, timezone

from sqlalchemy import BigInteger, DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from latchkey.infrastructure.persistence.database import Base


class RefreshSessionModel(Base):
    """Refresh session model backing real refresh-token revocation."""

    __tablename__ = "refresh_sessions"

    jti: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    # Unix timestamp, same clock as the token's exp claim
    expires_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    revoked_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (Index("ix_refresh_sessions_user", "user_id"),)

    def __repr__(self) -> str:
        return f"RefreshSessionModel(jti={self.jti!r}, user_id={self.user_id!r}, revoked={self.revoked_at is not None})"
