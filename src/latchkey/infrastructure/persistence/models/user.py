"""SQLAlchemy model for the users table.

Emails and usernames are globally unique; the unique constraints here are
the authoritative guard against concurrent registrations.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Enum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from latchkey.domain.entities.user import DEFAULT_ROLE, UserRole
from latchkey.infrastructure.persistence.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserModel(Base):
    """SQLAlchemy model for the users table.

    The password hash is a deferred column that raises if touched without
    being loaded: queries that need it must ask for it explicitly.

    Attributes:
        id: Primary key (UUID string).
        email: Normalized email address (unique).
        username: Normalized username (unique when present).
        password_hash: Argon2 password hash.
        role: The user's role.
        full_name: Optional display name.
        phone: Optional phone number.
        avatar_url: Optional avatar image URL.
        loyalty_points: Customer loyalty balance.
        membership_tier: Customer membership tier, if any.
        staff_department: Department of a staff member.
        staff_start_date: When a staff member started.
        created_at: Timestamp when the user was created.
        updated_at: Timestamp when the user was last updated.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
        comment="User ID (UUID)",
    )
    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
        comment="Normalized email address",
    )
    username: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
        unique=True,
        comment="Normalized username",
    )
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        deferred=True,
        deferred_raiseload=True,
        comment="Hashed password (argon2)",
    )
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, native_enum=False, length=20, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=DEFAULT_ROLE,
    )
    full_name: Mapped[str | None] = mapped_column(String(120), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    loyalty_points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    membership_tier: Mapped[str | None] = mapped_column(String(20), nullable=True)
    staff_department: Mapped[str | None] = mapped_column(String(100), nullable=True)
    staff_start_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
