"""User repository for database operations."""

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import undefer

from latchkey.infrastructure.persistence.models import UserModel


class UserRepository:
    """Repository for user database operations.

    Callers pass already-normalized emails and usernames.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    async def create(self, user: UserModel) -> UserModel:
        """Create a new user.

        Raises:
            sqlalchemy.exc.IntegrityError: If the email or username is taken.
        """
        self.session.add(user)
        await self.session.flush()
        return user

    async def save(self, user: UserModel) -> None:
        """Flush pending changes of a user loaded from this session."""
        self.session.add(user)
        await self.session.flush()

    async def get_by_id(
        self, user_id: str, include_password_hash: bool = False
    ) -> UserModel | None:
        """Get a user by ID.

        Args:
            user_id: User ID (UUID string).
            include_password_hash: Load the normally hidden password hash.

        Returns:
            User model if found, None otherwise.
        """
        stmt = select(UserModel).where(UserModel.id == user_id)
        if include_password_hash:
            stmt = stmt.options(undefer(UserModel.password_hash))
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_email(
        self, email: str, include_password_hash: bool = False
    ) -> UserModel | None:
        """Get a user by normalized email.

        Args:
            email: Normalized email address.
            include_password_hash: Load the normally hidden password hash.

        Returns:
            User model if found, None otherwise.
        """
        stmt = select(UserModel).where(UserModel.email == email)
        if include_password_hash:
            stmt = stmt.options(undefer(UserModel.password_hash))
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_by_email_or_username(
        self, email: str, username: str | None = None
    ) -> UserModel | None:
        """Find a user holding either the email or the username.

        When both match different users, the one holding the email wins so
        that email conflicts are reported first.
        """
        conditions = [UserModel.email == email]
        if username:
            conditions.append(UserModel.username == username)

        result = await self.session.execute(select(UserModel).where(or_(*conditions)))
        users = list(result.scalars().all())
        for user in users:
            if user.email == email:
                return user
        return users[0] if users else None
