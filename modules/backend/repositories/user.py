"""
User Repository.

Data access layer for accounts. Every lookup ignores soft-deleted users.
"""

from sqlalchemy import or_, select

from modules.backend.models.user import User
from modules.backend.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for User model."""

    model = User
    label = "User"

    async def get_active_by_id(self, user_id: str) -> User | None:
        """Get an active user by ID."""
        result = await self.session.execute(
            select(User).where(User.id == user_id, User.is_active.is_(True))
        )
        return result.scalar_one_or_none()

    async def get_active_by_email(self, email: str) -> User | None:
        """Get an active user by email (case-insensitive)."""
        result = await self.session.execute(
            select(User).where(
                User.email == email.lower(),
                User.is_active.is_(True),
            )
        )
        return result.scalar_one_or_none()

    async def is_taken(
        self,
        email: str | None = None,
        username: str | None = None,
        exclude_id: str | None = None,
    ) -> bool:
        """
        Check whether an email or username is already used by any row.

        Soft-deleted users still hold their email and username because the
        columns are unique at the database level.
        """
        conditions = []
        if email is not None:
            conditions.append(User.email == email.lower())
        if username is not None:
            conditions.append(User.username == username)
        if not conditions:
            return False

        query = select(User.id).where(or_(*conditions))
        if exclude_id is not None:
            query = query.where(User.id != exclude_id)
        result = await self.session.execute(query.limit(1))
        return result.scalar_one_or_none() is not None

    async def deactivate(self, user_id: str) -> User:
        """Soft delete: clear is_active instead of removing the row."""
        return await self.update(user_id, is_active=False)
