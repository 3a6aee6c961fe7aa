"""
User Repository

Data access layer for User model and class enrollment.
"""

from typing import Optional, List, Set
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.repositories.base import BaseRepository
from app.models import User, UserRole, class_memberships


class UserRepository(BaseRepository[User]):
    """Repository for User model."""

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    # =================
    # Get by email
    # =================
    async def get_by_email(self, email: str) -> Optional[User]:
        """Get a user by email address."""
        result = await self.db.execute(
            select(User).where(User.email == email)
        )
        return result.scalar_one_or_none()

    # =================
    # Enrollment set
    # =================
    async def get_class_ids(self, user_id: UUID) -> Set[UUID]:
        """Read the user's class memberships straight from the membership table."""
        result = await self.db.execute(
            select(class_memberships.c.class_id)
            .where(class_memberships.c.user_id == user_id)
        )
        return set(result.scalars().all())

    # =================
    # Class roster
    # =================
    async def get_students_in_class(self, class_id: UUID) -> List[User]:
        """All student accounts enrolled in a class, ordered by name."""
        result = await self.db.execute(
            select(User)
            .join(class_memberships, class_memberships.c.user_id == User.id)
            .where(
                class_memberships.c.class_id == class_id,
                User.role == UserRole.STUDENT.value,
            )
            .order_by(User.name)
        )
        return list(result.scalars().all())
