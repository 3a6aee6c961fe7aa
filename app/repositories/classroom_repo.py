"""
Classroom Repository
"""

from sqlalchemy.ext.asyncio import AsyncSession

from app.repositories.base import BaseRepository
from app.models import Classroom


class ClassroomRepository(BaseRepository[Classroom]):
    """Repository for Classroom model."""

    def __init__(self, db: AsyncSession):
        super().__init__(Classroom, db)
