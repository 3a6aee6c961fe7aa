"""
Assignment Repository

Data access layer for Assignment and its ordered question set.
"""

from typing import List, Optional, Iterable
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from app.repositories.base import BaseRepository
from app.models import Assignment, AssignmentQuestion


class AssignmentRepository(BaseRepository[Assignment]):
    """Repository for Assignment model."""

    def __init__(self, db: AsyncSession):
        super().__init__(Assignment, db)

    async def next_quiz_number(self, class_id: UUID) -> int:
        """max(existing quiz_number) + 1 within the class, starting at 1."""
        result = await self.db.execute(
            select(func.max(Assignment.quiz_number))
            .where(Assignment.class_id == class_id)
        )
        return (result.scalar() or 0) + 1

    async def add_assignment(
        self,
        class_id: UUID,
        question_ids: List[UUID],
        assigned_by: Optional[UUID],
        quiz_number: int,
        title: str,
        description: Optional[str],
    ) -> Assignment:
        """
        Insert an assignment with its ordered questions and commit.

        Raises IntegrityError if quiz_number was taken concurrently.
        """
        assignment = Assignment(
            class_id=class_id,
            assigned_by=assigned_by,
            quiz_number=quiz_number,
            title=title,
            description=description,
        )
        assignment.items = [
            AssignmentQuestion(question_id=qid, position=i)
            for i, qid in enumerate(question_ids)
        ]
        self.db.add(assignment)
        await self.db.commit()

        # Reload so server defaults and eager relationships are populated
        result = await self.db.execute(
            select(Assignment)
            .where(Assignment.id == assignment.id)
            .execution_options(populate_existing=True)
        )
        return result.unique().scalar_one()

    async def get_active(self, class_ids: Optional[Iterable[UUID]] = None) -> List[Assignment]:
        """Active assignments, newest first, optionally limited to some classes."""
        stmt = select(Assignment).where(Assignment.is_active.is_(True))
        if class_ids is not None:
            class_ids = list(class_ids)
            if not class_ids:
                return []
            stmt = stmt.where(Assignment.class_id.in_(class_ids))
        stmt = stmt.order_by(Assignment.assigned_at.desc(), Assignment.quiz_number.desc())
        result = await self.db.execute(stmt)
        return list(result.unique().scalars().all())
