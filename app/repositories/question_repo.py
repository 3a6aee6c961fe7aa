"""
Question Repository

Data access layer for the Question catalog.
"""

from typing import Any, Dict, Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.repositories.base import BaseRepository
from app.models import Question, Classroom


class QuestionRepository(BaseRepository[Question]):
    """Repository for Question model."""

    def __init__(self, db: AsyncSession):
        super().__init__(Question, db)

    async def get_correct_answer(self, question_id: UUID) -> Optional[int]:
        """Current answer key, read without loading the whole row."""
        result = await self.db.execute(
            select(Question.correct_answer).where(Question.id == question_id)
        )
        return result.scalar_one_or_none()

    async def apply_changes(self, question: Question, changes: Dict[str, Any]) -> Question:
        """Write the given field changes and commit."""
        class_ids = changes.pop("class_ids", None)
        for key, value in changes.items():
            setattr(question, key, value)
        if class_ids is not None:
            result = await self.db.execute(
                select(Classroom).where(Classroom.id.in_(class_ids))
            )
            question.classes = list(result.scalars().all())

        await self.db.commit()
        await self.db.refresh(question)
        return question
