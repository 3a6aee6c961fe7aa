"""
Quiz Session Repository

Data access layer for per student x assignment progress rows.

Progress is advanced with a single UPDATE whose SET clause reads the
pre-update row, so concurrent submissions never lose or double an increment.
"""

from datetime import datetime
from typing import List, Optional, Set
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, func, case, or_

from app.repositories.base import BaseRepository
from app.models import QuizSession, SessionStatus


class QuizSessionRepository(BaseRepository[QuizSession]):
    """Repository for QuizSession model."""

    def __init__(self, db: AsyncSession):
        super().__init__(QuizSession, db)

    async def get_for_student(self, student_id: UUID, assignment_id: UUID) -> Optional[QuizSession]:
        result = await self.db.execute(
            select(QuizSession)
            .where(
                QuizSession.student_id == student_id,
                QuizSession.assignment_id == assignment_id,
            )
            .execution_options(populate_existing=True)
        )
        return result.unique().scalar_one_or_none()

    async def increment(
        self,
        student_id: UUID,
        assignment_id: UUID,
        current_question_index: Optional[int],
        now: datetime,
    ) -> bool:
        """
        Record one more answered question on an existing session.

        Returns False when no session exists yet.
        """
        bumped = QuizSession.questions_answered + 1
        reaches_end = or_(
            QuizSession.status == SessionStatus.COMPLETED.value,
            bumped >= QuizSession.total_questions,
        )
        new_count = case(
            (bumped > QuizSession.total_questions, QuizSession.total_questions),
            else_=bumped,
        )
        stmt = (
            update(QuizSession)
            .where(
                QuizSession.student_id == student_id,
                QuizSession.assignment_id == assignment_id,
            )
            .values(
                questions_answered=new_count,
                current_question_index=(
                    current_question_index if current_question_index is not None else new_count
                ),
                last_activity_at=now,
                status=case(
                    (reaches_end, SessionStatus.COMPLETED.value),
                    else_=SessionStatus.IN_PROGRESS.value,
                ),
                completed_at=func.coalesce(
                    QuizSession.completed_at,
                    case((reaches_end, now), else_=None),
                ),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        await self.db.commit()
        return (result.rowcount or 0) > 0

    async def insert_first(
        self,
        student_id: UUID,
        assignment_id: UUID,
        current_question_index: Optional[int],
        total_questions: int,
        now: datetime,
    ) -> QuizSession:
        """
        Create the session for a student's first answer and commit.

        Raises IntegrityError if another submission created it concurrently.
        """
        completed = total_questions <= 1
        session = QuizSession(
            student_id=student_id,
            assignment_id=assignment_id,
            status=(SessionStatus.COMPLETED if completed else SessionStatus.IN_PROGRESS).value,
            current_question_index=current_question_index if current_question_index is not None else 1,
            questions_answered=1,
            total_questions=total_questions,
            started_at=now,
            last_activity_at=now,
            completed_at=now if completed else None,
        )
        self.db.add(session)
        await self.db.commit()
        await self.db.refresh(session)
        return session

    async def get_by_assignment(self, assignment_id: UUID) -> List[QuizSession]:
        result = await self.db.execute(
            select(QuizSession).where(QuizSession.assignment_id == assignment_id)
        )
        return list(result.unique().scalars().all())

    async def get_completed_assignment_ids(self, student_id: UUID) -> Set[UUID]:
        result = await self.db.execute(
            select(QuizSession.assignment_id).where(
                QuizSession.student_id == student_id,
                QuizSession.status == SessionStatus.COMPLETED.value,
            )
        )
        return set(result.scalars().all())
