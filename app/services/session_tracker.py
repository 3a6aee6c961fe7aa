"""
Session Tracker

Maintains the per student x assignment progress row as answers arrive.

Lifecycle:
    not_started --(first answer)--> in_progress --(all answered)--> completed

A single-question quiz goes straight from not_started to completed.
Nothing leaves completed, and completed_at is written exactly once.

Tracking is a convenience view over the response ledger. Any failure here
surfaces as DependencyFailure so the submission path can log it and still
report the answer as saved.
"""

import logging
from datetime import datetime
from typing import Callable, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import DependencyFailure
from app.models import QuizSession
from app.repositories.session_repo import QuizSessionRepository
from app.utils.timeutils import utcnow

logger = logging.getLogger(__name__)


class ActivityLabel:
    ACTIVE = "active"
    SLOW = "slow"
    IDLE = "idle"


def activity_label(idle_minutes: int) -> str:
    """Label an in-progress student by minutes since their last answer."""
    if idle_minutes > settings.IDLE_THRESHOLD_MINUTES:
        return ActivityLabel.IDLE
    if idle_minutes > settings.SLOW_THRESHOLD_MINUTES:
        return ActivityLabel.SLOW
    return ActivityLabel.ACTIVE


class SessionTracker:
    """Advances quiz sessions; the submission path is its only caller."""

    def __init__(self, db: AsyncSession, clock: Callable[[], datetime] = utcnow):
        self.db = db
        self.session_repo = QuizSessionRepository(db)
        self.clock = clock

    async def advance(
        self,
        student_id: UUID,
        assignment_id: UUID,
        current_question_index: Optional[int],
        total_questions: int,
    ) -> QuizSession:
        """
        Count one newly committed response against the student's session.

        Must be called once per successfully inserted response, never for
        rejected duplicates.

        Raises:
            DependencyFailure: the session row could not be written
        """
        now = self.clock()
        try:
            updated = await self.session_repo.increment(
                student_id, assignment_id, current_question_index, now
            )
            if not updated:
                try:
                    return await self.session_repo.insert_first(
                        student_id,
                        assignment_id,
                        current_question_index,
                        total_questions,
                        now,
                    )
                except IntegrityError:
                    # Another answer from the same student created the row first
                    await self.db.rollback()
                    logger.debug(
                        f"Session for student {student_id} / assignment {assignment_id} "
                        f"created concurrently, incrementing instead"
                    )
                    await self.session_repo.increment(
                        student_id, assignment_id, current_question_index, now
                    )

            session = await self.session_repo.get_for_student(student_id, assignment_id)
            if session is None:
                raise DependencyFailure("Quiz session vanished while being updated")
            return session

        except SQLAlchemyError as e:
            await self.db.rollback()
            raise DependencyFailure(f"Quiz session update failed: {e}") from e
