"""
Live Progress Service

Progress board for one assignment: every enrolled student is placed in
exactly one of not started / in progress / completed.

The roster and the assignment's sessions are each loaded with one query
and joined in memory, so the cost per call is constant in round trips.
"""

import logging
from datetime import datetime
from typing import Callable, Dict
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError
from app.models import QuizSession, SessionStatus
from app.repositories.assignment_repo import AssignmentRepository
from app.repositories.session_repo import QuizSessionRepository
from app.repositories.user_repo import UserRepository
from app.schemas.progress import (
    CompletedEntry,
    InProgressEntry,
    LiveProgressResponse,
    NotStartedEntry,
    ProgressSummary,
)
from app.services.session_tracker import activity_label
from app.utils.timeutils import ensure_utc, minutes_between, seconds_between, utcnow

logger = logging.getLogger(__name__)


class LiveProgressService:
    """Read-side projection over the roster and quiz sessions."""

    def __init__(self, db: AsyncSession, clock: Callable[[], datetime] = utcnow):
        self.db = db
        self.clock = clock
        self.assignment_repo = AssignmentRepository(db)
        self.session_repo = QuizSessionRepository(db)
        self.user_repo = UserRepository(db)

    async def get_live_progress(self, assignment_id: UUID) -> LiveProgressResponse:
        assignment = await self.assignment_repo.get_by_id(assignment_id)
        if not assignment:
            raise NotFoundError("Assignment not found")

        students = await self.user_repo.get_students_in_class(assignment.class_id)
        sessions: Dict[UUID, QuizSession] = {
            s.student_id: s for s in await self.session_repo.get_by_assignment(assignment_id)
        }

        now = self.clock()
        not_started, in_progress, completed = [], [], []

        for student in students:
            base = {
                "id": student.id,
                "name": student.name,
                "email": student.email,
                "admission_no": student.admission_no,
            }
            session = sessions.get(student.id)

            if session is None:
                not_started.append(NotStartedEntry(**base))
            elif session.status == SessionStatus.COMPLETED.value:
                completed.append(
                    CompletedEntry(
                        **base,
                        questions_answered=session.questions_answered,
                        total_questions=session.total_questions,
                        started_at=ensure_utc(session.started_at),
                        completed_at=ensure_utc(session.completed_at),
                        time_taken_seconds=seconds_between(session.started_at, session.completed_at),
                    )
                )
            else:
                last_seen = session.last_activity_at or session.started_at
                idle = minutes_between(last_seen, now)
                progress = (
                    round(session.questions_answered / session.total_questions * 100)
                    if session.total_questions else 0
                )
                in_progress.append(
                    InProgressEntry(
                        **base,
                        current_question_index=session.current_question_index,
                        questions_answered=session.questions_answered,
                        total_questions=session.total_questions,
                        progress=progress,
                        started_at=ensure_utc(session.started_at),
                        last_activity_at=ensure_utc(session.last_activity_at),
                        idle_minutes=idle,
                        activity=activity_label(idle),
                    )
                )

        # Students needing attention first
        in_progress.sort(key=lambda e: e.idle_minutes, reverse=True)

        return LiveProgressResponse(
            assignment_id=assignment.id,
            assignment_title=assignment.title,
            class_name=assignment.classroom.name if assignment.classroom else None,
            total_students=len(students),
            total_questions=assignment.total_questions,
            summary=ProgressSummary(
                not_started=len(not_started),
                in_progress=len(in_progress),
                completed=len(completed),
            ),
            not_started=not_started,
            in_progress=in_progress,
            completed=completed,
            last_updated=now,
        )
