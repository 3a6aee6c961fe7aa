"""
Leaderboard Service

Ranks students by correct answers, fastest average response time first
among ties. Aggregation happens in the database over a bounded window of
the most recent responses; hitting the bound truncates instead of failing.
"""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import ForbiddenError
from app.repositories.response_repo import ResponseRepository
from app.schemas.leaderboard import LeaderboardEntry, LeaderboardResponse
from app.services.context import RequesterContext

logger = logging.getLogger(__name__)


class LeaderboardService:

    def __init__(self, db: AsyncSession, max_responses: Optional[int] = None):
        self.db = db
        self.response_repo = ResponseRepository(db)
        self.max_responses = max_responses or settings.LEADERBOARD_MAX_RESPONSES

    async def get_leaderboard(
        self,
        viewer: RequesterContext,
        class_id: Optional[UUID] = None,
    ) -> LeaderboardResponse:
        """
        Build the leaderboard as seen by `viewer`.

        Students only see rows for assignments they attempted themselves,
        and only for classes they belong to.
        """
        assignment_ids = None
        if not viewer.is_admin:
            if class_id is not None and not viewer.is_enrolled_in(class_id):
                raise ForbiddenError("Student is not in this class")
            assignment_ids = await self.response_repo.get_attempted_assignment_ids(viewer.user_id)

        tallies, truncated = await self.response_repo.tally_by_student(
            limit=self.max_responses,
            class_id=class_id,
            assignment_ids=assignment_ids,
        )
        if truncated:
            logger.warning(
                f"Leaderboard truncated to the {self.max_responses} most recent responses "
                f"(class={class_id})"
            )

        tallies.sort(key=lambda t: (-t.correct_answers, t.average_response_time_ms))

        entries = [
            LeaderboardEntry(
                rank=i,
                student_id=t.student_id,
                student_name=t.name,
                student_email=t.email,
                score=t.correct_answers,
                total_answers=t.total_answers,
                correct_answers=t.correct_answers,
                average_response_time_ms=round(t.average_response_time_ms, 2),
            )
            for i, t in enumerate(tallies, start=1)
        ]
        return LeaderboardResponse(class_id=class_id, entries=entries, truncated=truncated)
