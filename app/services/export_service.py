"""
Research Export Service

Dumps every response of an assignment with its engagement classification
attached. Question statistics are computed once per question from all of
its responses, then each row is classified against them.
"""

import logging
from datetime import datetime
from typing import Callable, Dict, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError
from app.repositories.assignment_repo import AssignmentRepository
from app.repositories.response_repo import ResponseRepository
from app.schemas.export import (
    ResearchExportResponse,
    ResearchExportRow,
    ResearchExportSummary,
)
from app.services.engagement import (
    QuestionStats,
    classify,
    compute_question_stats,
    network_condition,
)
from app.utils.timeutils import ensure_utc, utcnow

logger = logging.getLogger(__name__)


class ResearchExportService:

    def __init__(self, db: AsyncSession, clock: Callable[[], datetime] = utcnow):
        self.db = db
        self.clock = clock
        self.assignment_repo = AssignmentRepository(db)
        self.response_repo = ResponseRepository(db)

    async def export_assignment(self, assignment_id: UUID) -> ResearchExportResponse:
        assignment = await self.assignment_repo.get_by_id(assignment_id)
        if not assignment:
            raise NotFoundError("Assignment not found")

        responses = await self.response_repo.get_by_assignment(assignment_id)
        question_ids = {r.question_id for r in responses}
        samples = await self.response_repo.get_timing_samples(question_ids)

        stats: Dict[UUID, Optional[QuestionStats]] = {
            qid: compute_question_stats((ms / 1000, ok) for ms, ok in qsamples)
            for qid, qsamples in samples.items()
        }

        rows = []
        for r in responses:
            seconds = r.response_time_ms / 1000
            result = classify(
                is_correct=bool(r.is_correct),
                response_time_seconds=seconds,
                stats=stats.get(r.question_id),
                network=network_condition(r.rtt_ms, r.jitter_ms),
            )
            rows.append(
                ResearchExportRow(
                    response_id=r.id,
                    quiz_number=assignment.quiz_number,
                    student_id=r.student_id,
                    student_name=r.student.name,
                    admission_no=r.student.admission_no,
                    question_id=r.question_id,
                    question_text=r.question.question_text,
                    selected_answer=r.selected_answer,
                    correct_answer=r.question.correct_answer,
                    is_correct=bool(r.is_correct),
                    response_time_ms=r.response_time_ms,
                    response_time_sec=round(seconds, 3),
                    rtt_ms=r.rtt_ms,
                    jitter_ms=r.jitter_ms,
                    stability_percent=r.stability_percent,
                    network_quality=r.network_quality,
                    network_penalty=round(result.penalty, 3),
                    adjusted_time_sec=(
                        round(result.adjusted_time, 3) if result.adjusted_time is not None else None
                    ),
                    engagement_level=result.level.value,
                    engagement_score=(
                        round(result.engagement_score, 3) if result.engagement_score is not None else None
                    ),
                    answered_at=ensure_utc(r.answered_at),
                )
            )

        total = len(rows)
        correct = sum(1 for row in rows if row.is_correct)
        avg_seconds = sum(row.response_time_sec for row in rows) / total if total else 0.0

        logger.info(f"Exported {total} responses for assignment {assignment_id}")

        return ResearchExportResponse(
            assignment_id=assignment.id,
            quiz_number=assignment.quiz_number,
            assignment_title=assignment.title,
            class_name=assignment.classroom.name if assignment.classroom else None,
            exported_at=self.clock(),
            summary=ResearchExportSummary(
                total_questions=assignment.total_questions,
                total_responses=total,
                correct_responses=correct,
                accuracy_percent=round(correct / total * 100, 2) if total else 0.0,
                average_response_time_sec=round(avg_seconds, 3),
            ),
            responses=rows,
        )
