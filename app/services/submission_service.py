"""
Submission Service

The single write path of the quiz engine:

1. validate the request and the caller's enrollment
2. append one row to the response ledger (the durability boundary)
3. advance the caller's quiz session (best-effort)
4. return correctness feedback

Duplicate answers for the same (student, question, assignment) triple are
rejected by the ledger's unique constraint. The lookup before the insert is
only a fast path for the common double-click case.
"""

import asyncio
import logging
from datetime import datetime
from typing import Callable, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import (
    DependencyFailure,
    DuplicateSubmissionError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from app.models import Assignment, Question, Response, ResponseStatus
from app.models.question import OPTION_COUNT
from app.repositories.assignment_repo import AssignmentRepository
from app.repositories.question_repo import QuestionRepository
from app.repositories.response_repo import ResponseRepository
from app.schemas.submission import (
    AnswerRecordResponse,
    MyResponseItem,
    NetworkMetrics,
    SubmitAnswerRequest,
    SubmitAnswerResponse,
)
from app.services.context import RequesterContext
from app.services.session_tracker import SessionTracker
from app.utils.timeutils import from_epoch_ms, to_epoch_ms, utcnow

logger = logging.getLogger(__name__)


def compute_response_time_ms(client_start_ms: int, server_receive: datetime) -> int:
    """
    Elapsed time between the client-declared start and server receipt.

    Client clocks can run ahead of ours; negative values are floored to 0.
    """
    elapsed = to_epoch_ms(server_receive) - int(client_start_ms)
    if elapsed < 0:
        logger.warning(
            f"Negative response time {elapsed}ms (client clock ahead of server), flooring to 0"
        )
        return 0
    return elapsed


class SubmissionService:
    """Service for answer submission and the student's own response history."""

    def __init__(
        self,
        db: AsyncSession,
        clock: Callable[[], datetime] = utcnow,
        session_tracker: Optional[SessionTracker] = None,
    ):
        self.db = db
        self.clock = clock
        self.question_repo = QuestionRepository(db)
        self.assignment_repo = AssignmentRepository(db)
        self.response_repo = ResponseRepository(db)
        self.session_tracker = session_tracker or SessionTracker(db, clock=clock)

    # ============================================================
    # SUBMIT ANSWER
    # ============================================================

    async def submit_answer(
        self,
        ctx: RequesterContext,
        request: SubmitAnswerRequest,
    ) -> SubmitAnswerResponse:
        """
        Record a student's answer.

        SUBMISSION_TIMEOUT_SECONDS bounds the checks that run before the
        write. Once the response row is committed the call always succeeds.

        Raises:
            ValidationError: missing fields, answer out of range, question not in assignment
            ForbiddenError: caller is not enrolled in request.class_id
            NotFoundError: question or assignment does not exist
            DuplicateSubmissionError: the triple already has a response
            asyncio.TimeoutError: the pre-write checks ran out of time; nothing was stored
        """
        question, assignment = await asyncio.wait_for(
            self._check_submission(ctx, request),
            timeout=settings.SUBMISSION_TIMEOUT_SECONDS,
        )

        received_at = self.clock()
        response_time_ms = compute_response_time_ms(request.start_time, received_at)

        # Graded against the key as it stands right now; later key edits
        # only reach this row through the re-scoring sweep.
        correct_answer = question.correct_answer
        is_correct = request.selected_answer == correct_answer

        metrics = request.network_metrics or NetworkMetrics()
        response = await self.response_repo.insert_response(
            student_id=ctx.user_id,
            question_id=request.question_id,
            assignment_id=request.assignment_id,
            class_id=request.class_id,
            selected_answer=request.selected_answer,
            is_correct=is_correct,
            status=ResponseStatus.ANSWERED.value,
            start_time=from_epoch_ms(request.start_time),
            response_time_ms=response_time_ms,
            answered_at=received_at,
            rtt_ms=metrics.rtt_ms,
            jitter_ms=metrics.jitter_ms,
            stability_percent=metrics.stability_percent,
            network_quality=metrics.network_quality,
        )

        logger.info(
            f"Response {response.id} stored: student={ctx.user_id} "
            f"question={request.question_id} assignment={request.assignment_id} "
            f"correct={is_correct} time={response_time_ms}ms"
        )

        # The response is committed; from here on nothing may fail the request.
        await self._advance_session(
            ctx.user_id,
            request.assignment_id,
            request.current_question_index,
            assignment.total_questions,
        )

        return SubmitAnswerResponse(
            response=AnswerRecordResponse.model_validate(response),
            is_correct=is_correct,
            correct_answer=correct_answer,
            response_time_ms=response_time_ms,
        )

    async def _check_submission(
        self,
        ctx: RequesterContext,
        request: SubmitAnswerRequest,
    ) -> Tuple[Question, Assignment]:
        self._validate(request)

        if not ctx.is_enrolled_in(request.class_id):
            raise ForbiddenError("Student is not in this class")

        question = await self.question_repo.get_by_id(request.question_id)
        if not question:
            raise NotFoundError("Question not found")

        assignment = await self.assignment_repo.get_by_id(request.assignment_id)
        if not assignment:
            raise NotFoundError("Assignment not found")
        if assignment.class_id != request.class_id:
            raise ValidationError("Assignment does not belong to this class")
        if request.question_id not in assignment.question_ids:
            raise ValidationError("Question is not part of this assignment")

        existing = await self.response_repo.find_by_triple(
            ctx.user_id, request.question_id, request.assignment_id
        )
        if existing:
            raise DuplicateSubmissionError("Question already answered for this assignment")

        return question, assignment

    def _validate(self, request: SubmitAnswerRequest) -> None:
        required = {
            "question_id": request.question_id,
            "assignment_id": request.assignment_id,
            "class_id": request.class_id,
            "selected_answer": request.selected_answer,
            "start_time": request.start_time,
        }
        missing = [name for name, value in required.items() if value is None]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")
        if not 0 <= request.selected_answer < OPTION_COUNT:
            raise ValidationError(f"Selected answer must be between 0 and {OPTION_COUNT - 1}")

    async def _advance_session(
        self,
        student_id: UUID,
        assignment_id: UUID,
        current_question_index: Optional[int],
        total_questions: int,
    ) -> None:
        try:
            await asyncio.wait_for(
                self.session_tracker.advance(
                    student_id, assignment_id, current_question_index, total_questions
                ),
                timeout=settings.SESSION_UPDATE_TIMEOUT_SECONDS,
            )
        except asyncio.TimeoutError:
            logger.error(
                f"Session update timed out for student {student_id} / assignment {assignment_id}"
            )
        except DependencyFailure as e:
            logger.error(f"Session update failed (submission kept): {e}")
        except Exception as e:
            logger.exception(f"Unexpected session update error (submission kept): {e}")

    # ============================================================
    # NETWORK METRICS (late arrival)
    # ============================================================

    async def update_network_metrics(
        self,
        ctx: RequesterContext,
        response_id: UUID,
        metrics: NetworkMetrics,
    ) -> AnswerRecordResponse:
        """
        Attach metrics measured after the answer was sent.

        Only fields present in the payload are written, so a later partial
        update never erases an earlier measurement, and 0 is stored as 0.
        """
        response = await self.response_repo.get_by_id(response_id)
        if not response:
            raise NotFoundError("Response not found")
        if response.student_id != ctx.user_id:
            raise ForbiddenError("Not your response")

        changes = {
            key: value
            for key, value in metrics.model_dump(exclude_unset=True).items()
            if value is not None
        }
        if changes:
            response = await self.response_repo.update_network_metrics(response, changes)
        return AnswerRecordResponse.model_validate(response)

    # ============================================================
    # MY RESPONSES
    # ============================================================

    async def list_my_responses(self, ctx: RequesterContext) -> List[MyResponseItem]:
        responses: List[Response] = await self.response_repo.get_by_student(ctx.user_id)
        return [
            MyResponseItem(
                **AnswerRecordResponse.model_validate(r).model_dump(),
                question_text=r.question.question_text,
                correct_answer=r.question.correct_answer,
            )
            for r in responses
        ]
