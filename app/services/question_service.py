"""
Question Service

Administrative question edits and the re-scoring sweep that follows a
change of answer key.

The edit is the authoritative request: it is committed first, and the
sweep that reconciles stored correctness runs afterwards on a best-effort
basis. A failed sweep is logged and can be re-run at any time, since it
only flips rows whose stored correctness disagrees with the current key.
"""

import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import DependencyFailure, NotFoundError, ValidationError
from app.models.question import OPTION_COUNT
from app.repositories.question_repo import QuestionRepository
from app.repositories.response_repo import ResponseRepository
from app.schemas.question import (
    QuestionResponse,
    QuestionUpdate,
    QuestionUpdateResponse,
    RescoreReportResponse,
)

logger = logging.getLogger(__name__)


@dataclass
class RescoreReport:
    question_id: UUID
    correct_answer: int
    marked_correct: int
    marked_incorrect: int

    @property
    def total(self) -> int:
        return self.marked_correct + self.marked_incorrect

    def to_schema(self) -> RescoreReportResponse:
        return RescoreReportResponse(
            question_id=self.question_id,
            correct_answer=self.correct_answer,
            marked_correct=self.marked_correct,
            marked_incorrect=self.marked_incorrect,
            total_reevaluated=self.total,
        )


class RescoringService:
    """Bulk re-evaluation of stored correctness for one question."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.question_repo = QuestionRepository(db)
        self.response_repo = ResponseRepository(db)

    async def sweep(self, question_id: UUID, correct_answer: Optional[int] = None) -> RescoreReport:
        """
        Re-evaluate every response to a question against its answer key.

        Args:
            question_id: question whose responses are re-evaluated
            correct_answer: key to apply; defaults to the question's current key

        Raises:
            NotFoundError: the question does not exist
            DependencyFailure: the bulk update failed
        """
        if correct_answer is None:
            correct_answer = await self.question_repo.get_correct_answer(question_id)
            if correct_answer is None:
                raise NotFoundError("Question not found")

        try:
            marked_correct, marked_incorrect = await self.response_repo.rescore_question(
                question_id, correct_answer
            )
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise DependencyFailure(f"Re-scoring sweep failed for question {question_id}: {e}") from e

        report = RescoreReport(
            question_id=question_id,
            correct_answer=correct_answer,
            marked_correct=marked_correct,
            marked_incorrect=marked_incorrect,
        )
        logger.info(
            f"Re-evaluated {report.total} responses for question {question_id} "
            f"({marked_correct} set to correct, {marked_incorrect} set to incorrect)"
        )
        return report


class QuestionService:
    """Service for question edits."""

    def __init__(self, db: AsyncSession, rescoring: Optional[RescoringService] = None):
        self.db = db
        self.question_repo = QuestionRepository(db)
        self.rescoring = rescoring or RescoringService(db)

    async def update_question(
        self,
        question_id: UUID,
        update: QuestionUpdate,
    ) -> QuestionUpdateResponse:
        """
        Apply a partial edit; re-score stored responses if the key changed.

        Raises:
            NotFoundError: question does not exist
            ValidationError: wrong option count or key out of range
        """
        question = await self.question_repo.get_by_id(question_id)
        if not question:
            raise NotFoundError("Question not found")

        changes = update.model_dump(exclude_unset=True)
        if "options" in changes and (changes["options"] is None or len(changes["options"]) != OPTION_COUNT):
            raise ValidationError(f"Question must have exactly {OPTION_COUNT} options")
        if "correct_answer" in changes:
            key = changes["correct_answer"]
            if key is None or not 0 <= key < OPTION_COUNT:
                raise ValidationError(f"Correct answer must be between 0 and {OPTION_COUNT - 1}")
        # Required columns cannot be cleared by a partial update
        for required in ("question_text",):
            if required in changes and changes[required] is None:
                changes.pop(required)

        old_key = question.correct_answer
        question = await self.question_repo.apply_changes(question, changes)
        key_changed = question.correct_answer != old_key

        rescore = None
        queued = False
        if key_changed:
            if settings.RESCORE_IN_BACKGROUND:
                queued = await self._enqueue_sweep(question.id)
            if not queued:
                rescore = await self._sweep_inline(question.id, question.correct_answer)

        return QuestionUpdateResponse(
            question=QuestionResponse.model_validate(question),
            rescore=rescore.to_schema() if rescore else None,
            rescore_queued=queued,
        )

    async def _sweep_inline(self, question_id: UUID, correct_answer: int) -> Optional[RescoreReport]:
        try:
            return await self.rescoring.sweep(question_id, correct_answer)
        except DependencyFailure as e:
            logger.error(f"Error re-evaluating responses (question edit kept): {e}")
            return None

    async def _enqueue_sweep(self, question_id: UUID) -> bool:
        try:
            from app.db.redis import get_arq_pool

            pool = await get_arq_pool()
            await pool.enqueue_job(
                "rescore_question_responses",
                question_id=str(question_id),
            )
            logger.info(f"Queued re-scoring sweep for question {question_id}")
            return True
        except Exception as e:
            logger.warning(f"Could not queue re-scoring sweep, running inline: {e}")
            return False
