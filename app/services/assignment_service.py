"""
Assignment Service

Creating quizzes for a class and the student-facing list of what is
currently assigned.
"""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError, ValidationError
from app.models import Assignment
from app.repositories.assignment_repo import AssignmentRepository
from app.repositories.classroom_repo import ClassroomRepository
from app.repositories.question_repo import QuestionRepository
from app.repositories.response_repo import ResponseRepository
from app.repositories.session_repo import QuizSessionRepository
from app.repositories.user_repo import UserRepository
from app.schemas.assignment import (
    AssignedQuestionItem,
    AssignmentCreate,
    AssignmentResponse,
    NonParticipantItem,
    NonParticipantListResponse,
)
from app.services.context import RequesterContext
from app.utils.timeutils import ensure_utc

logger = logging.getLogger(__name__)

QUIZ_NUMBER_ATTEMPTS = 3


def to_assignment_response(assignment: Assignment) -> AssignmentResponse:
    return AssignmentResponse(
        id=assignment.id,
        class_id=assignment.class_id,
        class_name=assignment.classroom.name if assignment.classroom else None,
        quiz_number=assignment.quiz_number,
        title=assignment.title,
        description=assignment.description,
        is_active=assignment.is_active,
        assigned_at=ensure_utc(assignment.assigned_at),
        assigned_by=assignment.assigned_by,
        question_ids=assignment.question_ids,
        total_questions=assignment.total_questions,
    )


class AssignmentService:
    """Service for assignment operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.assignment_repo = AssignmentRepository(db)
        self.classroom_repo = ClassroomRepository(db)
        self.question_repo = QuestionRepository(db)
        self.response_repo = ResponseRepository(db)
        self.session_repo = QuizSessionRepository(db)
        self.user_repo = UserRepository(db)

    # ============================================================
    # CREATE
    # ============================================================

    async def create_assignment(
        self,
        ctx: RequesterContext,
        data: AssignmentCreate,
    ) -> AssignmentResponse:
        """
        Bind questions to a class as the next numbered quiz.

        Raises:
            NotFoundError: class does not exist
            ValidationError: one or more questions do not exist
        """
        classroom = await self.classroom_repo.get_by_id(data.class_id)
        if not classroom:
            raise NotFoundError("Class not found")

        found = {q.id for q in await self.question_repo.get_by_ids(data.question_ids)}
        unknown = [str(qid) for qid in data.question_ids if qid not in found]
        if unknown:
            raise ValidationError(f"Unknown questions: {', '.join(unknown)}")

        for attempt in range(1, QUIZ_NUMBER_ATTEMPTS + 1):
            quiz_number = await self.assignment_repo.next_quiz_number(data.class_id)
            try:
                assignment = await self.assignment_repo.add_assignment(
                    class_id=data.class_id,
                    question_ids=data.question_ids,
                    assigned_by=ctx.user_id,
                    quiz_number=quiz_number,
                    title=data.title or f"Quiz {quiz_number}",
                    description=data.description,
                )
            except IntegrityError:
                await self.db.rollback()
                logger.warning(
                    f"Quiz number {quiz_number} taken for class {data.class_id} "
                    f"(attempt {attempt}/{QUIZ_NUMBER_ATTEMPTS})"
                )
                continue

            logger.info(
                f"Assignment {assignment.id} created: class={data.class_id} "
                f"quiz={quiz_number} questions={len(data.question_ids)}"
            )
            return to_assignment_response(assignment)

        raise ValidationError("Could not allocate a quiz number, please retry")

    # ============================================================
    # LIST
    # ============================================================

    async def list_active(self, class_id: Optional[UUID] = None) -> List[AssignmentResponse]:
        assignments = await self.assignment_repo.get_active(
            class_ids=[class_id] if class_id else None
        )
        return [to_assignment_response(a) for a in assignments]

    async def get_assigned_questions(self, ctx: RequesterContext) -> List[AssignedQuestionItem]:
        """
        Questions of every active assignment in the caller's classes, with
        answered and completion flags. Answer keys are never included.
        """
        assignments = await self.assignment_repo.get_active(class_ids=ctx.class_ids)
        if not assignments:
            return []

        assignment_ids = [a.id for a in assignments]
        answered = await self.response_repo.get_answered_pairs(ctx.user_id, assignment_ids)
        completed = await self.session_repo.get_completed_assignment_ids(ctx.user_id)

        items = []
        for assignment in assignments:
            for item in assignment.items:
                question = item.question
                items.append(
                    AssignedQuestionItem(
                        question_id=question.id,
                        question_text=question.question_text,
                        options=list(question.options),
                        image_url=question.image_url,
                        class_id=assignment.class_id,
                        class_name=assignment.classroom.name if assignment.classroom else None,
                        assignment_id=assignment.id,
                        quiz_number=assignment.quiz_number,
                        assignment_title=assignment.title,
                        position=item.position,
                        is_answered=(assignment.id, question.id) in answered,
                        assignment_completed=assignment.id in completed,
                    )
                )
        return items

    # ============================================================
    # NON-PARTICIPANTS
    # ============================================================

    async def get_non_participants(self, assignment_id: UUID) -> NonParticipantListResponse:
        """Enrolled students with no response at all for the assignment."""
        assignment = await self.assignment_repo.get_by_id(assignment_id)
        if not assignment:
            raise NotFoundError("Assignment not found")

        students = await self.user_repo.get_students_in_class(assignment.class_id)
        participants = await self.response_repo.get_participant_ids(assignment_id)

        return NonParticipantListResponse(
            assignment_id=assignment_id,
            total_students=len(students),
            non_participants=[
                NonParticipantItem(
                    id=s.id,
                    name=s.name,
                    email=s.email,
                    admission_no=s.admission_no,
                )
                for s in students
                if s.id not in participants
            ],
        )
