"""
Response Repository

Data access layer for the Response ledger.

Inserts rely on the (student, question, assignment) unique constraint to
reject duplicates; bulk re-scoring is done with conditional UPDATEs so
only rows whose correctness actually changes are touched.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Set, Tuple, Iterable
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, func, case, distinct
from sqlalchemy.exc import IntegrityError

from app.core.exceptions import DuplicateSubmissionError, ValidationError
from app.repositories.base import BaseRepository
from app.models import Response, User

logger = logging.getLogger(__name__)


@dataclass
class StudentTally:
    """Grouped leaderboard aggregate for one student."""
    student_id: UUID
    name: str
    email: str
    total_answers: int
    correct_answers: int
    average_response_time_ms: float


def _is_unique_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    # asyncpg / psycopg expose the SQLSTATE; 23505 is unique_violation
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code is not None:
        return code == "23505"
    message = str(orig).lower()
    return "unique" in message or "duplicate" in message


class ResponseRepository(BaseRepository[Response]):
    """Repository for Response model."""

    def __init__(self, db: AsyncSession):
        super().__init__(Response, db)

    # ============================================================
    # WRITE PATH
    # ============================================================

    async def find_by_triple(
        self,
        student_id: UUID,
        question_id: UUID,
        assignment_id: UUID,
    ) -> Optional[Response]:
        result = await self.db.execute(
            select(Response).where(
                Response.student_id == student_id,
                Response.question_id == question_id,
                Response.assignment_id == assignment_id,
            )
        )
        return result.unique().scalar_one_or_none()

    async def insert_response(self, **fields) -> Response:
        """
        Insert and commit a response.

        Raises:
            DuplicateSubmissionError: another insert for the same triple committed first
            ValidationError: any other integrity violation (range checks, dangling refs)
        """
        response = Response(**fields)
        self.db.add(response)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            if _is_unique_violation(e):
                raise DuplicateSubmissionError("Question already answered for this assignment")
            logger.warning(f"Response insert rejected by constraint: {e.orig}")
            raise ValidationError("Response violates a data constraint")
        await self.db.refresh(response)
        return response

    async def update_network_metrics(self, response: Response, metrics: Dict[str, object]) -> Response:
        for key, value in metrics.items():
            setattr(response, key, value)
        await self.db.commit()
        await self.db.refresh(response)
        return response

    # ============================================================
    # RE-SCORING SWEEP
    # ============================================================

    async def rescore_question(self, question_id: UUID, correct_answer: int) -> Tuple[int, int]:
        """
        Two conditional bulk updates, committed together.

        Returns:
            (rows flipped to correct, rows flipped to incorrect)
        """
        to_correct = await self.db.execute(
            update(Response)
            .where(
                Response.question_id == question_id,
                Response.selected_answer == correct_answer,
                Response.is_correct.is_(False),
            )
            .values(is_correct=True)
            .execution_options(synchronize_session=False)
        )
        to_incorrect = await self.db.execute(
            update(Response)
            .where(
                Response.question_id == question_id,
                Response.selected_answer != correct_answer,
                Response.is_correct.is_(True),
            )
            .values(is_correct=False)
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()
        return to_correct.rowcount or 0, to_incorrect.rowcount or 0

    # ============================================================
    # READ SIDE
    # ============================================================

    async def get_by_student(self, student_id: UUID) -> List[Response]:
        result = await self.db.execute(
            select(Response)
            .where(Response.student_id == student_id)
            .order_by(Response.answered_at.desc())
        )
        return list(result.unique().scalars().all())

    async def get_by_assignment(self, assignment_id: UUID) -> List[Response]:
        result = await self.db.execute(
            select(Response)
            .where(Response.assignment_id == assignment_id)
            .order_by(Response.answered_at.desc())
        )
        return list(result.unique().scalars().all())

    async def get_answered_pairs(
        self,
        student_id: UUID,
        assignment_ids: Iterable[UUID],
    ) -> Set[Tuple[UUID, UUID]]:
        """(assignment_id, question_id) pairs the student has already answered."""
        assignment_ids = list(assignment_ids)
        if not assignment_ids:
            return set()
        result = await self.db.execute(
            select(Response.assignment_id, Response.question_id).where(
                Response.student_id == student_id,
                Response.assignment_id.in_(assignment_ids),
            )
        )
        return {(row[0], row[1]) for row in result.all()}

    async def get_participant_ids(self, assignment_id: UUID) -> Set[UUID]:
        result = await self.db.execute(
            select(distinct(Response.student_id))
            .where(Response.assignment_id == assignment_id)
        )
        return set(result.scalars().all())

    async def get_attempted_assignment_ids(self, student_id: UUID) -> Set[UUID]:
        result = await self.db.execute(
            select(distinct(Response.assignment_id))
            .where(Response.student_id == student_id)
        )
        return set(result.scalars().all())

    async def get_timing_samples(
        self,
        question_ids: Iterable[UUID],
    ) -> Dict[UUID, List[Tuple[int, bool]]]:
        """All (response_time_ms, is_correct) samples per question, across assignments."""
        question_ids = list(question_ids)
        samples: Dict[UUID, List[Tuple[int, bool]]] = {qid: [] for qid in question_ids}
        if not question_ids:
            return samples
        result = await self.db.execute(
            select(Response.question_id, Response.response_time_ms, Response.is_correct)
            .where(Response.question_id.in_(question_ids))
        )
        for question_id, response_time_ms, is_correct in result.all():
            samples[question_id].append((response_time_ms, bool(is_correct)))
        return samples

    async def tally_by_student(
        self,
        limit: int,
        class_id: Optional[UUID] = None,
        assignment_ids: Optional[Iterable[UUID]] = None,
    ) -> Tuple[List[StudentTally], bool]:
        """
        Group at most `limit` of the most recent matching responses by student.

        Returns:
            (tallies, truncated) where truncated is True when more rows matched than were scanned
        """
        filters = []
        if class_id is not None:
            filters.append(Response.class_id == class_id)
        if assignment_ids is not None:
            assignment_ids = list(assignment_ids)
            if not assignment_ids:
                return [], False
            filters.append(Response.assignment_id.in_(assignment_ids))

        recent = (
            select(
                Response.student_id.label("student_id"),
                Response.is_correct.label("is_correct"),
                Response.response_time_ms.label("response_time_ms"),
            )
            .where(*filters)
            .order_by(Response.answered_at.desc())
            .limit(limit)
            .subquery()
        )

        stmt = (
            select(
                recent.c.student_id,
                User.name,
                User.email,
                func.count().label("total_answers"),
                func.sum(case((recent.c.is_correct.is_(True), 1), else_=0)).label("correct_answers"),
                func.avg(recent.c.response_time_ms).label("average_response_time_ms"),
            )
            .join(User, User.id == recent.c.student_id)
            .group_by(recent.c.student_id, User.name, User.email)
        )
        result = await self.db.execute(stmt)
        tallies = [
            StudentTally(
                student_id=row.student_id,
                name=row.name,
                email=row.email,
                total_answers=int(row.total_answers or 0),
                correct_answers=int(row.correct_answers or 0),
                average_response_time_ms=float(row.average_response_time_ms or 0.0),
            )
            for row in result.all()
        ]

        matched = await self.db.execute(
            select(func.count(Response.id)).where(*filters)
        )
        truncated = (matched.scalar() or 0) > limit
        return tallies, truncated
