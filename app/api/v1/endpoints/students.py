"""
Student Endpoints

Endpoints:
----------
- POST  /students/submit-answer                          - Record one answer
- PATCH /students/response/{response_id}/network-metrics - Attach late network metrics
- GET   /students/assigned-questions                     - Questions of active assignments
- GET   /students/my-responses                           - The caller's own answers
"""

import asyncio
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_student_context
from app.api.errors import to_http_exception
from app.core.exceptions import QuizServiceError
from app.db.database import get_db
from app.schemas.assignment import AssignedQuestionListResponse
from app.schemas.submission import (
    AnswerRecordResponse,
    MyResponseListResponse,
    NetworkMetricsUpdate,
    SubmitAnswerRequest,
    SubmitAnswerResponse,
)
from app.services.assignment_service import AssignmentService
from app.services.context import RequesterContext
from app.services.submission_service import SubmissionService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Students"])


def get_submission_service(db: AsyncSession = Depends(get_db)) -> SubmissionService:
    return SubmissionService(db)


def get_assignment_service(db: AsyncSession = Depends(get_db)) -> AssignmentService:
    return AssignmentService(db)


# ============================================================
# SUBMIT ANSWER
# ============================================================

@router.post(
    "/submit-answer",
    response_model=SubmitAnswerResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit an answer",
    description="""
    Stores the answer and returns whether it was correct.

    Each question can be answered once per assignment. A second submission
    for the same question and assignment is rejected with 400.

    If the checks before the write run out of time the request fails with 504
    and nothing is stored. Once the answer is stored the request succeeds.
    """,
)
async def submit_answer(
    request: SubmitAnswerRequest,
    ctx: RequesterContext = Depends(get_student_context),
    service: SubmissionService = Depends(get_submission_service),
):
    try:
        return await service.submit_answer(ctx, request)
    except asyncio.TimeoutError:
        logger.error(f"Submission timed out for student {ctx.user_id}")
        raise HTTPException(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            detail="Submission timed out, please retry",
        )
    except QuizServiceError as e:
        raise to_http_exception(e)


# ============================================================
# NETWORK METRICS
# ============================================================

@router.patch(
    "/response/{response_id}/network-metrics",
    response_model=AnswerRecordResponse,
    summary="Attach network metrics to a stored response",
)
async def update_network_metrics(
    response_id: UUID,
    data: NetworkMetricsUpdate,
    ctx: RequesterContext = Depends(get_student_context),
    service: SubmissionService = Depends(get_submission_service),
):
    try:
        return await service.update_network_metrics(ctx, response_id, data.network_metrics)
    except QuizServiceError as e:
        raise to_http_exception(e)


# ============================================================
# ASSIGNED QUESTIONS
# ============================================================

@router.get(
    "/assigned-questions",
    response_model=AssignedQuestionListResponse,
    summary="List questions of active assignments",
)
async def assigned_questions(
    ctx: RequesterContext = Depends(get_student_context),
    service: AssignmentService = Depends(get_assignment_service),
):
    questions = await service.get_assigned_questions(ctx)
    return AssignedQuestionListResponse(questions=questions, total=len(questions))


# ============================================================
# MY RESPONSES
# ============================================================

@router.get(
    "/my-responses",
    response_model=MyResponseListResponse,
    summary="List my answers",
)
async def my_responses(
    ctx: RequesterContext = Depends(get_student_context),
    service: SubmissionService = Depends(get_submission_service),
):
    responses = await service.list_my_responses(ctx)
    return MyResponseListResponse(responses=responses, total=len(responses))
