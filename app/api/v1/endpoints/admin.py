"""
Admin Endpoints

Endpoints:
----------
- POST /admin/assignments                                - Create a quiz for a class
- GET  /admin/assignments                                - List active assignments
- GET  /admin/assignments/{assignment_id}/live-progress  - Live progress board
- GET  /admin/assignments/{assignment_id}/non-participants - Students with no answer yet
- GET  /admin/assignments/{assignment_id}/responses/export - Research export with engagement
- PUT  /admin/questions/{question_id}                    - Edit a question
- POST /admin/questions/{question_id}/rescore            - Re-run the re-scoring sweep
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_requester_context, require_admin
from app.api.errors import to_http_exception
from app.core.exceptions import DependencyFailure, QuizServiceError
from app.db.database import get_db
from app.schemas.assignment import (
    AssignmentCreate,
    AssignmentListResponse,
    AssignmentResponse,
    NonParticipantListResponse,
)
from app.schemas.export import ResearchExportResponse
from app.schemas.progress import LiveProgressResponse
from app.schemas.question import (
    QuestionUpdate,
    QuestionUpdateResponse,
    RescoreReportResponse,
)
from app.services.assignment_service import AssignmentService
from app.services.context import RequesterContext
from app.services.export_service import ResearchExportService
from app.services.progress_service import LiveProgressService
from app.services.question_service import QuestionService, RescoringService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Admin"], dependencies=[Depends(require_admin)])


def get_assignment_service(db: AsyncSession = Depends(get_db)) -> AssignmentService:
    return AssignmentService(db)


def get_progress_service(db: AsyncSession = Depends(get_db)) -> LiveProgressService:
    return LiveProgressService(db)


def get_export_service(db: AsyncSession = Depends(get_db)) -> ResearchExportService:
    return ResearchExportService(db)


def get_question_service(db: AsyncSession = Depends(get_db)) -> QuestionService:
    return QuestionService(db)


def get_rescoring_service(db: AsyncSession = Depends(get_db)) -> RescoringService:
    return RescoringService(db)


# ============================================================
# ASSIGNMENTS
# ============================================================

@router.post(
    "/assignments",
    response_model=AssignmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Assign questions to a class",
)
async def create_assignment(
    data: AssignmentCreate,
    ctx: RequesterContext = Depends(get_requester_context),
    service: AssignmentService = Depends(get_assignment_service),
):
    try:
        return await service.create_assignment(ctx, data)
    except QuizServiceError as e:
        raise to_http_exception(e)


@router.get(
    "/assignments",
    response_model=AssignmentListResponse,
    summary="List active assignments",
)
async def list_assignments(
    class_id: Optional[UUID] = Query(None),
    service: AssignmentService = Depends(get_assignment_service),
):
    assignments = await service.list_active(class_id=class_id)
    return AssignmentListResponse(assignments=assignments, total=len(assignments))


# ============================================================
# LIVE PROGRESS
# ============================================================

@router.get(
    "/assignments/{assignment_id}/live-progress",
    response_model=LiveProgressResponse,
    summary="Live progress board for an assignment",
)
async def live_progress(
    assignment_id: UUID,
    service: LiveProgressService = Depends(get_progress_service),
):
    try:
        return await service.get_live_progress(assignment_id)
    except QuizServiceError as e:
        raise to_http_exception(e)


@router.get(
    "/assignments/{assignment_id}/non-participants",
    response_model=NonParticipantListResponse,
    summary="Enrolled students who have not answered anything",
)
async def non_participants(
    assignment_id: UUID,
    service: AssignmentService = Depends(get_assignment_service),
):
    try:
        return await service.get_non_participants(assignment_id)
    except QuizServiceError as e:
        raise to_http_exception(e)


# ============================================================
# RESEARCH EXPORT
# ============================================================

@router.get(
    "/assignments/{assignment_id}/responses/export",
    response_model=ResearchExportResponse,
    summary="Export responses with engagement classification",
)
async def export_responses(
    assignment_id: UUID,
    service: ResearchExportService = Depends(get_export_service),
):
    try:
        return await service.export_assignment(assignment_id)
    except QuizServiceError as e:
        raise to_http_exception(e)


# ============================================================
# QUESTIONS
# ============================================================

@router.put(
    "/questions/{question_id}",
    response_model=QuestionUpdateResponse,
    summary="Edit a question",
    description="""
    Applies the edit. When the answer key changes, stored responses are
    re-evaluated afterwards. A failed re-evaluation does not undo the edit;
    use the rescore endpoint to run it again.
    """,
)
async def update_question(
    question_id: UUID,
    data: QuestionUpdate,
    service: QuestionService = Depends(get_question_service),
):
    try:
        return await service.update_question(question_id, data)
    except QuizServiceError as e:
        raise to_http_exception(e)


@router.post(
    "/questions/{question_id}/rescore",
    response_model=RescoreReportResponse,
    summary="Re-evaluate stored responses against the current key",
)
async def rescore_question(
    question_id: UUID,
    service: RescoringService = Depends(get_rescoring_service),
):
    try:
        report = await service.sweep(question_id)
        return report.to_schema()
    except DependencyFailure as e:
        logger.error(f"Manual re-scoring failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Re-scoring failed, please retry",
        )
    except QuizServiceError as e:
        raise to_http_exception(e)
