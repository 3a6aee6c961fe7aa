"""
Leaderboard Endpoint

- GET /leaderboard?class_id=...  - Ranked students by correct answers
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_requester_context
from app.api.errors import to_http_exception
from app.core.exceptions import QuizServiceError
from app.db.database import get_db
from app.schemas.leaderboard import LeaderboardResponse
from app.services.context import RequesterContext
from app.services.leaderboard_service import LeaderboardService

router = APIRouter(tags=["Leaderboard"])


def get_leaderboard_service(db: AsyncSession = Depends(get_db)) -> LeaderboardService:
    return LeaderboardService(db)


@router.get("", response_model=LeaderboardResponse, summary="Class leaderboard")
async def leaderboard(
    class_id: Optional[UUID] = Query(None),
    ctx: RequesterContext = Depends(get_requester_context),
    service: LeaderboardService = Depends(get_leaderboard_service),
):
    try:
        return await service.get_leaderboard(ctx, class_id=class_id)
    except QuizServiceError as e:
        raise to_http_exception(e)
