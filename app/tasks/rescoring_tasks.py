"""
Re-scoring Tasks

Background re-evaluation of stored responses after an answer key edit.
"""

import logging
from typing import Any, Dict
from uuid import UUID

from arq.worker import Retry
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import DependencyFailure, NotFoundError
from app.db.database import AsyncSessionLocal
from app.services.question_service import RescoringService

logger = logging.getLogger(__name__)


async def get_worker_db_session() -> AsyncSession:
    """Create a database session for worker use."""
    return AsyncSessionLocal()


async def rescore_question_responses(
    ctx: Dict[str, Any],
    question_id: str,
) -> Dict[str, Any]:
    """
    Re-evaluate every response to a question against its current key.

    The sweep only touches rows that disagree with the key, so a retried
    job converges on the same state.

    Args:
        ctx: ARQ context (job_id, job_try, redis)
        question_id: UUID of the edited question
    """
    job_id = ctx.get("job_id", "unknown")
    job_try = ctx.get("job_try", 1)

    logger.info(f"Re-scoring question {question_id} (job: {job_id}, attempt: {job_try})")

    try:
        question_uuid = UUID(question_id)
    except ValueError:
        logger.error(f"Invalid question ID: {question_id}")
        return {"success": False, "error": "Invalid question ID"}

    session = await get_worker_db_session()
    try:
        report = await RescoringService(session).sweep(question_uuid)
        return {
            "success": True,
            "question_id": question_id,
            "marked_correct": report.marked_correct,
            "marked_incorrect": report.marked_incorrect,
        }
    except NotFoundError:
        logger.warning(f"Question {question_id} no longer exists, nothing to re-score")
        return {"success": False, "question_id": question_id, "error": "Question not found"}
    except DependencyFailure as e:
        logger.error(f"Re-scoring attempt {job_try} failed: {e}")
        raise Retry(defer=job_try * 10)
    finally:
        await session.close()
