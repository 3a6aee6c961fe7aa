"""
ARQ Worker Configuration

Running the Worker:
------------------
    # From project root directory
    arq app.worker.WorkerSettings

    # With verbose logging
    arq app.worker.WorkerSettings --verbose

Several workers may run against the same Redis queue; a re-scoring job is
safe to run more than once.
"""

import logging
from typing import Any, Dict

from app.core.config import settings
from app.db.database import engine
from app.db.redis import get_arq_redis_settings
from app.tasks.rescoring_tasks import rescore_question_responses

# ============================================================
# Logging Configuration
# ============================================================

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


# ============================================================
# Startup and Shutdown Hooks
# ============================================================

async def startup(ctx: Dict[str, Any]) -> None:
    logger.info("ARQ Worker starting up...")
    logger.info("ARQ Worker ready to process jobs")


async def shutdown(ctx: Dict[str, Any]) -> None:
    logger.info("ARQ Worker shutting down...")
    await engine.dispose()
    logger.info("ARQ Worker shutdown complete")


# ============================================================
# Worker Configuration Class
# ============================================================

class WorkerSettings:
    """
    ARQ Worker settings.

    Discovered by ARQ when you run:
        arq app.worker.WorkerSettings
    """

    functions = [
        rescore_question_responses,
    ]

    redis_settings = get_arq_redis_settings()

    on_startup = startup
    on_shutdown = shutdown

    # ========================================
    # Job Settings
    # ========================================
    job_timeout = 120      # a sweep is two bulk updates
    keep_result = 3600     # 1 hour
    max_tries = 5

    # ========================================
    # Concurrency Settings
    # ========================================
    max_jobs = 10
    poll_delay = 0.5

    queue_name = "arq:queue"
    health_check_interval = 10
