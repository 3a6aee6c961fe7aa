"""
Background Tasks Module

Task definitions for ARQ workers.

- rescoring_tasks.py: re-evaluation of stored responses after a key edit

Enqueue with: await pool.enqueue_job('rescore_question_responses', question_id=...)

Running Workers:
---------------
    arq app.worker.WorkerSettings
"""

from app.tasks.rescoring_tasks import rescore_question_responses

__all__ = [
    "rescore_question_responses",
]
