"""
Submission Schemas

Pydantic models for the answer submission path and network metrics.
"""

from datetime import datetime
from typing import Optional, List
from uuid import UUID

from pydantic import BaseModel, Field


# ============================================================
# Request Schemas
# ============================================================

class NetworkMetrics(BaseModel):
    """
    Client-measured network quality. Every field is optional and may
    arrive after the answer itself; 0 is a real value, omitted means unknown.
    """
    rtt_ms: Optional[float] = Field(None, ge=0)
    jitter_ms: Optional[float] = Field(None, ge=0)
    stability_percent: Optional[float] = Field(None, ge=0, le=100)
    network_quality: Optional[str] = Field(None, max_length=20)


class SubmitAnswerRequest(BaseModel):
    """
    A student's answer to one question of one assignment.

    Presence and range are checked by the submission service so that
    they map to the same 400 as every other validation failure.
    """
    question_id: Optional[UUID] = None
    assignment_id: Optional[UUID] = None
    class_id: Optional[UUID] = None
    selected_answer: Optional[int] = None
    start_time: Optional[int] = Field(None, description="Client start time, ms since epoch")
    current_question_index: Optional[int] = Field(None, ge=0)
    total_questions: Optional[int] = Field(None, ge=1)
    network_metrics: Optional[NetworkMetrics] = None


class NetworkMetricsUpdate(BaseModel):
    """Late-arriving metrics for an already stored response."""
    network_metrics: NetworkMetrics


# ============================================================
# Response Schemas
# ============================================================

class AnswerRecordResponse(BaseModel):
    """A stored response row."""
    id: UUID
    student_id: UUID
    question_id: UUID
    assignment_id: UUID
    class_id: UUID
    selected_answer: int
    is_correct: bool
    status: str
    start_time: datetime
    response_time_ms: int
    answered_at: datetime
    rtt_ms: Optional[float] = None
    jitter_ms: Optional[float] = None
    stability_percent: Optional[float] = None
    network_quality: Optional[str] = None

    class Config:
        from_attributes = True


class SubmitAnswerResponse(BaseModel):
    """Feedback returned to the student after a submission."""
    response: AnswerRecordResponse
    is_correct: bool
    correct_answer: int
    response_time_ms: int


class MyResponseItem(AnswerRecordResponse):
    """A student's own response with the question prompt."""
    question_text: str
    correct_answer: int


class MyResponseListResponse(BaseModel):
    responses: List[MyResponseItem]
    total: int
