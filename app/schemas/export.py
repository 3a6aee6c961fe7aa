"""
Research Export Schemas

Per-response rows enriched with the engagement classification, for
researchers to load into their own analysis tools.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel


class ResearchExportRow(BaseModel):
    response_id: UUID
    quiz_number: int
    student_id: UUID
    student_name: str
    admission_no: Optional[str] = None
    question_id: UUID
    question_text: str
    selected_answer: int
    correct_answer: int
    is_correct: bool
    response_time_ms: int
    response_time_sec: float
    rtt_ms: Optional[float] = None
    jitter_ms: Optional[float] = None
    stability_percent: Optional[float] = None
    network_quality: Optional[str] = None
    network_penalty: float
    adjusted_time_sec: Optional[float] = None
    engagement_level: str
    engagement_score: Optional[float] = None
    answered_at: datetime


class ResearchExportSummary(BaseModel):
    total_questions: int
    total_responses: int
    correct_responses: int
    accuracy_percent: float
    average_response_time_sec: float


class ResearchExportResponse(BaseModel):
    assignment_id: UUID
    quiz_number: int
    assignment_title: str
    class_name: Optional[str] = None
    exported_at: datetime
    summary: ResearchExportSummary
    responses: List[ResearchExportRow]
