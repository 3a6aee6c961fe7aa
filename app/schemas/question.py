"""
Question Schemas

Pydantic models for question edits and re-scoring reports.
"""

from datetime import datetime
from typing import Optional, List
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from app.models.question import OPTION_COUNT


class QuestionUpdate(BaseModel):
    """Partial update of a question; only supplied fields change."""
    question_text: Optional[str] = Field(None, min_length=1)
    options: Optional[List[str]] = None
    correct_answer: Optional[int] = None
    subject: Optional[str] = Field(None, max_length=100)
    image_url: Optional[str] = Field(None, max_length=500)
    class_ids: Optional[List[UUID]] = None

    @field_validator("question_text")
    @classmethod
    def strip_text(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v is not None else v


class QuestionResponse(BaseModel):
    id: UUID
    question_text: str
    options: List[str]
    correct_answer: int
    subject: Optional[str] = None
    image_url: Optional[str] = None
    class_ids: List[UUID] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class RescoreReportResponse(BaseModel):
    """Outcome of a re-scoring sweep."""
    question_id: UUID
    correct_answer: int
    marked_correct: int
    marked_incorrect: int
    total_reevaluated: int


class QuestionUpdateResponse(BaseModel):
    question: QuestionResponse
    rescore: Optional[RescoreReportResponse] = None
    rescore_queued: bool = False


# Re-exported for callers validating option arity
__all__ = [
    "OPTION_COUNT",
    "QuestionUpdate",
    "QuestionResponse",
    "RescoreReportResponse",
    "QuestionUpdateResponse",
]
