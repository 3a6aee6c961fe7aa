"""
Assignment Schemas
"""

from datetime import datetime
from typing import Optional, List
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


class AssignmentCreate(BaseModel):
    """Bind an ordered set of questions to a class."""
    class_id: UUID
    question_ids: List[UUID] = Field(..., min_length=1)
    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = None

    @field_validator("question_ids")
    @classmethod
    def no_repeats(cls, v: List[UUID]) -> List[UUID]:
        if len(set(v)) != len(v):
            raise ValueError("Each question may appear only once in an assignment")
        return v


class AssignmentResponse(BaseModel):
    id: UUID
    class_id: UUID
    class_name: Optional[str] = None
    quiz_number: int
    title: str
    description: Optional[str] = None
    is_active: bool
    assigned_at: datetime
    assigned_by: Optional[UUID] = None
    question_ids: List[UUID]
    total_questions: int


class AssignmentListResponse(BaseModel):
    assignments: List[AssignmentResponse]
    total: int


class AssignedQuestionItem(BaseModel):
    """One question of an active assignment, as a student sees it (no answer key)."""
    question_id: UUID
    question_text: str
    options: List[str]
    image_url: Optional[str] = None
    class_id: UUID
    class_name: Optional[str] = None
    assignment_id: UUID
    quiz_number: int
    assignment_title: str
    position: int
    is_answered: bool
    assignment_completed: bool


class AssignedQuestionListResponse(BaseModel):
    questions: List[AssignedQuestionItem]
    total: int


class NonParticipantItem(BaseModel):
    id: UUID
    name: str
    email: str
    admission_no: Optional[str] = None


class NonParticipantListResponse(BaseModel):
    assignment_id: UUID
    total_students: int
    non_participants: List[NonParticipantItem]
