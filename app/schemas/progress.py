"""
Live Progress Schemas
"""

from datetime import datetime
from typing import Optional, List
from uuid import UUID

from pydantic import BaseModel


class StudentRef(BaseModel):
    id: UUID
    name: str
    email: str
    admission_no: Optional[str] = None


class NotStartedEntry(StudentRef):
    pass


class InProgressEntry(StudentRef):
    current_question_index: int
    questions_answered: int
    total_questions: int
    progress: int                 # percent, rounded
    started_at: Optional[datetime] = None
    last_activity_at: Optional[datetime] = None
    idle_minutes: int
    activity: str                 # active | slow | idle


class CompletedEntry(StudentRef):
    questions_answered: int
    total_questions: int
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    time_taken_seconds: int


class ProgressSummary(BaseModel):
    not_started: int
    in_progress: int
    completed: int


class LiveProgressResponse(BaseModel):
    assignment_id: UUID
    assignment_title: str
    class_name: Optional[str] = None
    total_students: int
    total_questions: int
    summary: ProgressSummary
    not_started: List[NotStartedEntry]
    in_progress: List[InProgressEntry]
    completed: List[CompletedEntry]
    last_updated: datetime
