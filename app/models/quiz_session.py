import enum

from sqlalchemy import (
    Column, String, Integer, DateTime, ForeignKey, Uuid,
    UniqueConstraint, Index,
)
from sqlalchemy.orm import relationship

from .base import BaseModel


class SessionStatus(str, enum.Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class QuizSession(BaseModel):
    """Per student x assignment progress. Written only by the submission path."""
    __tablename__ = "quiz_sessions"
    __table_args__ = (
        UniqueConstraint("student_id", "assignment_id", name="uq_quiz_sessions_student_assignment"),
        Index("ix_quiz_sessions_assignment_status", "assignment_id", "status"),
    )

    student_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    assignment_id = Column(Uuid(as_uuid=True), ForeignKey("assignments.id", ondelete="CASCADE"), nullable=False)

    status = Column(String(20), default=SessionStatus.NOT_STARTED.value, nullable=False)
    current_question_index = Column(Integer, default=0, nullable=False)
    questions_answered = Column(Integer, default=0, nullable=False)
    total_questions = Column(Integer, nullable=False)

    started_at = Column(DateTime(timezone=True), nullable=True)
    last_activity_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    student = relationship("User", lazy="joined")
