import enum

from sqlalchemy import (
    Column, String, Integer, Float, Boolean, DateTime, ForeignKey, Uuid,
    UniqueConstraint, CheckConstraint, Index, func,
)
from sqlalchemy.orm import relationship

from .base import BaseModel


class ResponseStatus(str, enum.Enum):
    ANSWERED = "answered"
    SKIPPED = "skipped"


class Response(BaseModel):
    """
    One student's answer to one question within one assignment.

    The (student, question, assignment) triple is the uniqueness key so the
    same question may recur across assignments. The constraint, not an
    application-level lookup, decides which of several racing inserts wins.
    """
    __tablename__ = "responses"
    __table_args__ = (
        UniqueConstraint(
            "student_id", "question_id", "assignment_id",
            name="uq_responses_student_question_assignment",
        ),
        CheckConstraint("selected_answer >= 0 AND selected_answer <= 4", name="ck_responses_selected_answer_range"),
        CheckConstraint("response_time_ms >= 0", name="ck_responses_response_time_non_negative"),
        Index("ix_responses_question_correct", "question_id", "is_correct"),
    )

    student_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    question_id = Column(Uuid(as_uuid=True), ForeignKey("questions.id", ondelete="CASCADE"), nullable=False, index=True)
    assignment_id = Column(Uuid(as_uuid=True), ForeignKey("assignments.id", ondelete="CASCADE"), nullable=False, index=True)
    class_id = Column(Uuid(as_uuid=True), ForeignKey("classes.id", ondelete="CASCADE"), nullable=False, index=True)

    # Answer
    selected_answer = Column(Integer, nullable=False)
    is_correct = Column(Boolean, nullable=False)
    status = Column(String(20), default=ResponseStatus.ANSWERED.value, nullable=False)

    # Timing
    start_time = Column(DateTime(timezone=True), nullable=False)
    response_time_ms = Column(Integer, nullable=False)
    answered_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    # Network metrics, measured by the client and often sent after the answer.
    # NULL means "not measured"; 0 is a real measurement.
    rtt_ms = Column(Float, nullable=True)
    jitter_ms = Column(Float, nullable=True)
    stability_percent = Column(Float, nullable=True)
    network_quality = Column(String(20), nullable=True)

    # Relationships
    student = relationship("User", lazy="joined")
    question = relationship("Question", lazy="joined")
