from sqlalchemy import (
    Column, String, Integer, Boolean, Text, DateTime, ForeignKey, Uuid,
    UniqueConstraint, func,
)
from sqlalchemy.orm import relationship

from app.db.database import Base
from .base import BaseModel


class AssignmentQuestion(Base):
    """Ordered membership of a question in an assignment."""
    __tablename__ = "assignment_questions"

    assignment_id = Column(Uuid(as_uuid=True), ForeignKey("assignments.id", ondelete="CASCADE"), primary_key=True)
    question_id = Column(Uuid(as_uuid=True), ForeignKey("questions.id", ondelete="CASCADE"), primary_key=True, index=True)
    position = Column(Integer, nullable=False, default=0)

    assignment = relationship("Assignment", back_populates="items")
    question = relationship("Question", lazy="joined")


class Assignment(BaseModel):
    """A quiz instance: an ordered question set bound to one class."""
    __tablename__ = "assignments"
    __table_args__ = (
        UniqueConstraint("class_id", "quiz_number", name="uq_assignments_class_quiz_number"),
    )

    class_id = Column(Uuid(as_uuid=True), ForeignKey("classes.id", ondelete="CASCADE"), nullable=False, index=True)
    assigned_by = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    quiz_number = Column(Integer, nullable=False)
    title = Column(String(200), nullable=False, default="Quiz")
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    assigned_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    # Relationships
    classroom = relationship("Classroom", back_populates="assignments", lazy="joined")
    items = relationship(
        "AssignmentQuestion",
        back_populates="assignment",
        cascade="all, delete-orphan",
        order_by="AssignmentQuestion.position",
        lazy="selectin",
    )

    @property
    def question_ids(self) -> list:
        return [item.question_id for item in self.items]

    @property
    def total_questions(self) -> int:
        return len(self.items)
