from sqlalchemy import Column, String, Integer, Text, Table, ForeignKey, JSON, Uuid, CheckConstraint
from sqlalchemy.orm import relationship

from app.db.database import Base
from .base import BaseModel

OPTION_COUNT = 5

question_classes = Table(
    "question_classes",
    Base.metadata,
    Column("question_id", Uuid(as_uuid=True), ForeignKey("questions.id", ondelete="CASCADE"), primary_key=True),
    Column("class_id", Uuid(as_uuid=True), ForeignKey("classes.id", ondelete="CASCADE"), primary_key=True),
)


class Question(BaseModel):
    __tablename__ = "questions"
    __table_args__ = (
        CheckConstraint("correct_answer >= 0 AND correct_answer <= 4", name="ck_questions_correct_answer_range"),
    )

    # Question content
    question_text = Column(Text, nullable=False)
    options = Column(JSON, nullable=False)        # exactly OPTION_COUNT strings
    correct_answer = Column(Integer, nullable=False)  # zero-based option index

    # Metadata
    subject = Column(String(100), nullable=True)
    image_url = Column(String(500), nullable=True)

    classes = relationship("Classroom", secondary=question_classes, lazy="selectin")

    @property
    def class_ids(self) -> list:
        return [c.id for c in self.classes]
