from sqlalchemy import Column, String, Text, Table, ForeignKey, Uuid
from sqlalchemy.orm import relationship

from app.db.database import Base
from .base import BaseModel


class_memberships = Table(
    "class_memberships",
    Base.metadata,
    Column("user_id", Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("class_id", Uuid(as_uuid=True), ForeignKey("classes.id", ondelete="CASCADE"), primary_key=True, index=True),
)


class Classroom(BaseModel):
    __tablename__ = "classes"

    name = Column(String(100), unique=True, nullable=False)
    description = Column(Text, nullable=True)

    students = relationship(
        "User",
        secondary=class_memberships,
        back_populates="classes",
    )
    assignments = relationship(
        "Assignment",
        back_populates="classroom",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
