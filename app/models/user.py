import enum

from sqlalchemy import Column, String, Boolean, DateTime
from sqlalchemy.orm import relationship
from .base import BaseModel


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    STUDENT = "student"


class User(BaseModel):
    __tablename__ = "users"

    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(100), nullable=False)
    role = Column(String(20), default=UserRole.STUDENT.value, nullable=False, index=True)
    admission_no = Column(String(50), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    last_login = Column(DateTime(timezone=True), nullable=True)

    # Enrollment
    classes = relationship(
        "Classroom",
        secondary="class_memberships",
        back_populates="students",
        lazy="selectin",
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    @property
    def class_ids(self) -> set:
        return {c.id for c in self.classes}
