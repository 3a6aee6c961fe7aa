from app.models.base import Base
from app.models.user import User, UserRole
from app.models.classroom import Classroom, class_memberships
from app.models.question import Question, question_classes, OPTION_COUNT
from app.models.assignment import Assignment, AssignmentQuestion
from app.models.response import Response, ResponseStatus
from app.models.quiz_session import QuizSession, SessionStatus

__all__ = [
    "Base",
    "User",
    "UserRole",
    "Classroom",
    "class_memberships",
    "Question",
    "question_classes",
    "OPTION_COUNT",
    "Assignment",
    "AssignmentQuestion",
    "Response",
    "ResponseStatus",
    "QuizSession",
    "SessionStatus",
]
