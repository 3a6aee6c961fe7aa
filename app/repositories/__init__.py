from app.repositories.base import BaseRepository
from app.repositories.user_repo import UserRepository
from app.repositories.classroom_repo import ClassroomRepository
from app.repositories.question_repo import QuestionRepository
from app.repositories.assignment_repo import AssignmentRepository
from app.repositories.response_repo import ResponseRepository, StudentTally
from app.repositories.session_repo import QuizSessionRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "ClassroomRepository",
    "QuestionRepository",
    "AssignmentRepository",
    "ResponseRepository",
    "StudentTally",
    "QuizSessionRepository",
]
