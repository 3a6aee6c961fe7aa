"""Row builders shared by the test modules."""

from datetime import datetime, timedelta, timezone

from app.core.security import get_password_hash
from app.models import (
    Classroom,
    Question,
    QuizSession,
    Response,
    ResponseStatus,
    User,
    UserRole,
    class_memberships,
)
from app.repositories.assignment_repo import AssignmentRepository
from app.services.context import RequesterContext
from app.utils.timeutils import to_epoch_ms

NOW = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)
PASSWORD = "Secret123!"

_password_hash = None


def password_hash() -> str:
    global _password_hash
    if _password_hash is None:
        _password_hash = get_password_hash(PASSWORD)
    return _password_hash


class FixedClock:
    """Callable clock the tests can move forward."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


async def create_user(db, email, name, role=UserRole.STUDENT, admission_no=None):
    user = User(
        email=email,
        name=name,
        role=role.value,
        admission_no=admission_no,
        password_hash=password_hash(),
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def create_class(db, name):
    classroom = Classroom(name=name)
    db.add(classroom)
    await db.commit()
    await db.refresh(classroom)
    return classroom


async def enroll(db, user, classroom):
    await db.execute(class_memberships.insert().values(user_id=user.id, class_id=classroom.id))
    await db.commit()


async def create_question(db, text="What is 2 + 2?", correct_answer=1):
    question = Question(
        question_text=text,
        options=["3", "4", "5", "22", "none"],
        correct_answer=correct_answer,
    )
    db.add(question)
    await db.commit()
    await db.refresh(question)
    return question


async def create_assignment(db, classroom, questions, quiz_number=1, admin=None):
    return await AssignmentRepository(db).add_assignment(
        class_id=classroom.id,
        question_ids=[q.id for q in questions],
        assigned_by=admin.id if admin else None,
        quiz_number=quiz_number,
        title=f"Quiz {quiz_number}",
        description=None,
    )


async def add_response(
    db,
    student,
    question,
    assignment,
    selected_answer,
    response_time_ms=5000,
    answered_at=NOW,
    is_correct=None,
    rtt_ms=None,
    jitter_ms=None,
):
    if is_correct is None:
        is_correct = selected_answer == question.correct_answer
    response = Response(
        student_id=student.id,
        question_id=question.id,
        assignment_id=assignment.id,
        class_id=assignment.class_id,
        selected_answer=selected_answer,
        is_correct=is_correct,
        status=ResponseStatus.ANSWERED.value,
        start_time=answered_at - timedelta(milliseconds=response_time_ms),
        response_time_ms=response_time_ms,
        answered_at=answered_at,
        rtt_ms=rtt_ms,
        jitter_ms=jitter_ms,
    )
    db.add(response)
    await db.commit()
    await db.refresh(response)
    return response


async def add_session(db, student, assignment, status, answered, started_at, last_activity_at, completed_at=None):
    session = QuizSession(
        student_id=student.id,
        assignment_id=assignment.id,
        status=status.value,
        current_question_index=answered,
        questions_answered=answered,
        total_questions=assignment.total_questions,
        started_at=started_at,
        last_activity_at=last_activity_at,
        completed_at=completed_at,
    )
    db.add(session)
    await db.commit()
    return session


def student_ctx(student, *classrooms):
    return RequesterContext(
        user_id=student.id,
        role=UserRole.STUDENT.value,
        class_ids=frozenset(c.id for c in classrooms),
    )


def admin_ctx(admin):
    return RequesterContext(user_id=admin.id, role=UserRole.ADMIN.value)


def epoch_ms_before(moment: datetime, seconds: float) -> int:
    return to_epoch_ms(moment - timedelta(seconds=seconds))
