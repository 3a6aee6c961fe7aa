import asyncio

import pytest

from app.db.database import AsyncSessionLocal
from app.models import SessionStatus
from app.repositories.session_repo import QuizSessionRepository
from app.services.session_tracker import ActivityLabel, SessionTracker, activity_label
from app.utils.timeutils import ensure_utc
from tests.factories import NOW, create_assignment, create_question


async def test_session_moves_through_lifecycle(db, clock, classroom_setup):
    setup = classroom_setup
    student = setup.students[0]
    tracker = SessionTracker(db, clock=clock)

    first = await tracker.advance(student.id, setup.assignment.id, 1, 3)
    assert first.status == SessionStatus.IN_PROGRESS.value
    assert first.questions_answered == 1
    assert ensure_utc(first.started_at) == NOW

    clock.advance(minutes=1)
    second = await tracker.advance(student.id, setup.assignment.id, 2, 3)
    assert second.status == SessionStatus.IN_PROGRESS.value
    assert second.questions_answered == 2
    assert second.completed_at is None

    finished_at = clock.advance(minutes=1)
    third = await tracker.advance(student.id, setup.assignment.id, 3, 3)
    assert third.status == SessionStatus.COMPLETED.value
    assert third.questions_answered == 3
    assert ensure_utc(third.completed_at) == finished_at


async def test_completed_session_stays_completed(db, clock, classroom_setup):
    setup = classroom_setup
    student = setup.students[0]
    tracker = SessionTracker(db, clock=clock)
    for index in range(1, 4):
        await tracker.advance(student.id, setup.assignment.id, index, 3)
    completed_at = clock()

    clock.advance(minutes=5)
    again = await tracker.advance(student.id, setup.assignment.id, 3, 3)

    assert again.status == SessionStatus.COMPLETED.value
    assert again.questions_answered == 3
    assert ensure_utc(again.completed_at) == completed_at


async def test_single_question_quiz_completes_on_first_answer(db, clock, classroom_setup):
    setup = classroom_setup
    question = await create_question(db, text="Only one")
    solo = await create_assignment(db, setup.classroom, [question], quiz_number=2)

    session = await SessionTracker(db, clock=clock).advance(setup.students[0].id, solo.id, 1, 1)

    assert session.status == SessionStatus.COMPLETED.value
    assert session.questions_answered == 1
    assert ensure_utc(session.completed_at) == NOW


async def test_concurrent_first_answers_both_count(clock, classroom_setup):
    setup = classroom_setup
    student = setup.students[0]

    async def advance(index):
        async with AsyncSessionLocal() as session:
            return await SessionTracker(session, clock=clock).advance(
                student.id, setup.assignment.id, index, 3
            )

    await asyncio.gather(advance(1), advance(2))

    async with AsyncSessionLocal() as session:
        tracked = await QuizSessionRepository(session).get_for_student(student.id, setup.assignment.id)
    assert tracked.questions_answered == 2
    assert tracked.status == SessionStatus.IN_PROGRESS.value


@pytest.mark.parametrize(
    "idle,expected",
    [
        (0, ActivityLabel.ACTIVE),
        (2, ActivityLabel.ACTIVE),
        (3, ActivityLabel.SLOW),
        (5, ActivityLabel.SLOW),
        (6, ActivityLabel.IDLE),
    ],
)
def test_activity_label(idle, expected):
    assert activity_label(idle) == expected
