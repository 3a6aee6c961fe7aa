import asyncio

import pytest
from sqlalchemy import func, select

from app.core.config import settings
from app.core.exceptions import (
    DependencyFailure,
    DuplicateSubmissionError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from app.db.database import AsyncSessionLocal
from app.models import QuizSession, Response, SessionStatus
from app.repositories.response_repo import ResponseRepository
from app.schemas.question import QuestionUpdate
from app.schemas.submission import NetworkMetrics, SubmitAnswerRequest
from app.services.question_service import QuestionService, RescoringService
from app.services.submission_service import SubmissionService, compute_response_time_ms
from tests.factories import (
    NOW,
    create_class,
    create_question,
    epoch_ms_before,
    student_ctx,
)


def _request(setup, question, selected=1, seconds=8, clock_now=NOW, **extra):
    return SubmitAnswerRequest(
        question_id=question.id,
        assignment_id=setup.assignment.id,
        class_id=setup.classroom.id,
        selected_answer=selected,
        start_time=epoch_ms_before(clock_now, seconds),
        **extra,
    )


async def _count_responses(db):
    return (await db.execute(select(func.count()).select_from(Response))).scalar()


# ============================================================
# Happy path
# ============================================================

async def test_submit_correct_answer_records_and_starts_session(db, clock, classroom_setup):
    setup = classroom_setup
    student = setup.students[0]
    service = SubmissionService(db, clock=clock)

    result = await service.submit_answer(
        student_ctx(student, setup.classroom),
        _request(setup, setup.questions[0], current_question_index=1),
    )

    assert result.is_correct is True
    assert result.correct_answer == 1
    assert result.response_time_ms == 8000
    assert result.response.student_id == student.id

    session = (await db.execute(select(QuizSession))).scalar_one()
    assert session.status == SessionStatus.IN_PROGRESS.value
    assert session.questions_answered == 1
    assert session.total_questions == 3


async def test_wrong_answer_is_reported_with_key(db, clock, classroom_setup):
    setup = classroom_setup
    service = SubmissionService(db, clock=clock)

    result = await service.submit_answer(
        student_ctx(setup.students[0], setup.classroom),
        _request(setup, setup.questions[0], selected=3),
    )

    assert result.is_correct is False
    assert result.correct_answer == 1


def test_response_time_is_floored_at_zero():
    future_start = epoch_ms_before(NOW, -5)
    assert compute_response_time_ms(future_start, NOW) == 0
    assert compute_response_time_ms(epoch_ms_before(NOW, 2.5), NOW) == 2500


# ============================================================
# Rejections
# ============================================================

async def test_second_answer_for_same_question_is_rejected(db, clock, classroom_setup):
    setup = classroom_setup
    ctx = student_ctx(setup.students[0], setup.classroom)
    service = SubmissionService(db, clock=clock)

    await service.submit_answer(ctx, _request(setup, setup.questions[0]))
    with pytest.raises(DuplicateSubmissionError):
        await service.submit_answer(ctx, _request(setup, setup.questions[0], selected=2))

    assert await _count_responses(db) == 1
    session = (await db.execute(select(QuizSession))).scalar_one()
    assert session.questions_answered == 1


async def test_unique_constraint_rejects_duplicate_when_lookup_misses(db, clock, classroom_setup, monkeypatch):
    setup = classroom_setup
    ctx = student_ctx(setup.students[0], setup.classroom)
    service = SubmissionService(db, clock=clock)
    await service.submit_answer(ctx, _request(setup, setup.questions[0]))

    async def no_match(self, *args, **kwargs):
        return None

    monkeypatch.setattr(ResponseRepository, "find_by_triple", no_match)

    with pytest.raises(DuplicateSubmissionError):
        await service.submit_answer(ctx, _request(setup, setup.questions[0], selected=4))
    assert await _count_responses(db) == 1


async def test_concurrent_duplicate_submissions_store_one_response(clock, classroom_setup):
    setup = classroom_setup
    ctx = student_ctx(setup.students[0], setup.classroom)

    async def submit(selected):
        async with AsyncSessionLocal() as session:
            service = SubmissionService(session, clock=clock)
            return await service.submit_answer(ctx, _request(setup, setup.questions[0], selected=selected))

    results = await asyncio.gather(submit(1), submit(2), return_exceptions=True)

    successes = [r for r in results if not isinstance(r, Exception)]
    failures = [r for r in results if isinstance(r, Exception)]
    assert len(successes) == 1
    assert len(failures) == 1
    assert isinstance(failures[0], DuplicateSubmissionError)

    async with AsyncSessionLocal() as session:
        assert await _count_responses(session) == 1
        tracked = (await session.execute(select(QuizSession))).scalar_one()
        assert tracked.questions_answered == 1


async def test_student_outside_class_is_forbidden(db, clock, classroom_setup):
    setup = classroom_setup
    other = await create_class(db, "Grade 8 Red")
    service = SubmissionService(db, clock=clock)

    with pytest.raises(ForbiddenError):
        await service.submit_answer(
            student_ctx(setup.students[0], other),
            _request(setup, setup.questions[0]),
        )


async def test_missing_fields_are_rejected(db, clock, classroom_setup):
    setup = classroom_setup
    service = SubmissionService(db, clock=clock)
    request = SubmitAnswerRequest(question_id=setup.questions[0].id, selected_answer=1)

    with pytest.raises(ValidationError) as exc:
        await service.submit_answer(student_ctx(setup.students[0], setup.classroom), request)
    assert "assignment_id" in str(exc.value)
    assert "start_time" in str(exc.value)


@pytest.mark.parametrize("selected", [-1, 5])
async def test_answer_out_of_range_is_rejected(db, clock, classroom_setup, selected):
    setup = classroom_setup
    service = SubmissionService(db, clock=clock)

    with pytest.raises(ValidationError):
        await service.submit_answer(
            student_ctx(setup.students[0], setup.classroom),
            _request(setup, setup.questions[0], selected=selected),
        )


async def test_unknown_question_is_not_found(db, clock, classroom_setup):
    setup = classroom_setup
    service = SubmissionService(db, clock=clock)
    request = _request(setup, setup.questions[0])
    request.question_id = setup.assignment.id

    with pytest.raises(NotFoundError):
        await service.submit_answer(student_ctx(setup.students[0], setup.classroom), request)


async def test_question_outside_assignment_is_rejected(db, clock, classroom_setup):
    setup = classroom_setup
    stray = await create_question(db, text="Not assigned")
    service = SubmissionService(db, clock=clock)

    with pytest.raises(ValidationError):
        await service.submit_answer(
            student_ctx(setup.students[0], setup.classroom),
            _request(setup, stray),
        )


# ============================================================
# Session tracking is best-effort
# ============================================================

class _FailingTracker:
    async def advance(self, *args, **kwargs):
        raise DependencyFailure("session store unavailable")


class _SlowTracker:
    async def advance(self, *args, **kwargs):
        await asyncio.sleep(5)


async def test_session_failure_does_not_fail_submission(db, clock, classroom_setup):
    setup = classroom_setup
    service = SubmissionService(db, clock=clock, session_tracker=_FailingTracker())

    result = await service.submit_answer(
        student_ctx(setup.students[0], setup.classroom),
        _request(setup, setup.questions[0]),
    )

    assert result.is_correct is True
    assert await _count_responses(db) == 1


async def test_slow_session_update_is_abandoned(db, clock, classroom_setup, monkeypatch):
    setup = classroom_setup
    monkeypatch.setattr(settings, "SESSION_UPDATE_TIMEOUT_SECONDS", 0.05)
    service = SubmissionService(db, clock=clock, session_tracker=_SlowTracker())

    result = await service.submit_answer(
        student_ctx(setup.students[0], setup.classroom),
        _request(setup, setup.questions[0]),
    )

    assert result.response.id is not None


# ============================================================
# Network metrics
# ============================================================

async def test_network_metrics_merge_without_erasing(db, clock, classroom_setup):
    setup = classroom_setup
    ctx = student_ctx(setup.students[0], setup.classroom)
    service = SubmissionService(db, clock=clock)
    submitted = await service.submit_answer(
        ctx,
        _request(setup, setup.questions[0], network_metrics=NetworkMetrics(rtt_ms=80)),
    )

    updated = await service.update_network_metrics(
        ctx, submitted.response.id, NetworkMetrics(jitter_ms=0, network_quality="good")
    )

    assert updated.rtt_ms == 80
    assert updated.jitter_ms == 0
    assert updated.network_quality == "good"


async def test_network_metrics_of_another_student_are_forbidden(db, clock, classroom_setup):
    setup = classroom_setup
    service = SubmissionService(db, clock=clock)
    submitted = await service.submit_answer(
        student_ctx(setup.students[0], setup.classroom),
        _request(setup, setup.questions[0]),
    )

    with pytest.raises(ForbiddenError):
        await service.update_network_metrics(
            student_ctx(setup.students[1], setup.classroom),
            submitted.response.id,
            NetworkMetrics(rtt_ms=10),
        )


async def test_my_responses_lists_only_own_answers(db, clock, classroom_setup):
    setup = classroom_setup
    service = SubmissionService(db, clock=clock)
    ada = student_ctx(setup.students[0], setup.classroom)
    ben = student_ctx(setup.students[1], setup.classroom)
    await service.submit_answer(ada, _request(setup, setup.questions[0]))
    await service.submit_answer(ben, _request(setup, setup.questions[0], selected=0))

    mine = await service.list_my_responses(ada)

    assert len(mine) == 1
    assert mine[0].question_text == "Question 1"
    assert mine[0].correct_answer == 1


# ============================================================
# Submission budget
# ============================================================

async def test_slow_session_update_never_fails_a_stored_answer(db, clock, classroom_setup, monkeypatch):
    setup = classroom_setup
    monkeypatch.setattr(settings, "SUBMISSION_TIMEOUT_SECONDS", 0.05)
    monkeypatch.setattr(settings, "SESSION_UPDATE_TIMEOUT_SECONDS", 0.2)

    class _LateTracker:
        async def advance(self, *args, **kwargs):
            await asyncio.sleep(0.1)

    service = SubmissionService(db, clock=clock, session_tracker=_LateTracker())

    result = await service.submit_answer(
        student_ctx(setup.students[0], setup.classroom),
        _request(setup, setup.questions[0]),
    )

    assert result.is_correct is True
    assert await _count_responses(db) == 1


async def test_slow_checks_time_out_before_anything_is_stored(db, clock, classroom_setup, monkeypatch):
    setup = classroom_setup
    monkeypatch.setattr(settings, "SUBMISSION_TIMEOUT_SECONDS", 0.05)

    async def hang(self, *args, **kwargs):
        await asyncio.sleep(5)

    monkeypatch.setattr(ResponseRepository, "find_by_triple", hang)
    service = SubmissionService(db, clock=clock)

    with pytest.raises(asyncio.TimeoutError):
        await service.submit_answer(
            student_ctx(setup.students[0], setup.classroom),
            _request(setup, setup.questions[0]),
        )
    assert await _count_responses(db) == 0


# ============================================================
# Full quiz run
# ============================================================

async def test_each_answer_is_graded_against_the_key_at_write_time(db, clock, classroom_setup, monkeypatch):
    setup = classroom_setup
    ada, ben, cleo = setup.students
    question = setup.questions[0]
    service = SubmissionService(db, clock=clock)

    async def skip_sweep(self, *args, **kwargs):
        return None

    monkeypatch.setattr(RescoringService, "sweep", skip_sweep)

    async def answer(student, selected):
        return await service.submit_answer(
            student_ctx(student, setup.classroom), _request(setup, question, selected=selected)
        )

    before = await answer(ada, 1)
    await QuestionService(db).update_question(question.id, QuestionUpdate(correct_answer=2))
    after_old_key = await answer(ben, 1)
    after_new_key = await answer(cleo, 2)

    assert before.is_correct is True
    assert after_old_key.is_correct is False
    assert after_new_key.is_correct is True
    assert after_new_key.correct_answer == 2

    rows = (
        await db.execute(
            select(Response)
            .where(Response.question_id == question.id)
            .execution_options(populate_existing=True)
        )
    ).unique().scalars()
    assert {r.student_id: r.is_correct for r in rows} == {ada.id: True, ben.id: False, cleo.id: True}


async def test_three_question_quiz_runs_to_completion(db, clock, classroom_setup):
    setup = classroom_setup
    ctx = student_ctx(setup.students[0], setup.classroom)
    service = SubmissionService(db, clock=clock)
    q1, q2, q3 = setup.questions

    async def tracked_session():
        return (
            await db.execute(select(QuizSession).execution_options(populate_existing=True))
        ).scalar_one()

    await service.submit_answer(ctx, _request(setup, q1, current_question_index=1))
    clock.advance(seconds=20)
    await service.submit_answer(ctx, _request(setup, q2, current_question_index=2, clock_now=clock()))

    session = await tracked_session()
    assert session.status == SessionStatus.IN_PROGRESS.value
    assert session.questions_answered == 2
    assert session.completed_at is None

    clock.advance(seconds=20)
    await service.submit_answer(ctx, _request(setup, q3, current_question_index=3, clock_now=clock()))

    session = await tracked_session()
    assert session.status == SessionStatus.COMPLETED.value
    assert session.questions_answered == 3
    completed_at = session.completed_at
    assert completed_at is not None

    clock.advance(seconds=20)
    with pytest.raises(DuplicateSubmissionError):
        await service.submit_answer(
            ctx, _request(setup, q3, selected=0, current_question_index=3, clock_now=clock())
        )

    session = await tracked_session()
    assert session.status == SessionStatus.COMPLETED.value
    assert session.questions_answered == 3
    assert session.completed_at == completed_at
    assert await _count_responses(db) == 3
