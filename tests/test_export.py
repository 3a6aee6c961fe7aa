from uuid import uuid4

import pytest

from app.core.exceptions import NotFoundError
from app.services.engagement import EngagementLevel
from app.services.export_service import ResearchExportService
from tests.factories import NOW, add_response


async def test_export_classifies_each_response(db, clock, classroom_setup):
    setup = classroom_setup
    ada, ben, cleo = setup.students
    question = setup.questions[0]
    await add_response(db, ada, question, setup.assignment, 1, response_time_ms=4000)
    await add_response(db, ben, question, setup.assignment, 1, response_time_ms=12000, rtt_ms=300, jitter_ms=40)
    await add_response(db, cleo, question, setup.assignment, 0, response_time_ms=30000)

    export = await ResearchExportService(db, clock=clock).export_assignment(setup.assignment.id)

    assert export.quiz_number == 1
    assert export.exported_at == NOW
    assert export.summary.total_responses == 3
    assert export.summary.correct_responses == 2
    assert export.summary.accuracy_percent == pytest.approx(66.67)

    rows = {row.student_name: row for row in export.responses}
    assert rows["Ada"].engagement_level == EngagementLevel.ACTIVE.value
    assert rows["Ada"].network_penalty == 1.0
    assert rows["Ben"].network_penalty > 1.0
    assert rows["Ben"].adjusted_time_sec < rows["Ben"].response_time_sec
    assert rows["Cleo"].engagement_level == EngagementLevel.PASSIVE.value
    assert rows["Cleo"].correct_answer == 1


async def test_export_of_empty_assignment(db, clock, classroom_setup):
    export = await ResearchExportService(db, clock=clock).export_assignment(classroom_setup.assignment.id)

    assert export.responses == []
    assert export.summary.accuracy_percent == 0.0
    assert export.summary.total_questions == 3


async def test_export_unknown_assignment(db, clock):
    with pytest.raises(NotFoundError):
        await ResearchExportService(db, clock=clock).export_assignment(uuid4())
