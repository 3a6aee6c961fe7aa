import os
import tempfile
from types import SimpleNamespace

import pytest

# Settings are read at import time; point them at a throwaway SQLite file first.
_DB_DIR = tempfile.mkdtemp(prefix="quizroom-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("RESCORE_IN_BACKGROUND", "false")

from app.db.database import AsyncSessionLocal, Base, engine  # noqa: E402
from app.models import UserRole  # noqa: E402
from tests.factories import (  # noqa: E402
    FixedClock,
    create_assignment,
    create_class,
    create_question,
    create_user,
    enroll,
)


@pytest.fixture(autouse=True)
async def schema():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()


@pytest.fixture
async def db():
    async with AsyncSessionLocal() as session:
        yield session


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
async def classroom_setup(db):
    """One class, one admin, three enrolled students, a three-question assignment."""
    classroom = await create_class(db, "Grade 7 Blue")
    admin = await create_user(db, "teacher@school.edu", "Ms Admin", role=UserRole.ADMIN)
    students = []
    for i, name in enumerate(["Ada", "Ben", "Cleo"], start=1):
        student = await create_user(db, f"s{i}@school.edu", name, admission_no=f"ADM{i:03d}")
        await enroll(db, student, classroom)
        students.append(student)
    questions = [
        await create_question(db, text=f"Question {i}", correct_answer=1)
        for i in range(1, 4)
    ]
    assignment = await create_assignment(db, classroom, questions, admin=admin)
    return SimpleNamespace(
        classroom=classroom,
        admin=admin,
        students=students,
        questions=questions,
        assignment=assignment,
    )
