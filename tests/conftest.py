import os
import tempfile
from datetime import UTC, datetime

# Must be set before db.py is imported anywhere
_TMP = tempfile.mkdtemp(prefix="assessment-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP}/test.db"
os.environ["ASSESSMENT_API_KEY"] = "test-key"
os.environ["ADMIN_TOKEN"] = "test-admin"

import pytest  # noqa: E402

import models  # noqa: E402,F401
from db import Base, SessionLocal, engine  # noqa: E402
from models import Assessment, AssessmentQuestion, Flashcard, User  # noqa: E402

Base.metadata.create_all(engine)

API_KEY = "test-key"
ADMIN_TOKEN = "test-admin"


def user_headers(user_id: str = "alice") -> dict:
    return {"x-api-key": API_KEY, "x-user-id": user_id}


@pytest.fixture(autouse=True)
def _clean_db():
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db):
    def _make(user_id: str = "alice") -> User:
        user = User(id=user_id)
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture
def make_assessment(db):
    """
    Create an assessment with ``n`` questions. Question i has correct answer
    "A" and is spread round-robin over ``sections``.
    """

    def _make(
        assessment_id: str = "quiz-1",
        n: int = 10,
        kind: str = "quiz",
        duration_minutes=None,
        question_count=None,
        total_marks=None,
        sections=("Algebra", "Geometry"),
    ) -> Assessment:
        a = Assessment(
            id=assessment_id,
            kind=kind,
            title=f"{assessment_id} title",
            duration_minutes=duration_minutes,
            question_count=question_count,
            total_marks=total_marks,
        )
        db.add(a)
        for i in range(n):
            db.add(
                AssessmentQuestion(
                    id=f"{assessment_id}-q{i}",
                    assessment_id=assessment_id,
                    position=i,
                    prompt=f"Question {i}",
                    options=["A", "B", "C", "D"],
                    correct_answer="A",
                    section=sections[i % len(sections)],
                )
            )
        db.commit()
        return a

    return _make


@pytest.fixture
def make_flashcards(db):
    def _make(n: int, chapter_id: str = "ch-1", subject_id: str = "subj-1", prefix: str = "card"):
        base = datetime(2025, 1, 1, tzinfo=UTC)
        cards = []
        for i in range(n):
            card = Flashcard(
                id=f"{prefix}-{i:03d}",
                chapter_id=chapter_id,
                subject_id=subject_id,
                front=f"front {i}",
                back=f"back {i}",
                created_at=base.replace(minute=i % 60, hour=i // 60),
            )
            db.add(card)
            cards.append(card)
        db.commit()
        return [c.id for c in cards]

    return _make
