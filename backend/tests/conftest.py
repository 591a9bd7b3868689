import copy
import os

# Keep the app import from creating a lessons.db file next to the package.
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from lesson_service import models  # noqa: F401
from lesson_service.database import get_session
from lesson_service.main import app

SAMPLE_LESSON = {
    "id": "basic_greetings",
    "title": "Basic Greetings",
    "description": "Learn essential greetings in different languages",
    "language": "Multiple",
    "difficulty": "BEGINNER",
    "estimatedMinutes": 12,
    "topics": ["greetings", "basics", "conversation"],
    "questions": [
        {
            "id": "greeting_1",
            "question": "Select the Spanish word for \"Hello\"",
            "correctAnswer": "Hola",
            "options": ["Guten Tag", "Bonjour", "Hola", "Ciao"],
            "type": "MULTIPLE_CHOICE",
            "difficulty": "BEGINNER",
            "language": "Spanish",
            "audioUrl": None,
            "imageUrl": None,
            "explanation": "Hola is the most common and friendly way to say hello in Spanish.",
            "orderIndex": 0,
        }
    ],
}


@pytest.fixture
def engine():
    """A fresh in-memory SQLite database shared by every connection of one test."""
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as s:
        yield s


@pytest.fixture
def client(engine):
    def _session_override():
        with Session(engine) as s:
            yield s

    app.dependency_overrides[get_session] = _session_override
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def lesson_payload():
    """A deep copy of the sample lesson so tests can mutate it freely."""
    return copy.deepcopy(SAMPLE_LESSON)
