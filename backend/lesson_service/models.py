"""SQLModel data models.

This module defines the two database tables behind the lessons API and
the closed enums shared with the request/response schemas. A `Lesson`
owns its `QuizQuestion` rows; ownership is enforced by the repository
layer (questions are written and deleted together with their lesson)
rather than by ORM cascade settings.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from sqlalchemy import JSON, Column, DateTime
from sqlalchemy.types import TypeDecorator
from sqlmodel import SQLModel, Field


class Difficulty(str, Enum):
    BEGINNER = "BEGINNER"
    INTERMEDIATE = "INTERMEDIATE"
    ADVANCED = "ADVANCED"


class QuestionType(str, Enum):
    MULTIPLE_CHOICE = "MULTIPLE_CHOICE"
    FILL_IN_BLANK = "FILL_IN_BLANK"
    TRUE_OR_FALSE = "TRUE_OR_FALSE"
    LISTENING = "LISTENING"
    SPEAKING = "SPEAKING"


class UTCDateTime(TypeDecorator):
    """Timezone-aware UTC datetimes on every backend.

    SQLite drops tzinfo on the way back, so naive values read from the
    database are tagged as UTC; aware values are converted to UTC on write.
    """
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            raise ValueError("naive datetime given for a UTC column")
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Lesson(SQLModel, table=True):
    """A learning unit.

    Fields:
    - `id`: caller-chosen string key (e.g. `basic_greetings`)
    - `topics`: free-text tags stored as a JSON array without duplicates
    - `created_at` / `updated_at`: set on insert and on every update
    """
    __tablename__ = "lessons"

    id: str = Field(primary_key=True)
    title: str = Field(nullable=False)
    description: Optional[str] = Field(default=None, max_length=1000)
    language: Optional[str] = Field(default=None, index=True)
    difficulty: Optional[Difficulty] = Field(default=None, index=True)
    estimated_minutes: Optional[int] = None
    topics: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(UTCDateTime(), nullable=False))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(UTCDateTime(), nullable=False))


class QuizQuestion(SQLModel, table=True):
    """A single assessment item belonging to a `Lesson`.

    `language` is independent of the parent lesson so that a "Multiple"
    lesson can mix questions in several languages.
    """
    __tablename__ = "quiz_questions"

    id: str = Field(primary_key=True)
    lesson_id: str = Field(foreign_key="lessons.id", index=True, nullable=False)
    question: str = Field(nullable=False, max_length=1000)
    correct_answer: str = Field(nullable=False)
    options: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    type: QuestionType = Field(default=QuestionType.MULTIPLE_CHOICE)
    difficulty: Optional[Difficulty] = Field(default=None, index=True)
    language: Optional[str] = Field(default=None, index=True)
    audio_url: Optional[str] = None
    image_url: Optional[str] = None
    explanation: Optional[str] = Field(default=None, max_length=1000)
    order_index: int = Field(default=0)
