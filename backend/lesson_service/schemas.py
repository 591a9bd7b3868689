"""Pydantic request/response schemas used by the API.

Schemas keep the JSON shape stable for the client app: field names are
camelCase on the wire (`correctAnswer`, `orderIndex`, ...) while the
Python side stays snake_case. Input models accept either spelling.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .models import Difficulty, QuestionType

# ids travel in URL paths, so they are restricted to one safe path segment
ID_PATTERN = r"^[A-Za-z0-9][A-Za-z0-9_.-]*$"
# first segments under /api/lessons/ that belong to other routes
RESERVED_LESSON_IDS = frozenset({"search", "language", "difficulty"})


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class QuizQuestionIn(CamelModel):
    """A question as submitted inside a lesson body."""
    id: str = Field(min_length=1, max_length=255, pattern=ID_PATTERN)
    question: str = Field(min_length=1, max_length=1000)
    correct_answer: str = Field(min_length=1)
    options: List[str] = Field(default_factory=list)
    type: QuestionType = QuestionType.MULTIPLE_CHOICE
    difficulty: Optional[Difficulty] = None
    language: Optional[str] = None
    audio_url: Optional[str] = None
    image_url: Optional[str] = None
    explanation: Optional[str] = Field(default=None, max_length=1000)
    order_index: int = 0

    @model_validator(mode="after")
    def _correct_answer_among_options(self):
        if self.type == QuestionType.MULTIPLE_CHOICE and self.correct_answer not in self.options:
            raise ValueError("correctAnswer must be one of options for MULTIPLE_CHOICE questions")
        return self


class LessonUpdate(CamelModel):
    """Body for `PUT /api/lessons/{id}`.

    `id` may be omitted (the path wins). Leaving `questions` out keeps the
    stored questions; sending a list, even an empty one, replaces them.
    """
    id: Optional[str] = Field(default=None, min_length=1, max_length=255, pattern=ID_PATTERN)
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=1000)
    language: Optional[str] = None
    difficulty: Optional[Difficulty] = None
    estimated_minutes: Optional[int] = Field(default=None, gt=0)
    topics: List[str] = Field(default_factory=list)
    questions: Optional[List[QuizQuestionIn]] = None

    @field_validator("id")
    @classmethod
    def _id_not_reserved(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v in RESERVED_LESSON_IDS:
            raise ValueError(f"lesson id {v!r} is reserved")
        return v

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("title must not be blank")
        return v

    @field_validator("topics")
    @classmethod
    def _dedupe_topics(cls, v: List[str]) -> List[str]:
        # topics are a set; keep first occurrence so round-trips stay stable
        return list(dict.fromkeys(v))


class LessonCreate(LessonUpdate):
    """Body for `POST /api/lessons`; the id is chosen by the client."""
    id: str = Field(min_length=1, max_length=255, pattern=ID_PATTERN)
    questions: List[QuizQuestionIn] = Field(default_factory=list)


class QuizQuestionOut(CamelModel):
    id: str
    question: str
    correct_answer: str
    options: List[str]
    type: QuestionType
    difficulty: Optional[Difficulty] = None
    language: Optional[str] = None
    audio_url: Optional[str] = None
    image_url: Optional[str] = None
    explanation: Optional[str] = None
    order_index: int


class LessonSummaryOut(CamelModel):
    """Lesson without nested questions, used by list and search views."""
    id: str
    title: str
    description: Optional[str] = None
    language: Optional[str] = None
    difficulty: Optional[Difficulty] = None
    estimated_minutes: Optional[int] = None
    topics: List[str]
    created_at: datetime
    updated_at: datetime


class LessonOut(LessonSummaryOut):
    """Full lesson detail including its questions ordered by `orderIndex`."""
    questions: List[QuizQuestionOut]
