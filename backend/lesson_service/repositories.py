"""Repository classes encapsulating database operations.

Each repository is small and focused on a single table (lessons, quiz
questions). Repositories only stage changes on the session; the service
layer decides when a unit of work is committed or rolled back so that a
lesson and its questions are always written together.
"""

from typing import Iterable, List, Optional
from sqlmodel import Session, select
from . import models
from .models import Difficulty


class LessonRepository:
    """Queries and writes for `Lesson` rows."""
    def __init__(self, session: Session):
        self.session = session

    def get(self, lesson_id: str) -> Optional[models.Lesson]:
        """Get a `Lesson` by primary key."""
        return self.session.get(models.Lesson, lesson_id)

    def exists(self, lesson_id: str) -> bool:
        stmt = select(models.Lesson.id).where(models.Lesson.id == lesson_id)
        return self.session.exec(stmt).first() is not None

    def add(self, lesson: models.Lesson) -> models.Lesson:
        self.session.add(lesson)
        return lesson

    def delete(self, lesson: models.Lesson) -> None:
        self.session.delete(lesson)

    def find(self, language: Optional[str] = None, difficulty: Optional[Difficulty] = None) -> List[models.Lesson]:
        """Return lessons, optionally filtered by exact language and/or difficulty."""
        stmt = select(models.Lesson)
        if language is not None:
            stmt = stmt.where(models.Lesson.language == language)
        if difficulty is not None:
            stmt = stmt.where(models.Lesson.difficulty == difficulty)
        stmt = stmt.order_by(models.Lesson.created_at, models.Lesson.id)
        return list(self.session.exec(stmt).all())

    def search(self, query: str) -> List[models.Lesson]:
        """Case-insensitive substring match on title or description.

        Matching is done in Python with `str.casefold` because SQLite's
        `lower()` only folds ASCII characters.
        """
        needle = query.casefold()
        out = []
        for lesson in self.find():
            if needle in lesson.title.casefold() or needle in (lesson.description or "").casefold():
                out.append(lesson)
        return out


class QuizQuestionRepository:
    """Queries and writes for `QuizQuestion` rows."""
    def __init__(self, session: Session):
        self.session = session

    def list_for_lesson(self, lesson_id: str) -> List[models.QuizQuestion]:
        """List a lesson's questions ordered by `order_index` (ties by id)."""
        stmt = (
            select(models.QuizQuestion)
            .where(models.QuizQuestion.lesson_id == lesson_id)
            .order_by(models.QuizQuestion.order_index, models.QuizQuestion.id)
        )
        return list(self.session.exec(stmt).all())

    def find(self, language: Optional[str] = None, difficulty: Optional[Difficulty] = None) -> List[models.QuizQuestion]:
        """Return questions across lessons filtered by language and/or difficulty."""
        stmt = select(models.QuizQuestion)
        if language is not None:
            stmt = stmt.where(models.QuizQuestion.language == language)
        if difficulty is not None:
            stmt = stmt.where(models.QuizQuestion.difficulty == difficulty)
        stmt = stmt.order_by(
            models.QuizQuestion.lesson_id,
            models.QuizQuestion.order_index,
            models.QuizQuestion.id,
        )
        return list(self.session.exec(stmt).all())

    def owners_of(self, question_ids: Iterable[str]) -> dict:
        """Map each already-stored question id in `question_ids` to its lesson id."""
        ids = list(question_ids)
        if not ids:
            return {}
        stmt = select(models.QuizQuestion.id, models.QuizQuestion.lesson_id).where(
            models.QuizQuestion.id.in_(ids)
        )
        return {qid: lesson_id for qid, lesson_id in self.session.exec(stmt).all()}

    def add_all(self, questions: List[models.QuizQuestion]) -> None:
        for q in questions:
            self.session.add(q)

    def delete_for_lesson(self, lesson_id: str) -> int:
        """Delete every question owned by `lesson_id`; return how many were removed."""
        questions = self.list_for_lesson(lesson_id)
        for q in questions:
            self.session.delete(q)
        return len(questions)
