"""Business logic services used by HTTP controllers.

`LessonService` is the store facade for the API: it validates lesson
aggregates, coordinates the two repositories and owns the transaction
boundary. Every write (create, update, delete) is a single commit; any
failure rolls the whole unit of work back so a lesson is never stored
without its questions or vice versa.
"""

import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session

from . import models, repositories, schemas
from .config import settings
from .errors import ConflictError, NotFoundError, ValidationError
from .models import Difficulty

logger = logging.getLogger("lesson_service.services")


def _question_rows(lesson_id: str, questions: List[schemas.QuizQuestionIn]) -> List[models.QuizQuestion]:
    return [
        models.QuizQuestion(
            id=q.id,
            lesson_id=lesson_id,
            question=q.question,
            correct_answer=q.correct_answer,
            options=list(q.options),
            type=q.type,
            difficulty=q.difficulty,
            language=q.language,
            audio_url=q.audio_url,
            image_url=q.image_url,
            explanation=q.explanation,
            order_index=q.order_index,
        )
        for q in questions
    ]


def to_lesson_out(lesson: models.Lesson, questions: List[models.QuizQuestion]) -> schemas.LessonOut:
    """Assemble the detail view of a lesson aggregate."""
    data = lesson.model_dump()
    data["questions"] = [q.model_dump() for q in questions]
    return schemas.LessonOut.model_validate(data)


class LessonService:
    """CRUD and lookups over the lesson aggregate."""
    def __init__(self, session: Session):
        self.session = session
        self.lesson_repo = repositories.LessonRepository(session)
        self.question_repo = repositories.QuizQuestionRepository(session)

    # reads

    def get(self, lesson_id: str) -> schemas.LessonOut:
        """Return a lesson with its questions ordered by `order_index`."""
        lesson = self._require(lesson_id)
        return to_lesson_out(lesson, self.question_repo.list_for_lesson(lesson_id))

    def list_all(self) -> List[models.Lesson]:
        return self.lesson_repo.find()

    def list_by_language(self, language: str) -> List[models.Lesson]:
        return self.lesson_repo.find(language=language)

    def list_by_difficulty(self, difficulty: Difficulty) -> List[models.Lesson]:
        return self.lesson_repo.find(difficulty=difficulty)

    def list_by_language_and_difficulty(self, language: str, difficulty: Difficulty) -> List[models.Lesson]:
        return self.lesson_repo.find(language=language, difficulty=difficulty)

    def search(self, query: Optional[str]) -> List[models.Lesson]:
        """Case-insensitive substring search over title and description.

        Raises `ValidationError` for a blank query or one longer than
        `settings.MAX_SEARCH_LENGTH`.
        """
        q = (query or "").strip()
        if not q:
            raise ValidationError("search query must not be empty")
        if len(q) > settings.MAX_SEARCH_LENGTH:
            raise ValidationError(f"search query longer than {settings.MAX_SEARCH_LENGTH} characters")
        return self.lesson_repo.search(q)

    def list_questions(self, lesson_id: str) -> List[models.QuizQuestion]:
        """Questions of one lesson ordered by `order_index`; empty if it has none."""
        self._require(lesson_id)
        return self.question_repo.list_for_lesson(lesson_id)

    def find_questions(self, language: Optional[str] = None, difficulty: Optional[Difficulty] = None) -> List[models.QuizQuestion]:
        return self.question_repo.find(language=language, difficulty=difficulty)

    # writes

    def create(self, payload: schemas.LessonCreate) -> schemas.LessonOut:
        """Persist a new lesson together with its questions.

        Raises `ConflictError` when the lesson id or any question id is
        already stored, and `ValidationError` for duplicate question ids
        inside the payload.
        """
        if self.lesson_repo.exists(payload.id):
            logger.warning("lesson_conflict id=%s", payload.id)
            raise ConflictError(f"lesson already exists: {payload.id}")
        self._check_question_ids(payload.id, payload.questions)
        now = models.utcnow()
        lesson = models.Lesson(
            id=payload.id,
            title=payload.title,
            description=payload.description,
            language=payload.language,
            difficulty=payload.difficulty,
            estimated_minutes=payload.estimated_minutes,
            topics=list(payload.topics),
            created_at=now,
            updated_at=now,
        )
        try:
            self.lesson_repo.add(lesson)
            # the lesson row must exist before rows referencing it
            self.session.flush()
            self.question_repo.add_all(_question_rows(payload.id, payload.questions))
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            logger.warning("lesson_conflict id=%s error=%s", payload.id, e.orig)
            raise ConflictError(f"lesson or question id already exists: {payload.id}") from e
        except SQLAlchemyError:
            self.session.rollback()
            raise
        logger.info("lesson_created id=%s questions=%d", payload.id, len(payload.questions))
        return self.get(payload.id)

    def update(self, lesson_id: str, payload: schemas.LessonUpdate) -> schemas.LessonOut:
        """Replace the mutable fields of an existing lesson.

        `created_at` is kept and `updated_at` refreshed. Questions are
        replaced only when the payload carries a `questions` list.
        """
        lesson = self._require(lesson_id)
        if payload.id is not None and payload.id != lesson_id:
            raise ValidationError(f"body id {payload.id!r} does not match path id {lesson_id!r}")
        if payload.questions is not None:
            self._check_question_ids(lesson_id, payload.questions)
        try:
            lesson.title = payload.title
            lesson.description = payload.description
            lesson.language = payload.language
            lesson.difficulty = payload.difficulty
            lesson.estimated_minutes = payload.estimated_minutes
            lesson.topics = list(payload.topics)
            lesson.updated_at = max(models.utcnow(), lesson.created_at)
            self.lesson_repo.add(lesson)
            if payload.questions is not None:
                self.question_repo.delete_for_lesson(lesson_id)
                # deletes must hit the table before re-inserting reused ids
                self.session.flush()
                self.question_repo.add_all(_question_rows(lesson_id, payload.questions))
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            logger.warning("lesson_update_conflict id=%s error=%s", lesson_id, e.orig)
            raise ConflictError(f"question id already exists for lesson: {lesson_id}") from e
        except SQLAlchemyError:
            self.session.rollback()
            raise
        logger.info("lesson_updated id=%s", lesson_id)
        return self.get(lesson_id)

    def delete(self, lesson_id: str) -> None:
        """Delete a lesson and, explicitly, every question it owns."""
        lesson = self._require(lesson_id)
        try:
            removed = self.question_repo.delete_for_lesson(lesson_id)
            self.session.flush()
            self.lesson_repo.delete(lesson)
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise
        logger.info("lesson_deleted id=%s questions=%d", lesson_id, removed)

    # helpers

    def _require(self, lesson_id: str) -> models.Lesson:
        lesson = self.lesson_repo.get(lesson_id)
        if lesson is None:
            logger.info("lesson_not_found id=%s", lesson_id)
            raise NotFoundError(f"lesson not found: {lesson_id}")
        return lesson

    def _check_question_ids(self, lesson_id: str, questions: List[schemas.QuizQuestionIn]) -> None:
        """Reject duplicate ids in the payload and ids owned by another lesson."""
        seen = set()
        for q in questions:
            if q.id in seen:
                raise ValidationError(f"duplicate question id in payload: {q.id}")
            seen.add(q.id)
        taken = {qid: owner for qid, owner in self.question_repo.owners_of(seen).items() if owner != lesson_id}
        if taken:
            qid = sorted(taken)[0]
            logger.warning("question_conflict id=%s owner=%s", qid, taken[qid])
            raise ConflictError(f"question id already used by lesson {taken[qid]}: {qid}")
