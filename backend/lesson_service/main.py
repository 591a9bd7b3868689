"""FastAPI application entrypoint and HTTP controllers.

This module defines the HTTP endpoints of the lessons backend.
Controllers are intentionally thin: they accept requests, delegate to
`LessonService`, and return JSON using the camelCase schemas. Domain
errors are turned into status codes by the handlers in `errors.py`.

Endpoints implemented:
- GET /api/lessons (optional ?language=&difficulty=)
- GET /api/lessons/search?q=
- GET /api/lessons/language/{language}
- GET /api/lessons/difficulty/{difficulty}
- GET /api/lessons/{id}
- GET /api/lessons/{id}/questions
- POST /api/lessons
- PUT /api/lessons/{id}
- DELETE /api/lessons/{id}
- GET /api/questions (optional ?language=&difficulty=)
- GET /health
"""

import json
import logging
import time
import uuid
from typing import List, Optional

from fastapi import FastAPI, Depends, Query, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from . import services
from .config import settings
from .database import create_db_and_tables, get_session
from .errors import (
    LessonServiceError,
    general_exception_handler,
    lesson_error_handler,
    storage_error_handler,
    validation_exception_handler,
)
from .models import Difficulty
from .schemas import LessonCreate, LessonOut, LessonSummaryOut, LessonUpdate, QuizQuestionOut

app = FastAPI(title="Language Lessons API")
logger = logging.getLogger("lesson_service.api")
if not logging.getLogger().handlers:
    logging.basicConfig(level=settings.LOG_LEVEL)

app.add_exception_handler(LessonServiceError, lesson_error_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(SQLAlchemyError, storage_error_handler)
app.add_exception_handler(Exception, general_exception_handler)

# Wide-open CORS so the mobile/web client can hit a local backend in dev.
if settings.ALLOW_DEV_CORS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

create_db_and_tables()


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)
    request.state.request_id = req_id
    started = time.perf_counter()
    response: Response
    try:
        response = await call_next(request)
    except Exception:
        elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
        logger.exception(
            "request_failed %s",
            json.dumps(
                {
                    "request_id": req_id,
                    "path": request.url.path,
                    "method": request.method,
                    "duration_ms": elapsed_ms,
                    "client": request.client.host if request.client else "unknown",
                },
                ensure_ascii=True,
            ),
        )
        raise
    response.headers["X-Request-ID"] = req_id
    elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
    if request.url.path.startswith("/api"):
        logger.info(
            "request_done %s",
            json.dumps(
                {
                    "request_id": req_id,
                    "path": request.url.path,
                    "method": request.method,
                    "status_code": response.status_code,
                    "duration_ms": elapsed_ms,
                    "client": request.client.host if request.client else "unknown",
                },
                ensure_ascii=True,
            ),
        )
    return response


@app.get('/api/lessons', response_model=List[LessonSummaryOut])
def list_lessons(
    language: Optional[str] = None,
    difficulty: Optional[Difficulty] = None,
    db: Session = Depends(get_session),
):
    """List lessons without their questions.

    `language` and `difficulty` are optional exact-match filters and may
    be combined.
    """
    svc = services.LessonService(db)
    if language is not None and difficulty is not None:
        return svc.list_by_language_and_difficulty(language, difficulty)
    if language is not None:
        return svc.list_by_language(language)
    if difficulty is not None:
        return svc.list_by_difficulty(difficulty)
    return svc.list_all()


@app.get('/api/lessons/search', response_model=List[LessonSummaryOut])
def search_lessons(q: Optional[str] = Query(default=None), db: Session = Depends(get_session)):
    """Case-insensitive substring search over lesson title and description."""
    return services.LessonService(db).search(q)


@app.get('/api/lessons/language/{language}', response_model=List[LessonSummaryOut])
def lessons_by_language(language: str, db: Session = Depends(get_session)):
    return services.LessonService(db).list_by_language(language)


@app.get('/api/lessons/difficulty/{difficulty}', response_model=List[LessonSummaryOut])
def lessons_by_difficulty(difficulty: Difficulty, db: Session = Depends(get_session)):
    """Filter by difficulty; anything other than an exact enum name is a 400."""
    return services.LessonService(db).list_by_difficulty(difficulty)


@app.get('/api/lessons/{lesson_id}', response_model=LessonOut)
def get_lesson(lesson_id: str, db: Session = Depends(get_session)):
    """Return one lesson with its questions ordered by `orderIndex`."""
    return services.LessonService(db).get(lesson_id)


@app.get('/api/lessons/{lesson_id}/questions', response_model=List[QuizQuestionOut])
def lesson_questions(lesson_id: str, db: Session = Depends(get_session)):
    return services.LessonService(db).list_questions(lesson_id)


@app.post('/api/lessons', response_model=LessonOut, status_code=status.HTTP_201_CREATED)
def create_lesson(payload: LessonCreate, db: Session = Depends(get_session)):
    """Create a lesson and its nested questions in one transaction.

    Returns 409 when the lesson id or a question id is already taken.
    """
    return services.LessonService(db).create(payload)


@app.put('/api/lessons/{lesson_id}', response_model=LessonOut)
def update_lesson(lesson_id: str, payload: LessonUpdate, db: Session = Depends(get_session)):
    """Replace a lesson's fields (and its questions when `questions` is sent)."""
    return services.LessonService(db).update(lesson_id, payload)


@app.delete('/api/lessons/{lesson_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_lesson(lesson_id: str, db: Session = Depends(get_session)):
    """Delete a lesson together with all of its questions."""
    services.LessonService(db).delete(lesson_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.get('/api/questions', response_model=List[QuizQuestionOut])
def list_questions(
    language: Optional[str] = None,
    difficulty: Optional[Difficulty] = None,
    db: Session = Depends(get_session),
):
    """List questions across all lessons, optionally by language and/or difficulty."""
    return services.LessonService(db).find_questions(language=language, difficulty=difficulty)


@app.get("/health")
def health():
    """Lightweight health check for uptime monitoring."""
    return {"status": "ok"}
