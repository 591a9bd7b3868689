"""Domain exceptions and their HTTP mapping.

Services raise these; `main.py` registers the handlers below so each
error becomes a JSON `{"detail": ...}` response with a stable status code.
Unexpected failures are logged and answered with a generic 500 body.
"""

import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger("lesson_service.errors")

INTERNAL_ERROR_DETAIL = "internal server error"


class LessonServiceError(Exception):
    """Base exception for all lesson store errors."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(LessonServiceError):
    """Raised when a lesson id does not exist."""
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(LessonServiceError):
    """Raised when creating a lesson or question whose id is already taken."""
    status_code = status.HTTP_409_CONFLICT


class ValidationError(LessonServiceError):
    """Raised for malformed lesson payloads or query parameters."""
    status_code = status.HTTP_400_BAD_REQUEST


async def lesson_error_handler(request: Request, exc: LessonServiceError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report request validation failures as 400 instead of FastAPI's 422."""
    errors = [
        {
            "field": ".".join(str(loc) for loc in err.get("loc", [])),
            "issue": err.get("msg", "validation error"),
            "type": err.get("type", "validation_error"),
        }
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(errors)},
    )


async def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error(
        "storage_error request_id=%s path=%s",
        getattr(request.state, "request_id", ""),
        request.url.path,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": INTERNAL_ERROR_DETAIL},
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "unhandled_error request_id=%s path=%s",
        getattr(request.state, "request_id", ""),
        request.url.path,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": INTERNAL_ERROR_DETAIL},
    )
