"""
Global exception handlers for the FastAPI application.
"""

from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from loguru import logger
from sqlalchemy.exc import TimeoutError as SQLAlchemyTimeoutError

from app.utils.exceptions import (
    TrackerException,
    NotFoundError,
    InvalidTransitionError,
    ValidationError as CustomValidationError,
)
from app.utils.formatters import format_error_response

# First match wins
STATUS_BY_EXCEPTION = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (CustomValidationError, status.HTTP_400_BAD_REQUEST),
    (InvalidTransitionError, status.HTTP_409_CONFLICT),
)


def status_for(exc: TrackerException) -> int:
    for exc_type, status_code in STATUS_BY_EXCEPTION:
        if isinstance(exc, exc_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def tracker_exception_handler(request: Request, exc: TrackerException) -> JSONResponse:
    """Map tracker domain errors to 404 / 400 / 409."""
    status_code = status_for(exc)

    if status_code >= 500:
        logger.opt(exception=exc).error(f"Tracker exception on {request.url.path}: {exc.message}")
    else:
        logger.info(f"{exc.__class__.__name__} on {request.url.path}: {exc.message}")

    return JSONResponse(status_code=status_code, content=format_error_response(exc, status_code))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Report request-schema failures as 400 Bad Request.

    Covers missing or empty required fields, explicit nulls, unknown status
    values and malformed path ids.
    """
    errors = [
        {
            "field": ".".join(str(loc) for loc in error.get("loc", [])),
            "message": error.get("msg"),
            "type": error.get("type"),
        }
        for error in exc.errors()
    ]

    logger.warning(f"Validation error on {request.url.path}: {errors}")

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "ValidationError",
            "detail": "Request validation failed",
            "status_code": status.HTTP_400_BAD_REQUEST,
            "errors": errors,
        },
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler: 503 when the connection pool is exhausted, 500 otherwise."""
    if isinstance(exc, SQLAlchemyTimeoutError):
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "error": "ServiceUnavailable",
                "detail": "Database is busy (connection pool exhausted). Please retry in a moment.",
                "status_code": status.HTTP_503_SERVICE_UNAVAILABLE,
            },
            headers={"Retry-After": "3"},
        )

    logger.opt(exception=exc).error(f"Unhandled exception on {request.url.path}: {exc}")

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=format_error_response(exc, status.HTTP_500_INTERNAL_SERVER_ERROR),
    )
