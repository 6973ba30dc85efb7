"""Problem-details error responses.

Registers FastAPI exception handlers that render every failure as an
``application/problem+json`` body:

- ``SleepTrackerError`` subclasses -> their own status (404, 409, 422, 400, 503)
- request validation failures -> 422 with per-field errors
- anything else -> 500
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from sleep_tracker.errors import SleepTrackerError
from sleep_tracker.schemas.problem import PROBLEM_CONTENT_TYPE, FieldError, Problem

logger = logging.getLogger(__name__)


def problem_response(problem: Problem) -> JSONResponse:
    return JSONResponse(
        status_code=problem.status,
        content=problem.model_dump(exclude_none=True),
        media_type=PROBLEM_CONTENT_TYPE,
    )


def problem_from_error(exc: SleepTrackerError) -> Problem:
    errors = [FieldError(field=exc.field, message=exc.message)] if exc.field else None
    return Problem.build(
        status=exc.status_code,
        problem_type=exc.problem_type,
        title=exc.title,
        detail=exc.message,
        errors=errors,
    )


def _field_name(loc: tuple) -> str:
    # Drop the "body" / "query" / "path" prefix FastAPI puts first
    parts = [str(part) for part in loc[1:]] if len(loc) > 1 else [str(part) for part in loc]
    return ".".join(parts)


async def _handle_domain_error(request: Request, exc: SleepTrackerError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return problem_response(problem_from_error(exc))


async def _handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        FieldError(field=_field_name(tuple(error.get("loc", ()))), message=error.get("msg", ""))
        for error in exc.errors()
    ]
    logger.info(f"{request.method} {request.url.path} -> 422: {len(errors)} invalid field(s)")
    return problem_response(
        Problem.build(
            status=422,
            problem_type="validation-error",
            title="Validation Error",
            detail="Request validation failed",
            errors=errors,
        )
    )


class CatchAllErrorMiddleware(BaseHTTPMiddleware):
    """Turns any unhandled exception into a 500 problem response."""

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception:
            logger.error(
                f"Unhandled exception on {request.method} {request.url.path}", exc_info=True
            )
            return problem_response(
                Problem.build(
                    status=500,
                    problem_type="internal-error",
                    title="Internal Server Error",
                    detail="An unexpected error occurred",
                )
            )


def register_error_handlers(app: FastAPI) -> None:
    """Attach all exception handlers to the application."""
    app.add_exception_handler(SleepTrackerError, _handle_domain_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _handle_validation_error)  # type: ignore[arg-type]
    app.add_middleware(CatchAllErrorMiddleware)
