"""Public API problems and translation of internal handler errors."""

import logging
from typing import Any, NoReturn

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from syncapi.core.errors import ConfigNotFoundError, JsonValidationError, ValueConflictError

logger = logging.getLogger(__name__)

HTTP_RESPONSE_BODY_DEBUG_MESSAGE = "HTTP response body: "

PROBLEM_TYPE_BASE = "https://reference.syncapi.dev/reference/errors"
PUBLIC_API_PREFIX = "/api/public/"


class Problem(Exception):
    status: int = 500
    title: str = "unexpected-problem"

    def __init__(self, detail: str | None = None, data: dict[str, Any] | None = None):
        self.detail = detail
        self.data = data
        super().__init__(detail or self.title)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": f"{PROBLEM_TYPE_BASE}#{self.title}",
            "title": self.title,
            "status": self.status,
            "detail": self.detail,
            "data": self.data,
        }


class ResourceNotFoundProblem(Problem):
    status = 404
    title = "resource-not-found"

    def __init__(self, resource_id: str, detail: str | None = None):
        super().__init__(
            detail or "The requested resource could not be found.",
            {"resourceId": resource_id},
        )


class BadRequestProblem(Problem):
    status = 400
    title = "bad-request"


class ConflictProblem(Problem):
    status = 409
    title = "state-conflict"


class UnprocessableEntityProblem(Problem):
    status = 422
    title = "unprocessable-entity"


class UnexpectedProblem(Problem):
    title = "unexpected-problem"

    def __init__(self, status: int = 500, detail: str | None = None):
        super().__init__(detail or "An unexpected problem has occurred.")
        self.status = status


def handle_config_error(exc: BaseException, resource_id: str) -> NoReturn:
    """Raise the public problem matching an internal handler error."""
    if isinstance(exc, Problem):
        raise exc
    if isinstance(exc, ConfigNotFoundError):
        raise ResourceNotFoundProblem(resource_id) from exc
    if isinstance(exc, JsonValidationError):
        raise BadRequestProblem(f"The body of the request contains an invalid connector configuration. {exc}") from exc
    if isinstance(exc, ValueConflictError):
        raise ConflictProblem(str(exc)) from exc
    if isinstance(exc, ValueError):
        raise UnprocessableEntityProblem(str(exc)) from exc
    raise UnexpectedProblem(500, str(exc) or None) from exc


async def problem_exception_handler(request: Request, exc: Problem) -> JSONResponse:
    if exc.status >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(
        exc.to_dict(),
        status_code=exc.status,
        media_type="application/problem+json",
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Public API validation errors are rendered as problems; others keep FastAPI's body."""
    if not request.url.path.startswith(PUBLIC_API_PREFIX):
        return await request_validation_exception_handler(request, exc)
    problem = UnprocessableEntityProblem(
        "The request is invalid.", {"errors": jsonable_encoder(exc.errors())}
    )
    return await problem_exception_handler(request, problem)
