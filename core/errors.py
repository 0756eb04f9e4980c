import logging
from typing import Any

from authx.exceptions import AuthXException
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from domain.errors import (
    Conflict,
    DomainError,
    ErrorCode,
    Forbidden,
    LimitExceeded,
    NotFound,
    Unauthorized,
    ValidationFailed,
)
from schemas.error import ApiError

logger = logging.getLogger(__name__)

_STATUS_BY_KIND: list[tuple[type[DomainError], int]] = [
    (ValidationFailed, 400),
    (Unauthorized, 401),
    (Forbidden, 403),
    (NotFound, 404),
    (Conflict, 409),
    (LimitExceeded, 422),
]


def status_for(exc: DomainError) -> int:
    for kind, code in _STATUS_BY_KIND:
        if isinstance(exc, kind):
            return code
    return 500


def _error(status_code: int, code: ErrorCode, message: str, details: dict[str, Any] | None = None) -> JSONResponse:
    body = ApiError(code=code.value, message=message, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def validation_details(exc: RequestValidationError) -> dict[str, Any]:
    """Collapse pydantic's error list into ``{field: message}``."""
    details: dict[str, Any] = {}
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(loc) or "value"
        message = err.get("msg", "invalid")
        if field in details:
            previous = details[field]
            details[field] = [*previous, message] if isinstance(previous, list) else [previous, message]
        else:
            details[field] = message
    return details


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    status_code = status_for(exc)
    if status_code == 500:
        logger.error("Unclassified domain error on %s %s", request.method, request.url.path, exc_info=exc)
        return _error(status_code, ErrorCode.INTERNAL_ERROR, "Internal server error")
    return _error(status_code, exc.code, exc.message, exc.details)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _error(
        400,
        ErrorCode.VALIDATION_ERROR,
        ValidationFailed.message,
        validation_details(exc),
    )


async def auth_error_handler(request: Request, exc: AuthXException) -> JSONResponse:
    return _error(401, ErrorCode.UNAUTHORIZED, Unauthorized.message)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _error(500, ErrorCode.INTERNAL_ERROR, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(AuthXException, auth_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
