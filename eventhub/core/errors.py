"""
Application error taxonomy and the single error-to-response translator.

Business code raises one of the ``AppError`` subclasses and never builds
HTTP responses itself. ``error_response`` is invoked at the boundary of
every request (see ``register_error_handlers``) and decides the status code
and body from the error's ``kind`` tag.
"""
import enum
import re
import traceback
from typing import Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from eventhub.core.config import settings
from eventhub.core.logging import logger


class ErrorKind(str, enum.Enum):
    validation = "validation"
    duplicate_key = "duplicate_key"
    invalid_id = "invalid_id"
    unauthorized = "unauthorized"
    forbidden = "forbidden"
    not_found = "not_found"
    internal = "internal"


STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.validation: status.HTTP_400_BAD_REQUEST,
    ErrorKind.duplicate_key: status.HTTP_400_BAD_REQUEST,
    ErrorKind.invalid_id: status.HTTP_400_BAD_REQUEST,
    ErrorKind.unauthorized: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.forbidden: status.HTTP_403_FORBIDDEN,
    ErrorKind.not_found: status.HTTP_404_NOT_FOUND,
    ErrorKind.internal: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class AppError(Exception):
    """Base class for errors that carry their own wire representation."""

    kind: ErrorKind = ErrorKind.internal
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[Dict[str, str]]] = None):
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)


class DuplicateKeyError(AppError):
    kind = ErrorKind.duplicate_key

    def __init__(self, field: str, message: Optional[str] = None):
        self.field = field
        text = message or f"{field} already exists"
        super().__init__(text, errors=[{"field": field, "message": text}])


class InvalidIdError(AppError):
    kind = ErrorKind.invalid_id
    default_message = "Invalid ID format"

    def __init__(self, message: Optional[str] = None):
        text = message or self.default_message
        super().__init__(text, errors=[{"field": "id", "message": text}])


class UnauthorizedError(AppError):
    kind = ErrorKind.unauthorized
    default_message = "Authentication required"


class TokenExpiredError(UnauthorizedError):
    default_message = "Token expired"


class TokenInvalidError(UnauthorizedError):
    default_message = "Invalid token"


class ForbiddenError(AppError):
    kind = ErrorKind.forbidden
    default_message = "Forbidden"


class NotFoundError(AppError):
    kind = ErrorKind.not_found
    default_message = "Resource not found"


# PostgreSQL: Key (email)=(a@b.c) already exists.  SQLite: UNIQUE constraint failed: users.email
_PG_DUPLICATE = re.compile(r"Key \((?P<field>[^)]+)\)=")
_SQLITE_DUPLICATE = re.compile(r"UNIQUE constraint failed: \w+\.(?P<field>\w+)")


def duplicate_field(exc: IntegrityError) -> Optional[str]:
    """Extract the offending column name from a unique-constraint violation."""
    text = str(exc.orig)
    for pattern in (_PG_DUPLICATE, _SQLITE_DUPLICATE):
        match = pattern.search(text)
        if match:
            return match.group("field")
    return None


def _validation_errors(exc: RequestValidationError) -> List[Dict[str, str]]:
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ())]
        field = ".".join(loc[1:]) if len(loc) > 1 else ".".join(loc)
        message = err.get("msg", "Invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.append({"field": field, "message": message})
    return errors


def _is_query_error(exc: RequestValidationError) -> bool:
    return any(tuple(err.get("loc", ()))[:1] == ("query",) for err in exc.errors())


def error_response(exc: Exception) -> JSONResponse:
    """Translate any exception into the JSON error body and status code."""
    if isinstance(exc, AppError):
        body = {"message": exc.message}
        if exc.errors:
            body["errors"] = exc.errors
        return JSONResponse(status_code=STATUS_BY_KIND[exc.kind], content=body)

    if isinstance(exc, RequestValidationError):
        message = "Query validation error" if _is_query_error(exc) else "Validation error"
        return JSONResponse(
            status_code=STATUS_BY_KIND[ErrorKind.validation],
            content={"message": message, "errors": _validation_errors(exc)},
        )

    if isinstance(exc, IntegrityError):
        field = duplicate_field(exc)
        if field:
            return error_response(DuplicateKeyError(field))

    logger.opt(exception=exc).error(f"Unhandled error: {exc}")
    body = {"message": "Internal server error"}
    if not settings.is_production:
        body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return JSONResponse(status_code=STATUS_BY_KIND[ErrorKind.internal], content=body)


async def _handle(request: Request, exc: Exception) -> JSONResponse:
    if isinstance(exc, AppError) and exc.kind == ErrorKind.unauthorized:
        logger.warning(f"{request.method} {request.url.path} rejected: {exc.message}")
    return error_response(exc)


def register_error_handlers(app: FastAPI) -> None:
    """Route every error raised during a request through ``error_response``."""
    app.add_exception_handler(AppError, _handle)
    app.add_exception_handler(RequestValidationError, _handle)
    app.add_exception_handler(IntegrityError, _handle)
    app.add_exception_handler(Exception, _handle)
