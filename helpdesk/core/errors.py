"""Application error type and the normaliser that maps failures onto it."""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping

from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..application.services.token_service import ExpiredTokenError, InvalidTokenError
from ..domain.errors import DocumentValidationError, DuplicateKeyError, InvalidIdentifierError
from .messages import ErrorMessages

logger = logging.getLogger(__name__)


class AppError(Exception):
    """An error with an HTTP status code.

    ``operational`` is true for failures raised on purpose by business logic,
    whose message is safe to show to the caller. The normaliser creates
    non-operational instances for unexpected faults.
    """

    def __init__(self, message: str, status_code: int, *, operational: bool = True) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.operational = operational

    @property
    def status(self) -> str:
        return "fail" if str(self.status_code).startswith("4") else "error"

    def __repr__(self) -> str:
        return f"<AppError {self.status_code} {self.message!r}>"


def normalize_error(exc: BaseException) -> AppError:
    if isinstance(exc, AppError):
        return exc
    if isinstance(exc, InvalidIdentifierError):
        return AppError(f"Invalid {exc.path}: {exc.value}.", 400)
    if isinstance(exc, DuplicateKeyError):
        return AppError(f"{ErrorMessages.DUPLICATE_KEY} {exc.field}", 400)
    if isinstance(exc, DocumentValidationError):
        return AppError(_invalid_input(exc.errors.values()), 400)
    if isinstance(exc, RequestValidationError):
        return AppError(_invalid_input(_request_error_messages(exc.errors())), 400)
    if isinstance(exc, ExpiredTokenError):
        return AppError(ErrorMessages.EXPIRED_TOKEN, 401)
    if isinstance(exc, InvalidTokenError):
        return AppError(ErrorMessages.INVALID_TOKEN, 401)
    if isinstance(exc, StarletteHTTPException):
        # Express-style catch-all: unknown path or unsupported method.
        if exc.status_code in (404, 405):
            return AppError(ErrorMessages.ROUTE_NOT_FOUND, 404)
        return AppError(str(exc.detail), exc.status_code)

    logger.error("Unhandled error: %r", exc, exc_info=exc)
    return AppError(ErrorMessages.INTERNAL_SERVER_ERROR, 500, operational=False)


def _invalid_input(messages: Iterable[str]) -> str:
    return f"{ErrorMessages.INVALID_INPUT} {'. '.join(messages)}"


def _request_error_messages(errors: Iterable[Mapping[str, Any]]) -> List[str]:
    messages: List[str] = []
    for error in errors:
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(location)
        message = error.get("msg", "Invalid value")
        messages.append(f"{field}: {message}" if field else message)
    return messages
