"""Serialises failures into the uniform JSON error contract."""

from __future__ import annotations

import traceback
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ...application.services.token_service import TokenError
from ...core.errors import AppError, normalize_error
from ...core.messages import ErrorMessages
from ...domain.errors import PersistenceError


class ErrorResponder:
    """Builds error responses.

    Verbose mode (development) includes the raw error and stack trace. Terse
    mode (production) exposes only the status and message of operational
    errors and replaces everything else with a generic message.
    """

    def __init__(self, verbose: bool = False) -> None:
        self.verbose = verbose

    def respond(self, exc: BaseException) -> JSONResponse:
        error = normalize_error(exc)
        if self.verbose:
            return JSONResponse(status_code=error.status_code, content=self._verbose_body(exc, error))
        if error.operational:
            return JSONResponse(
                status_code=error.status_code,
                content={"status": error.status, "message": error.message},
            )
        return JSONResponse(
            status_code=500,
            content={"status": "error", "message": ErrorMessages.INTERNAL_SERVER_ERROR},
        )

    @staticmethod
    def _verbose_body(exc: BaseException, error: AppError) -> Dict[str, Any]:
        return {
            "status": error.status,
            "message": error.message,
            "error": {
                "name": type(exc).__name__,
                "detail": str(exc),
                "statusCode": error.status_code,
                "isOperational": error.operational,
            },
            "stack": traceback.format_exception(type(exc), exc, exc.__traceback__),
        }


def register_error_handlers(app: FastAPI, responder: ErrorResponder) -> None:
    async def handle(request: Request, exc: Exception) -> JSONResponse:
        return responder.respond(exc)

    for exc_class in (
        AppError,
        PersistenceError,
        TokenError,
        RequestValidationError,
        StarletteHTTPException,
        Exception,
    ):
        app.add_exception_handler(exc_class, handle)
