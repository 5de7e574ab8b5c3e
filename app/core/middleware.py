from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError, ResponseValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware
import logging
from typing import Sequence, Any

from app.schemas.result import Error, Result, ErrorCategory
from app.core.exception import CustomException, MissingConfigurationException

logger = logging.getLogger(__name__)


class ExceptionHandlingMiddleware(BaseHTTPMiddleware):
    """
    Turns any exception raised by a route into a Result.failure envelope.

    Configuration errors are logged because they mean a job never ran;
    other unexpected errors are logged when log_internal_errors is set.
    """

    def __init__(self, app, log_internal_errors: bool = True):
        super().__init__(app)
        self.log_internal_errors = log_internal_errors
        self.handlers = {
            MissingConfigurationException: self._handle_missing_configuration,
            CustomException: self._handle_custom_exception,
            ValidationError: self._handle_validation_error,
            RequestValidationError: self._handle_validation_error,
            ResponseValidationError: self._handle_validation_error,
            HTTPException: self._handle_http_exception,
        }

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as ex:
            return await self._handle_exception(ex, request)

    async def _handle_exception(self, ex: Exception, request: Request) -> JSONResponse:
        # Order matters: subclasses are registered before their bases
        for exc_type, handler in self.handlers.items():
            if isinstance(ex, exc_type):
                return await handler(ex, request)

        return await self._handle_unhandled_exception(ex, request)

    async def _handle_missing_configuration(
        self, ex: MissingConfigurationException, request: Request
    ) -> JSONResponse:
        logger.error(
            "Refusing %s %s: missing configuration %s",
            request.method, request.url.path, ", ".join(ex.names),
        )
        return await self._handle_custom_exception(ex, request)

    async def _handle_custom_exception(
        self, ex: CustomException, request: Request
    ) -> JSONResponse:
        error = Error(
            message=ex.detail, status_code=ex.status_code, category=ex.category
        )
        return self._create_error_response(error)

    async def _handle_validation_error(
        self,
        ex: ValidationError | RequestValidationError | ResponseValidationError,
        request: Request,
    ) -> JSONResponse:
        error = Error(
            message=self._format_validation_error(ex.errors()),
            status_code=422,
            category=ErrorCategory.VALIDATION,
        )
        return self._create_error_response(error)

    async def _handle_http_exception(
        self, ex: HTTPException, request: Request
    ) -> JSONResponse:
        error = Error(
            message=ex.detail if isinstance(ex.detail, str) else str(ex.detail),
            status_code=ex.status_code,
            category=self._infer_category_from_status(ex.status_code),
        )
        return self._create_error_response(error)

    async def _handle_unhandled_exception(
        self, ex: Exception, request: Request
    ) -> JSONResponse:
        if self.log_internal_errors:
            logger.error(
                f"Unhandled exception on {request.method} {request.url.path}",
                exc_info=ex,
                extra={
                    "path": request.url.path,
                    "method": request.method,
                    "client": request.client.host if request.client else None,
                },
            )

        # Don't expose internal error details in production
        error = Error(
            message="An unexpected error occurred. Please try again later.",
            status_code=500,
            category=ErrorCategory.INTERNAL,
        )
        return self._create_error_response(error)

    def _create_error_response(self, error: Error) -> JSONResponse:
        return JSONResponse(
            status_code=error.status_code, content=Result.failure(error).model_dump()
        )

    def _format_validation_error(self, errors: Sequence[Any]) -> str:
        messages = []
        for error in errors:
            loc = " -> ".join(str(loc) for loc in error.get("loc", []))
            msg = error.get("msg", "Unknown error")
            messages.append(f"Error in {loc}: {msg}")

        return "; ".join(messages) if messages else "Validation failed"

    def _infer_category_from_status(self, status_code: int) -> ErrorCategory:
        status_category_map = {
            401: ErrorCategory.AUTHENTICATION,
            403: ErrorCategory.AUTHORIZATION,
            404: ErrorCategory.NOT_FOUND,
            409: ErrorCategory.RESOURCE_CONFLICT,
            422: ErrorCategory.VALIDATION,
        }
        if status_code in status_category_map:
            return status_category_map[status_code]
        elif 400 <= status_code < 500:
            return ErrorCategory.BAD_REQUEST
        elif status_code >= 500:
            return ErrorCategory.INTERNAL
        return ErrorCategory.CUSTOM


def register_exception_handlers(app: FastAPI, log_internal_errors: bool = True) -> None:
    """
    Route HTTP and request-validation errors through the same envelope.

    FastAPI answers these inside the router, before the middleware sees them,
    so they need explicit handlers.
    """
    responder = ExceptionHandlingMiddleware(app, log_internal_errors=log_internal_errors)

    async def handle(request: Request, exc: Exception) -> JSONResponse:
        return await responder._handle_exception(exc, request)

    app.add_exception_handler(HTTPException, handle)
    app.add_exception_handler(RequestValidationError, handle)
