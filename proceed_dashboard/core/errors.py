# === proceed_dashboard/core/errors.py ===
import logging
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from starlette.exceptions import HTTPException as StarletteHTTPException

from proceed_dashboard.core.config import Settings

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Error that maps onto an HTTP status and a uniform JSON error body"""

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None, details: Any = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details


class ValidationError(AppError):
    status_code = 400


class NotFoundError(AppError):
    status_code = 404


class PayloadTooLargeError(AppError):
    status_code = 413


def error_body(message: str, details: Any = None) -> dict:
    error = {"message": message}
    if details is not None:
        error["details"] = details
    return {"error": error}


def error_response(status_code: int, message: str, details: Any = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(error_body(message, details)),
    )


def internal_error_response(request: Request, exc: Exception, settings: Settings) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    message = str(exc) if settings.is_development else "Internal server error"
    return error_response(500, message)


def register_exception_handlers(app: FastAPI, settings: Settings) -> None:

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        logger.warning(f"Application error {exc.status_code} on {request.method} {request.url.path}: {exc.message}")
        return error_response(exc.status_code, exc.message, exc.details)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = [{k: v for k, v in e.items() if k != "ctx"} for e in exc.errors()]
        logger.warning(f"Invalid request on {request.method} {request.url.path}: {errors}")
        return error_response(400, "Invalid request parameters", errors)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return error_response(404, "Not found", {"path": request.url.path})
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        return internal_error_response(request, exc, settings)
