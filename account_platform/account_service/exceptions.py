"""Error taxonomy and the centralized error formatter.

Every failure a route handler raises is an AppError subclass; the handlers
registered by `register_exception_handlers` turn them (and framework errors)
into one envelope:

    {"status": "fail" | "error", "message": ...}
    {"status": "fail", "errors": [{"field": ..., "message": ...}]}
"""
import logging
from typing import Any, Dict, List

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base exception for all application errors."""

    status_code = 500

    def __init__(self, message: str, status_code: int = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)

    @property
    def status(self) -> str:
        return "fail" if self.status_code < 500 else "error"

    def to_dict(self) -> Dict[str, Any]:
        return {"status": self.status, "message": self.message}


class ValidationError(AppError):
    """Request payload failed validation. Carries field-level detail."""

    status_code = 400

    def __init__(self, errors: List[Dict[str, str]], message: str = "Invalid input data"):
        self.errors = errors
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {"status": self.status, "errors": self.errors}


class AuthenticationError(AppError):
    """Credentials or bearer token rejected."""

    status_code = 401


class NotFoundError(AppError):
    status_code = 404


class DependencyError(AppError):
    """An external collaborator (mail transport, ...) failed."""

    status_code = 500


class RateLimitError(AppError):
    status_code = 429

    def __init__(self, message: str = "Too many requests from this IP, please try again in an hour!"):
        super().__init__(message)


def _error_response(exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def _field_name(loc) -> str:
    # ("body", "email") -> "email"; ("path", "token") -> "token"
    parts = [str(p) for p in loc if p not in ("body", "path", "query", "header")]
    return ".".join(parts) or "body"


def register_exception_handlers(app: FastAPI) -> None:
    """Install the centralized formatter on `app`."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return _error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = [
            {"field": _field_name(err.get("loc", ())), "message": err.get("msg", "Invalid value")}
            for err in exc.errors()
        ]
        return _error_response(ValidationError(errors))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 404:
            error = NotFoundError(f"The endpoint {request.url.path} does not exist!")
        else:
            error = AppError(str(exc.detail), exc.status_code)
        return _error_response(error)

    @app.exception_handler(RateLimitExceeded)
    def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
        logger.warning("Rate limit exceeded: ip=%s path=%s", request.client.host if request.client else "unknown", request.url.path)
        return _error_response(RateLimitError())

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error_response(AppError("Something went wrong!"))
