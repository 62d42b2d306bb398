from typing import Any, Mapping, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.exceptions import OnboardingError
from app.core.logging import get_logger
from app.schemas.response import ErrorResponse
from app.core.config import settings

logger = get_logger(__name__)

INTERNAL_ERROR_MESSAGE = "An internal error occurred. Please try again later."


def error_response(
    status_code: int,
    error: str,
    code: str,
    details: Any = None,
    headers: Optional[Mapping[str, str]] = None,
) -> JSONResponse:
    """
    Renders the {"error", "code", "details"} body shared by every handler.
    """
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, code=code, details=details).model_dump(),
        headers=dict(headers) if headers else None,
    )


def _internal_error(request: Request, exc: Exception, label: str) -> JSONResponse:
    logger.error(
        f"{label}: {type(exc).__name__} on {request.method} {request.url.path}",
        exc_info=True
    )
    # Exception text may carry connection strings; only the class name goes out
    details = None if settings.is_production else {"type": type(exc).__name__}
    return error_response(500, INTERNAL_ERROR_MESSAGE, "INTERNAL_ERROR", details)


def add_exception_handlers(app: FastAPI):
    """
    Registers exception handlers with the FastAPI app.
    """
    @app.exception_handler(OnboardingError)
    async def onboarding_exception_handler(request: Request, exc: OnboardingError):
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return error_response(exc.status_code, exc.message, exc.code, exc.details, headers)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """
        Handles routing-level HTTP exceptions (404, 405, etc.)
        """
        return error_response(exc.status_code, str(exc.detail), "HTTP_ERROR", headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return error_response(
            422,
            "Input validation failed",
            "VALIDATION_ERROR",
            jsonable_encoder(exc.errors())
        )

    @app.exception_handler(PyMongoError)
    async def storage_exception_handler(request: Request, exc: PyMongoError):
        return _internal_error(request, exc, "Storage failure")

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        return _internal_error(request, exc, "Unhandled exception")
