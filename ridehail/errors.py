"""
RideHail - Error Handling

Base application error and the FastAPI handlers that turn errors into the
API's JSON envelope. Internal failures are logged server-side and answered
with an opaque message.
"""

from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger


class AppError(Exception):
    """Base class for errors that map directly onto an HTTP response."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    message: str = "Request failed"

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status_code,
            "success": False,
            "message": self.message,
        }


class InternalError(AppError):
    """Failure that is fatal to the request; details never reach the client."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Internal server error"


class ConfigurationError(InternalError):
    """Startup configuration is missing or unusable."""


def format_validation_errors(errors: List[Dict[str, Any]]) -> List[Dict[str, str]]:
    """
    Flatten pydantic error details into ``[{field: message}]``.

    The field is the last element of the error location, or "unknown"
    when the location is empty.
    """
    formatted = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        key = loc[-1] if loc else "unknown"
        formatted.append({key: error.get("msg", "Invalid value")})
    return formatted


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if isinstance(exc, InternalError):
        logger.opt(exception=exc).error(
            "Internal error on {} {}", request.method, request.url.path
        )
        # Public message only; the cause stays in the server log
        body = InternalError().to_dict()
    else:
        logger.warning(
            "{} on {} {}: {}",
            type(exc).__name__, request.method, request.url.path, exc.message,
        )
        body = exc.to_dict()
    return JSONResponse(status_code=exc.status_code, content=body)


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "status": status.HTTP_400_BAD_REQUEST,
            "success": False,
            "message": "Validation Error",
            "errors": format_validation_errors(exc.errors()),
        },
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.opt(exception=exc).error(
        "Unhandled error on {} {}", request.method, request.url.path
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=InternalError().to_dict(),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the error-to-response mapping on an application."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
