"""
Error types raised by the store and the handlers that turn every failure
into one of the JSON shapes the API promises:

    {"message": "..."}                          400 / 401 / 403 / 404 / 500
    {"errors": [{"path": ..., "message": ...}]}  400 on invalid input
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

# Location prefixes FastAPI puts in front of a field path.
_LOCATION_PREFIXES = {"body", "query", "path", "header", "cookie"}


class WorkforceError(Exception):
    """Base class for errors the API reports with a human-readable message."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BusinessRuleError(WorkforceError):
    """A request that is well-formed but breaks an invariant (duplicate, cap, in use)."""


class NotFoundError(WorkforceError):
    status_code = status.HTTP_404_NOT_FOUND


def format_validation_errors(exc: RequestValidationError) -> list:
    """Flatten pydantic error locations into dotted ``path`` strings."""
    formatted = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ())]
        if loc and loc[0] in _LOCATION_PREFIXES:
            loc = loc[1:]
        formatted.append({"path": ".".join(loc), "message": err.get("msg", "Invalid value")})
    return formatted


async def workforce_error_handler(request: Request, exc: WorkforceError) -> JSONResponse:
    if isinstance(exc, BusinessRuleError):
        logger.warning("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return JSONResponse({"message": exc.message}, status_code=exc.status_code)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        {"errors": format_validation_errors(exc)},
        status_code=status.HTTP_400_BAD_REQUEST,
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        {"message": exc.detail},
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        {"message": "Internal server error"},
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def install_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(WorkforceError, workforce_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
