"""
Error taxonomy shared by repositories, the lifecycle service and the HTTP layer.

Each error carries the status code the transport should answer with. Anything
that is not a `RegistryError` becomes a 500.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class RegistryError(RuntimeError):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal error."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class ValidationError(RegistryError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Missing required fields"


class NotFound(RegistryError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class Conflict(RegistryError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Email already exists"


class StorageUnavailable(RegistryError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Storage is unavailable."


async def _registry_error_handler(request: Request, exc: RegistryError) -> JSONResponse:
    if isinstance(exc, StorageUnavailable):
        logger.error("storage_unavailable method=%s path=%s error=%s", request.method, request.url.path, exc)
    else:
        logger.info(
            "request_rejected method=%s path=%s status=%s error=%s",
            request.method,
            request.url.path,
            exc.status_code,
            exc.message,
        )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = [".".join(str(part) for part in err.get("loc", ()) if part != "body") for err in exc.errors()]
    fields = [f for f in fields if f]
    message = f"Invalid request: {', '.join(fields)}" if fields else "Invalid request"
    logger.info("request_invalid method=%s path=%s fields=%s", request.method, request.url.path, fields)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("request_failed method=%s path=%s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RegistryError, _registry_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
