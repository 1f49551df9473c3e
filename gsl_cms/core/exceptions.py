"""
Error taxonomy for the content API.

Every failure a route can report is a CatalogError carrying the HTTP status,
a human-readable message and, for upstream failures, the original payload.
The handler registered in main.py renders them as ``{message, error?}``.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from gsl_cms.core.logging import get_logger

logger = get_logger(__name__)


class CatalogError(Exception):
    """Base exception for the content API."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Server error"

    def __init__(self, message: str | None = None, error: Any = None) -> None:
        self.message = message or self.default_message
        self.error = error
        super().__init__(self.message)

    def to_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {"message": self.message}
        if self.error is not None:
            body["error"] = self.error
        return body


class ValidationError(CatalogError):
    """Missing required field, file or URL."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class DecodeError(ValidationError):
    """Uploaded bytes are not a decodable image."""

    default_message = "Invalid image file"


class InvalidUrlError(CatalogError):
    """A stored public URL cannot be mapped back to an object path."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid image URL"


class NotFoundError(CatalogError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Record not found"


class UpstreamStorageError(CatalogError):
    """The object store rejected or failed a call."""

    default_message = "Storage request failed"


class UpstreamRepositoryError(CatalogError):
    """The database rejected or failed a call."""

    default_message = "Database request failed"


class UnexpectedError(CatalogError):
    default_message = "Server error"


def error_payload(exc: BaseException) -> Any:
    """Extract the most useful JSON-able payload from a client exception.

    postgrest's APIError exposes ``json()``; storage3 raises with a dict as its
    first argument; everything else falls back to the string form.
    """
    to_json = getattr(exc, "json", None)
    if callable(to_json):
        return to_json()
    if exc.args and isinstance(exc.args[0], dict):
        return exc.args[0]
    return {"message": str(exc)}


@contextmanager
def reported_as(message: str) -> Iterator[None]:
    """Give upstream failures raised inside the block a caller-specific message."""
    try:
        yield
    except (UpstreamStorageError, UpstreamRepositoryError) as exc:
        exc.message = message
        raise


@contextmanager
def server_errors() -> Iterator[None]:
    """Turn anything that is not already a CatalogError into an UnexpectedError."""
    try:
        yield
    except CatalogError:
        raise
    except Exception as exc:
        logger.exception("unexpected_error", error=str(exc))
        raise UnexpectedError(error=str(exc)) from exc


async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    """Log the failure, then answer with ``{message, error?}``."""
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        "request_failed",
        method=request.method,
        path=request.url.path,
        status=exc.status_code,
        message=exc.message,
        error=exc.error,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed path params or bodies get the same 400 envelope as missing fields."""
    error = ValidationError("Invalid request", error=jsonable_encoder(exc.errors()))
    return await catalog_error_handler(request, error)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort for failures raised outside a catalog pipeline."""
    logger.exception("unhandled_error", path=request.url.path, error=str(exc))
    return await catalog_error_handler(request, UnexpectedError(error=str(exc)))
