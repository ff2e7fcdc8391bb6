"""
Error normalization.

Every failure leaves the API through one of the handlers below, which decide
the status code and the public envelope::

    {"error": ..., "message": ..., "details": [...]}

Store internals are logged, never returned.
"""
import logging
import traceback

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import get_settings

logger = logging.getLogger(__name__)


class NotFoundError(Exception):
    """Exception raised when a referenced entity does not exist."""

    error = "Not found"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ProductNotFoundError(NotFoundError):
    """Exception raised when the requested product doesn't exist."""

    error = "Product not found"

    def __init__(self, product_id: int):
        super().__init__(f"Product with ID {product_id} not found")
        self.product_id = product_id


def error_response(status_code: int, error: str, message: str, **extra) -> JSONResponse:
    content = {"error": error, "message": message}
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content)


def _field_name(loc) -> str:
    # loc looks like ("body", "price") or ("query", "minPrice")
    parts = [str(part) for part in loc[1:]]
    return ".".join(parts) if parts else str(loc[0]) if loc else ""


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {
            "field": _field_name(err.get("loc", ())),
            "location": str(err["loc"][0]) if err.get("loc") else "",
            "message": err.get("msg", ""),
            "type": err.get("type", ""),
        }
        for err in exc.errors()
    ]
    return error_response(
        status.HTTP_400_BAD_REQUEST,
        "Validation error",
        "Request validation failed",
        details=details,
    )


async def not_found_exception_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return error_response(status.HTTP_404_NOT_FOUND, exc.error, exc.message)


async def integrity_exception_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    # Upstream validation should have rejected this row
    logger.warning(f"Integrity error on {request.method} {request.url.path}: {exc.orig}")
    return error_response(
        status.HTTP_400_BAD_REQUEST,
        "Database validation error",
        "The provided data violates database constraints",
    )


async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Database error",
        "An error occurred while processing the request",
    )


def available_routes(app: FastAPI) -> list[str]:
    routes = []
    for route in app.routes:
        if isinstance(route, APIRoute) and route.include_in_schema:
            for method in sorted(route.methods):
                routes.append(f"{method} {route.path}")
    return routes


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        return error_response(
            status.HTTP_404_NOT_FOUND,
            "Route not found",
            f"Route {request.method} {request.url.path} does not exist",
            availableRoutes=available_routes(request.app),
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail), "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    extra = {}
    if get_settings().is_development:
        extra["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal server error",
        str(exc) or exc.__class__.__name__,
        **extra,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach every handler; more specific exception classes win."""
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(NotFoundError, not_found_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
