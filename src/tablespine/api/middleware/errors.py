"""
Error-handling middleware — maps exceptions to the ``{"error": ...}`` envelope.

Three sources of failure share one wire shape:

    TableSpineError          → its own code and status
    RequestValidationError   → 400 VALIDATION_ERROR with field details
    HTTPException            → status kept, NOT_FOUND for 404
    anything else            → 500 INTERNAL_SERVER_ERROR, logged, never echoed
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from tablespine.core.errors import InternalError, NotFoundError, TableSpineError, ValidationError
from tablespine.core.logging import get_logger

logger = get_logger(__name__)

HTTP_STATUS_TO_CODE: dict[int, str] = {
    400: "VALIDATION_ERROR",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "DUPLICATE_ERROR",
}


def error_response(exc: TableSpineError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def table_spine_error_handler(request: Request, exc: TableSpineError) -> JSONResponse:
    logger.info(
        "request_failed",
        method=request.method,
        path=request.url.path,
        status=exc.status_code,
        message=exc.message,
        **exc.log_fields(),
    )
    return error_response(exc)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return await table_spine_error_handler(request, ValidationError.from_pydantic(exc))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        return error_response(NotFoundError("Resource"))
    body = {
        "error": {
            "code": HTTP_STATUS_TO_CODE.get(exc.status_code, f"HTTP_{exc.status_code}"),
            "message": str(exc.detail),
        }
    }
    return JSONResponse(status_code=exc.status_code, content=body, headers=getattr(exc, "headers", None))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all — logs the exception and returns a generic 500."""
    logger.exception(
        "unhandled_exception",
        method=request.method,
        path=request.url.path,
        error_type=type(exc).__name__,
    )
    return error_response(InternalError())


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TableSpineError, table_spine_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
