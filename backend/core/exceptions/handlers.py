from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.events import EventPublishingError, PublishError
from core.config import settings
from core.logging import get_structured_logger
from core.utils.correlation import get_correlation_id

from .api_exceptions import APIException, EventPublishException
from .utils import format_error_response

logger = get_structured_logger(__name__)


def _correlation_headers(correlation_id: str) -> dict:
    return {settings.CORRELATION_ID_HEADER: correlation_id}


async def api_exception_handler(request: Request, exc: APIException) -> JSONResponse:
    """Handle custom API exceptions"""
    correlation_id = exc.correlation_id or get_correlation_id(request)
    extra = {}
    if getattr(exc, "errors", None):
        extra["errors"] = exc.errors
    if exc.detail != exc.message:
        extra["detail"] = exc.detail

    return JSONResponse(
        status_code=exc.status_code,
        content=format_error_response(
            message=exc.message,
            status_code=exc.status_code,
            error_code=exc.error_code,
            correlation_id=correlation_id,
            timestamp=exc.timestamp,
            **extra
        ),
        headers=_correlation_headers(correlation_id),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle standard HTTP exceptions"""
    correlation_id = get_correlation_id(request)

    return JSONResponse(
        status_code=exc.status_code,
        content=format_error_response(
            message=str(exc.detail),
            status_code=exc.status_code,
            error_code=f"HTTP_{exc.status_code}",
            correlation_id=correlation_id,
        ),
        headers=_correlation_headers(correlation_id),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle validation errors raised by FastAPI's own parameter parsing"""
    correlation_id = get_correlation_id(request)

    errors = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"][1:])  # Skip 'body' prefix
        errors.append({"field": field, "message": error["msg"]})

    logger.warning(
        f"Request validation failed for {request.method} {request.url.path}",
        correlation_id=correlation_id,
        metadata={"errors": errors},
    )
    return JSONResponse(
        status_code=400,
        content=format_error_response(
            message="Validation failed",
            status_code=400,
            error_code="VALIDATION_ERROR",
            correlation_id=correlation_id,
            errors=errors,
        ),
        headers=_correlation_headers(correlation_id),
    )


async def publish_error_handler(request: Request, exc: PublishError) -> JSONResponse:
    """Critical event publish failures surface as 503"""
    api_exc = EventPublishException.from_publish_error(exc)
    return await api_exception_handler(request, api_exc)


async def event_construction_exception_handler(request: Request, exc: EventPublishingError) -> JSONResponse:
    """Envelope or routing key could not be built from the domain object"""
    correlation_id = get_correlation_id(request)
    logger.error(
        f"Event construction failed: {exc}",
        correlation_id=correlation_id,
        exception=exc,
    )
    return JSONResponse(
        status_code=500,
        content=format_error_response(
            message="Event could not be constructed",
            status_code=500,
            error_code="EVENT_CONSTRUCTION_ERROR",
            correlation_id=correlation_id,
        ),
        headers=_correlation_headers(correlation_id),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions"""
    correlation_id = get_correlation_id(request)
    logger.error(
        f"Unexpected error on {request.method} {request.url.path}",
        correlation_id=correlation_id,
        exception=exc,
    )

    return JSONResponse(
        status_code=500,
        content=format_error_response(
            message="An unexpected error occurred",
            status_code=500,
            error_code="INTERNAL_ERROR",
            correlation_id=correlation_id,
        ),
        headers=_correlation_headers(correlation_id),
    )
