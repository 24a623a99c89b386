from .api_exceptions import (
    APIException,
    ValidationException,
    AuthorizationException,
    NotFoundException,
    ConflictException,
    EventPublishException,
)

from .handlers import (
    api_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    publish_error_handler,
    event_construction_exception_handler,
    general_exception_handler,
)

from .utils import (
    get_correlation_id,
    format_error_response
)

__all__ = [
    # Exceptions
    "APIException",
    "ValidationException",
    "AuthorizationException",
    "NotFoundException",
    "ConflictException",
    "EventPublishException",

    # Handlers
    "api_exception_handler",
    "http_exception_handler",
    "validation_exception_handler",
    "publish_error_handler",
    "event_construction_exception_handler",
    "general_exception_handler",

    # Utils
    "get_correlation_id",
    "format_error_response"
]
