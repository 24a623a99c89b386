from fastapi import HTTPException
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from core.events import PublishError


class APIException(HTTPException):
    """Custom API exception with enhanced error details"""

    def __init__(
        self,
        status_code: int,
        message: str = "An unexpected API error occurred",
        detail: Optional[str] = None,
        error_code: Optional[str] = None,
        correlation_id: Optional[str] = None,
        **kwargs
    ):
        self.message = message
        self.detail = detail or message
        self.error_code = error_code or f"ERR_{status_code}"
        # Filled in from the request by the exception handler when not given
        self.correlation_id = correlation_id
        self.timestamp = datetime.now(timezone.utc).isoformat()

        super().__init__(status_code=status_code, detail=self.detail, **kwargs)


class ValidationException(APIException):
    """Exception for validation errors"""

    def __init__(
        self,
        message: str = "Validation failed",
        errors: Optional[List[Dict[str, Any]]] = None,
        correlation_id: Optional[str] = None,
    ):
        self.errors = errors or []
        super().__init__(
            status_code=400,
            message=message,
            error_code="VALIDATION_ERROR",
            correlation_id=correlation_id,
        )


class AuthorizationException(APIException):
    """Exception for authorization errors"""

    def __init__(self, message: str = "Access denied"):
        super().__init__(
            status_code=403,
            message=message,
            error_code="AUTHORIZATION_ERROR"
        )


class NotFoundException(APIException):
    """Exception for resource not found errors"""

    def __init__(self, message: str = "Resource not found", resource: Optional[str] = None):
        self.resource = resource
        super().__init__(
            status_code=404,
            message=message,
            error_code="NOT_FOUND"
        )


class ConflictException(APIException):
    """Exception for conflict errors"""

    def __init__(self, message: str = "Resource conflict"):
        super().__init__(
            status_code=409,
            message=message,
            error_code="CONFLICT_ERROR"
        )


class EventPublishException(APIException):
    """A critical domain event could not be published; the operation was rolled back"""

    def __init__(
        self,
        message: str = "Event could not be published",
        error_code: str = "EVENT_PUBLISH_FAILED",
        correlation_id: Optional[str] = None,
        topic: Optional[str] = None,
    ):
        self.topic = topic
        super().__init__(
            status_code=503,
            message=message,
            error_code=error_code,
            correlation_id=correlation_id,
        )

    @classmethod
    def from_publish_error(cls, error: PublishError) -> "EventPublishException":
        return cls(
            message=f"Operation rolled back: {error}",
            error_code=error.error_code,
            correlation_id=error.correlation_id,
            topic=error.topic,
        )
