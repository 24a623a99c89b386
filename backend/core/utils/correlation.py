from typing import Optional, Any

from core.utils.uuid_utils import uuid7_str


def new_correlation_id() -> str:
    """Generate a correlation id for a request that arrived without one."""
    return uuid7_str()


def get_correlation_id(request: Optional[Any] = None) -> str:
    """
    Retrieves the correlation ID that CorrelationIdMiddleware stored on the
    request state, or generates a new one when called outside a request.
    """
    if request is not None:
        correlation_id = getattr(request.state, "correlation_id", None)
        if correlation_id:
            return correlation_id
    return new_correlation_id()
