from datetime import datetime, timezone
from typing import Any, Dict, Optional

from core.utils.correlation import get_correlation_id


def format_error_response(
    message: str,
    status_code: int = 500,
    error_code: Optional[str] = None,
    correlation_id: Optional[str] = None,
    timestamp: Optional[str] = None,
    **kwargs
) -> Dict[str, Any]:
    """Format a standardized error response"""
    return {
        "success": False,
        "message": message,
        "error_code": error_code or f"ERR_{status_code}",
        "correlation_id": correlation_id or get_correlation_id(),
        "timestamp": timestamp or datetime.now(timezone.utc).isoformat(),
        **kwargs
    }
