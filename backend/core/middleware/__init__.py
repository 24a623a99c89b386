"""
Middleware package for FastAPI application
"""
from .correlation import CorrelationIdMiddleware
from .validation import validate, format_validation_errors

__all__ = [
    "CorrelationIdMiddleware",
    "validate",
    "format_validation_errors",
]
