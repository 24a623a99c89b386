"""
Structured logging for the services.
Provides JSON log lines carrying the service name and the request's correlation id.
"""
import logging
import json
import sys
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union
from enum import Enum


class LogLevel(Enum):
    """Log level enumeration"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(Enum):
    """Log format enumeration"""
    SIMPLE = "simple"
    DETAILED = "detailed"
    JSON = "json"


class StructuredLogger:
    """
    Structured logger emitting one JSON document per line.

    Output goes through the standard logging tree, so handlers configured by
    setup_logging (and pytest's caplog) see every entry.
    """

    def __init__(
        self,
        name: str,
        service: str = "commerce",
        log_format: LogFormat = LogFormat.JSON,
    ):
        self.name = name
        self.service = service
        self.log_format = log_format
        self.logger = logging.getLogger(name)

    def _create_log_entry(
        self,
        level: str,
        message: str,
        correlation_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        exception: Optional[BaseException] = None,
    ) -> Dict[str, Any]:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": level.upper(),
            "message": message,
            "service": self.service,
            "logger": self.name,
        }

        if correlation_id:
            log_entry["correlation_id"] = correlation_id

        if metadata:
            log_entry["metadata"] = metadata

        if exception:
            log_entry["exception"] = {
                "type": type(exception).__name__,
                "message": str(exception),
                "traceback": "".join(traceback.format_exception(
                    type(exception), exception, exception.__traceback__
                )),
            }

        return log_entry

    def _log(
        self,
        level: str,
        message: str,
        correlation_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        exception: Optional[BaseException] = None,
    ):
        if self.log_format == LogFormat.JSON:
            log_entry = self._create_log_entry(level, message, correlation_id, metadata, exception)
            log_message = json.dumps(log_entry, default=str)
        else:
            log_message = message
            if correlation_id:
                log_message += f" | Correlation: {correlation_id}"
            if metadata:
                log_message += f" | Metadata: {metadata}"
            if exception:
                log_message += f" | Error: {exception}"

        getattr(self.logger, level.lower())(log_message)

    def debug(self, message: str, correlation_id: Optional[str] = None,
              metadata: Optional[Dict[str, Any]] = None):
        self._log("debug", message, correlation_id, metadata)

    def info(self, message: str, correlation_id: Optional[str] = None,
             metadata: Optional[Dict[str, Any]] = None):
        self._log("info", message, correlation_id, metadata)

    def warning(self, message: str, correlation_id: Optional[str] = None,
                metadata: Optional[Dict[str, Any]] = None,
                exception: Optional[BaseException] = None):
        self._log("warning", message, correlation_id, metadata, exception)

    def error(self, message: str, correlation_id: Optional[str] = None,
              metadata: Optional[Dict[str, Any]] = None,
              exception: Optional[BaseException] = None):
        self._log("error", message, correlation_id, metadata, exception)

    def log_request(
        self,
        method: str,
        endpoint: str,
        correlation_id: Optional[str] = None,
        duration_ms: Optional[float] = None,
        status_code: Optional[int] = None,
    ):
        """Log HTTP request with structured data"""
        self.info(
            f"{method} {endpoint}",
            correlation_id=correlation_id,
            metadata={
                "method": method,
                "endpoint": endpoint,
                "duration_ms": duration_ms,
                "status_code": status_code,
            },
        )


class LoggerManager:
    """
    Manager for creating and configuring structured loggers across the application
    """

    _loggers: Dict[str, StructuredLogger] = {}
    _default_config: Dict[str, Any] = {
        "service": "commerce",
        "log_format": LogFormat.JSON,
    }

    @classmethod
    def configure_defaults(cls, service: str, log_format: LogFormat = LogFormat.JSON):
        cls._default_config = {"service": service, "log_format": log_format}
        # Loggers handed out earlier keep their object identity but pick up the new defaults.
        for structured in cls._loggers.values():
            structured.service = service
            structured.log_format = log_format

    @classmethod
    def get_logger(cls, name: str) -> StructuredLogger:
        """Get or create a structured logger instance"""
        if name not in cls._loggers:
            cls._loggers[name] = StructuredLogger(name=name, **cls._default_config)
        return cls._loggers[name]


def setup_logging(
    level: Union[str, LogLevel] = LogLevel.INFO,
    log_format: Union[str, LogFormat] = LogFormat.JSON,
    service: str = "commerce",
) -> None:
    """
    Configure application-wide logging.

    Args:
        level: Logging level
        log_format: Log format (simple, detailed, json)
        service: Service name stamped on structured log entries
    """
    if isinstance(log_format, str):
        log_format = LogFormat(log_format.lower())

    LoggerManager.configure_defaults(service=service, log_format=log_format)

    if isinstance(level, LogLevel):
        log_level = getattr(logging, level.value)
    else:
        log_level = getattr(logging, level.upper())

    if log_format == LogFormat.JSON:
        format_str = '%(message)s'
    elif log_format == LogFormat.DETAILED:
        format_str = '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'
    else:
        format_str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    logging.basicConfig(
        level=log_level,
        format=format_str,
        handlers=[logging.StreamHandler(sys.stdout)]
    )

    # Set specific log levels for noisy libraries
    logging.getLogger('aiokafka').setLevel(logging.WARNING)
    logging.getLogger('asyncio').setLevel(logging.WARNING)
    logging.getLogger('httpx').setLevel(logging.WARNING)


def get_structured_logger(name: str) -> StructuredLogger:
    """Get a structured logger instance for a module."""
    return LoggerManager.get_logger(name)


__all__ = [
    'StructuredLogger',
    'LoggerManager',
    'LogLevel',
    'LogFormat',
    'setup_logging',
    'get_structured_logger',
]
