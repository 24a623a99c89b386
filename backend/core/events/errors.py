"""
Error taxonomy of the event publishing layer.
"""
from typing import Iterable, Optional


class EventPublishingError(Exception):
    """Base class for every error raised by core.events."""


class MalformedDomainObject(EventPublishingError, ValueError):
    """A domain object lacks a field its event schema requires."""

    def __init__(self, event_type: str, missing_fields: Iterable[str] = (), reason: Optional[str] = None):
        self.event_type = event_type
        self.missing_fields = tuple(missing_fields)
        self.reason = reason
        if self.missing_fields:
            detail = f"missing required field(s): {', '.join(self.missing_fields)}"
        else:
            detail = reason or "invalid domain object"
        super().__init__(f"Cannot build {event_type} event: {detail}")


class InvalidRoutingKey(EventPublishingError, ValueError):
    """The partition key of a transport message is missing or empty."""

    def __init__(self, key: object = None, event_type: Optional[str] = None):
        self.key = key
        self.event_type = event_type
        target = f" for {event_type}" if event_type else ""
        super().__init__(f"Invalid routing key{target}: {key!r}")


class BrokerConnectionError(EventPublishingError, ConnectionError):
    """The broker could not be reached while connecting the producer."""


class PublishError(EventPublishingError):
    """
    A critical event could not be handed to the broker.

    Carries the failed PublishResult so callers can report the outcome
    without re-deriving it.
    """

    error_code = "EVENT_PUBLISH_ERROR"

    def __init__(
        self,
        message: str,
        topic: str,
        key: Optional[str] = None,
        correlation_id: Optional[str] = None,
        result=None,
    ):
        self.topic = topic
        self.key = key
        self.correlation_id = correlation_id
        self.result = result
        super().__init__(message)


class PublishUnavailable(PublishError):
    """The producer was not connected (or its circuit was open) at publish time."""

    error_code = "EVENT_PUBLISH_UNAVAILABLE"


class PublishFailed(PublishError):
    """The broker send failed or timed out."""

    error_code = "EVENT_PUBLISH_FAILED"
