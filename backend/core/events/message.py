"""
Transport message construction: envelope + routing key + headers.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from core.utils.correlation import new_correlation_id
from core.utils.uuid_utils import uuid7_str

from .envelope import BaseEventEnvelope, format_timestamp
from .errors import InvalidRoutingKey
from .registry import deserialize_envelope, serialize_envelope


@dataclass(frozen=True)
class TransportMessage:
    """
    What is handed to the broker.

    Attributes:
        key: Partition key, the primary identifier of the entity the event is about
        value: Serialized event envelope (UTF-8 JSON)
        headers: correlationId, producer, timestamp, eventType, eventId
    """

    key: str
    value: bytes
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def correlation_id(self) -> Optional[str]:
        return self.headers.get("correlationId")

    @property
    def event_type(self) -> Optional[str]:
        return self.headers.get("eventType")

    @property
    def producer(self) -> Optional[str]:
        return self.headers.get("producer")

    def envelope(self) -> BaseEventEnvelope:
        """Decode the value back into its envelope."""
        return deserialize_envelope(self.value)

    def kafka_key(self) -> bytes:
        return self.key.encode("utf-8")

    def kafka_headers(self) -> List[Tuple[str, bytes]]:
        return [(name, value.encode("utf-8")) for name, value in self.headers.items()]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class MessageBuilder:
    """
    Turns envelopes into transport messages for one producing service.

    Stateless apart from the producer identity and the clock, so a single
    instance is shared by every request of the service.
    """

    def __init__(self, producer_name: str, clock: Callable[[], datetime] = _utc_now):
        if not producer_name:
            raise ValueError("producer_name is required for MessageBuilder")
        self.producer_name = producer_name
        self._clock = clock

    def build(
        self,
        key: Any,
        envelope: BaseEventEnvelope,
        correlation_id: Optional[str] = None,
    ) -> TransportMessage:
        routing_key = self._routing_key(key, envelope)
        return TransportMessage(
            key=routing_key,
            value=serialize_envelope(envelope),
            headers={
                "correlationId": correlation_id or new_correlation_id(),
                "producer": self.producer_name,
                "timestamp": format_timestamp(self._clock()),
                "eventType": envelope.event_type,
                "eventId": uuid7_str(),
            },
        )

    @staticmethod
    def _routing_key(key: Any, envelope: BaseEventEnvelope) -> str:
        if key is None:
            raise InvalidRoutingKey(key, envelope.event_type)
        routing_key = key.decode("utf-8") if isinstance(key, bytes) else str(key)
        if not routing_key.strip():
            raise InvalidRoutingKey(key, envelope.event_type)
        return routing_key
