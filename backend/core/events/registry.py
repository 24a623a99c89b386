"""
Closed registry of every event envelope the services publish.

`EventEnvelope` is a discriminated union keyed on `eventType`, so a decoded
message always comes back as the concrete envelope class for its tag.
"""
import json
from typing import Annotated, Any, Dict, Type, Union

from pydantic import Field, TypeAdapter

from .envelope import BaseEventEnvelope
from .order_events import OrderCancelled, OrderCreated, OrderStatusUpdated
from .product_events import ProductCreated, ProductUpdated, StockDeducted, StockRestored
from .user_events import UserDeleted, UserRegistered, UserUpdated

EventEnvelope = Annotated[
    Union[
        UserRegistered,
        UserUpdated,
        UserDeleted,
        ProductCreated,
        ProductUpdated,
        StockDeducted,
        StockRestored,
        OrderCreated,
        OrderStatusUpdated,
        OrderCancelled,
    ],
    Field(discriminator="event_type"),
]

EVENT_TYPES: Dict[str, Type[BaseEventEnvelope]] = {
    envelope_cls.model_fields["event_type"].default: envelope_cls
    for envelope_cls in (
        UserRegistered,
        UserUpdated,
        UserDeleted,
        ProductCreated,
        ProductUpdated,
        StockDeducted,
        StockRestored,
        OrderCreated,
        OrderStatusUpdated,
        OrderCancelled,
    )
}

_envelope_adapter: TypeAdapter = TypeAdapter(EventEnvelope)


def serialize_envelope(envelope: BaseEventEnvelope) -> bytes:
    """Deterministic JSON encoding: sorted keys, compact separators, UTF-8."""
    return json.dumps(
        envelope.to_dict(),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    ).encode("utf-8")


def parse_envelope(data: Dict[str, Any]) -> BaseEventEnvelope:
    """Validate a wire-shaped mapping into its concrete envelope class."""
    return _envelope_adapter.validate_python(data)


def deserialize_envelope(raw: Union[bytes, str]) -> BaseEventEnvelope:
    """Inverse of serialize_envelope."""
    return _envelope_adapter.validate_json(raw)
