"""
Order event schemas (order-service).
"""
from typing import Any, Literal, Tuple

from pydantic import Field

from .envelope import (
    BaseEventEnvelope,
    EventPayload,
    build_payload,
    format_timestamp,
    require_fields,
    require_values,
    stringify_id,
    utc_now_iso,
)
from .errors import MalformedDomainObject


class OrderItemSnapshot(EventPayload):
    product_id: str
    variant_id: str
    quantity: int
    price: float
    seller_id: str


class OrderCreatedPayload(EventPayload):
    order_id: str
    buyer_id: str
    items: Tuple[OrderItemSnapshot, ...]
    total_amount: float
    status: str
    created_at: str


class OrderStatusUpdatedPayload(EventPayload):
    order_id: str
    status: str
    updated_at: str


class OrderCancelledPayload(EventPayload):
    order_id: str
    buyer_id: str
    items: Tuple[OrderItemSnapshot, ...]
    total_amount: float
    cancelled_at: str


class OrderCreated(BaseEventEnvelope):
    event_type: Literal["OrderCreated"] = Field("OrderCreated", alias="eventType")
    payload: OrderCreatedPayload


class OrderStatusUpdated(BaseEventEnvelope):
    event_type: Literal["OrderStatusUpdated"] = Field("OrderStatusUpdated", alias="eventType")
    payload: OrderStatusUpdatedPayload


class OrderCancelled(BaseEventEnvelope):
    event_type: Literal["OrderCancelled"] = Field("OrderCancelled", alias="eventType")
    payload: OrderCancelledPayload


_ITEM_FIELDS = {
    "product_id": ("product_id",),
    "variant_id": ("variant_id",),
    "quantity": ("quantity",),
    "price": ("price",),
    "seller_id": ("seller_id",),
}


def _status_value(status: Any) -> Any:
    return getattr(status, "value", status)


def _item_snapshots(event_type: str, items: Any) -> Tuple[dict, ...]:
    if isinstance(items, (str, bytes)) or not hasattr(items, "__iter__"):
        raise MalformedDomainObject(event_type, reason="items must be a list")
    snapshots = []
    for index, item in enumerate(items):
        try:
            values = require_fields(event_type, item, _ITEM_FIELDS)
        except MalformedDomainObject as exc:
            raise MalformedDomainObject(
                event_type, [f"items[{index}].{name}" for name in exc.missing_fields]
            ) from exc
        for id_field in ("product_id", "variant_id", "seller_id"):
            values[id_field] = stringify_id(values[id_field])
        snapshots.append(values)
    return tuple(snapshots)


def create_order_created_event(order: Any) -> OrderCreated:
    """OrderCreated with line items; status and createdAt come from the order."""
    values = require_fields("OrderCreated", order, {
        "order_id": ("order_id", "id"),
        "buyer_id": ("buyer_id",),
        "items": ("items",),
        "total_amount": ("total_amount",),
        "status": ("status",),
        "created_at": ("created_at",),
    })
    payload = build_payload(
        "OrderCreated",
        OrderCreatedPayload,
        order_id=stringify_id(values["order_id"]),
        buyer_id=stringify_id(values["buyer_id"]),
        items=_item_snapshots("OrderCreated", values["items"]),
        total_amount=values["total_amount"],
        status=_status_value(values["status"]),
        created_at=format_timestamp(values["created_at"]),
    )
    return OrderCreated(payload=payload)


def create_order_status_updated_event(order_id: Any, status: Any) -> OrderStatusUpdated:
    require_values("OrderStatusUpdated", order_id=order_id, status=status)
    payload = build_payload(
        "OrderStatusUpdated",
        OrderStatusUpdatedPayload,
        order_id=stringify_id(order_id),
        status=_status_value(status),
        updated_at=utc_now_iso(),
    )
    return OrderStatusUpdated(payload=payload)


def create_order_cancelled_event(order: Any) -> OrderCancelled:
    """OrderCancelled; cancelledAt is the event time, not a field of the order."""
    values = require_fields("OrderCancelled", order, {
        "order_id": ("order_id", "id"),
        "buyer_id": ("buyer_id",),
        "items": ("items",),
        "total_amount": ("total_amount",),
    })
    payload = build_payload(
        "OrderCancelled",
        OrderCancelledPayload,
        order_id=stringify_id(values["order_id"]),
        buyer_id=stringify_id(values["buyer_id"]),
        items=_item_snapshots("OrderCancelled", values["items"]),
        total_amount=values["total_amount"],
        cancelled_at=utc_now_iso(),
    )
    return OrderCancelled(payload=payload)
