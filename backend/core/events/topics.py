"""
Topic routing and publish criticality, declared once per event type.

Critical events fail the business operation that emitted them when they
cannot be handed to the broker; the others degrade to a logged observation.
"""
from dataclasses import dataclass
from typing import Dict


class Topics:
    USER_REGISTERED = "user.registered"
    USER_UPDATED = "user.updated"
    USER_DELETED = "user.deleted"
    PRODUCT_CREATED = "product.created"
    PRODUCT_UPDATED = "product.updated"
    STOCK_DEDUCTED = "product.stock.deducted"
    STOCK_RESTORED = "product.stock.restored"
    ORDER_CREATED = "order.created"
    ORDER_STATUS_UPDATED = "order.status.updated"
    ORDER_CANCELLED = "order.cancelled"


@dataclass(frozen=True)
class EventRoute:
    topic: str
    critical: bool


EVENT_ROUTES: Dict[str, EventRoute] = {
    # Registration succeeds even if the broker is down.
    "UserRegistered": EventRoute(Topics.USER_REGISTERED, critical=False),
    "UserUpdated": EventRoute(Topics.USER_UPDATED, critical=False),
    "UserDeleted": EventRoute(Topics.USER_DELETED, critical=False),
    "ProductCreated": EventRoute(Topics.PRODUCT_CREATED, critical=False),
    "ProductUpdated": EventRoute(Topics.PRODUCT_UPDATED, critical=False),
    # Inventory movements and order lifecycle changes must be recorded.
    "StockDeducted": EventRoute(Topics.STOCK_DEDUCTED, critical=True),
    "StockRestored": EventRoute(Topics.STOCK_RESTORED, critical=True),
    "OrderCreated": EventRoute(Topics.ORDER_CREATED, critical=True),
    "OrderStatusUpdated": EventRoute(Topics.ORDER_STATUS_UPDATED, critical=False),
    "OrderCancelled": EventRoute(Topics.ORDER_CANCELLED, critical=True),
}


def route_for(event_type: str) -> EventRoute:
    try:
        return EVENT_ROUTES[event_type]
    except KeyError:
        raise KeyError(f"No topic route registered for event type {event_type!r}") from None
